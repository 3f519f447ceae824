"""
Stub individuals and factories with scripted fitness and call counters.
"""

import itertools
from random import Random
from typing import Optional, Sequence


class StubIndividual:
	"""
	Individual whose operators do nothing unless a result is scripted.

	crossover_fitness / mutate_fitness / optimize_fitness: fitness the
	individual takes after the corresponding operator (None keeps it).
	"""

	def __init__(
		self,
		id: int,
		fitness: int,
		crossover_fitness: Optional[int] = None,
		mutate_fitness: Optional[int] = None,
		optimize_fitness: Optional[int] = None,
	):
		self._id = id
		self._fitness = fitness
		self.crossover_fitness = crossover_fitness
		self.mutate_fitness = mutate_fitness
		self.optimize_fitness = optimize_fitness
		self.optimize_calls = 0
		self.mutate_calls = 0
		self.crossover_calls = 0
		self.crossover_parents: list[tuple[int, int]] = []

	@property
	def id(self) -> int:
		return self._id

	@property
	def fitness(self) -> int:
		return self._fitness

	def optimize(self) -> None:
		self.optimize_calls += 1
		if self.optimize_fitness is not None:
			self._fitness = self.optimize_fitness

	def mutate(self) -> None:
		self.mutate_calls += 1
		if self.mutate_fitness is not None:
			self._fitness = self.mutate_fitness

	def crossover(self, parent1: "StubIndividual", parent2: "StubIndividual") -> None:
		self.crossover_calls += 1
		self.crossover_parents.append((parent1.id, parent2.id))
		if self.crossover_fitness is not None:
			self._fitness = self.crossover_fitness

	def __repr__(self) -> str:
		return f"StubIndividual(id={self._id}, fitness={self._fitness})"


class StubFactory:
	"""
	Population factory returning StubIndividuals with fixed fitness values.

	Args:
		fitnesses: Fitness of slot i is fitnesses[i % len(fitnesses)]
		extra: Individuals to add to (or, if negative, drop from) each batch
	"""

	def __init__(self, fitnesses: Sequence[int] = (100,), extra: int = 0):
		self.fitnesses = list(fitnesses)
		self.extra = extra
		self.calls = 0
		self.created: list[StubIndividual] = []
		self._ids = itertools.count(1)

	def __call__(self, size: int, rng: Random) -> list[StubIndividual]:
		self.calls += 1
		batch = [
			StubIndividual(next(self._ids), self.fitnesses[i % len(self.fitnesses)])
			for i in range(max(0, size + self.extra))
		]
		self.created.extend(batch)
		return batch
