"""
Closed-tour problem (travelling salesman) as a reference Individual.

Cities are random integer points; distances are rounded Euclidean integers
so tour lengths are integer costs (lower is better), matching the fitness
model of the Population.

Operators:
- optimize(): one 2-opt pass (reverse any segment that shortens the tour)
- mutate(): reverse a random segment
- crossover(p1, p2): order crossover (OX1), a slice of p1 completed with the
  remaining cities in p2's order

Usage:
	problem = TourProblem(num_cities=40, seed=1)
	population = Population(problem.factory, PopulationConfig(population_size=30), seed=1)
"""

import itertools
from random import Random
from typing import Optional, Sequence

import numpy as np


class TourProblem:
	"""Random city layout with an integer distance matrix."""

	def __init__(
		self,
		num_cities: int = 30,
		seed: Optional[int] = None,
		width: int = 1000,
		height: int = 1000,
	):
		if num_cities < 4:
			raise ValueError(f"num_cities must be >= 4, got {num_cities}")
		if width < 1 or height < 1:
			raise ValueError("width and height must be >= 1")

		rng = np.random.default_rng(seed)
		self._coordinates = np.stack(
			[rng.integers(0, width, size=num_cities), rng.integers(0, height, size=num_cities)],
			axis=1,
		)
		diff = self._coordinates[:, None, :] - self._coordinates[None, :, :]
		self._distances = np.rint(np.sqrt((diff ** 2).sum(axis=2))).astype(np.int64)
		# plain nested list for the scalar lookups of the 2-opt loop
		self._matrix: list[list[int]] = self._distances.tolist()
		self._ids = itertools.count(1)

	@property
	def num_cities(self) -> int:
		return len(self._matrix)

	@property
	def coordinates(self) -> np.ndarray:
		return self._coordinates.copy()

	@property
	def distances(self) -> np.ndarray:
		return self._distances.copy()

	def distance(self, a: int, b: int) -> int:
		return self._matrix[a][b]

	def tour_length(self, order: Sequence[int]) -> int:
		"""Length of the closed tour visiting cities in order."""
		idx = np.asarray(order, dtype=np.int64)
		return int(self._distances[idx, np.roll(idx, -1)].sum())

	def next_id(self) -> int:
		return next(self._ids)

	def random_individual(self, rng: Random) -> "TourIndividual":
		order = list(range(self.num_cities))
		rng.shuffle(order)
		return TourIndividual(self, order, rng)

	def factory(self, size: int, rng: Random) -> list["TourIndividual"]:
		"""Population factory: size random tours."""
		return [self.random_individual(rng) for _ in range(size)]

	def __repr__(self) -> str:
		return f"TourProblem(num_cities={self.num_cities})"


class TourIndividual:
	"""
	A closed tour, stored as a permutation of city indices.

	The random source is shared with the population that created it so a
	seeded run is reproducible end to end.
	"""

	def __init__(self, problem: TourProblem, order: Sequence[int], rng: Random):
		if sorted(order) != list(range(problem.num_cities)):
			raise ValueError("order must be a permutation of all city indices")
		self._problem = problem
		self._rng = rng
		self._id = problem.next_id()
		self._order = list(order)
		self._fitness = self._evaluate()

	@property
	def id(self) -> int:
		return self._id

	@property
	def fitness(self) -> int:
		return self._fitness

	@property
	def order(self) -> list[int]:
		return list(self._order)

	def _evaluate(self) -> int:
		# a degenerate layout (all cities on one point) must still give a usable divisor
		return max(1, self._problem.tour_length(self._order))

	def optimize(self) -> None:
		"""One first-improvement 2-opt pass over every segment."""
		order = self._order
		n = len(order)
		dist = self._problem.distance
		improved = False

		for i in range(n - 1):
			for j in range(i + 2, n):
				if i == 0 and j == n - 1:
					continue
				a, b = order[i], order[i + 1]
				c, d = order[j], order[(j + 1) % n]
				delta = dist(a, c) + dist(b, d) - dist(a, b) - dist(c, d)
				if delta < 0:
					order[i + 1:j + 1] = reversed(order[i + 1:j + 1])
					improved = True

		if improved:
			self._fitness = self._evaluate()

	def mutate(self) -> None:
		"""Reverse a random segment of at least two cities."""
		n = len(self._order)
		i, j = sorted(self._rng.sample(range(n), 2))
		self._order[i:j + 1] = reversed(self._order[i:j + 1])
		self._fitness = self._evaluate()

	def crossover(self, parent1: "TourIndividual", parent2: "TourIndividual") -> None:
		"""Order crossover (OX1): overwrite this tour from two parents."""
		n = len(parent1._order)
		start, end = sorted(self._rng.sample(range(n), 2))

		child: list[Optional[int]] = [None] * n
		child[start:end + 1] = parent1._order[start:end + 1]
		taken = set(child[start:end + 1])

		# remaining cities in parent2's order, read from just after the slice
		rotated = parent2._order[end + 1:] + parent2._order[:end + 1]
		fill = [city for city in rotated if city not in taken]
		positions = [(end + 1 + k) % n for k in range(n - (end - start + 1))]
		for pos, city in zip(positions, fill):
			child[pos] = city

		self._order = child
		self._fitness = self._evaluate()

	def __repr__(self) -> str:
		return f"TourIndividual(id={self._id}, fitness={self._fitness})"
