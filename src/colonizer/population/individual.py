"""
Individual abstraction for the evolutionary population.

Provides the Protocol every candidate solution must satisfy. The optimizer
never inherits from or constructs individuals itself: it only reads
``id``/``fitness`` and calls the three in-place operators below.

Usage:
	from colonizer.population.individual import Individual

	class MyIndividual:
		id: str
		fitness: int
		def optimize(self) -> None: ...
		def mutate(self) -> None: ...
		def crossover(self, parent1, parent2) -> None: ...

	assert isinstance(MyIndividual(), Individual)
"""

from random import Random
from typing import Callable, Hashable, Protocol, TypeVar, runtime_checkable


@runtime_checkable
class Individual(Protocol):
	"""
	Protocol for candidate solutions managed by a Population.

	Attributes:
		id: Unique identifier, stable for the individual's lifetime.
			Compared for equality only, never for ordering.
		fitness: Integer cost, lower is better.
	"""

	@property
	def id(self) -> Hashable: ...

	@property
	def fitness(self) -> int: ...

	def optimize(self) -> None:
		"""Refine the individual in place (local search)."""
		...

	def mutate(self) -> None:
		"""Perturb the individual in place."""
		...

	def crossover(self, parent1: "Individual", parent2: "Individual") -> None:
		"""Overwrite this individual with a recombination of two parents."""
		...


# TypeVar for generic population operations
T = TypeVar('T', bound=Individual)

# Problem-specific "regenerate population" collaborator:
# (population_size, rng) -> freshly seeded individuals
PopulationFactory = Callable[[int, Random], list[T]]
