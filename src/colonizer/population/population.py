"""
Steady-state evolutionary population.

A Population owns a fixed number of individual slots and advances them one
generation per advance() call:

1. Crossover: fitness-proportionate ("healthy") selection gates up to
   int(N * 0.03) + 2 recombinations; each child overwrites the weakest slot.
2. Mutation: the same number of trials, each mutating the weakest slot with
   probability 1/mutation_rate. The rate drops by one per generation (floor
   1) so disruption escalates under stagnation.
3. Cataclysm: once the countdown runs out the whole population is
   regenerated from the problem-specific factory.
4. Intensification: the best individual is refined in place.

Any improvement of the best fitness resets the mutation rate, the cataclysm
countdown and the stagnation counter.

The population is single-threaded: advance() must be called serially.
"""

import random
import sys
from typing import Callable, Generic, Hashable, Optional

from colonizer.population.config import PopulationConfig
from colonizer.population.individual import PopulationFactory, T


class Population(Generic[T]):
	"""
	Generic steady-state genetic algorithm over any Individual type.

	The problem-specific part is injected:
	- individuals implement the Individual protocol (fitness, optimize,
	  mutate, crossover)
	- factory(size, rng) seeds a fresh population, used at construction and
	  on every cataclysm

	Usage:
		population = Population(problem.factory, PopulationConfig(population_size=30), seed=7)
		while population.iterations_without_improvement < 500:
			population.advance()
		print(population.best_fitness)
	"""

	def __init__(
		self,
		factory: PopulationFactory,
		config: Optional[PopulationConfig] = None,
		rng: Optional[random.Random] = None,
		seed: Optional[int] = None,
		verbose: bool = False,
		logger: Optional[Callable[[str], None]] = None,
	):
		"""
		Args:
			factory: Callable (size, rng) -> list of freshly seeded individuals
			config: Population configuration (defaults: PopulationConfig())
			rng: Random source shared by selection, mutation and the factory
			seed: Seed for a private Random when rng is not given
			verbose: Log best-fitness changes and cataclysms
			logger: Logging function (default: print)
		"""
		self._config = config or PopulationConfig()
		self._config.validate()
		self._factory = factory
		self._rng = rng if rng is not None else random.Random(seed)
		self._verbose = verbose
		self._logger = logger or print

		self._individuals: list[T] = []
		self._best: Optional[T] = None
		self._best_fitness: int = sys.maxsize
		self._mutation_rate = self._config.initial_mutation_rate
		self._cataclysm_countdown = self._config.initial_cataclysm_countdown
		self._current_iteration = 0
		self._iterations_without_improvement = 0
		self._cataclysms = 0

		self.regenerate_population()

	def _log(self, msg: str) -> None:
		if self._verbose:
			self._logger(msg)

	# =========================================================================
	# Read-only state
	# =========================================================================

	@property
	def config(self) -> PopulationConfig:
		return self._config

	@property
	def size(self) -> int:
		return self._config.population_size

	@property
	def individuals(self) -> tuple[T, ...]:
		return tuple(self._individuals)

	@property
	def best(self) -> T:
		return self._best

	@property
	def best_id(self) -> Hashable:
		return self._best.id

	@property
	def best_fitness(self) -> int:
		return self._best_fitness

	@property
	def mutation_rate(self) -> int:
		return self._mutation_rate

	@property
	def cataclysm_countdown(self) -> int:
		return self._cataclysm_countdown

	@property
	def current_iteration(self) -> int:
		return self._current_iteration

	@property
	def iterations_without_improvement(self) -> int:
		return self._iterations_without_improvement

	@property
	def cataclysms(self) -> int:
		"""Number of cataclysms triggered so far (initial seeding excluded)."""
		return self._cataclysms

	# =========================================================================
	# Generation step
	# =========================================================================

	def advance(self) -> None:
		"""Run exactly one generation."""
		self._iterations_without_improvement += 1
		self._current_iteration += 1

		children = self._compute_crossovers()
		mutations = self._compute_mutations()
		self._compute_cataclysms()

		self._best.optimize()
		self._sync_best()

		if self._verbose and self._current_iteration % 100 == 0:
			self._log(
				f"[Population] Gen {self._current_iteration}: best={self._best_fitness}, "
				f"children={children}, mutations={mutations}, "
				f"mutation_rate={self._mutation_rate}, cataclysm_in={self._cataclysm_countdown}"
			)

	# =========================================================================
	# Crossover
	# =========================================================================

	def _compute_crossovers(self) -> int:
		"""Run the crossover phase. Returns the number of children produced."""
		if self.size == 1:
			return 0

		children = 0
		for _ in range(self._config.max_children):
			parent = self.select_healthy()
			if parent is None:
				break
			if self._crossover(parent):
				children += 1

		return children

	def _crossover(self, parent: T) -> bool:
		"""
		Perform one crossover gated by a healthy parent.

		Returns False when no distinct (parent1, parent2, victim) triple was
		found within max_selection_attempts.
		"""
		selection = self._select_crossover_individuals()
		if selection is None:
			return False

		p1, p2, child = selection
		child.crossover(p1, p2)
		self._on_new_best(child)
		return True

	def _select_crossover_individuals(self) -> Optional[tuple[T, T, T]]:
		"""Draw two random parents and the weakest slot, all pairwise distinct."""
		child = self.select_weak()
		if child is None:
			return None

		size = len(self._individuals)
		for _ in range(self._config.max_selection_attempts):
			p1 = self._individuals[self._rng.randrange(size)]
			p2 = self._individuals[self._rng.randrange(size)]
			if p1.id != p2.id and p1.id != child.id and p2.id != child.id:
				return p1, p2, child

		return None

	# =========================================================================
	# Best tracking
	# =========================================================================

	def _on_new_best(self, individual: T) -> None:
		"""Record individual as best if it improves on the current best."""
		if individual.fitness < self._best_fitness:
			if self._best is not None:
				self._log(f"[Population] Gen {self._current_iteration}: new best {individual.fitness} (was {self._best_fitness})")
			self._reset_schedule()
			self._set_best(individual)
		elif self._config.legacy_best_overwrite:
			self._set_best(individual)

	def _reset_schedule(self) -> None:
		self._mutation_rate = self._config.initial_mutation_rate
		self._cataclysm_countdown = self._config.initial_cataclysm_countdown
		self._iterations_without_improvement = 0

	def _set_best(self, individual: T) -> None:
		self._best = individual
		self._best_fitness = individual.fitness

	def _sync_best(self) -> None:
		"""Pick up the result of refining the best individual in place."""
		refined = self._best.fitness
		if refined < self._best_fitness:
			self._reset_schedule()
		self._best_fitness = refined

	# =========================================================================
	# Mutation
	# =========================================================================

	def _compute_mutations(self) -> int:
		"""Run the mutation phase. Returns the number of mutations applied."""
		if self.size == 1:
			return 0

		mutations = 0
		for _ in range(self._config.max_mutations):
			if self._rng.randrange(self._mutation_rate) == 0:
				weak = self.select_weak()
				if weak is not None:
					weak.mutate()
					mutations += 1

		self._mutation_rate = max(1, self._mutation_rate - 1)
		return mutations

	# =========================================================================
	# Cataclysm
	# =========================================================================

	def _compute_cataclysms(self) -> bool:
		"""Run the cataclysm phase. Returns True if the population was regenerated."""
		if self.size == 1:
			return False

		triggered = False
		if self.is_cataclysm_time():
			self._log(f"[Population] Gen {self._current_iteration}: cataclysm, regenerating {self.size} individuals")
			self.regenerate_population()
			self._cataclysm_countdown = self._config.initial_cataclysm_countdown
			self._cataclysms += 1
			triggered = True

		self._cataclysm_countdown -= 1
		return triggered

	def is_cataclysm_time(self) -> bool:
		if self.size == 1:
			return False
		return self._cataclysm_countdown <= 0

	def regenerate_population(self) -> None:
		"""
		Replace every slot with a freshly seeded individual.

		With preserve_best_on_cataclysm the current best takes over the first
		fresh slot. The fittest slot then goes through best tracking; if the
		previous best did not survive, the fittest slot becomes the new best.
		"""
		size = self.size
		fresh = list(self._factory(size, self._rng))
		if len(fresh) != size:
			raise ValueError(f"Population factory returned {len(fresh)} individuals, expected {size}")

		if self._best is not None and self._config.preserve_best_on_cataclysm:
			fresh[0] = self._best

		self._individuals = fresh
		fittest = min(fresh, key=lambda ind: ind.fitness)

		if self._best is not None and not any(ind is self._best for ind in fresh):
			if fittest.fitness < self._best_fitness:
				self._reset_schedule()
			self._set_best(fittest)
		else:
			self._on_new_best(fittest)

	# =========================================================================
	# Selection
	# =========================================================================

	def select_weak(self) -> Optional[T]:
		"""
		Return the slot with the highest fitness, excluding the best.

		Ties go to the first slot in iteration order. Returns None only when
		every slot is the best (capacity 1).
		"""
		best_id = self._best.id if self._best is not None else None
		weakest: Optional[T] = None
		max_fitness: Optional[int] = None

		for individual in self._individuals:
			if individual.id == best_id:
				continue
			if max_fitness is None or individual.fitness > max_fitness:
				weakest = individual
				max_fitness = individual.fitness

		return weakest

	def acceptance_window(self, fitness: int) -> int:
		"""
		Size of the draw window for healthy selection: fitness * 3 // best + 1.

		An individual is accepted when a uniform draw in [0, window) hits 0,
		so individuals close to the best are accepted more often.
		"""
		if self._best_fitness <= 0:
			raise ValueError(f"Healthy selection requires a positive best fitness, got {self._best_fitness}")
		if fitness < 0:
			raise ValueError(f"Healthy selection requires non-negative fitness, got {fitness}")
		return fitness * 3 // self._best_fitness + 1

	def select_healthy(self) -> Optional[T]:
		"""
		Fitness-proportionate acceptance over one circular pass.

		Starts at a uniformly random slot and visits every slot once. Each
		non-best slot is accepted with probability 1/acceptance_window.
		Returns None if no slot was accepted.
		"""
		size = len(self._individuals)
		best_id = self._best.id
		start = self._rng.randrange(size)

		for offset in range(size):
			individual = self._individuals[(start + offset) % size]
			if individual.id == best_id:
				continue
			window = self.acceptance_window(individual.fitness)
			if self._rng.randrange(window) == 0:
				return individual

		return None

	def __repr__(self) -> str:
		return (
			f"Population(size={self.size}, best={self._best_fitness}, "
			f"iteration={self._current_iteration}, mutation_rate={self._mutation_rate}, "
			f"cataclysm_in={self._cataclysm_countdown})"
		)
