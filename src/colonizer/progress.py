"""
Progress tracking utilities for optimization runs.

Provides a reusable class to track, calculate, and log generation-level
progress metrics in a standardized way. Fitness is an integer cost
(lower is better) throughout Colonizer.
"""

from typing import List, Optional, Callable, Protocol, Sequence
from dataclasses import dataclass


class HasFitness(Protocol):
	"""Protocol for objects that have a fitness value."""
	@property
	def fitness(self) -> int: ...


@dataclass
class ProgressStats:
	"""Statistics for a single tick/generation."""
	generation: int
	best_global: int
	best_current: int
	avg_current: float
	worst_current: int
	improved: bool = False


class ProgressTracker:
	"""
	Tracks optimization progress and logs standardized metrics.

	Usage:
		tracker = ProgressTracker(logger=my_logger, prefix="[Task]")

		for gen in range(generations):
			population.advance()
			tracker.tick_population(population.individuals, generation=gen)

		summary = tracker.summary()

	The tracker logs lines like:
		[Task] [Gen 10/500] best=5120, current=5120, avg=6012.40 *
	"""

	def __init__(
		self,
		logger: Optional[Callable[[str], None]] = None,
		prefix: str = "",
		total_generations: Optional[int] = None,
	):
		"""
		Args:
			logger: Callable that logs messages (e.g., Logger instance, print)
			prefix: Prefix for log messages (e.g., "[Task]")
			total_generations: Total expected generations (for progress display)
		"""
		self._log = logger or print
		self._prefix = prefix + " " if prefix else ""
		self._total = total_generations

		self._best_global: Optional[int] = None
		self._best_generation: int = 0
		self._history: List[ProgressStats] = []

	def tick(
		self,
		fitness_values: Sequence[int],
		generation: Optional[int] = None,
		log: bool = True,
	) -> ProgressStats:
		"""
		Record a tick (generation) of fitness values.

		Args:
			fitness_values: Fitness values of the current population
			generation: Current generation number (auto-incremented if None)
			log: Whether to log progress

		Returns:
			ProgressStats for this tick
		"""
		if not fitness_values:
			raise ValueError("fitness_values cannot be empty")

		gen = generation if generation is not None else len(self._history)

		best_current = min(fitness_values)
		worst_current = max(fitness_values)
		avg_current = sum(fitness_values) / len(fitness_values)

		improved = False
		if self._best_global is None or best_current < self._best_global:
			self._best_global = best_current
			self._best_generation = gen
			improved = True

		stats = ProgressStats(
			generation=gen,
			best_global=self._best_global,
			best_current=best_current,
			avg_current=avg_current,
			worst_current=worst_current,
			improved=improved,
		)
		self._history.append(stats)

		if log:
			self._log_tick(stats)

		return stats

	def tick_population(
		self,
		individuals: Sequence[HasFitness],
		generation: Optional[int] = None,
		log: bool = True,
	) -> ProgressStats:
		"""Record a tick from a sequence of individuals."""
		return self.tick([ind.fitness for ind in individuals], generation=generation, log=log)

	def _log_tick(self, stats: ProgressStats) -> None:
		gen_str = f"Gen {stats.generation + 1}"
		if self._total:
			gen_str = f"Gen {stats.generation + 1}/{self._total}"

		improved_str = " *" if stats.improved else ""

		self._log(
			f"{self._prefix}[{gen_str}] "
			f"best={stats.best_global}, "
			f"current={stats.best_current}, "
			f"avg={stats.avg_current:.2f}{improved_str}"
		)

	@property
	def best_global(self) -> Optional[int]:
		"""Best fitness value seen so far."""
		return self._best_global

	@property
	def best_generation(self) -> int:
		"""Generation where best fitness was found."""
		return self._best_generation

	@property
	def history(self) -> List[ProgressStats]:
		"""Full history of progress stats."""
		return self._history.copy()

	@property
	def generations_run(self) -> int:
		"""Number of generations recorded."""
		return len(self._history)

	def summary(self) -> dict:
		"""Get summary statistics."""
		if not self._history:
			return {"generations": 0}

		first = self._history[0]
		last = self._history[-1]
		improvement = (first.best_current - last.best_global) / first.best_current * 100 if first.best_current else 0.0

		return {
			"generations": len(self._history),
			"initial_fitness": first.best_current,
			"final_fitness": last.best_global,
			"improvement_pct": improvement,
			"best_generation": self._best_generation,
			"improvements": sum(1 for s in self._history if s.improved),
		}

	def log_summary(self) -> None:
		"""Log a summary of the optimization run."""
		s = self.summary()
		if s["generations"] == 0:
			self._log(f"{self._prefix}No generations completed")
			return

		self._log(f"{self._prefix}Summary:")
		self._log(f"  Generations: {s['generations']}")
		self._log(f"  Initial: {s['initial_fitness']}")
		self._log(f"  Final: {s['final_fitness']}")
		self._log(f"  Improvement: {s['improvement_pct']:.2f}%")
		self._log(f"  Best at generation: {s['best_generation'] + 1}")
		self._log(f"  Total improvements: {s['improvements']}")
