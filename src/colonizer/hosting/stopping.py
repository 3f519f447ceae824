"""
Stopping conditions for hosted optimization runs.
"""

from dataclasses import dataclass
from enum import IntEnum, auto
from typing import Optional, Protocol


class StopReason(IntEnum):
	"""Reason why a hosted optimization run stopped."""
	CONVERGENCE = auto()  # No improvement for max_iterations_without_improvement
	TARGET_REACHED = auto()  # best_fitness <= target_fitness
	MAX_ITERATIONS = auto()  # Reached max_iterations
	TIMEOUT = auto()  # Ran longer than max_seconds
	SHUTDOWN = auto()  # External abort request


class ProgressSource(Protocol):
	"""The read-only population state a stopping condition looks at."""
	@property
	def best_fitness(self) -> int: ...

	@property
	def current_iteration(self) -> int: ...

	@property
	def iterations_without_improvement(self) -> int: ...


@dataclass
class StoppingCondition:
	"""
	When to stop calling advance(). Every limit is optional; with none set
	the run only ends on an abort request.

	Attributes:
		max_iterations: Stop after this many generations of the current run
		max_iterations_without_improvement: Stop after this many generations
			without a best-fitness improvement
		target_fitness: Stop once best_fitness <= target_fitness
		max_seconds: Stop after this much wall-clock time
	"""
	max_iterations: Optional[int] = None
	max_iterations_without_improvement: Optional[int] = None
	target_fitness: Optional[int] = None
	max_seconds: Optional[float] = None

	def __post_init__(self):
		if self.max_iterations is not None and self.max_iterations < 0:
			raise ValueError(f"max_iterations must be >= 0, got {self.max_iterations}")
		if self.max_iterations_without_improvement is not None and self.max_iterations_without_improvement < 1:
			raise ValueError(
				f"max_iterations_without_improvement must be >= 1, got {self.max_iterations_without_improvement}"
			)
		if self.max_seconds is not None and self.max_seconds <= 0:
			raise ValueError(f"max_seconds must be > 0, got {self.max_seconds}")

	def check(
		self,
		population: ProgressSource,
		elapsed: float = 0.0,
		start_iteration: int = 0,
	) -> Optional[StopReason]:
		"""
		Args:
			population: Population being advanced
			elapsed: Seconds since the run started
			start_iteration: population.current_iteration when the run started;
				max_iterations counts generations from there

		Returns:
			The reason to stop, or None to keep going
		"""
		if self.target_fitness is not None and population.best_fitness <= self.target_fitness:
			return StopReason.TARGET_REACHED
		if self.max_iterations is not None and population.current_iteration - start_iteration >= self.max_iterations:
			return StopReason.MAX_ITERATIONS
		if (
			self.max_iterations_without_improvement is not None
			and population.iterations_without_improvement >= self.max_iterations_without_improvement
		):
			return StopReason.CONVERGENCE
		if self.max_seconds is not None and elapsed >= self.max_seconds:
			return StopReason.TIMEOUT
		return None
