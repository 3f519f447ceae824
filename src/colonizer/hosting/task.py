"""
Computation tasks run by ComputationThreads.

A task receives a TaskContext exposing the cancellation flag of its thread
and a progress reporter. OptimizationTask is the task that drives a
Population: it calls advance() until its StoppingCondition fires or an abort
is requested. Cancellation is only checked between generations, so a
population is never left half-way through a generation.
"""

import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Optional, Protocol, runtime_checkable

from colonizer.hosting.stopping import StopReason, StoppingCondition
from colonizer.population.individual import T
from colonizer.population.population import Population
from colonizer.progress import ProgressTracker


class TaskContext:
	"""Cancellation flag and progress reporter handed to a running task."""

	def __init__(
		self,
		stop_event: Optional[threading.Event] = None,
		reporter: Optional[Callable[[str], None]] = None,
	):
		self._stop_event = stop_event or threading.Event()
		self._reporter = reporter

	def should_stop(self) -> bool:
		"""True once an abort has been requested."""
		return self._stop_event.is_set()

	def request_stop(self) -> None:
		self._stop_event.set()

	def report(self, message: str) -> None:
		"""Publish a one-line progress message (shown in ThreadInfo.additional_info)."""
		if self._reporter:
			self._reporter(message)


@runtime_checkable
class ComputationTask(Protocol):
	"""Anything a ComputationThread can run."""

	def run(self, context: TaskContext, *args: Any) -> Any: ...


@dataclass
class OptimizationResult(Generic[T]):
	"""
	Result of a hosted optimization run.

	Attributes:
		best: Best individual at the end of the run
		initial_fitness: Best fitness before the first generation
		final_fitness: Best fitness at the end
		improvement_percent: (initial - final) / initial * 100
		iterations_run: Generations advanced by this run
		stop_reason: Why the run stopped
		elapsed_seconds: Wall-clock duration
		cataclysms: Population regenerations during the run
		history: (iteration, best_fitness) samples, one per report interval
	"""
	best: T
	initial_fitness: int
	final_fitness: int
	improvement_percent: float
	iterations_run: int
	stop_reason: StopReason
	elapsed_seconds: float
	cataclysms: int = 0
	history: list[tuple[int, int]] = field(default_factory=list)

	def __repr__(self) -> str:
		return (
			f"OptimizationResult("
			f"initial={self.initial_fitness}, "
			f"final={self.final_fitness}, "
			f"improvement={self.improvement_percent:.2f}%, "
			f"iterations={self.iterations_run}, "
			f"stop={self.stop_reason.name})"
		)


class OptimizationTask(Generic[T]):
	"""
	Advance a Population until a stopping condition is met.

	Usage:
		task = OptimizationTask(population, StoppingCondition(max_iterations=1000))
		result = task.run(TaskContext())

		# or hosted:
		dispatcher.run_computation(thread_id, task)
	"""

	def __init__(
		self,
		population: Population[T],
		stopping: Optional[StoppingCondition] = None,
		report_interval: int = 100,
		verbose: bool = False,
		logger: Optional[Callable[[str], None]] = None,
	):
		if report_interval < 1:
			raise ValueError(f"report_interval must be >= 1, got {report_interval}")
		self._population = population
		self._stopping = stopping or StoppingCondition()
		self._report_interval = report_interval
		self._verbose = verbose
		self._logger = logger or print
		self._result: Optional[OptimizationResult[T]] = None

	@property
	def population(self) -> Population[T]:
		return self._population

	@property
	def stopping(self) -> StoppingCondition:
		return self._stopping

	@property
	def result(self) -> Optional[OptimizationResult[T]]:
		"""Result of the last completed run (None while running)."""
		return self._result

	def _log(self, msg: str) -> None:
		if self._verbose:
			self._logger(msg)

	def run(self, context: TaskContext, *args: Any) -> OptimizationResult[T]:
		population = self._population
		stopping = self._stopping
		start = time.monotonic()
		start_iteration = population.current_iteration
		start_cataclysms = population.cataclysms
		initial_fitness = population.best_fitness

		tracker = ProgressTracker(logger=self._logger, prefix="[Task]", total_generations=stopping.max_iterations)
		history = [(population.current_iteration, initial_fitness)]
		self._log(f"[Task] Start: best={initial_fitness}, size={population.size}")

		while True:
			if context.should_stop():
				stop_reason = StopReason.SHUTDOWN
				break
			stop_reason = stopping.check(population, time.monotonic() - start, start_iteration)
			if stop_reason is not None:
				break

			population.advance()

			if population.current_iteration % self._report_interval == 0:
				history.append((population.current_iteration, population.best_fitness))
				tracker.tick_population(population.individuals, generation=population.current_iteration - start_iteration - 1, log=self._verbose)
				context.report(
					f"iteration={population.current_iteration}, best={population.best_fitness}, "
					f"stagnant={population.iterations_without_improvement}"
				)

		final_fitness = population.best_fitness
		if history[-1][0] != population.current_iteration:
			history.append((population.current_iteration, final_fitness))
		improvement_pct = ((initial_fitness - final_fitness) / initial_fitness * 100) if final_fitness < initial_fitness else 0.0

		result = OptimizationResult(
			best=population.best,
			initial_fitness=initial_fitness,
			final_fitness=final_fitness,
			improvement_percent=improvement_pct,
			iterations_run=population.current_iteration - start_iteration,
			stop_reason=stop_reason,
			elapsed_seconds=time.monotonic() - start,
			cataclysms=population.cataclysms - start_cataclysms,
			history=history,
		)
		self._result = result
		if self._verbose and tracker.generations_run:
			tracker.log_summary()
		self._log(f"[Task] Stop ({stop_reason.name}): {result}")
		context.report(f"stopped ({stop_reason.name.lower()}), best={final_fitness}, iterations={result.iterations_run}")
		return result

	def __repr__(self) -> str:
		return f"OptimizationTask(population={self._population!r}, stopping={self._stopping})"
