"""
Hosting layer: run populations on background threads.

Usage:
	from colonizer.hosting import ComputationThreadDispatcher, OptimizationTask, StoppingCondition

	dispatcher = ComputationThreadDispatcher()
	thread_id = dispatcher.new_thread()
	dispatcher.run_computation(thread_id, OptimizationTask(population, StoppingCondition(max_iterations=5000)))
"""

from colonizer.hosting.dispatcher import (
	THREADS_PER_PROCESSOR,
	CallResponse,
	ComputationThreadDispatcher,
)
from colonizer.hosting.stopping import StopReason, StoppingCondition
from colonizer.hosting.task import (
	ComputationTask,
	OptimizationResult,
	OptimizationTask,
	TaskContext,
)
from colonizer.hosting.thread import ComputationThread, ThreadInfo, ThreadState


__all__ = [
	'THREADS_PER_PROCESSOR',
	'CallResponse',
	'ComputationThreadDispatcher',
	'StopReason',
	'StoppingCondition',
	'ComputationTask',
	'OptimizationResult',
	'OptimizationTask',
	'TaskContext',
	'ComputationThread',
	'ThreadInfo',
	'ThreadState',
]
