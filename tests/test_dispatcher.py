"""
Test the computation thread dispatcher.

Run with: python tests/test_dispatcher.py
"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent.parent))

import logging
import os
import threading
import time
import uuid
from concurrent.futures import ThreadPoolExecutor

import pytest

from colonizer.hosting import (
	THREADS_PER_PROCESSOR,
	CallResponse,
	ComputationThreadDispatcher,
	OptimizationTask,
	StopReason,
	StoppingCondition,
	TaskContext,
	ThreadState,
)
from colonizer.logger import TRACE, OptimizationLogger
from colonizer.population import Population, PopulationConfig
from tests.stubs import StubFactory


class BlockingTask:
	def __init__(self):
		self.started = threading.Event()

	def run(self, context: TaskContext, *args):
		self.started.set()
		while not context.should_stop():
			time.sleep(0.01)
		return args


def make_dispatcher(capacity=4):
	messages = []
	return ComputationThreadDispatcher(capacity=capacity, logger=messages.append), messages


def test_default_capacity():
	dispatcher = ComputationThreadDispatcher()
	assert dispatcher.capacity == (os.cpu_count() or 1) * THREADS_PER_PROCESSOR
	assert dispatcher.thread_count == 0


def test_invalid_capacity():
	with pytest.raises(ValueError):
		ComputationThreadDispatcher(capacity=0)


def test_new_thread_and_capacity():
	dispatcher, _ = make_dispatcher(capacity=2)
	first = dispatcher.new_thread()
	second = dispatcher.new_thread()

	assert first != second
	assert dispatcher.thread_count == 2
	assert set(dispatcher.thread_ids()) == {first, second}
	with pytest.raises(RuntimeError):
		dispatcher.new_thread()


def test_unknown_thread():
	dispatcher, messages = make_dispatcher()
	unknown = uuid.uuid4()

	info = dispatcher.get_thread_info(unknown)
	assert info.thread_id == unknown
	assert info.state == ThreadState.DEAD
	assert not info.accepts_commands
	assert info.additional_info == "Thread ID not found"

	assert dispatcher.run_computation(unknown, BlockingTask()) == CallResponse(False, "Thread ID not found")
	assert dispatcher.abort_thread_action(unknown) == CallResponse(False, "Thread ID not found")
	assert dispatcher.dispose_thread(unknown) == CallResponse(False, "Thread ID not found")
	assert sum("WARNING" in m for m in messages) == 4


def test_thread_info_lookups_logged_at_trace():
	messages = []
	logger = OptimizationLogger("TestDispatcherTrace", level=logging.DEBUG, file_logger=messages.append)
	dispatcher = ComputationThreadDispatcher(capacity=2, logger=logger)
	thread_id = dispatcher.new_thread()

	dispatcher.get_thread_info(thread_id)
	assert any("NewThread" in m for m in messages)
	assert not any("GetThreadInfo" in m for m in messages)

	logger.set_level(TRACE)
	dispatcher.get_thread_info(thread_id)
	assert messages[-1] == f"[Dispatcher] GetThreadInfo: {{{thread_id}}}"


def test_run_abort_dispose():
	dispatcher, _ = make_dispatcher()
	thread_id = dispatcher.new_thread()
	assert dispatcher.get_thread_info(thread_id).state == ThreadState.IDLE

	task = BlockingTask()
	assert dispatcher.run_computation(thread_id, task, "a") == CallResponse(True, "")
	assert task.started.wait(5)
	assert dispatcher.get_thread_info(thread_id).state == ThreadState.RUNNING

	busy = dispatcher.run_computation(thread_id, BlockingTask())
	assert busy == CallResponse(False, "Thread does not accept commands")

	assert dispatcher.abort_thread_action(thread_id).success
	thread = dispatcher.get_thread(thread_id)
	assert thread.join(5)
	assert dispatcher.get_thread_info(thread_id).state == ThreadState.ABORTED
	assert thread.result == ("a",)

	assert dispatcher.dispose_thread(thread_id).success
	assert dispatcher.thread_count == 0
	assert dispatcher.get_thread_info(thread_id).state == ThreadState.DEAD


def test_dispose_aborts_running_task():
	dispatcher, _ = make_dispatcher()
	thread_id = dispatcher.new_thread()
	task = BlockingTask()
	dispatcher.run_computation(thread_id, task)
	assert task.started.wait(5)
	thread = dispatcher.get_thread(thread_id)

	assert dispatcher.dispose_thread(thread_id).success
	assert thread.join(5)
	assert dispatcher.get_thread(thread_id) is None


def test_hosted_optimization():
	dispatcher, _ = make_dispatcher()
	population = Population(StubFactory(), PopulationConfig(population_size=10), seed=1)
	task = OptimizationTask(population, StoppingCondition(max_iterations=500), report_interval=100)

	thread_id = dispatcher.new_thread()
	assert dispatcher.run_computation(thread_id, task).success
	thread = dispatcher.get_thread(thread_id)
	assert thread.join(10)

	info = dispatcher.get_thread_info(thread_id)
	assert info.state == ThreadState.COMPLETED
	assert info.additional_info.startswith("stopped (max_iterations)")
	assert thread.result.stop_reason == StopReason.MAX_ITERATIONS
	assert population.current_iteration == 500


def test_concurrent_registry_access():
	dispatcher, _ = make_dispatcher(capacity=64)

	def create_and_dispose(_):
		thread_id = dispatcher.new_thread()
		info = dispatcher.get_thread_info(thread_id)
		response = dispatcher.dispose_thread(thread_id)
		return info.state, response.success

	with ThreadPoolExecutor(max_workers=8) as pool:
		results = list(pool.map(create_and_dispose, range(200)))

	assert all(state == ThreadState.IDLE and ok for state, ok in results)
	assert dispatcher.thread_count == 0


def test_shutdown():
	dispatcher, _ = make_dispatcher()
	tasks = [BlockingTask() for _ in range(3)]
	for task in tasks:
		dispatcher.run_computation(dispatcher.new_thread(), task)
	for task in tasks:
		assert task.started.wait(5)

	dispatcher.shutdown(timeout=5)
	assert dispatcher.thread_count == 0


def test_call_response_dict():
	response = CallResponse(False, "Thread ID not found")
	assert CallResponse.from_dict(response.to_dict()) == response
	assert CallResponse.from_dict({"success": True}) == CallResponse.ok()


if __name__ == "__main__":
	print("=" * 60)
	print("Dispatcher Tests")
	print("=" * 60)

	for name, fn in list(globals().items()):
		if name.startswith("test_") and callable(fn):
			fn()
			print(f"  {name}: OK")

	print("\nAll tests passed!")
