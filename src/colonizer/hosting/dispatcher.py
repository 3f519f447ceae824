"""
Registry of computation threads addressed by UUID.

The dispatcher is a plain object: create one per process (or per test) and
pass it to whoever needs it. Unknown identifiers and busy threads are
reported as unsuccessful CallResponses and logged as warnings rather than
raised, so a remote caller always receives an answer.
"""

import os
import threading
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from colonizer.hosting.task import ComputationTask
from colonizer.hosting.thread import ComputationThread, ThreadInfo
from colonizer.logger import OptimizationLogger


TAG = "Dispatcher"
THREADS_PER_PROCESSOR = 2

THREAD_NOT_FOUND = "Thread ID not found"
THREAD_BUSY = "Thread does not accept commands"


@dataclass
class CallResponse:
	"""Outcome of a dispatcher command."""
	success: bool
	details: str = ""

	def to_dict(self) -> dict[str, Any]:
		return {"success": self.success, "details": self.details}

	@classmethod
	def from_dict(cls, data: dict[str, Any]) -> "CallResponse":
		return cls(success=bool(data["success"]), details=data.get("details") or "")

	@classmethod
	def ok(cls) -> "CallResponse":
		return cls(success=True, details="")


def default_capacity() -> int:
	return (os.cpu_count() or 1) * THREADS_PER_PROCESSOR


class ComputationThreadDispatcher:
	"""
	Creates, runs, aborts and disposes ComputationThreads.

	Usage:
		dispatcher = ComputationThreadDispatcher(capacity=4)
		thread_id = dispatcher.new_thread()
		dispatcher.run_computation(thread_id, OptimizationTask(population, stopping))
		print(dispatcher.get_thread_info(thread_id))
		dispatcher.dispose_thread(thread_id)
	"""

	def __init__(
		self,
		capacity: Optional[int] = None,
		logger: Optional[Union[OptimizationLogger, Callable[[str], None]]] = None,
	):
		capacity = default_capacity() if capacity is None else capacity
		if capacity < 1:
			raise ValueError(f"capacity must be >= 1, got {capacity}")
		self._capacity = capacity
		self._threads: dict[uuid.UUID, ComputationThread] = {}
		self._lock = threading.Lock()
		self._logger = logger if logger is not None else OptimizationLogger(TAG)

	@property
	def capacity(self) -> int:
		"""Maximum number of threads the dispatcher will hold."""
		return self._capacity

	@property
	def thread_count(self) -> int:
		with self._lock:
			return len(self._threads)

	def thread_ids(self) -> list[uuid.UUID]:
		with self._lock:
			return list(self._threads)

	# Logging helpers: OptimizationLogger gets levels, plain callables get everything

	def _trace(self, msg: str) -> None:
		if isinstance(self._logger, OptimizationLogger):
			self._logger.trace(f"[{TAG}] {msg}")

	def _debug(self, msg: str) -> None:
		if isinstance(self._logger, OptimizationLogger):
			self._logger.debug(f"[{TAG}] {msg}")

	def _info(self, msg: str) -> None:
		self._logger(f"[{TAG}] {msg}")

	def _warning(self, msg: str) -> None:
		if isinstance(self._logger, OptimizationLogger):
			self._logger.warning(f"[{TAG}] {msg}")
		else:
			self._logger(f"[{TAG}] WARNING: {msg}")

	def _error(self, msg: str) -> None:
		if isinstance(self._logger, OptimizationLogger):
			self._logger.error(f"[{TAG}] {msg}")
		else:
			self._logger(f"[{TAG}] ERROR: {msg}")

	def _get(self, thread_id: uuid.UUID) -> Optional[ComputationThread]:
		with self._lock:
			return self._threads.get(thread_id)

	def new_thread(self) -> uuid.UUID:
		"""
		Register a new idle thread.

		Returns:
			The new thread's id

		Raises:
			RuntimeError: if the dispatcher is at capacity
		"""
		with self._lock:
			if len(self._threads) >= self._capacity:
				raise RuntimeError(f"Dispatcher is at capacity ({self._capacity} threads)")
			thread = ComputationThread(logger=self._error)
			self._threads[thread.id] = thread
			count = len(self._threads)

		self._debug(f"NewThread: {{{thread.id}}}")
		self._debug(f"Capacity: {count} alive/{self._capacity} total")
		return thread.id

	def get_thread_info(self, thread_id: uuid.UUID) -> ThreadInfo:
		thread = self._get(thread_id)
		if thread is None:
			self._warning(f"GetThreadInfo: Thread does not exist: {{{thread_id}}}")
			return ThreadInfo.not_found(thread_id)
		self._trace(f"GetThreadInfo: {{{thread_id}}}")
		return thread.info

	def get_thread(self, thread_id: uuid.UUID) -> Optional[ComputationThread]:
		"""The thread object itself (for results and joins), or None."""
		return self._get(thread_id)

	def run_computation(self, thread_id: uuid.UUID, task: ComputationTask, *args: Any) -> CallResponse:
		"""Start task on the given thread."""
		thread = self._get(thread_id)
		if thread is None:
			self._warning(f"RunComputation: Thread does not exist: {{{thread_id}}}")
			return CallResponse(False, THREAD_NOT_FOUND)

		try:
			thread.run_computation(task, *args)
		except RuntimeError:
			self._warning(f"RunComputation: Thread does not accept commands: {{{thread_id}}}")
			return CallResponse(False, THREAD_BUSY)

		self._info(f"RunComputation: {{{thread_id}}} {type(task).__name__}")
		return CallResponse.ok()

	def abort_thread_action(self, thread_id: uuid.UUID) -> CallResponse:
		"""Request the thread's current task to stop."""
		thread = self._get(thread_id)
		if thread is None:
			self._warning(f"AbortThreadAction: Thread does not exist: {{{thread_id}}}")
			return CallResponse(False, THREAD_NOT_FOUND)

		self._info(f"AbortThreadAction: {{{thread_id}}}")
		thread.abort_current_action()
		return CallResponse.ok()

	def dispose_thread(self, thread_id: uuid.UUID) -> CallResponse:
		"""Abort the thread's current task and remove it from the registry."""
		with self._lock:
			thread = self._threads.pop(thread_id, None)
		if thread is None:
			self._warning(f"DisposeThread: Thread does not exist: {{{thread_id}}}")
			return CallResponse(False, THREAD_NOT_FOUND)

		self._info(f"DisposeThread: {{{thread_id}}}")
		thread.dispose()
		self._debug(f"DisposeThread: Success: {{{thread_id}}}")
		return CallResponse.ok()

	def shutdown(self, timeout: Optional[float] = None) -> None:
		"""Dispose every thread and wait for their workers to exit."""
		with self._lock:
			threads = list(self._threads.values())
			self._threads.clear()
		for thread in threads:
			thread.dispose()
		for thread in threads:
			thread.join(timeout)
		if threads:
			self._info(f"Shutdown: disposed {len(threads)} threads")

	def __repr__(self) -> str:
		return f"ComputationThreadDispatcher(threads={self.thread_count}, capacity={self._capacity})"
