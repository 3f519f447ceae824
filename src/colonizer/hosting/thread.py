"""
Computation threads: one worker thread running one task at a time.

A ComputationThread is addressed by a UUID and reports its state through a
ThreadInfo snapshot. Running a task starts a daemon threading.Thread; an
abort sets the cancellation event that the task polls between steps.
"""

import threading
import traceback
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from colonizer.hosting.task import ComputationTask, TaskContext


class ThreadState(str, Enum):
	"""Lifecycle state of a computation thread."""
	IDLE = "idle"  # Created, no task run yet
	RUNNING = "running"
	COMPLETED = "completed"  # Last task returned normally
	ABORTED = "aborted"  # Last task stopped on an abort request
	FAILED = "failed"  # Last task raised
	DEAD = "dead"  # Unknown or disposed thread


@dataclass
class ThreadInfo:
	"""Snapshot of a computation thread, safe to hand to callers."""
	thread_id: uuid.UUID
	state: ThreadState
	accepts_commands: bool
	additional_info: str = ""

	def to_dict(self) -> dict[str, Any]:
		return {
			"thread_id": str(self.thread_id),
			"state": self.state.value,
			"accepts_commands": self.accepts_commands,
			"additional_info": self.additional_info,
		}

	@classmethod
	def from_dict(cls, data: dict[str, Any]) -> "ThreadInfo":
		return cls(
			thread_id=uuid.UUID(str(data["thread_id"])),
			state=ThreadState(data["state"]),
			accepts_commands=bool(data["accepts_commands"]),
			additional_info=data.get("additional_info") or "",
		)

	@classmethod
	def not_found(cls, thread_id: uuid.UUID) -> "ThreadInfo":
		return cls(
			thread_id=thread_id,
			state=ThreadState.DEAD,
			accepts_commands=False,
			additional_info="Thread ID not found",
		)


class ComputationThread:
	"""
	Runs ComputationTasks on a background thread, one at a time.

	Usage:
		thread = ComputationThread()
		thread.run_computation(task)
		...
		thread.abort_current_action()
		thread.join(timeout=5)
		print(thread.info.state, thread.result)
	"""

	def __init__(self, logger: Optional[Callable[[str], None]] = None):
		self._id = uuid.uuid4()
		self._logger = logger
		self._lock = threading.Lock()
		self._state = ThreadState.IDLE
		self._additional_info = ""
		self._stop_event = threading.Event()
		self._worker: Optional[threading.Thread] = None
		self._result: Any = None
		self._error: Optional[BaseException] = None

	def _log(self, msg: str) -> None:
		if self._logger:
			self._logger(msg)

	@property
	def id(self) -> uuid.UUID:
		return self._id

	@property
	def state(self) -> ThreadState:
		with self._lock:
			return self._state

	@property
	def info(self) -> ThreadInfo:
		with self._lock:
			return ThreadInfo(
				thread_id=self._id,
				state=self._state,
				accepts_commands=self._state not in (ThreadState.RUNNING, ThreadState.DEAD),
				additional_info=self._additional_info,
			)

	@property
	def result(self) -> Any:
		"""Return value of the last task (None until it completes)."""
		return self._result

	@property
	def error(self) -> Optional[BaseException]:
		"""Exception raised by the last task, if it failed."""
		return self._error

	def run_computation(self, task: ComputationTask, *args: Any) -> None:
		"""
		Start task on a new background thread.

		Raises:
			RuntimeError: if a task is already running or the thread is disposed
		"""
		with self._lock:
			if self._state in (ThreadState.RUNNING, ThreadState.DEAD):
				raise RuntimeError(f"Thread {self._id} does not accept commands (state={self._state.value})")
			self._state = ThreadState.RUNNING
			self._additional_info = ""
			self._result = None
			self._error = None
			self._stop_event = threading.Event()
			context = TaskContext(self._stop_event, self._report)
			self._worker = threading.Thread(
				target=self._run,
				args=(task, context, args),
				name=f"computation-{self._id}",
				daemon=True,
			)
			self._worker.start()

	def _report(self, message: str) -> None:
		with self._lock:
			# a disposed thread keeps reporting "Disposed"
			if self._state != ThreadState.DEAD:
				self._additional_info = message

	def _run(self, task: ComputationTask, context: TaskContext, args: tuple) -> None:
		try:
			result = task.run(context, *args)
		except Exception as e:
			self._log(f"[Thread] {{{self._id}}} task failed: {e}\n{traceback.format_exc()}")
			with self._lock:
				self._error = e
				# a disposed thread stays dead
				if self._state == ThreadState.RUNNING:
					self._state = ThreadState.FAILED
					self._additional_info = f"{type(e).__name__}: {e}"
			return

		with self._lock:
			self._result = result
			if self._state == ThreadState.RUNNING:
				self._state = ThreadState.ABORTED if context.should_stop() else ThreadState.COMPLETED

	def abort_current_action(self) -> None:
		"""Ask the running task to stop at its next check. No-op when idle."""
		self._stop_event.set()

	def join(self, timeout: Optional[float] = None) -> bool:
		"""
		Wait for the current task to finish.

		Returns:
			True if no task is running anymore
		"""
		worker = self._worker
		if worker is None:
			return True
		worker.join(timeout)
		return not worker.is_alive()

	def dispose(self) -> None:
		"""Abort the current task and refuse further commands."""
		self.abort_current_action()
		with self._lock:
			self._state = ThreadState.DEAD
			self._additional_info = "Disposed"

	def __repr__(self) -> str:
		return f"ComputationThread(id={self._id}, state={self.state.value})"
