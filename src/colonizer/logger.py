"""
Reusable logging utilities for Colonizer runs.

This module provides two loggers:
- Logger: callable, file + console output with timestamps, one log file per
  run under a date-based directory structure (logs/YYYY/MM/DD/)
- OptimizationLogger: thin wrapper around the standard ``logging`` module with
  an extra TRACE level, used as the default sink of long-lived components
  (dispatcher, computation threads)

Both can be passed to any component that accepts a logging function
(Callable[[str], None]).
"""

import os
import logging
from datetime import datetime
from typing import Optional, Callable

# Custom TRACE level (below DEBUG)
TRACE = 5
logging.addLevelName(TRACE, "TRACE")


class Logger:
	"""
	Reusable logger that writes to both file and console with timestamps.

	Usage:
		logger = Logger("tour_run", log_dir="logs")

		logger("Starting run...")
		logger.header("Results")

		# Pass to components that accept a logger function
		population = Population(problem.factory, config, logger=logger, verbose=True)

	Attributes:
		name: Logger name (used for log filename)
		log_file: Path to the log file
	"""

	def __init__(
		self,
		name: str = "colonizer",
		log_dir: Optional[str] = None,
		console: bool = True,
		timestamp_format: str = '%H:%M:%S',
	):
		"""
		Initialize logger.

		Args:
			name: Base name for the log file (e.g., "tour_run")
			log_dir: Root log directory (default: ./logs); a YYYY/MM/DD
				subdirectory is created below it
			console: Whether to also log to console
			timestamp_format: strftime format for log timestamps
		"""
		self.name = name
		self._console = console
		self._timestamp_format = timestamp_format

		now = datetime.now()
		root = log_dir if log_dir is not None else os.path.join(os.getcwd(), "logs")
		date_dir = os.path.join(root, now.strftime("%Y"), now.strftime("%m"), now.strftime("%d"))
		os.makedirs(date_dir, exist_ok=True)

		timestamp = now.strftime("%Y%m%d_%H%M%S")
		self.log_file = os.path.join(date_dir, f"{name}_{timestamp}.log")

		self._logger = logging.getLogger(f'colonizer.run.{name}.{timestamp}')
		self._logger.setLevel(logging.INFO)
		self._logger.propagate = False
		self._logger.handlers.clear()

		formatter = logging.Formatter(
			'%(asctime)s | %(message)s',
			datefmt=timestamp_format
		)

		file_handler = logging.FileHandler(self.log_file)
		file_handler.setLevel(logging.INFO)
		file_handler.setFormatter(formatter)
		self._logger.addHandler(file_handler)

		if console:
			console_handler = logging.StreamHandler()
			console_handler.setLevel(logging.INFO)
			console_handler.setFormatter(formatter)
			self._logger.addHandler(console_handler)

	def __call__(self, message: str = "", flush: bool = True) -> None:
		"""Log a message. Makes Logger callable for easy integration."""
		self.log(message, flush=flush)

	def log(self, message: str = "", flush: bool = True) -> None:
		"""
		Log a message to file and console.

		Args:
			message: Message to log
			flush: Whether to flush handlers immediately
		"""
		self._logger.info(message)
		if flush:
			for handler in self._logger.handlers:
				handler.flush()

	def separator(self, char: str = "=", width: int = 70) -> None:
		"""Log a separator line."""
		self.log(char * width)

	def header(self, title: str, char: str = "=", width: int = 70) -> None:
		"""Log a formatted header."""
		self.log()
		self.separator(char, width)
		self.log(f"  {title}")
		self.separator(char, width)

	def close(self) -> None:
		"""Close and detach all handlers (releases the log file)."""
		for handler in list(self._logger.handlers):
			handler.close()
			self._logger.removeHandler(handler)

	def __repr__(self) -> str:
		return f"Logger(name='{self.name}', log_file='{self.log_file}')"


def create_logger(
	name: str = "colonizer",
	log_dir: Optional[str] = None,
	console: bool = True,
) -> Logger:
	"""
	Factory function to create a Logger instance.

	Args:
		name: Base name for the log file
		log_dir: Override log directory
		console: Whether to also log to console

	Returns:
		Configured Logger instance
	"""
	return Logger(name=name, log_dir=log_dir, console=console)


class OptimizationLogger:
	"""
	Logger wrapper with TRACE, DEBUG, INFO, WARNING, ERROR levels.

	TRACE: Very verbose per-generation details
	DEBUG: Individual lifecycle (threads created/disposed)
	INFO: Progress summaries
	WARNING/ERROR: Unknown identifiers, failed tasks

	Usage:
		logger = OptimizationLogger("Dispatcher", level=logging.INFO)
		logger.info("Thread created")
		logger.warning("Thread does not exist")

	With an external sink (e.g. a Logger instance), every message at or above
	the configured level is forwarded to it instead of the logging handlers.
	"""

	def __init__(
		self,
		name: str,
		level: int = logging.INFO,
		file_logger: Optional[Callable[[str], None]] = None,
	):
		self._logger = logging.getLogger(f"colonizer.{name}")
		if not file_logger and not self._logger.handlers:
			handler = logging.StreamHandler()
			handler.setFormatter(logging.Formatter("%(message)s"))
			self._logger.addHandler(handler)
		self._logger.setLevel(level)
		self._name = name
		self._file_logger = file_logger

	@property
	def name(self) -> str:
		return self._name

	def _emit(self, level: int, msg: str) -> None:
		if not self._logger.isEnabledFor(level):
			return
		if self._file_logger:
			self._file_logger(msg)
		else:
			self._logger.log(level, msg)

	def trace(self, msg: str) -> None:
		"""Log at TRACE level."""
		self._emit(TRACE, msg)

	def debug(self, msg: str) -> None:
		"""Log at DEBUG level."""
		self._emit(logging.DEBUG, msg)

	def info(self, msg: str) -> None:
		"""Log at INFO level."""
		self._emit(logging.INFO, msg)

	def warning(self, msg: str) -> None:
		"""Log at WARNING level."""
		self._emit(logging.WARNING, msg)

	def error(self, msg: str) -> None:
		"""Log at ERROR level."""
		self._emit(logging.ERROR, msg)

	def __call__(self, msg: str) -> None:
		"""Default: INFO level (compatible with print-style logging)."""
		self.info(msg)

	def set_level(self, level: int) -> None:
		"""Change log level dynamically."""
		self._logger.setLevel(level)
