"""
HTTP proxy for a remote worker's computation thread dispatcher.

Endpoints (relative to http://{host}:{port}/RoutingAi/Slave):
- POST   /threads               -> {"thread_id": "..."}
- GET    /threads/{id}          -> ThreadInfo
- POST   /threads/{id}/abort    -> CallResponse
- DELETE /threads/{id}          -> CallResponse
- GET    /ping                  -> 204 or any 2xx

Unknown thread ids (HTTP 404) map to the same "Thread ID not found" answers
the local dispatcher gives.
"""

import time
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

import requests

from colonizer.hosting.dispatcher import THREAD_NOT_FOUND, CallResponse
from colonizer.hosting.thread import ThreadInfo


SERVICE_PATH = "/RoutingAi/Slave"
DEFAULT_PORT = 8080

Endpoint = Union[str, tuple[str, int]]


@dataclass
class WorkerClientConfig:
	"""Configuration for the worker client.

	Args:
		base_url: Service URL, e.g. http://host:8080/RoutingAi/Slave
		timeout: Request timeout in seconds
		retry_count: Number of attempts before giving up
		retry_delay: Delay between attempts in seconds
		verify_ssl: True, False, or a path to a CA bundle (https only)
	"""
	base_url: str = f"http://localhost:{DEFAULT_PORT}{SERVICE_PATH}"
	timeout: float = 30.0
	retry_count: int = 3
	retry_delay: float = 1.0
	verify_ssl: bool | str = True


def endpoint_url(endpoint: Endpoint) -> str:
	"""
	Build the service URL of a worker.

	Args:
		endpoint: "host:port", "host" (default port) or (host, port)
	"""
	if isinstance(endpoint, tuple):
		host, port = endpoint
	else:
		host, sep, port_str = endpoint.strip().rpartition(":")
		if not sep:
			host, port = port_str, DEFAULT_PORT
		else:
			try:
				port = int(port_str)
			except ValueError:
				raise ValueError(f"Invalid port in endpoint '{endpoint}'") from None
	if not host:
		raise ValueError(f"Invalid endpoint '{endpoint}': empty host")
	if not 0 < int(port) < 65536:
		raise ValueError(f"Invalid endpoint '{endpoint}': port out of range")
	return f"http://{host}:{port}{SERVICE_PATH}"


class WorkerClient:
	"""
	HTTP client mirroring the ComputationThreadDispatcher commands.

	Example usage:
		client = get_worker_proxy("worker-1:8080")
		thread_id = client.new_thread()
		print(client.get_thread_info(thread_id).state)
		client.abort_thread_action(thread_id)
		client.dispose_thread(thread_id)
	"""

	def __init__(
		self,
		config: Optional[WorkerClientConfig] = None,
		logger: Optional[Callable[[str], None]] = None,
	):
		self._config = config or WorkerClientConfig()
		if self._config.retry_count < 1:
			raise ValueError(f"retry_count must be >= 1, got {self._config.retry_count}")
		self._logger = logger or (lambda x: None)
		self._session = requests.Session()
		self._session.headers.update({
			"Content-Type": "application/json",
			"Accept": "application/json",
		})
		self._session.verify = self._config.verify_ssl

	@property
	def base_url(self) -> str:
		return self._config.base_url

	def _url(self, path: str) -> str:
		"""Build full URL from path (keeps the service prefix of base_url)."""
		return self._config.base_url.rstrip("/") + "/" + path.lstrip("/")

	def _request(
		self,
		method: str,
		path: str,
		json_data: Optional[dict] = None,
	) -> tuple[int, Optional[dict]]:
		"""Make HTTP request with retries.

		Returns (status_code, body); body is None for 204 No Content and 404.
		Raises ConnectionError once every attempt failed.
		"""
		url = self._url(path)
		last_error = None

		for attempt in range(self._config.retry_count):
			try:
				response = self._session.request(
					method=method,
					url=url,
					json=json_data,
					timeout=self._config.timeout,
				)

				if response.status_code in (204, 404):
					return response.status_code, None

				response.raise_for_status()
				return response.status_code, response.json()

			except requests.RequestException as e:
				last_error = e
				self._logger(f"[WorkerClient] Request failed (attempt {attempt + 1}): {e}")
				if attempt < self._config.retry_count - 1:
					time.sleep(self._config.retry_delay)

		raise ConnectionError(f"Failed after {self._config.retry_count} attempts: {last_error}")

	def _call(self, method: str, path: str) -> CallResponse:
		status, body = self._request(method, path)
		if status == 404:
			return CallResponse(False, THREAD_NOT_FOUND)
		if body is None:
			return CallResponse.ok()
		return CallResponse.from_dict(body)

	def ping(self) -> bool:
		"""True if the worker answers."""
		try:
			self._request("GET", "/ping")
		except ConnectionError:
			return False
		return True

	def new_thread(self) -> uuid.UUID:
		"""Create a thread on the worker and return its id."""
		_, body = self._request("POST", "/threads")
		if not body or "thread_id" not in body:
			raise ConnectionError(f"Worker at {self.base_url} returned no thread id")
		thread_id = uuid.UUID(str(body["thread_id"]))
		self._logger(f"[WorkerClient] NewThread: {{{thread_id}}}")
		return thread_id

	def get_thread_info(self, thread_id: uuid.UUID) -> ThreadInfo:
		status, body = self._request("GET", f"/threads/{thread_id}")
		if status == 404 or body is None:
			return ThreadInfo.not_found(thread_id)
		return ThreadInfo.from_dict(body)

	def abort_thread_action(self, thread_id: uuid.UUID) -> CallResponse:
		return self._call("POST", f"/threads/{thread_id}/abort")

	def dispose_thread(self, thread_id: uuid.UUID) -> CallResponse:
		return self._call("DELETE", f"/threads/{thread_id}")

	def close(self) -> None:
		self._session.close()

	def __enter__(self) -> "WorkerClient":
		return self

	def __exit__(self, *exc: Any) -> None:
		self.close()

	def __repr__(self) -> str:
		return f"WorkerClient(base_url={self.base_url!r})"


def get_worker_proxy(
	endpoint: Endpoint,
	timeout: float = 30.0,
	retry_count: int = 3,
	retry_delay: float = 1.0,
	logger: Optional[Callable[[str], None]] = None,
) -> WorkerClient:
	"""Return a WorkerClient bound to a worker's dispatcher service."""
	config = WorkerClientConfig(
		base_url=endpoint_url(endpoint),
		timeout=timeout,
		retry_count=retry_count,
		retry_delay=retry_delay,
	)
	return WorkerClient(config, logger=logger)
