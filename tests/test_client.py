"""
Test the remote worker client with a mocked HTTP session.

Run with: python tests/test_client.py
"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import uuid
from unittest.mock import MagicMock

import pytest
import requests

from colonizer.hosting import CallResponse, ThreadState
from colonizer.transport import WorkerClient, WorkerClientConfig, endpoint_url, get_worker_proxy


def response(status_code=200, body=None):
	resp = MagicMock()
	resp.status_code = status_code
	resp.json.return_value = body
	if status_code >= 400:
		resp.raise_for_status.side_effect = requests.HTTPError(f"{status_code} error")
	return resp


def make_client(*responses, retry_count=3):
	config = WorkerClientConfig(base_url="http://worker:8080/RoutingAi/Slave", retry_count=retry_count, retry_delay=0)
	client = WorkerClient(config)
	client._session = MagicMock()
	client._session.request.side_effect = list(responses)
	return client


def test_endpoint_url():
	assert endpoint_url("worker-1:9000") == "http://worker-1:9000/RoutingAi/Slave"
	assert endpoint_url(("10.0.0.2", 8081)) == "http://10.0.0.2:8081/RoutingAi/Slave"
	assert endpoint_url("worker-1") == "http://worker-1:8080/RoutingAi/Slave"


@pytest.mark.parametrize("endpoint", ["worker:abc", ":8080", "worker:70000"])
def test_endpoint_url_invalid(endpoint):
	with pytest.raises(ValueError):
		endpoint_url(endpoint)


def test_get_worker_proxy():
	client = get_worker_proxy("worker:8080", retry_count=5)
	assert client.base_url == "http://worker:8080/RoutingAi/Slave"


def test_new_thread():
	thread_id = uuid.uuid4()
	client = make_client(response(200, {"thread_id": str(thread_id)}))

	assert client.new_thread() == thread_id
	kwargs = client._session.request.call_args.kwargs
	assert kwargs["method"] == "POST"
	assert kwargs["url"] == "http://worker:8080/RoutingAi/Slave/threads"


def test_get_thread_info():
	thread_id = uuid.uuid4()
	body = {"thread_id": str(thread_id), "state": "running", "accepts_commands": False, "additional_info": "iteration=100"}
	client = make_client(response(200, body))

	info = client.get_thread_info(thread_id)
	assert info.state == ThreadState.RUNNING
	assert not info.accepts_commands
	assert info.additional_info == "iteration=100"
	assert client._session.request.call_args.kwargs["url"].endswith(f"/threads/{thread_id}")


def test_unknown_thread_maps_to_not_found():
	thread_id = uuid.uuid4()
	client = make_client(response(404), response(404), response(404))

	info = client.get_thread_info(thread_id)
	assert info.state == ThreadState.DEAD
	assert info.additional_info == "Thread ID not found"
	assert client.abort_thread_action(thread_id) == CallResponse(False, "Thread ID not found")
	assert client.dispose_thread(thread_id) == CallResponse(False, "Thread ID not found")


def test_abort_and_dispose():
	thread_id = uuid.uuid4()
	client = make_client(response(200, {"success": True, "details": ""}), response(204))

	assert client.abort_thread_action(thread_id).success
	assert client.dispose_thread(thread_id).success
	methods = [c.kwargs["method"] for c in client._session.request.call_args_list]
	assert methods == ["POST", "DELETE"]


def test_retries_then_succeeds():
	client = make_client(requests.ConnectionError("down"), response(204))
	assert client.ping()
	assert client._session.request.call_count == 2


def test_raises_after_retries():
	client = make_client(*[requests.ConnectionError("down")] * 3)
	with pytest.raises(ConnectionError):
		client.new_thread()
	assert client._session.request.call_count == 3


def test_server_error_is_retried():
	client = make_client(response(500), response(500), retry_count=2)
	with pytest.raises(ConnectionError):
		client.get_thread_info(uuid.uuid4())


def test_ping_down():
	client = make_client(requests.Timeout("slow"), retry_count=1)
	assert not client.ping()


if __name__ == "__main__":
	print("=" * 60)
	print("Worker Client Tests")
	print("=" * 60)

	test_endpoint_url()
	for endpoint in ["worker:abc", ":8080", "worker:70000"]:
		test_endpoint_url_invalid(endpoint)
	test_get_worker_proxy()
	test_new_thread()
	test_get_thread_info()
	test_unknown_thread_maps_to_not_found()
	test_abort_and_dispose()
	test_retries_then_succeeds()
	test_raises_after_retries()
	test_server_error_is_retried()
	test_ping_down()

	print("\nAll tests passed!")
