"""HTTP proxy for remote workers."""

from colonizer.transport.client import (
	WorkerClient,
	WorkerClientConfig,
	endpoint_url,
	get_worker_proxy,
)


__all__ = [
	'WorkerClient',
	'WorkerClientConfig',
	'endpoint_url',
	'get_worker_proxy',
]
