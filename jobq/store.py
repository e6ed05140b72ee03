"""Redis-backed storage for jobs and their queues."""

from __future__ import annotations

from typing import Any

import redis

from .model import Job, JobStatus

_DEFAULT_ADDRESS = "localhost:6379"


def connect_redis(url: str | None = None) -> redis.Redis:
    """Connect to Redis by URL or host:port address and check it answers."""
    address = url or _DEFAULT_ADDRESS
    if "://" in address:
        client = redis.Redis.from_url(address)
    else:
        host, _, port = address.rpartition(":")
        client = redis.Redis(host=host or "localhost", port=int(port or 6379))
    try:
        client.ping()
    except redis.RedisError as exc:
        client.close()
        raise ConnectionError(f"failed to ping redis: {exc}") from exc
    return client


def _text(value: Any) -> str:
    return value.decode() if isinstance(value, (bytes, bytearray)) else str(value)


def _job_key(job_id: str) -> str:
    return f"job:{job_id}"


def _queue_key(queue_name: str) -> str:
    return f"queue:{queue_name}"


class RedisJobStore:
    """Stores jobs as hashes and queues as lists of job ids."""

    def __init__(self, client: Any) -> None:
        self.client = client

    def save_job(self, job: Job) -> None:
        self.client.hset(_job_key(job.id), mapping=job.to_redis())

    def enqueue_job_id(self, queue_name: str, job_id: str) -> None:
        self.client.lpush(_queue_key(queue_name), job_id)

    def dequeue_job_id(self, queue_name: str, timeout: float) -> str | None:
        """Block up to timeout seconds for the oldest job id; None if none came."""
        result = self.client.brpop(_queue_key(queue_name), timeout=timeout)
        if result is None:
            return None
        _, job_id = result
        return _text(job_id)

    def re_enqueue_job_id(self, queue_name: str, job_id: str) -> None:
        """Put a job id back so it is the next one dequeued."""
        self.client.rpush(_queue_key(queue_name), job_id)

    def get_job_by_id(self, job_id: str) -> Job:
        data = self.client.hgetall(_job_key(job_id))
        if not data:
            raise KeyError(f"job not found: {job_id}")
        return Job.from_redis(data)

    def update_job_status(self, job_id: str, status: JobStatus | str) -> None:
        self.client.hset(_job_key(job_id), "status", JobStatus(status).value)