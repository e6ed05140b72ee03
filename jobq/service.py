"""Creating and fetching jobs on top of a job store."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Mapping, Protocol

from .errors import JOB_CREATE_FAILED, JOB_GET_FAILED, internal_server_error
from .model import Job, JobStatus


class JobStore(Protocol):
    """What the service and the workers need from job storage."""

    def save_job(self, job: Job) -> None: ...

    def enqueue_job_id(self, queue_name: str, job_id: str) -> None: ...

    def dequeue_job_id(self, queue_name: str, timeout: float) -> str | None: ...

    def get_job_by_id(self, job_id: str) -> Job: ...

    def update_job_status(self, job_id: str, status: JobStatus | str) -> None: ...

    def re_enqueue_job_id(self, queue_name: str, job_id: str) -> None: ...


class JobService:
    """Creates jobs, queues them, and looks them up."""

    def __init__(self, store: JobStore) -> None:
        self.store = store

    def create_job(
        self,
        job_type: str,
        payload: Mapping[str, Any] | None,
        queue_name: str,
        max_attempts: int,
    ) -> Job:
        """Store a new queued job and push its id onto the named queue."""
        job = Job(
            id=str(uuid.uuid4()),
            type=job_type,
            payload=dict(payload) if payload is not None else {},
            status=JobStatus.QUEUED,
            queue=queue_name,
            created_at=datetime.now(timezone.utc),
            attempt_count=0,
            max_attempts=max_attempts,
        )
        try:
            self.store.save_job(job)
        except Exception as exc:
            raise internal_server_error(JOB_CREATE_FAILED, cause=exc) from exc
        try:
            self.store.enqueue_job_id(queue_name, job.id)
        except Exception as exc:
            raise internal_server_error(JOB_CREATE_FAILED, cause=exc) from exc
        return job

    def get_job_by_id(self, job_id: str) -> Job:
        """Fetch a job, reporting any storage failure as an application error."""
        try:
            return self.store.get_job_by_id(job_id)
        except Exception as exc:
            raise internal_server_error(JOB_GET_FAILED, cause=exc) from exc