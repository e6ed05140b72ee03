"""Pulls job ids off a queue and runs them on a pool of worker threads."""

from __future__ import annotations

import logging
import queue
import threading

from .handlers import JobHandler
from .model import Job, JobStatus
from .service import JobStore

log = logging.getLogger(__name__)

_STOP = object()
_HANDOFF_POLL = 0.05


class JobProcessingError(Exception):
    """Raised when a single job cannot be carried out."""


class Manager:
    """Dispatches jobs from a store to registered handlers."""

    dequeue_timeout: float = 5.0
    retry_delay: float = 5.0

    def __init__(self, store: JobStore, concurrency: int) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.store = store
        self.concurrency = concurrency
        self.handlers: dict[str, JobHandler] = {}

    def register_handler(self, job_type: str, handler: JobHandler) -> None:
        self.handlers[job_type] = handler
        log.info("Registered handler for job type: %s", job_type)

    def start_worker(self, queue_name: str, stop_event: threading.Event) -> None:
        """Serve one queue until stop_event is set, then let in-flight jobs finish."""
        log.info("Starting worker for queue: %s", queue_name)
        jobs: queue.Queue = queue.Queue(maxsize=self.concurrency)
        workers = [
            threading.Thread(
                target=self._process_jobs,
                args=(jobs,),
                name=f"{queue_name}-worker-{n}",
                daemon=True,
            )
            for n in range(self.concurrency)
        ]
        for worker in workers:
            worker.start()
        try:
            self._feed(queue_name, jobs, stop_event)
        finally:
            for _ in workers:
                jobs.put(_STOP)
            log.info("Waiting for workers to finish...")
            for worker in workers:
                worker.join()

    def _feed(
        self, queue_name: str, jobs: queue.Queue, stop_event: threading.Event
    ) -> None:
        while not stop_event.is_set():
            try:
                job_id = self.store.dequeue_job_id(queue_name, self.dequeue_timeout)
            except Exception as exc:
                log.warning(
                    "Error dequeuing job from '%s': %s. Retrying...", queue_name, exc
                )
                if stop_event.wait(self.retry_delay):
                    return
                continue

            if not job_id:
                continue

            if self._hand_over(jobs, job_id, stop_event):
                log.info("Dequeued job: %s", job_id)
                continue

            log.info("Context done, re-enqueueing job: %s", job_id)
            try:
                self.store.re_enqueue_job_id(queue_name, job_id)
            except Exception as exc:
                log.error("Failed to re-enqueue job %s: %s", job_id, exc)
            return

    @staticmethod
    def _hand_over(
        jobs: queue.Queue, job_id: str, stop_event: threading.Event
    ) -> bool:
        while True:
            try:
                jobs.put(job_id, timeout=_HANDOFF_POLL)
                return True
            except queue.Full:
                if stop_event.is_set():
                    return False

    def _process_jobs(self, jobs: queue.Queue) -> None:
        for job_id in iter(jobs.get, _STOP):
            try:
                self.process_job(job_id)
            except JobProcessingError as exc:
                log.error("Error processing job %s: %s", job_id, exc)

    def process_job(self, job_id: str) -> Job:
        """Run one job through its handler, marking it processing then completed."""
        try:
            job = self.store.get_job_by_id(job_id)
        except Exception as exc:
            raise JobProcessingError(f"failed to get job: {exc}") from exc

        handler = self.handlers.get(job.type)
        if handler is None:
            raise JobProcessingError(f"no handler found for job type: {job.type}")

        self._set_status(job_id, JobStatus.PROCESSING)
        log.info("Processing job: %s", job_id)

        try:
            handler.handle_job(job)
        except Exception as exc:
            raise JobProcessingError(f"failed to handle job: {exc}") from exc

        self._set_status(job_id, JobStatus.COMPLETED)
        log.info("Job completed: %s", job_id)
        return job

    def _set_status(self, job_id: str, status: JobStatus) -> None:
        try:
            self.store.update_job_status(job_id, status)
        except Exception as exc:
            raise JobProcessingError(f"failed to update job status: {exc}") from exc