"""Handlers that carry out each kind of job."""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import ClassVar

from .model import Job

log = logging.getLogger(__name__)


class PayloadError(ValueError):
    """Raised when a job payload lacks a field its handler needs."""


class JobHandler(ABC):
    """Something that can carry out a job of one type."""

    job_type: ClassVar[str] = ""

    @abstractmethod
    def handle_job(self, job: Job) -> None:
        """Carry out the job, raising on failure."""


def _require_text(job: Job, name: str) -> str:
    value = job.payload.get(name)
    if not isinstance(value, str):
        raise PayloadError(f"missing or invalid '{name}' field")
    return value


class EmailHandler(JobHandler):
    """Sends an e-mail (simulated)."""

    job_type = "send_email"

    def __init__(self, delay: float = 2.0) -> None:
        self.delay = delay

    def handle_job(self, job: Job) -> None:
        log.info("Sending email for job %s", job.id)
        to = _require_text(job, "to")
        subject = _require_text(job, "subject")
        time.sleep(self.delay)
        log.info("Email sent to %s with subject: %s", to, subject)


class ImageHandler(JobHandler):
    """Processes an image (simulated)."""

    job_type = "process_image"

    def __init__(self, delay: float = 5.0) -> None:
        self.delay = delay

    def handle_job(self, job: Job) -> None:
        log.info("Processing image for job %s", job.id)
        image_url = _require_text(job, "image_url")
        operation = _require_text(job, "operation")
        time.sleep(self.delay)
        log.info("Image processed: %s with operation: %s", image_url, operation)


class ReportHandler(JobHandler):
    """Generates a report (simulated)."""

    job_type = "generate_report"

    def __init__(self, delay: float = 10.0) -> None:
        self.delay = delay

    def handle_job(self, job: Job) -> None:
        log.info("Generating report for job %s", job.id)
        report_type = _require_text(job, "report_type")
        date_range = _require_text(job, "date_range")
        time.sleep(self.delay)
        log.info("Report generated: %s for date range: %s", report_type, date_range)