"""The job record and its Redis and JSON representations."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping

_ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)
_TIME_RE = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<frac>\d+))?"
    r"(?P<tz>Z|[+-]\d{2}:\d{2})?$"
)


class JobStatus(str, Enum):
    """Lifecycle states of a job."""

    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    DELAYED = "delayed"
    RETRYING = "retrying"

    def __str__(self) -> str:
        return self.value


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _format_time(moment: datetime) -> str:
    text = moment.isoformat()
    if text.endswith("+00:00"):
        text = text[: -len("+00:00")] + "Z"
    return text


def _parse_time(text: str) -> datetime:
    match = _TIME_RE.match(text.strip())
    if match is None:
        raise ValueError(f"invalid timestamp: {text!r}")
    base = match["base"].replace(" ", "T")
    frac = (match["frac"] or "")[:6]
    tz = match["tz"] or ""
    if tz == "Z":
        tz = "+00:00"
    normalised = base + (f".{frac.ljust(6, '0')}" if frac else "") + tz
    return datetime.fromisoformat(normalised)


def _text(value: Any) -> str:
    return value.decode() if isinstance(value, (bytes, bytearray)) else str(value)


@dataclass(kw_only=True)
class Job:
    """A unit of work stored in Redis and processed by a worker."""

    id: str
    type: str
    payload: dict[str, Any] = field(default_factory=dict)
    status: JobStatus = JobStatus.QUEUED
    created_at: datetime = field(default_factory=_now)
    scheduled_at: datetime | None = None
    updated_at: datetime | None = None
    max_attempts: int = 0
    attempt_count: int = 0
    last_error: str = ""
    processed_at: datetime | None = None
    queue: str = ""

    def to_redis(self) -> dict[str, str]:
        """Return the hash fields stored for this job; unset times are left out."""
        fields: dict[str, str] = {
            "id": self.id,
            "type": self.type,
            "payload": json.dumps(self.payload),
            "status": JobStatus(self.status).value,
            "created_at": _format_time(self.created_at),
        }
        if self.scheduled_at is not None:
            fields["scheduled_at"] = _format_time(self.scheduled_at)
        if self.updated_at is not None:
            fields["updated_at"] = _format_time(self.updated_at)
        fields["max_attempts"] = str(self.max_attempts)
        fields["attempt_count"] = str(self.attempt_count)
        fields["last_error"] = self.last_error
        if self.processed_at is not None:
            fields["processed_at"] = _format_time(self.processed_at)
        fields["queue"] = self.queue
        return fields

    @classmethod
    def from_redis(cls, data: Mapping[Any, Any]) -> "Job":
        """Build a job from a Redis hash, whose keys and values may be bytes."""
        fields = {_text(key): _text(value) for key, value in data.items()}

        def optional_time(name: str) -> datetime | None:
            raw = fields.get(name, "")
            return _parse_time(raw) if raw else None

        raw_payload = fields.get("payload")
        payload = json.loads(raw_payload) if raw_payload else {}
        if payload is None:
            payload = {}
        if not isinstance(payload, dict):
            raise ValueError("job payload must be a JSON object")

        raw_status = fields.get("status")
        return cls(
            id=fields.get("id", ""),
            type=fields.get("type", ""),
            payload=payload,
            status=JobStatus(raw_status) if raw_status else JobStatus.QUEUED,
            created_at=optional_time("created_at") or _ZERO_TIME,
            scheduled_at=optional_time("scheduled_at"),
            updated_at=optional_time("updated_at"),
            max_attempts=int(fields.get("max_attempts") or 0),
            attempt_count=int(fields.get("attempt_count") or 0),
            last_error=fields.get("last_error", ""),
            processed_at=optional_time("processed_at"),
            queue=fields.get("queue", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON representation sent to API clients."""
        result: dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "payload": self.payload,
            "status": JobStatus(self.status).value,
            "created_at": _format_time(self.created_at),
        }
        if self.scheduled_at is not None:
            result["scheduled_at"] = _format_time(self.scheduled_at)
        result["updated_at"] = _format_time(self.updated_at or _ZERO_TIME)
        result["max_attempts"] = self.max_attempts
        result["attempt_count"] = self.attempt_count
        if self.last_error:
            result["last_error"] = self.last_error
        if self.processed_at is not None:
            result["processed_at"] = _format_time(self.processed_at)
        result["queue"] = self.queue
        return result