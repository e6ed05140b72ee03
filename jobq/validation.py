"""Request bodies and queue payloads, with field validation."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Sequence

_EMAIL_RE = re.compile(
    r"^[A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?"
    r"(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?)*$"
)


class ValidationError(ValueError):
    """Raised when a request or payload does not satisfy its rules."""

    def __init__(
        self,
        message: str,
        failures: Sequence[tuple[str, str]] = (),
        struct_name: str = "",
    ) -> None:
        super().__init__(message)
        self.failures: tuple[tuple[str, str], ...] = tuple(failures)
        self.struct_name = struct_name

    @classmethod
    def _from_failures(
        cls, struct_name: str, failures: Sequence[tuple[str, str]]
    ) -> "ValidationError":
        message = "\n".join(_describe(struct_name, f, t) for f, t in failures)
        return cls(message, failures, struct_name)

    def to_extra(self) -> dict[str, Any]:
        """Map each failing field to its failing rule, plus the last full message."""
        if not self.failures:
            return {"error": str(self)}
        extra: dict[str, Any] = {name: tag for name, tag in self.failures}
        last_field, last_tag = self.failures[-1]
        extra["full_error"] = _describe(self.struct_name, last_field, last_tag)
        return extra


def _describe(struct_name: str, field_name: str, tag: str) -> str:
    return (
        f"Key: '{struct_name}.{field_name}' Error:Field validation for "
        f"'{field_name}' failed on the '{tag}' tag"
    )


@dataclass(frozen=True)
class _Rule:
    tag: str
    check: Callable[[Any], bool]


@dataclass(frozen=True)
class _Field:
    name: str
    kind: type
    rules: tuple[_Rule, ...]


def _has_value(value: Any) -> bool:
    if isinstance(value, dict):
        return True
    return value not in (None, "", 0)


def _one_of(*choices: str) -> _Rule:
    return _Rule("oneof", lambda value: value in choices)


_REQUIRED = _Rule("required", _has_value)
_EMAIL = _Rule("email", lambda value: bool(_EMAIL_RE.match(value)))
_MIN_ONE = _Rule("min", lambda value: value >= 1)

_ZERO: dict[type, Any] = {str: "", int: 0, dict: None}
_KIND_NAME = {str: "string", int: "integer", dict: "object"}


def _json_type(value: Any) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, dict):
        return "object"
    if isinstance(value, list):
        return "array"
    return type(value).__name__


def _matches(value: Any, kind: type) -> bool:
    if kind is int:
        return isinstance(value, int) and not isinstance(value, bool)
    return isinstance(value, kind)


def _decode(
    struct_name: str, fields: Sequence[_Field], data: Any
) -> dict[str, Any]:
    if not isinstance(data, Mapping):
        raise ValidationError(
            f"{struct_name}: expected a JSON object, got {_json_type(data)}"
        )
    values: dict[str, Any] = {}
    for spec in fields:
        raw = data.get(spec.name)
        if raw is None:
            values[spec.name] = _ZERO[spec.kind]
        elif _matches(raw, spec.kind):
            values[spec.name] = raw
        else:
            raise ValidationError(
                f"{struct_name}.{spec.name}: cannot use {_json_type(raw)} "
                f"as {_KIND_NAME[spec.kind]}"
            )

    failures = []
    for spec in fields:
        value = values[spec.name]
        failed = next((rule.tag for rule in spec.rules if not rule.check(value)), None)
        if failed is not None:
            failures.append((spec.name, failed))
    if failures:
        raise ValidationError._from_failures(struct_name, failures)
    return values


_QUEUE_NAMES = ("process_image", "send_email", "generate_report")

_CREATE_JOB_FIELDS = (
    _Field("job_type", str, (_REQUIRED,)),
    _Field("payload", dict, (_REQUIRED,)),
    _Field("queue_name", str, (_REQUIRED, _one_of(*_QUEUE_NAMES))),
    _Field("max_attempts", int, (_REQUIRED, _MIN_ONE)),
)
_GET_JOB_FIELDS = (_Field("job_id", str, (_REQUIRED,)),)
_PROCESS_IMAGE_FIELDS = (_Field("image_url", str, (_REQUIRED,)),)
_SEND_EMAIL_FIELDS = (
    _Field("to", str, (_REQUIRED, _EMAIL)),
    _Field("subject", str, (_REQUIRED,)),
    _Field("body", str, (_REQUIRED,)),
)
_GENERATE_REPORT_FIELDS = (
    _Field("report_type", str, (_REQUIRED, _one_of("daily", "weekly", "monthly"))),
)


@dataclass(frozen=True)
class CreateJobRequest:
    """Body of a request to create a job."""

    job_type: str
    payload: dict[str, Any]
    queue_name: str
    max_attempts: int

    @classmethod
    def from_dict(cls, data: Any) -> "CreateJobRequest":
        return cls(**_decode(cls.__name__, _CREATE_JOB_FIELDS, data))


@dataclass(frozen=True)
class GetJobRequest:
    """Path parameters of a request to fetch a job."""

    job_id: str

    @classmethod
    def from_params(cls, params: Any) -> "GetJobRequest":
        return cls(**_decode(cls.__name__, _GET_JOB_FIELDS, params))


@dataclass(frozen=True)
class ProcessImagePayload:
    """Payload for the process_image queue."""

    image_url: str

    @classmethod
    def from_dict(cls, data: Any) -> "ProcessImagePayload":
        return cls(**_decode(cls.__name__, _PROCESS_IMAGE_FIELDS, data))


@dataclass(frozen=True)
class SendEmailPayload:
    """Payload for the send_email queue."""

    to: str
    subject: str
    body: str

    @classmethod
    def from_dict(cls, data: Any) -> "SendEmailPayload":
        return cls(**_decode(cls.__name__, _SEND_EMAIL_FIELDS, data))


@dataclass(frozen=True)
class GenerateReportPayload:
    """Payload for the generate_report queue."""

    report_type: str

    @classmethod
    def from_dict(cls, data: Any) -> "GenerateReportPayload":
        return cls(**_decode(cls.__name__, _GENERATE_REPORT_FIELDS, data))


_PAYLOAD_TYPES = {
    "process_image": ProcessImagePayload,
    "send_email": SendEmailPayload,
    "generate_report": GenerateReportPayload,
}


def validate_queue_payload(
    queue_name: str, payload: Any
) -> ProcessImagePayload | SendEmailPayload | GenerateReportPayload | None:
    """Check a payload against its queue's rules; unknown queues are not checked."""
    payload_type = _PAYLOAD_TYPES.get(queue_name)
    if payload_type is None:
        return None
    return payload_type.from_dict(payload if payload is not None else {})