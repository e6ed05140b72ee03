"""Application errors carrying an HTTP status, an error code and extra detail."""

from __future__ import annotations

from dataclasses import dataclass
from http import HTTPStatus
from typing import Any


@dataclass(frozen=True)
class ErrorCode:
    """A stable error code paired with its human-readable message."""

    code: str
    message: str


JOB_CREATE_FAILED = ErrorCode(code="001", message="Failed to create job")
JOB_GET_FAILED = ErrorCode(code="002", message="Failed to get job")
REQUEST_VALIDATION_ERROR = ErrorCode(code="003", message="Request validation error")


class AppError(Exception):
    """An error meant to be reported to an API client."""

    def __init__(
        self,
        http_status: int,
        code: str,
        message: str,
        extra: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.http_status = int(http_status)
        self.code = code
        self.message = message
        self.extra = extra
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"AppError(http_status={self.http_status}, code={self.code!r}, "
            f"message={self.message!r}, extra={self.extra!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the body sent to clients."""
        return {"code": self.code, "message": self.message, "extra": self.extra}


def _build(
    status: HTTPStatus,
    error_code: ErrorCode,
    cause: BaseException | None,
    extra: dict[str, Any] | None,
) -> AppError:
    details = dict(extra) if extra is not None else None
    if cause is not None:
        details = details if details is not None else {}
        details["error"] = str(cause)
    return AppError(
        http_status=status,
        code=error_code.code,
        message=error_code.message,
        extra=details,
        cause=cause,
    )


def not_found(
    error_code: ErrorCode,
    cause: BaseException | None = None,
    extra: dict[str, Any] | None = None,
) -> AppError:
    """Build a 404 error."""
    return _build(HTTPStatus.NOT_FOUND, error_code, cause, extra)


def request_validation_error(
    error_code: ErrorCode,
    cause: BaseException | None = None,
    extra: dict[str, Any] | None = None,
) -> AppError:
    """Build a 400 error."""
    return _build(HTTPStatus.BAD_REQUEST, error_code, cause, extra)


def forbidden(
    error_code: ErrorCode,
    cause: BaseException | None = None,
    extra: dict[str, Any] | None = None,
) -> AppError:
    """Build a 403 error."""
    return _build(HTTPStatus.FORBIDDEN, error_code, cause, extra)


def internal_server_error(
    error_code: ErrorCode,
    cause: BaseException | None = None,
    extra: dict[str, Any] | None = None,
) -> AppError:
    """Build a 500 error."""
    return _build(HTTPStatus.INTERNAL_SERVER_ERROR, error_code, cause, extra)


def unauthorized(
    error_code: ErrorCode,
    cause: BaseException | None = None,
    extra: dict[str, Any] | None = None,
) -> AppError:
    """Build a 401 error."""
    return _build(HTTPStatus.UNAUTHORIZED, error_code, cause, extra)