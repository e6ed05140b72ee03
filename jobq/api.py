"""HTTP API for creating jobs and looking them up."""

from __future__ import annotations

import json
import logging
from http import HTTPStatus
from typing import Any

from flask import Blueprint, Flask, jsonify, request

from .errors import REQUEST_VALIDATION_ERROR, AppError, request_validation_error
from .service import JobService, JobStore
from .validation import (
    CreateJobRequest,
    GetJobRequest,
    ValidationError,
    validate_queue_payload,
)

log = logging.getLogger(__name__)


def _validation_failure(exc: ValidationError) -> AppError:
    log.info("validate error: %s", exc)
    return request_validation_error(REQUEST_VALIDATION_ERROR, extra=exc.to_extra())


def _bind_create_job_request() -> CreateJobRequest:
    """Read and validate the create-job body; an empty body is not bound."""
    if not request.content_length:
        return CreateJobRequest(job_type="", payload={}, queue_name="", max_attempts=0)
    try:
        data = json.loads(request.get_data(cache=True))
    except ValueError as exc:
        log.info("validate error: %s", exc)
        raise request_validation_error(REQUEST_VALIDATION_ERROR, cause=exc) from exc
    try:
        return CreateJobRequest.from_dict(data)
    except ValidationError as exc:
        raise _validation_failure(exc) from exc


def _check_queue_payload(create_request: CreateJobRequest) -> None:
    """Check the payload against the rules of the queue it is sent to."""
    try:
        validate_queue_payload(create_request.queue_name, create_request.payload)
    except ValidationError as exc:
        raise _validation_failure(exc) from exc


def _bind_get_job_request(job_id: str) -> GetJobRequest:
    try:
        return GetJobRequest.from_params({"job_id": job_id})
    except ValidationError as exc:
        raise _validation_failure(exc) from exc


def _is_http_exception(exc: Exception) -> bool:
    """True for the framework's own HTTP errors (404, 405 and the like)."""
    return callable(getattr(exc, "get_response", None)) and isinstance(
        getattr(exc, "code", None), int
    )


def _handle_error(exc: Exception) -> Any:
    if _is_http_exception(exc):
        return exc
    if isinstance(exc, AppError):
        return jsonify(exc.to_dict()), exc.http_status
    log.exception("unhandled error")
    body = {
        "code": "000",
        "message": "Internal Server Error",
        "extra": {"error": str(exc)},
    }
    return jsonify(body), HTTPStatus.INTERNAL_SERVER_ERROR


def _job_blueprint(service: JobService) -> Blueprint:
    jobs = Blueprint("jobs", __name__, url_prefix="/api/v1/jobs")

    @jobs.post("/")
    def create_job() -> Any:
        create_request = _bind_create_job_request()
        log.debug("create job request: %s", create_request)
        _check_queue_payload(create_request)
        job = service.create_job(
            create_request.job_type,
            create_request.payload,
            create_request.queue_name,
            create_request.max_attempts,
        )
        return jsonify(job.to_dict())

    @jobs.get("/<job_id>")
    def get_job(job_id: str) -> Any:
        get_request = _bind_get_job_request(job_id)
        log.debug("get job request: %s", get_request)
        job = service.get_job_by_id(get_request.job_id)
        return jsonify(job.to_dict())

    return jobs


def create_app(store: JobStore) -> Flask:
    """Build the web application serving jobs kept in the given store."""
    app = Flask(__name__)

    @app.get("/health")
    def health() -> Any:
        return jsonify(status="ok")

    app.register_blueprint(_job_blueprint(JobService(store)))
    app.register_error_handler(Exception, _handle_error)
    return app