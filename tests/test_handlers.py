import logging
from unittest import mock

import pytest

from jobq.handlers import EmailHandler, ImageHandler, PayloadError, ReportHandler
from jobq.model import Job


def make_job(job_type, payload):
    return Job(id="job-1", type=job_type, payload=payload)


def test_email_handler_logs_send(caplog):
    caplog.set_level(logging.INFO, logger="jobq.handlers")
    job = make_job("send_email", {"to": "bob@example.com", "subject": "Hi"})
    EmailHandler(delay=0).handle_job(job)
    assert "Sending email for job job-1" in caplog.text
    assert "Email sent to bob@example.com with subject: Hi" in caplog.text


def test_image_handler_logs_processing(caplog):
    caplog.set_level(logging.INFO, logger="jobq.handlers")
    job = make_job("process_image", {"image_url": "img.png", "operation": "resize"})
    ImageHandler(delay=0).handle_job(job)
    assert "Image processed: img.png with operation: resize" in caplog.text


def test_report_handler_logs_generation(caplog):
    caplog.set_level(logging.INFO, logger="jobq.handlers")
    job = make_job("generate_report", {"report_type": "daily", "date_range": "june"})
    ReportHandler(delay=0).handle_job(job)
    assert "Report generated: daily for date range: june" in caplog.text


@pytest.mark.parametrize(
    "handler, payload, missing",
    [
        (EmailHandler(delay=0), {"subject": "Hi"}, "to"),
        (EmailHandler(delay=0), {"to": "bob@example.com"}, "subject"),
        (EmailHandler(delay=0), {"to": 5, "subject": "Hi"}, "to"),
        (ImageHandler(delay=0), {"operation": "resize"}, "image_url"),
        (ImageHandler(delay=0), {"image_url": "x"}, "operation"),
        (ReportHandler(delay=0), {"date_range": "june"}, "report_type"),
        (ReportHandler(delay=0), {"report_type": "daily", "date_range": None}, "date_range"),
    ],
)
def test_missing_field_raises(handler, payload, missing):
    with pytest.raises(PayloadError) as info:
        handler.handle_job(make_job("x", payload))
    assert str(info.value) == f"missing or invalid '{missing}' field"


def test_payload_error_is_value_error():
    with pytest.raises(ValueError):
        EmailHandler(delay=0).handle_job(make_job("send_email", {}))


def test_invalid_payload_does_not_sleep():
    with mock.patch("jobq.handlers.time.sleep") as sleep:
        with pytest.raises(PayloadError):
            ReportHandler().handle_job(make_job("generate_report", {}))
    assert sleep.call_count == 0


@pytest.mark.parametrize(
    "handler, payload, seconds",
    [
        (EmailHandler(), {"to": "bob@example.com", "subject": "s"}, 2),
        (ImageHandler(), {"image_url": "u", "operation": "o"}, 5),
        (ReportHandler(), {"report_type": "r", "date_range": "d"}, 10),
    ],
)
def test_default_delays(handler, payload, seconds):
    with mock.patch("jobq.handlers.time.sleep") as sleep:
        result = handler.handle_job(make_job("x", payload))
    assert result is None
    assert sleep.call_args_list == [mock.call(seconds)]


def test_job_types_match_queue_names():
    handlers = [EmailHandler(delay=0), ImageHandler(delay=0), ReportHandler(delay=0)]
    assert [h.job_type for h in handlers] == ["send_email", "process_image", "generate_report"]