from collections import defaultdict

import pytest

from jobq.api import create_app
from jobq.model import JobStatus


class MemoryStore:
    def __init__(self):
        self.jobs = {}
        self.queues = defaultdict(list)
        self.save_error = None

    def save_job(self, job):
        if self.save_error is not None:
            raise self.save_error
        self.jobs[job.id] = job

    def enqueue_job_id(self, queue_name, job_id):
        self.queues[queue_name].insert(0, job_id)

    def dequeue_job_id(self, queue_name, timeout):
        items = self.queues[queue_name]
        return items.pop() if items else None

    def re_enqueue_job_id(self, queue_name, job_id):
        self.queues[queue_name].append(job_id)

    def get_job_by_id(self, job_id):
        try:
            return self.jobs[job_id]
        except KeyError:
            raise KeyError(f"job not found: {job_id}") from None

    def update_job_status(self, job_id, status):
        self.jobs[job_id].status = JobStatus(status)


EMAIL_PAYLOAD = {"to": "alice@example.com", "subject": "Hi", "body": "Hello"}


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def client(store):
    return create_app(store).test_client()


def _create_body(**overrides):
    body = {
        "job_type": "send_email",
        "payload": EMAIL_PAYLOAD,
        "queue_name": "send_email",
        "max_attempts": 3,
    }
    body.update(overrides)
    return body


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json() == {"status": "ok"}


def test_create_job_stores_and_queues(client, store):
    response = client.post("/api/v1/jobs/", json=_create_body())
    assert response.status_code == 200
    body = response.get_json()
    assert body["type"] == "send_email"
    assert body["queue"] == "send_email"
    assert body["status"] == "queued"
    assert body["max_attempts"] == 3
    assert body["attempt_count"] == 0
    assert body["payload"] == EMAIL_PAYLOAD
    assert store.queues["send_email"] == [body["id"]]
    assert store.jobs[body["id"]].payload == EMAIL_PAYLOAD


def test_created_job_can_be_fetched(client):
    created = client.post("/api/v1/jobs/", json=_create_body()).get_json()
    response = client.get(f"/api/v1/jobs/{created['id']}")
    assert response.status_code == 200
    fetched = response.get_json()
    assert fetched["id"] == created["id"]
    assert fetched["payload"] == created["payload"]
    assert fetched["queue"] == created["queue"]


def test_unknown_queue_is_rejected(client, store):
    response = client.post("/api/v1/jobs/", json=_create_body(queue_name="other"))
    assert response.status_code == 400
    body = response.get_json()
    assert body["code"] == "003"
    assert body["message"] == "Request validation error"
    assert body["extra"]["queue_name"] == "oneof"
    assert store.jobs == {}


def test_missing_max_attempts_is_required(client):
    request_body = _create_body()
    del request_body["max_attempts"]
    response = client.post("/api/v1/jobs/", json=request_body)
    assert response.status_code == 400
    assert response.get_json()["extra"]["max_attempts"] == "required"


def test_invalid_email_payload_is_rejected(client, store):
    payload = dict(EMAIL_PAYLOAD, to="not-an-address")
    response = client.post("/api/v1/jobs/", json=_create_body(payload=payload))
    assert response.status_code == 400
    extra = response.get_json()["extra"]
    assert extra["to"] == "email"
    assert "to" in extra["full_error"]
    assert store.queues["send_email"] == []


def test_image_payload_requires_url(client):
    response = client.post(
        "/api/v1/jobs/",
        json=_create_body(job_type="process_image", queue_name="process_image", payload={"x": 1}),
    )
    assert response.status_code == 400
    assert response.get_json()["extra"]["image_url"] == "required"


def test_malformed_json_is_rejected(client):
    response = client.post(
        "/api/v1/jobs/", data="{not json", content_type="application/json"
    )
    assert response.status_code == 400
    body = response.get_json()
    assert body["code"] == "003"
    assert "error" in body["extra"]


def test_wrong_payload_type_is_rejected(client):
    response = client.post("/api/v1/jobs/", json=_create_body(payload=[1, 2]))
    assert response.status_code == 400
    assert "payload" in response.get_json()["extra"]["error"]


def test_empty_body_is_not_bound(client, store):
    response = client.post("/api/v1/jobs/")
    assert response.status_code == 200
    body = response.get_json()
    assert body["queue"] == ""
    assert body["max_attempts"] == 0
    assert store.queues[""] == [body["id"]]


def test_store_failure_reports_create_error(client, store):
    store.save_error = RuntimeError("disk full")
    response = client.post("/api/v1/jobs/", json=_create_body())
    assert response.status_code == 500
    body = response.get_json()
    assert body["code"] == "001"
    assert body["message"] == "Failed to create job"
    assert body["extra"]["error"] == "disk full"


def test_missing_job_reports_get_error(client):
    response = client.get("/api/v1/jobs/nope")
    assert response.status_code == 500
    body = response.get_json()
    assert body["code"] == "002"
    assert body["message"] == "Failed to get job"
    assert "nope" in body["extra"]["error"]


def test_unknown_route_stays_not_found(client):
    response = client.get("/api/v2/unknown")
    assert response.status_code == 404