# jobq

jobq is a small job queue built on Redis. It has two parts:

- an HTTP server (Flask) that accepts new jobs and returns the ones it has;
- a worker process that takes job ids off per-queue Redis lists and runs them.

Each job is kept in a Redis hash under `job:<id>`. Its id is pushed onto the
list `queue:<queue name>` and a worker pops it from the other end, so jobs
are taken oldest first.

## Installation

```
pip install .
```

With the test dependencies:

```
pip install ".[test]"
```

## Configuration

Both commands need a `.env` file in the working directory. If it is missing
they log an error and exit with status 1. The file is loaded into the
environment, and then these variables are read:

| Variable      | Meaning                                                                 | Default          |
|---------------|-------------------------------------------------------------------------|------------------|
| `REDIS_URL`   | A Redis URL (`redis://localhost:6379/0`) or a `host:port` address        | `localhost:6379` |
| `SERVER_PORT` | Port the HTTP server listens on (server only)                            | `8080`           |

Example `.env`:

```
REDIS_URL=localhost:6379
SERVER_PORT=8080
```

At startup the commands ping Redis. If the ping fails, or `SERVER_PORT` is not
a number, they exit with status 1.

## Running

Start the HTTP server. It listens on all interfaces:

```
jobq-server
```

Start the workers in another terminal:

```
jobq-worker
```

The worker serves three queues: `process_image`, `send_email` and
`generate_report`. Each queue has three concurrent worker threads. Send
SIGINT or SIGTERM to stop it. It then stops taking new jobs, and any job id it
has popped but not yet handed to a thread goes back to the front of its
queue. It waits up to ten seconds for running jobs to finish.

## HTTP API

### `GET /health`

Returns `{"status": "ok"}`.

### `POST /api/v1/jobs/`

Creates a job and pushes it onto a queue.

```json
{
  "job_type": "send_email",
  "queue_name": "send_email",
  "max_attempts": 3,
  "payload": {
    "to": "someone@example.com",
    "subject": "Hello",
    "body": "Hi there"
  }
}
```

All four fields are required. `queue_name` must be `process_image`,
`send_email` or `generate_report`. `max_attempts` must be an integer of at
least 1. The payload is then checked against the chosen queue:

- `process_image`: `image_url` is required.
- `send_email`: `to` is required and must be an e-mail address; `subject` and `body` are required.
- `generate_report`: `report_type` is required and must be `daily`, `weekly` or `monthly`.

A request with an empty body is not checked at all. A job with empty fields is
created from it.

On success the response is the new job as JSON. Its `id` is a fresh UUID and
its `status` is `"queued"`.

### `GET /api/v1/jobs/<job_id>`

Returns the stored job. An unknown id is reported as error `002`.

### Errors

Failed requests return a JSON body of this form:

```json
{"code": "003", "message": "Request validation error", "extra": {"queue_name": "oneof", "full_error": "..."}}
```

For a failed field check, `extra` maps each failing field to the rule it
broke (`required`, `oneof`, `email`, `min`). It also holds the last message
under `full_error`. For malformed JSON or a value of the wrong type, `extra`
holds `{"error": "..."}`.

| Code  | Meaning                   | HTTP status |
|-------|---------------------------|-------------|
| `001` | Failed to create job      | 500         |
| `002` | Failed to get job         | 500         |
| `003` | Request validation error  | 400         |
| `000` | Unexpected internal error | 500         |

Unknown routes and wrong methods get Flask's usual 404 and 405 responses.

## Job handlers

`jobq.handlers` has three handlers. Each one checks the payload fields it
needs and raises `PayloadError` if one is missing or is not a string. It then
simulates the work by sleeping for `delay` seconds, which can be set in its
constructor:

- `ImageHandler` (`process_image`): needs `image_url` and `operation`; default delay 5 s.
- `EmailHandler` (`send_email`): needs `to` and `subject`; default delay 2 s.
- `ReportHandler` (`generate_report`): needs `report_type` and `date_range`; default delay 10 s.

`Manager.process_job` sets the job's status to `processing` while it runs and
to `completed` when the handler returns. Any failure raises
`JobProcessingError`: the job cannot be read, it has no handler, the status
cannot be updated, or the handler raises. The worker threads log that error
and move on.

## Using it from Python

```python
from jobq.store import connect_redis, RedisJobStore
from jobq.service import JobService

store = RedisJobStore(connect_redis("localhost:6379"))
service = JobService(store)
job = service.create_job(
    "send_email",
    {"to": "someone@example.com", "subject": "Hi", "body": "..."},
    "send_email",
    3,
)
print(job.id, job.status)
```

Other entry points:

- `jobq.api.create_app(store)` builds the Flask app on any object with the
  methods of `jobq.service.JobStore`.
- `jobq.server.build_app(redis_url)` connects to Redis and builds the app on
  a `RedisJobStore`.
- `jobq.worker_main.build_manager(store, concurrency)` returns a `Manager`
  with the three handlers registered.
- `jobq.worker_main.run_workers(manager, queues, stop_event, shutdown_timeout)`
  serves each queue until `stop_event` is set. It returns `True` if every
  queue stopped within the timeout.
- `jobq.validation` has the request and payload classes and
  `validate_queue_payload`. `jobq.errors` has `AppError` and its helpers.

## What it does not do

- Failed jobs are not retried and are not marked `failed`. They keep the
  status `processing`, and `last_error` is not filled in. `max_attempts` and
  `attempt_count` are stored but not acted on.
- There is no scheduling. `scheduled_at` and the `delayed` and `retrying`
  statuses exist on the job record, but nothing sets or uses them.
- The handlers only simulate their work. They send no mail and process no
  images or reports.