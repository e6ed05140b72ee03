"""Command that runs workers for every known queue until told to stop."""

from __future__ import annotations

import argparse
import logging
import os
import signal
import threading
import time
from pathlib import Path
from typing import Iterable

from dotenv import load_dotenv

from .handlers import EmailHandler, ImageHandler, ReportHandler
from .manager import Manager
from .service import JobStore
from .store import RedisJobStore, connect_redis

log = logging.getLogger(__name__)

QUEUES = ("process_image", "send_email", "generate_report")
DEFAULT_CONCURRENCY = 3
SHUTDOWN_TIMEOUT = 10.0


def build_manager(store: JobStore, concurrency: int = DEFAULT_CONCURRENCY) -> Manager:
    """Make a manager with a handler for every known job type."""
    manager = Manager(store, concurrency)
    manager.register_handler("process_image", ImageHandler())
    manager.register_handler("send_email", EmailHandler())
    manager.register_handler("generate_report", ReportHandler())
    return manager


def run_workers(
    manager: Manager,
    queues: Iterable[str] = QUEUES,
    stop_event: threading.Event | None = None,
    shutdown_timeout: float = SHUTDOWN_TIMEOUT,
) -> bool:
    """Serve each queue until stop_event is set; True if all stopped in time."""
    stop_event = stop_event if stop_event is not None else threading.Event()
    names = list(queues)
    threads = [
        threading.Thread(
            target=manager.start_worker,
            args=(name, stop_event),
            name=f"queue-{name}",
            daemon=True,
        )
        for name in names
    ]
    for thread in threads:
        thread.start()
    log.info("workers started, listening on queues: %s", names)

    stop_event.wait()
    log.info("shutting down...")

    deadline = time.monotonic() + shutdown_timeout
    for thread in threads:
        thread.join(max(0.0, deadline - time.monotonic()))

    if any(thread.is_alive() for thread in threads):
        log.warning("workers stopped with timeout")
        return False
    log.info("workers stopped")
    return True


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="jobq-worker", description="Run job queue workers."
    )
    parser.parse_args(argv)
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    env_path = Path(".env")
    if not env_path.is_file():
        log.error("Error loading .env file: %s not found", env_path.resolve())
        return 1
    load_dotenv(env_path)

    try:
        client = connect_redis(os.environ.get("REDIS_URL"))
    except (ConnectionError, ValueError) as exc:
        log.error("Failed to connect to Redis: %s", exc)
        return 1

    try:
        log.info("Redis connected successfully")
        manager = build_manager(RedisJobStore(client))
        stop_event = threading.Event()

        def _on_signal(signum: int, frame: object) -> None:
            stop_event.set()

        previous = {
            sig: signal.signal(sig, _on_signal)
            for sig in (signal.SIGINT, signal.SIGTERM)
        }
        try:
            run_workers(manager, QUEUES, stop_event)
        finally:
            for sig, handler in previous.items():
                signal.signal(sig, handler)
    finally:
        client.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())