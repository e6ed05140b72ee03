"""Command that serves the job API."""

from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from .api import create_app
from .store import RedisJobStore, connect_redis

log = logging.getLogger(__name__)

DEFAULT_PORT = 8080
REDIS_EXTENSION = "jobq.redis"


def build_app(redis_url: str | None) -> Flask:
    """Connect to Redis and build the API on a store backed by it."""
    client = connect_redis(redis_url)
    app = create_app(RedisJobStore(client))
    app.extensions[REDIS_EXTENSION] = client
    return app


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="jobq-server", description="Serve the job API.")
    parser.parse_args(argv)
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    env_path = Path(".env")
    if not env_path.is_file():
        log.error("Error loading .env file: %s not found", env_path.resolve())
        return 1
    load_dotenv(env_path)

    raw_port = os.environ.get("SERVER_PORT") or str(DEFAULT_PORT)
    try:
        port = int(raw_port)
    except ValueError:
        log.error("Invalid SERVER_PORT: %s", raw_port)
        return 1

    try:
        app = build_app(os.environ.get("REDIS_URL"))
    except (ConnectionError, ValueError) as exc:
        log.error("Failed to connect to Redis: %s", exc)
        return 1

    client = app.extensions[REDIS_EXTENSION]
    try:
        log.info("Redis connected successfully")
        log.info("Server is running on port %s", port)
        app.run(host="0.0.0.0", port=port)
    finally:
        client.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())