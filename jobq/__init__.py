"""A Redis-backed job queue with a Flask HTTP API and a threaded worker pool."""

__version__ = "0.1.0"