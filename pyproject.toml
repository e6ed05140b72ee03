[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "jobq"
version = "0.1.0"
description = "A small Redis-backed job queue with an HTTP API for submitting jobs and a worker pool that runs them."
requires-python = ">=3.10"
keywords = ["job queue", "redis", "worker", "background jobs", "task queue"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: Flask",
    "Topic :: System :: Distributed Computing",
]
dependencies = [
    "flask",
    "redis",
    "python-dotenv",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
jobq-server = "jobq.server:main"
jobq-worker = "jobq.worker_main:main"

[tool.hatch.build.targets.wheel]
packages = ["jobq"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
