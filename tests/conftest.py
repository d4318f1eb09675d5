"""
Pytest configuration and shared fixtures.
"""

import threading
from collections.abc import Callable, Generator
from typing import Any

import pytest
from prometheus_client import CollectorRegistry

from jobqueue.config import get_settings
from jobqueue.observability.metrics import MetricsCollector
from jobqueue.queue.bounded import BoundedJobQueue
from jobqueue.types.job import Job
from jobqueue.types.run import RunConfig

# Upper bound for anything that is expected to finish
JOIN_TIMEOUT_SECONDS = 10.0


class BackgroundCall:
    """
    Runs a callable on a daemon thread and captures its outcome.

    Used to observe blocking queue calls from the test thread.
    """

    def __init__(self, fn: Callable[..., Any], *args: Any, **kwargs: Any):
        self.result: Any = None
        self.error: BaseException | None = None
        self._fn = fn
        self._args = args
        self._kwargs = kwargs
        self._thread = threading.Thread(target=self._run, daemon=True)

    def _run(self) -> None:
        try:
            self.result = self._fn(*self._args, **self._kwargs)
        except BaseException as e:  # captured for assertions in the test thread
            self.error = e

    def start(self) -> "BackgroundCall":
        self._thread.start()
        return self

    def join(self, timeout: float = JOIN_TIMEOUT_SECONDS) -> bool:
        """Wait for the call; True if it finished."""
        self._thread.join(timeout)
        return not self._thread.is_alive()

    @property
    def alive(self) -> bool:
        return self._thread.is_alive()


@pytest.fixture
def background() -> Callable[..., BackgroundCall]:
    """Start a callable on a background thread."""

    def start(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> BackgroundCall:
        return BackgroundCall(fn, *args, **kwargs).start()

    return start


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None]:
    """Make each test read settings from its own environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def registry() -> CollectorRegistry:
    """Isolated Prometheus registry."""
    return CollectorRegistry()


@pytest.fixture
def metrics(registry: CollectorRegistry) -> MetricsCollector:
    """Metrics collector bound to an isolated registry."""
    return MetricsCollector(registry=registry)


@pytest.fixture
def queue() -> BoundedJobQueue:
    """Small queue for unit tests."""
    return BoundedJobQueue(3)


@pytest.fixture
def make_job() -> Callable[..., Job]:
    """Create a job with a zero duration unless told otherwise."""

    def make(job_id: int, duration_ms: int = 0) -> Job:
        return Job(id=job_id, duration_ms=duration_ms)

    return make


@pytest.fixture
def fast_config() -> RunConfig:
    """Configuration for quick, sleep-free harness runs."""
    return RunConfig(
        capacity=20,
        producers=4,
        consumers=4,
        jobs_per_producer=100,
        no_sleep=True,
        verbose=False,
    )
