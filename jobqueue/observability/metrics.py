"""
Prometheus metrics collection.
"""

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
    start_http_server,
)

from jobqueue.constants import (
    METRIC_HARNESS_RUNS,
    METRIC_JOB_DURATION,
    METRIC_JOBS_DEQUEUED,
    METRIC_JOBS_DISCARDED,
    METRIC_JOBS_ENQUEUED,
    METRIC_JOBS_PROCESSED,
    METRIC_JOBS_PRODUCED,
    METRIC_QUEUE_DEPTH,
    METRIC_WORKER_CANCELLED,
)

# Global metrics instance
_metrics: "MetricsCollector | None" = None


class MetricsCollector:
    """
    Prometheus metrics collector for the job queue.

    Collects metrics for:
    - Queue depth and enqueue/dequeue/discard totals
    - Jobs produced per producer and processed per consumer
    - Simulated job duration
    - Worker cancellations
    - Harness runs by fairness verdict

    All prometheus_client metric types are thread-safe, so workers record
    directly from their own threads.
    """

    def __init__(self, registry: CollectorRegistry | None = None):
        """
        Initialize the metrics collector.

        Args:
            registry: Optional custom registry. Uses default if not provided.
        """
        self._registry = registry or REGISTRY

        self.queue_depth = Gauge(
            METRIC_QUEUE_DEPTH,
            "Number of jobs currently buffered in the queue",
            registry=self._registry,
        )

        self.jobs_enqueued = Counter(
            METRIC_JOBS_ENQUEUED,
            "Total number of jobs accepted by the queue",
            registry=self._registry,
        )

        self.jobs_dequeued = Counter(
            METRIC_JOBS_DEQUEUED,
            "Total number of jobs handed to consumers",
            registry=self._registry,
        )

        self.jobs_discarded = Counter(
            METRIC_JOBS_DISCARDED,
            "Total number of jobs refused because the queue was shut down",
            registry=self._registry,
        )

        self.jobs_produced = Counter(
            METRIC_JOBS_PRODUCED,
            "Total number of jobs submitted by each producer",
            ["producer_id"],
            registry=self._registry,
        )

        self.jobs_processed = Counter(
            METRIC_JOBS_PROCESSED,
            "Total number of jobs processed by each consumer",
            ["consumer_id"],
            registry=self._registry,
        )

        self.job_duration = Histogram(
            METRIC_JOB_DURATION,
            "Simulated job processing cost in seconds",
            buckets=(0.0, 0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 1.0),
            registry=self._registry,
        )

        self.worker_cancelled = Counter(
            METRIC_WORKER_CANCELLED,
            "Total number of workers stopped by cancellation",
            ["role"],
            registry=self._registry,
        )

        self.harness_runs = Counter(
            METRIC_HARNESS_RUNS,
            "Total number of harness runs by fairness verdict",
            ["verdict"],
            registry=self._registry,
        )

    def record_enqueued(self, depth: int) -> None:
        """Record a job accepted by the queue."""
        self.jobs_enqueued.inc()
        self.queue_depth.set(depth)

    def record_dequeued(self, depth: int) -> None:
        """Record a job handed to a consumer."""
        self.jobs_dequeued.inc()
        self.queue_depth.set(depth)

    def record_discarded(self) -> None:
        self.jobs_discarded.inc()

    def record_produced(self, producer_id: int) -> None:
        self.jobs_produced.labels(producer_id=str(producer_id)).inc()

    def record_processed(self, consumer_id: int, duration_seconds: float) -> None:
        """Record a job processed by a consumer."""
        self.jobs_processed.labels(consumer_id=str(consumer_id)).inc()
        self.job_duration.observe(duration_seconds)

    def record_cancelled(self, role: str) -> None:
        self.worker_cancelled.labels(role=role).inc()

    def record_run(self, verdict: str) -> None:
        self.harness_runs.labels(verdict=verdict).inc()

    def get_metrics(self) -> bytes:
        """Get all metrics in Prometheus format."""
        return generate_latest(self._registry)

    def serve(self, port: int) -> None:
        """Expose the registry over HTTP on a background thread."""
        start_http_server(port, registry=self._registry)


def setup_metrics() -> MetricsCollector:
    """
    Set up and return the metrics collector.

    Returns:
        MetricsCollector: The metrics collector instance.
    """
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics


def get_metrics() -> MetricsCollector:
    """
    Get the metrics collector instance, creating it on first use.

    Returns:
        MetricsCollector: The metrics collector instance.
    """
    if _metrics is None:
        return setup_metrics()
    return _metrics
