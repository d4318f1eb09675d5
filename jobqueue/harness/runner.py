"""
Harness orchestrating one producer/consumer run.

Sequencing: create the queue, start consumers, start producers, join
producers, shut the queue down exactly once, join consumers, then read the
consumers' counters and aggregate them into a fairness report.
"""

import logging
import threading
import time

from jobqueue.constants import (
    DEFAULT_TRIAL_SEED_STRIDE,
    SPAN_HARNESS_RUN,
    SPAN_HARNESS_TRIALS,
)
from jobqueue.errors import InvalidConfigurationError, OperationCancelledError
from jobqueue.harness.fairness import summarize
from jobqueue.observability.logging import bind_context, clear_context
from jobqueue.observability.metrics import MetricsCollector
from jobqueue.observability.tracing import get_tracer, set_span_attributes
from jobqueue.queue.bounded import BoundedJobQueue
from jobqueue.types.run import ConsumerStats, RunConfig, RunResult, TrialSummary
from jobqueue.worker.base import BaseWorker
from jobqueue.worker.consumer import Consumer
from jobqueue.worker.producer import Producer

logger = logging.getLogger(__name__)


class Harness:
    """
    Runs N producers against M consumers over one bounded queue.

    Features:
    - Consumers start before producers, so they block on the empty queue
    - Shutdown is issued once, after every producer has finished submitting,
      or at shutdown_after_seconds when configured (mid-run shutdown)
    - cancel() stops every worker; the run still returns a result
    """

    def __init__(self, config: RunConfig, metrics: MetricsCollector | None = None):
        """
        Initialize the harness.

        Args:
            config: Validated run configuration.
            metrics: Optional metrics collector shared with queue and workers.
        """
        self.config = config
        self._metrics = metrics

        self._lock = threading.Lock()
        self._cancelled = False
        self._workers: list[BaseWorker] = []

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Cancel every worker of the current (or next) run."""
        with self._lock:
            self._cancelled = True
            workers = list(self._workers)

        logger.info("Harness cancelling", extra={"workers": len(workers)})
        for worker in workers:
            worker.cancel()

    def run(self) -> RunResult:
        """
        Execute the run and aggregate its metrics.

        Returns:
            RunResult with per-consumer counts and the fairness report.
        """
        cfg = self.config

        with get_tracer().start_as_current_span(SPAN_HARNESS_RUN) as span:
            set_span_attributes(
                span,
                capacity=cfg.capacity,
                producers=cfg.producers,
                consumers=cfg.consumers,
                jobs_per_producer=cfg.jobs_per_producer,
                seed_base=cfg.seed_base,
                no_sleep=cfg.no_sleep,
            )

            result = self._execute()

            set_span_attributes(
                span,
                total_processed=result.report.total,
                elapsed_seconds=result.elapsed_seconds,
                verdict=result.report.verdict.value,
                cancelled=result.cancelled,
            )

        if self._metrics is not None:
            self._metrics.record_run(result.report.verdict.value)

        return result

    def _execute(self) -> RunResult:
        cfg = self.config

        queue = BoundedJobQueue(
            cfg.capacity,
            closed_policy=cfg.closed_enqueue_policy,
            metrics=self._metrics,
        )

        consumers = [
            Consumer(
                i + 1,
                queue,
                verbose=cfg.verbose,
                log_every=cfg.log_every,
                no_sleep=cfg.no_sleep,
                record_job_ids=cfg.record_job_ids,
                metrics=self._metrics,
            )
            for i in range(cfg.consumers)
        ]
        producers = [
            Producer(
                i + 1,
                queue,
                cfg.jobs_per_producer,
                cfg.seed_base + i,
                verbose=cfg.verbose,
                log_every=cfg.log_every,
                no_sleep=cfg.no_sleep,
                min_duration_ms=cfg.min_duration_ms,
                max_duration_ms=cfg.max_duration_ms,
                metrics=self._metrics,
            )
            for i in range(cfg.producers)
        ]

        with self._lock:
            self._workers = [*consumers, *producers]
            cancel_now = self._cancelled
        if cancel_now:
            for worker in [*consumers, *producers]:
                worker.cancel()

        logger.info(
            "Harness starting",
            extra={
                "capacity": cfg.capacity,
                "producers": cfg.producers,
                "consumers": cfg.consumers,
                "jobs_per_producer": cfg.jobs_per_producer,
            },
        )

        start = time.perf_counter()

        for consumer in consumers:
            consumer.start()
        for producer in producers:
            producer.start()

        shutdown_early = self._join_producers(producers, queue, start)

        queue.shutdown()

        for consumer in consumers:
            consumer.join()

        elapsed = time.perf_counter() - start

        # Every worker thread has joined: counters are final
        stats = [
            ConsumerStats(
                consumer_id=c.worker_id,
                processed_count=c.processed_count,
                state=c.state,
                processed_ids=list(c.processed_ids) if cfg.record_job_ids else None,
            )
            for c in consumers
        ]
        report = summarize(
            [s.processed_count for s in stats],
            elapsed,
            cfg.fairness_cv_threshold,
        )

        result = RunResult(
            config=cfg,
            consumers=stats,
            produced_total=sum(p.produced_count for p in producers),
            discarded_total=sum(p.discarded_count for p in producers),
            elapsed_seconds=elapsed,
            report=report,
            cancelled=self._cancelled,
            shutdown_early=shutdown_early,
        )

        logger.info(
            "Harness finished",
            extra={
                "total_processed": report.total,
                "elapsed": f"{elapsed:.3f}s",
                "throughput": f"{report.throughput:.2f}",
                "verdict": report.verdict.value,
            },
        )

        return result

    def _join_producers(
        self,
        producers: list[Producer],
        queue: BoundedJobQueue,
        start: float,
    ) -> bool:
        """
        Wait for producers, shutting the queue down at the deadline if one is set.

        Returns:
            True if the queue was shut down while producers were still running.
        """
        deadline = self.config.shutdown_after_seconds
        if deadline is None:
            for producer in producers:
                producer.join()
            return False

        shutdown_early = False
        for producer in producers:
            remaining = max(0.0, start + deadline - time.perf_counter())
            if not producer.join(remaining):
                shutdown_early = True
                break

        if shutdown_early:
            logger.info(
                "Shutdown deadline reached before producers finished",
                extra={"shutdown_after_seconds": deadline},
            )
            queue.shutdown()
            for producer in producers:
                producer.join()

        return shutdown_early


class TrialRunner:
    """
    Repeats a run with shifted seeds and keeps the worst-case fairness figures.

    Trial t (1-based) seeds producer i with seed_base + t * seed_stride + i.
    """

    def __init__(
        self,
        config: RunConfig,
        trials: int,
        seed_stride: int = DEFAULT_TRIAL_SEED_STRIDE,
        metrics: MetricsCollector | None = None,
    ):
        """
        Initialize the trial runner.

        Args:
            config: Base configuration.
            trials: Number of runs, at least 1.
            seed_stride: Seed offset between trials.
            metrics: Optional metrics collector.

        Raises:
            InvalidConfigurationError: If trials < 1.
        """
        if trials < 1:
            raise InvalidConfigurationError(f"trials must be >= 1, got {trials}")

        self.config = config
        self.trials = trials
        self.seed_stride = seed_stride
        self._metrics = metrics

        self._lock = threading.Lock()
        self._cancelled = False
        self._current: Harness | None = None

    def cancel(self) -> None:
        """Cancel the trial in progress and skip the remaining ones."""
        with self._lock:
            self._cancelled = True
            current = self._current
        if current is not None:
            current.cancel()

    def run(self) -> TrialSummary:
        """
        Run every trial.

        Returns:
            TrialSummary with every run and the worst Jain, Gini and min-share.
        """
        results: list[RunResult] = []
        worst_jain = float("inf")
        worst_gini = float("-inf")
        worst_min_share = float("inf")
        worst_trial = 0
        worst_counts: list[int] | None = None

        with get_tracer().start_as_current_span(SPAN_HARNESS_TRIALS) as span:
            set_span_attributes(span, trials=self.trials, seed_stride=self.seed_stride)

            for trial in range(1, self.trials + 1):
                trial_config = self.config.model_copy(
                    update={"seed_base": self.config.seed_base + trial * self.seed_stride}
                )
                harness = Harness(trial_config, metrics=self._metrics)
                with self._lock:
                    if self._cancelled:
                        break
                    self._current = harness

                # Main-thread log lines of this trial carry its number
                bind_context(trial=trial, seed_base=trial_config.seed_base)
                try:
                    result = harness.run()
                    results.append(result)
                    report = result.report
                    logger.info(
                        f"Trial {trial}/{self.trials} finished",
                        extra={
                            "jain": round(report.jain, 4),
                            "gini": round(report.gini, 4),
                            "min_share": round(report.min_share, 4),
                        },
                    )
                finally:
                    clear_context()

                worst_jain = min(worst_jain, report.jain)
                worst_gini = max(worst_gini, report.gini)
                worst_min_share = min(worst_min_share, report.min_share)

                # Keep the counts of the latest trial that set any worst-case record
                if (
                    worst_counts is None
                    or report.jain == worst_jain
                    or report.gini == worst_gini
                    or report.min_share == worst_min_share
                ):
                    worst_trial = trial
                    worst_counts = result.counts

                if result.cancelled:
                    break

        if not results:
            raise OperationCancelledError("trials cancelled before the first run")

        return TrialSummary(
            trials=results,
            worst_jain=worst_jain,
            worst_gini=worst_gini,
            worst_min_share=worst_min_share,
            worst_trial=worst_trial,
            worst_counts=worst_counts or [],
        )


def run_trials(
    config: RunConfig,
    trials: int,
    seed_stride: int = DEFAULT_TRIAL_SEED_STRIDE,
    metrics: MetricsCollector | None = None,
) -> TrialSummary:
    """Run `trials` seeded repetitions of `config`. See TrialRunner."""
    return TrialRunner(config, trials, seed_stride=seed_stride, metrics=metrics).run()
