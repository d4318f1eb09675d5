"""
Producer worker.

Synthesizes a fixed number of jobs with reproducible durations and submits
them to the queue one at a time, in index order.
"""

import logging
import random

from jobqueue.constants import (
    DEFAULT_LOG_EVERY,
    DEFAULT_MAX_DURATION_MS,
    DEFAULT_MIN_DURATION_MS,
    JOB_ID_STRIDE,
    WorkerRole,
    WorkerState,
)
from jobqueue.errors import InvalidConfigurationError, OperationCancelledError, QueueClosedError
from jobqueue.observability.metrics import MetricsCollector
from jobqueue.queue.bounded import BoundedJobQueue
from jobqueue.types.job import Job
from jobqueue.worker.base import BaseWorker

logger = logging.getLogger(__name__)


def make_job_id(producer_id: int, index: int) -> int:
    """Job ids are unique across producers while job_count stays below JOB_ID_STRIDE."""
    return producer_id * JOB_ID_STRIDE + index


class Producer(BaseWorker):
    """
    Job producer.

    Job ids are derived from (producer_id, index). Durations come from a
    random.Random seeded by the caller, so a given seed always yields the same
    sequence. With no_sleep, every duration is 0.
    """

    role = WorkerRole.PRODUCER

    def __init__(
        self,
        producer_id: int,
        queue: BoundedJobQueue,
        job_count: int,
        seed: int,
        *,
        verbose: bool = False,
        log_every: int = DEFAULT_LOG_EVERY,
        no_sleep: bool = False,
        min_duration_ms: int = DEFAULT_MIN_DURATION_MS,
        max_duration_ms: int = DEFAULT_MAX_DURATION_MS,
        metrics: MetricsCollector | None = None,
    ):
        """
        Initialize the producer.

        Args:
            producer_id: Worker id, also the high part of every job id.
            queue: Shared queue to submit into.
            job_count: Number of jobs to produce. Must be >= 0.
            seed: Seed for the duration generator.
            verbose: Log a progress line every `log_every` submissions.
            log_every: Progress interval, clamped to at least 1.
            no_sleep: Force every job duration to 0.
            min_duration_ms: Lower bound of the uniform duration range (inclusive).
            max_duration_ms: Upper bound of the uniform duration range (inclusive).
            metrics: Optional metrics collector.

        Raises:
            InvalidConfigurationError: For a negative job count or duration range.
        """
        if job_count < 0:
            raise InvalidConfigurationError(f"job_count must be >= 0, got {job_count}")
        if min_duration_ms < 0 or max_duration_ms < min_duration_ms:
            raise InvalidConfigurationError(
                f"invalid duration range [{min_duration_ms}, {max_duration_ms}]"
            )

        super().__init__(
            producer_id,
            queue,
            verbose=verbose,
            log_every=log_every,
            metrics=metrics,
        )
        self.job_count = job_count
        self.seed = seed
        self.no_sleep = no_sleep
        self.min_duration_ms = min_duration_ms
        self.max_duration_ms = max_duration_ms

        self._rand = random.Random(seed)
        self.produced_count = 0
        self.discarded_count = 0

    def make_job(self, index: int) -> Job:
        """Build the job for a given sequence index, advancing the generator."""
        if self.no_sleep:
            duration_ms = 0
        else:
            duration_ms = self._rand.randint(self.min_duration_ms, self.max_duration_ms)
        return Job(id=make_job_id(self.worker_id, index), duration_ms=duration_ms)

    def run(self) -> None:
        """Submit job_count jobs, stopping early on cancellation or queue shutdown."""
        self._state = WorkerState.RUNNING

        try:
            for index in range(self.job_count):
                job = self.make_job(index)

                if not self._submit(job):
                    logger.info(
                        "Queue shut down, producer stopping early",
                        extra={
                            "producer_id": self.worker_id,
                            "produced": self.produced_count,
                            "job_count": self.job_count,
                        },
                    )
                    break

                if self.verbose and index % self.log_every == 0:
                    logger.info(
                        f"Producer {self.worker_id} produced job {job.id}",
                        extra={
                            "producer_id": self.worker_id,
                            "job_id": job.id,
                            "duration_ms": job.duration_ms,
                        },
                    )

        except OperationCancelledError:
            logger.info(
                "Producer cancelled",
                extra={"producer_id": self.worker_id, "produced": self.produced_count},
            )
            self._record_cancelled()
            return

        except Exception:
            logger.exception("Producer failed", extra={"producer_id": self.worker_id})
            self._state = WorkerState.EXITED
            raise

        self._state = WorkerState.EXITED

    def _submit(self, job: Job) -> bool:
        """
        Enqueue one job.

        Returns:
            False if the queue refused the job because it was shut down.
        """
        try:
            accepted = self.queue.enqueue(job, self._token)
        except QueueClosedError:
            accepted = False

        if not accepted:
            self.discarded_count += 1
            return False

        self.produced_count += 1
        if self._metrics is not None:
            self._metrics.record_produced(self.worker_id)
        return True
