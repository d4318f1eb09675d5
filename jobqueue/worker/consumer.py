"""
Consumer worker.

Drains jobs until the queue reports it is shut down and empty, simulating
the cost of each job and counting how many it handled.
"""

import logging

from jobqueue.constants import DEFAULT_LOG_EVERY, WorkerRole, WorkerState
from jobqueue.errors import OperationCancelledError
from jobqueue.observability.metrics import MetricsCollector
from jobqueue.queue.bounded import BoundedJobQueue
from jobqueue.types.job import Job
from jobqueue.worker.base import BaseWorker

logger = logging.getLogger(__name__)


class Consumer(BaseWorker):
    """
    Job consumer.

    State machine:
    RUNNING -> (job) -> PROCESSING -> RUNNING -> (None) -> EXITED

    A transiently empty queue never ends the loop; only dequeue's None
    (empty and shut down) does. processed_count is stable once the thread
    has been joined.
    """

    role = WorkerRole.CONSUMER

    def __init__(
        self,
        consumer_id: int,
        queue: BoundedJobQueue,
        *,
        verbose: bool = False,
        log_every: int = DEFAULT_LOG_EVERY,
        no_sleep: bool = False,
        record_job_ids: bool = False,
        metrics: MetricsCollector | None = None,
    ):
        """
        Initialize the consumer.

        Args:
            consumer_id: Worker id.
            queue: Shared queue to drain.
            verbose: Log a progress line every `log_every` processed jobs.
            log_every: Progress interval, clamped to at least 1.
            no_sleep: Skip the simulated processing delay.
            record_job_ids: Keep the id of every processed job in processed_ids.
            metrics: Optional metrics collector.
        """
        super().__init__(
            consumer_id,
            queue,
            verbose=verbose,
            log_every=log_every,
            metrics=metrics,
        )
        self.no_sleep = no_sleep
        self.record_job_ids = record_job_ids

        self.processed_count = 0
        self.processed_ids: list[int] = []

    def run(self) -> None:
        """Consume until the empty-signal, or until cancelled."""
        self._state = WorkerState.RUNNING

        try:
            while True:
                job = self.queue.dequeue(self._token)
                if job is None:
                    break

                self._state = WorkerState.PROCESSING
                self._process(job)
                self._state = WorkerState.RUNNING

        except OperationCancelledError:
            logger.info(
                "Consumer cancelled",
                extra={"consumer_id": self.worker_id, "processed": self.processed_count},
            )
            self._record_cancelled()
            return

        except Exception:
            logger.exception("Consumer failed", extra={"consumer_id": self.worker_id})
            self._state = WorkerState.EXITED
            raise

        self._state = WorkerState.EXITED
        logger.debug(
            "Consumer drained",
            extra={"consumer_id": self.worker_id, "processed": self.processed_count},
        )

    def _process(self, job: Job) -> None:
        self.processed_count += 1
        if self.record_job_ids:
            self.processed_ids.append(job.id)

        if self._metrics is not None:
            self._metrics.record_processed(self.worker_id, job.duration_seconds)

        if self.verbose and self.processed_count % self.log_every == 0:
            logger.info(
                f"Consumer {self.worker_id} processing job {job.id}",
                extra={
                    "consumer_id": self.worker_id,
                    "job_id": job.id,
                    "processed": self.processed_count,
                },
            )

        # Simulated work happens outside the queue lock
        if not self.no_sleep and job.duration_ms > 0:
            self._token.sleep(job.duration_seconds)
