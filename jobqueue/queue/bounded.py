"""
Bounded blocking FIFO job queue with cooperative shutdown.

One lock guards the buffer and the shutdown flag. Two conditions share that
lock: producers wait on not_full, consumers wait on not_empty. Steady-state
operations wake a single waiter of the opposite class; shutdown() broadcasts
on both because every waiter's exit condition has changed.
"""

import logging
import threading
from collections import deque

from jobqueue.constants import ClosedEnqueuePolicy
from jobqueue.errors import (
    InvalidConfigurationError,
    OperationCancelledError,
    QueueClosedError,
)
from jobqueue.observability.metrics import MetricsCollector
from jobqueue.queue.cancellation import CancellationToken
from jobqueue.types.job import Job

logger = logging.getLogger(__name__)


class BoundedJobQueue:
    """
    Capacity-limited FIFO shared by all producers and consumers of a run.

    Features:
    - enqueue blocks while full, dequeue blocks while empty
    - shutdown is one-way and idempotent; buffered jobs are still delivered
    - dequeue returns None once the queue is shut down and drained
    - blocking calls abort with OperationCancelledError when their token is cancelled

    Invariants:
    - 0 <= len(buffer) <= capacity whenever the lock is not held
    - jobs leave in exactly the order they arrived, across all producers
    """

    def __init__(
        self,
        capacity: int,
        *,
        closed_policy: ClosedEnqueuePolicy = ClosedEnqueuePolicy.DISCARD,
        metrics: MetricsCollector | None = None,
    ):
        """
        Initialize the queue.

        Args:
            capacity: Maximum number of buffered jobs. Must be a positive integer.
            closed_policy: What enqueue does after shutdown: DISCARD returns False,
                REJECT raises QueueClosedError.
            metrics: Optional collector for depth and throughput counters.

        Raises:
            InvalidConfigurationError: If capacity is not a positive integer.
        """
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
            raise InvalidConfigurationError(
                f"capacity must be a positive integer, got {capacity!r}"
            )

        self._capacity = capacity
        self._closed_policy = ClosedEnqueuePolicy(closed_policy)
        self._metrics = metrics

        self._buffer: deque[Job] = deque()
        self._shutdown = False

        self._lock = threading.Lock()
        self._not_full = threading.Condition(self._lock)
        self._not_empty = threading.Condition(self._lock)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def closed_policy(self) -> ClosedEnqueuePolicy:
        return self._closed_policy

    @property
    def is_shutdown(self) -> bool:
        """True once shutdown() has been called."""
        with self._lock:
            return self._shutdown

    def __len__(self) -> int:
        with self._lock:
            return len(self._buffer)

    def enqueue(self, job: Job, cancel_token: CancellationToken | None = None) -> bool:
        """
        Append a job, blocking while the queue is full.

        Args:
            job: The job to submit.
            cancel_token: Token that aborts the wait when cancelled.

        Returns:
            True if the job was buffered. False if the queue was shut down and
            the job was discarded (DISCARD policy).

        Raises:
            OperationCancelledError: If the token was cancelled before or while waiting.
                The buffer is left untouched.
            QueueClosedError: If the queue was shut down and the policy is REJECT.
        """
        handle = self._watch(cancel_token)
        try:
            with self._lock:
                self._check_cancelled(cancel_token)

                while len(self._buffer) >= self._capacity and not self._shutdown:
                    self._not_full.wait()
                    if cancel_token is not None and cancel_token.cancelled:
                        # Pass on a notify we may have consumed
                        self._not_full.notify()
                        raise OperationCancelledError("enqueue cancelled")

                if self._shutdown:
                    return self._refuse(job)

                self._buffer.append(job)
                if self._metrics is not None:
                    self._metrics.record_enqueued(len(self._buffer))
                self._not_empty.notify()
                return True
        finally:
            self._unwatch(cancel_token, handle)

    def dequeue(self, cancel_token: CancellationToken | None = None) -> Job | None:
        """
        Remove and return the oldest job, blocking while the queue is empty.

        Args:
            cancel_token: Token that aborts the wait when cancelled.

        Returns:
            The head job, or None when the queue is empty and shut down
            (no more work will ever arrive).

        Raises:
            OperationCancelledError: If the token was cancelled before or while waiting.
        """
        handle = self._watch(cancel_token)
        try:
            with self._lock:
                self._check_cancelled(cancel_token)

                while not self._buffer and not self._shutdown:
                    self._not_empty.wait()
                    if cancel_token is not None and cancel_token.cancelled:
                        self._not_empty.notify()
                        raise OperationCancelledError("dequeue cancelled")

                if not self._buffer:
                    # Empty and shut down: drain complete
                    return None

                job = self._buffer.popleft()
                if self._metrics is not None:
                    self._metrics.record_dequeued(len(self._buffer))
                self._not_full.notify()
                return job
        finally:
            self._unwatch(cancel_token, handle)

    def shutdown(self) -> None:
        """
        Stop accepting jobs and wake every blocked caller.

        Idempotent. Jobs already buffered stay available to dequeue.
        """
        with self._lock:
            if self._shutdown:
                return
            self._shutdown = True
            remaining = len(self._buffer)
            self._not_empty.notify_all()
            self._not_full.notify_all()

        logger.info("Queue shut down", extra={"remaining_jobs": remaining})

    def _refuse(self, job: Job) -> bool:
        """Handle a job offered after shutdown. Called with the lock held."""
        if self._metrics is not None:
            self._metrics.record_discarded()

        if self._closed_policy == ClosedEnqueuePolicy.REJECT:
            raise QueueClosedError(f"queue is shut down, job {job.id} rejected")

        logger.debug("Discarded job after shutdown", extra={"job_id": job.id})
        return False

    def _check_cancelled(self, cancel_token: CancellationToken | None) -> None:
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()

    def _wake_all(self) -> None:
        """Wake every waiter so cancelled ones can notice their token."""
        with self._lock:
            self._not_full.notify_all()
            self._not_empty.notify_all()

    def _watch(self, cancel_token: CancellationToken | None) -> int | None:
        if cancel_token is None:
            return None
        return cancel_token.register(self._wake_all)

    def _unwatch(self, cancel_token: CancellationToken | None, handle: int | None) -> None:
        if cancel_token is not None and handle is not None:
            cancel_token.unregister(handle)
