"""
Shared worker plumbing: identity, lifecycle state, cancellation and threading.
"""

import threading

from jobqueue.constants import TERMINAL_STATES, WorkerRole, WorkerState
from jobqueue.observability.metrics import MetricsCollector
from jobqueue.queue.bounded import BoundedJobQueue
from jobqueue.queue.cancellation import CancellationToken


class BaseWorker:
    """
    Base for producer and consumer workers.

    A worker runs once, on one thread. Its counters are written only by that
    thread and are safe to read after the thread has been joined.
    """

    role: WorkerRole

    def __init__(
        self,
        worker_id: int,
        queue: BoundedJobQueue,
        *,
        verbose: bool = False,
        log_every: int = 50,
        metrics: MetricsCollector | None = None,
    ):
        self.worker_id = worker_id
        self.queue = queue
        self.verbose = verbose
        self.log_every = max(1, log_every)

        self._metrics = metrics
        self._token = CancellationToken()
        self._state = WorkerState.IDLE
        self._thread: threading.Thread | None = None

    @property
    def name(self) -> str:
        return f"{self.role.value.capitalize()}-{self.worker_id}"

    @property
    def state(self) -> WorkerState:
        return self._state

    @property
    def finished(self) -> bool:
        return self._state in TERMINAL_STATES

    @property
    def cancel_token(self) -> CancellationToken:
        return self._token

    def cancel(self) -> None:
        """Abort any blocking queue call or simulated work and stop the worker."""
        self._token.cancel()

    def run(self) -> None:
        raise NotImplementedError

    def start(self) -> threading.Thread:
        """
        Run the worker on a new thread.

        Returns:
            The started thread. Join it before reading the worker's counters.
        """
        if self._thread is not None:
            raise RuntimeError(f"{self.name} already started")
        self._thread = threading.Thread(target=self.run, name=self.name)
        self._thread.start()
        return self._thread

    def join(self, timeout: float | None = None) -> bool:
        """
        Wait for the worker thread to finish.

        Returns:
            True if the thread has terminated.
        """
        if self._thread is None:
            return self.finished
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def _record_cancelled(self) -> None:
        self._state = WorkerState.CANCELLED
        if self._metrics is not None:
            self._metrics.record_cancelled(self.role.value)
