"""
Cooperative cancellation for blocking queue calls.

Python threads cannot be interrupted from outside, so every worker owns a
CancellationToken. Blocking operations register a wake-up callback with the
token while they wait; cancel() sets the flag first and then runs the
callbacks, so a waiter that checks the flag under its own lock before waiting
can never miss the wake-up.
"""

import threading
from collections.abc import Callable

from jobqueue.errors import OperationCancelledError


class CancellationToken:
    """
    One-shot, thread-safe cancellation flag with wake-up callbacks.

    Once cancelled, a token stays cancelled.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: dict[int, Callable[[], None]] = {}
        self._next_handle = 0

    @property
    def cancelled(self) -> bool:
        """True once cancel() has been called."""
        return self._event.is_set()

    def cancel(self) -> None:
        """
        Cancel the token and wake every registered waiter.

        Idempotent: callbacks run only on the first call.
        """
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks = list(self._callbacks.values())

        # Run outside our lock: callbacks take the queue lock
        for callback in callbacks:
            callback()

    def register(self, callback: Callable[[], None]) -> int:
        """
        Register a callback to run when the token is cancelled.

        Must not be called while holding a lock the callback acquires.

        Returns:
            A handle for unregister().
        """
        with self._lock:
            handle = self._next_handle
            self._next_handle += 1
            self._callbacks[handle] = callback
            return handle

    def unregister(self, handle: int) -> None:
        with self._lock:
            self._callbacks.pop(handle, None)

    def raise_if_cancelled(self) -> None:
        """Raise OperationCancelledError if the token has been cancelled."""
        if self._event.is_set():
            raise OperationCancelledError("operation cancelled")

    def sleep(self, seconds: float) -> None:
        """
        Sleep for up to `seconds`, returning early by raising if cancelled.

        Raises:
            OperationCancelledError: If the token is cancelled before or during the sleep.
        """
        if seconds <= 0:
            self.raise_if_cancelled()
            return
        if self._event.wait(seconds):
            raise OperationCancelledError("sleep cancelled")
