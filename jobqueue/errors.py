"""
Exception types raised by the queue and its workers.

Full and empty queues are not errors: callers block instead. The only
failure a blocking call propagates at runtime is cancellation.
"""


class JobQueueError(Exception):
    """Base class for all job queue errors."""


class InvalidConfigurationError(JobQueueError, ValueError):
    """Raised at construction time for settings that cannot work (capacity <= 0, negative counts)."""


class OperationCancelledError(JobQueueError):
    """Raised when a blocking enqueue/dequeue (or simulated work) is cancelled."""


class QueueClosedError(JobQueueError):
    """Raised by enqueue after shutdown when the queue uses the REJECT policy."""
