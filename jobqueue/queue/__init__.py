"""
Queue module.
Contains the bounded blocking job queue and its cancellation token.
"""

from jobqueue.queue.bounded import BoundedJobQueue
from jobqueue.queue.cancellation import CancellationToken

__all__ = ["BoundedJobQueue", "CancellationToken"]
