"""
Worker module.
Contains the producer and consumer workers.
"""

from jobqueue.worker.consumer import Consumer
from jobqueue.worker.producer import Producer, make_job_id

__all__ = ["Consumer", "Producer", "make_job_id"]
