"""
Unit tests for the producer worker.
"""

import logging
import time

import pytest

from jobqueue.constants import ClosedEnqueuePolicy, WorkerState
from jobqueue.errors import InvalidConfigurationError
from jobqueue.queue.bounded import BoundedJobQueue
from jobqueue.worker.producer import Producer, make_job_id


def drain(queue: BoundedJobQueue) -> list:
    """Shut the queue down and collect everything left in it."""
    queue.shutdown()
    jobs = []
    while (job := queue.dequeue()) is not None:
        jobs.append(job)
    return jobs


class TestJobGeneration:
    """Tests for job ids and durations."""

    def test_job_ids_derived_from_producer_and_index(self):
        """Test id = producer_id * 1000 + index."""
        assert make_job_id(3, 0) == 3000
        assert make_job_id(3, 17) == 3017

    def test_produces_exact_count_in_index_order(self):
        """Test that all jobs are submitted in index order."""
        queue = BoundedJobQueue(10)
        producer = Producer(2, queue, job_count=5, seed=100, no_sleep=True)

        producer.run()

        assert [job.id for job in drain(queue)] == [2000, 2001, 2002, 2003, 2004]
        assert producer.produced_count == 5
        assert producer.discarded_count == 0
        assert producer.state == WorkerState.EXITED

    def test_durations_within_range(self):
        """Test that durations fall in [min, max] inclusive."""
        queue = BoundedJobQueue(50)
        producer = Producer(
            1, queue, job_count=50, seed=7, min_duration_ms=200, max_duration_ms=600
        )

        producer.run()

        durations = [job.duration_ms for job in drain(queue)]
        assert len(durations) == 50
        assert all(200 <= d <= 600 for d in durations)

    def test_same_seed_same_durations(self):
        """Test that a seed reproduces the duration sequence."""
        first, second = BoundedJobQueue(20), BoundedJobQueue(20)
        Producer(1, first, job_count=20, seed=42).run()
        Producer(1, second, job_count=20, seed=42).run()

        assert [j.duration_ms for j in drain(first)] == [j.duration_ms for j in drain(second)]

    def test_different_seeds_differ(self):
        """Test that different seeds give different sequences."""
        first, second = BoundedJobQueue(20), BoundedJobQueue(20)
        Producer(1, first, job_count=20, seed=1).run()
        Producer(1, second, job_count=20, seed=2).run()

        assert [j.duration_ms for j in drain(first)] != [j.duration_ms for j in drain(second)]

    def test_no_sleep_forces_zero_duration(self):
        """Test that no_sleep produces zero-cost jobs."""
        queue = BoundedJobQueue(10)
        Producer(1, queue, job_count=10, seed=5, no_sleep=True).run()

        assert all(job.duration_ms == 0 for job in drain(queue))

    def test_zero_jobs(self):
        """Test that a producer with nothing to do exits cleanly."""
        queue = BoundedJobQueue(1)
        producer = Producer(1, queue, job_count=0, seed=1)

        producer.run()

        assert producer.produced_count == 0
        assert producer.state == WorkerState.EXITED
        assert len(queue) == 0


class TestValidation:
    """Tests for producer configuration checks."""

    def test_negative_job_count_rejected(self):
        """Test that job_count < 0 is rejected."""
        with pytest.raises(InvalidConfigurationError):
            Producer(1, BoundedJobQueue(1), job_count=-1, seed=1)

    def test_inverted_duration_range_rejected(self):
        """Test that max < min is rejected."""
        with pytest.raises(InvalidConfigurationError):
            Producer(1, BoundedJobQueue(1), job_count=1, seed=1,
                     min_duration_ms=500, max_duration_ms=100)

    def test_log_every_clamped(self):
        """Test that log_every is at least 1."""
        producer = Producer(1, BoundedJobQueue(1), job_count=1, seed=1, log_every=0)
        assert producer.log_every == 1


class TestShutdownAndCancellation:
    """Tests for early termination."""

    def test_stops_at_first_refused_job(self):
        """Test that a shut-down queue ends production."""
        queue = BoundedJobQueue(5)
        queue.shutdown()
        producer = Producer(1, queue, job_count=10, seed=1, no_sleep=True)

        producer.run()

        assert producer.produced_count == 0
        assert producer.discarded_count == 1
        assert producer.state == WorkerState.EXITED

    def test_stops_on_reject_policy(self):
        """Test that QueueClosedError is treated as the end of production."""
        queue = BoundedJobQueue(5, closed_policy=ClosedEnqueuePolicy.REJECT)
        queue.shutdown()
        producer = Producer(1, queue, job_count=10, seed=1, no_sleep=True)

        producer.run()

        assert producer.produced_count == 0
        assert producer.discarded_count == 1
        assert producer.state == WorkerState.EXITED

    def test_cancel_while_blocked_on_full_queue(self):
        """Test that cancelling a blocked producer stops it without losing buffered jobs."""
        queue = BoundedJobQueue(2)
        producer = Producer(1, queue, job_count=10, seed=1, no_sleep=True)

        producer.start()
        time.sleep(0.2)
        assert producer.state == WorkerState.RUNNING
        assert len(queue) == 2

        producer.cancel()

        assert producer.join(5)
        assert producer.state == WorkerState.CANCELLED
        assert producer.produced_count == 2
        assert [job.id for job in drain(queue)] == [1000, 1001]

    def test_cannot_start_twice(self):
        """Test that a worker runs at most once."""
        producer = Producer(1, BoundedJobQueue(1), job_count=0, seed=1)
        producer.start()
        producer.join(5)

        with pytest.raises(RuntimeError):
            producer.start()


class TestProducerObservability:
    """Tests for progress logs and metrics."""

    def test_verbose_logs_every_n(self, caplog):
        """Test that progress is logged for indices divisible by log_every."""
        queue = BoundedJobQueue(10)
        producer = Producer(1, queue, job_count=5, seed=1, verbose=True, log_every=2, no_sleep=True)

        with caplog.at_level(logging.INFO, logger="jobqueue.worker.producer"):
            producer.run()

        messages = [r.getMessage() for r in caplog.records if "produced job" in r.getMessage()]
        assert messages == [
            "Producer 1 produced job 1000",
            "Producer 1 produced job 1002",
            "Producer 1 produced job 1004",
        ]

    def test_quiet_producer_does_not_log_progress(self, caplog):
        """Test that verbose=False suppresses progress lines."""
        queue = BoundedJobQueue(10)

        with caplog.at_level(logging.INFO, logger="jobqueue.worker.producer"):
            Producer(1, queue, job_count=5, seed=1, no_sleep=True).run()

        assert not [r for r in caplog.records if "produced job" in r.getMessage()]

    def test_produced_metric(self, metrics, registry):
        """Test that accepted jobs are counted per producer."""
        queue = BoundedJobQueue(10)
        Producer(4, queue, job_count=3, seed=1, no_sleep=True, metrics=metrics).run()

        assert registry.get_sample_value("jobs_produced_total", {"producer_id": "4"}) == 3
