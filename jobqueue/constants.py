"""
Application constants.
Centralized location for all constant values used across the application.
"""

from enum import StrEnum


class WorkerState(StrEnum):
    """
    Worker lifecycle states.

    State transitions:
    - IDLE -> RUNNING (run() entered)
    - RUNNING -> PROCESSING (consumer received a job)
    - PROCESSING -> RUNNING (simulated work finished)
    - RUNNING -> EXITED (empty-signal, or all jobs submitted)
    - RUNNING/PROCESSING -> CANCELLED (cancellation token fired)
    """

    IDLE = "idle"
    RUNNING = "running"
    PROCESSING = "processing"
    EXITED = "exited"
    CANCELLED = "cancelled"


TERMINAL_STATES = frozenset({WorkerState.EXITED, WorkerState.CANCELLED})


class ClosedEnqueuePolicy(StrEnum):
    """What enqueue does with a job offered after shutdown."""

    DISCARD = "discard"
    REJECT = "reject"


class FairnessVerdict(StrEnum):
    """Classification of how evenly jobs were spread across consumers."""

    FAIR = "fair"
    UNEVEN = "uneven"
    STARVATION = "starvation"


class WorkerRole(StrEnum):
    PRODUCER = "producer"
    CONSUMER = "consumer"


# Job generation
JOB_ID_STRIDE = 1000
DEFAULT_MIN_DURATION_MS = 200
DEFAULT_MAX_DURATION_MS = 600
DEFAULT_SEED_BASE = 100
DEFAULT_TRIAL_SEED_STRIDE = 10_000

# Harness defaults
DEFAULT_CAPACITY = 5
DEFAULT_PRODUCERS = 2
DEFAULT_CONSUMERS = 2
DEFAULT_JOBS_PER_PRODUCER = 10
DEFAULT_LOG_EVERY = 50
DEFAULT_FAIRNESS_CV_THRESHOLD = 0.10

# Metrics names
METRIC_QUEUE_DEPTH = "job_queue_depth"
METRIC_JOBS_ENQUEUED = "jobs_enqueued_total"
METRIC_JOBS_DEQUEUED = "jobs_dequeued_total"
METRIC_JOBS_DISCARDED = "jobs_discarded_total"
METRIC_JOBS_PRODUCED = "jobs_produced_total"
METRIC_JOBS_PROCESSED = "jobs_processed_total"
METRIC_JOB_DURATION = "job_simulated_duration_seconds"
METRIC_WORKER_CANCELLED = "worker_cancelled_total"
METRIC_HARNESS_RUNS = "harness_runs_total"

# Trace span names
SPAN_HARNESS_RUN = "harness_run"
SPAN_HARNESS_TRIALS = "harness_trials"
