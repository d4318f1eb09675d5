"""
Type definitions for the job queue.
Contains the job value type and harness input/output models.
"""

from jobqueue.types.job import Job
from jobqueue.types.run import (
    ConsumerStats,
    FairnessReport,
    RunConfig,
    RunResult,
    TrialSummary,
)

__all__ = [
    # Job types
    "Job",
    # Run types
    "RunConfig",
    "ConsumerStats",
    "FairnessReport",
    "RunResult",
    "TrialSummary",
]
