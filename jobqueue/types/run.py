"""
Harness run type definitions.
Configuration of a run and the results reported back to the caller.
"""

from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from jobqueue.config import Settings
from jobqueue.constants import (
    DEFAULT_CAPACITY,
    DEFAULT_CONSUMERS,
    DEFAULT_FAIRNESS_CV_THRESHOLD,
    DEFAULT_JOBS_PER_PRODUCER,
    DEFAULT_LOG_EVERY,
    DEFAULT_MAX_DURATION_MS,
    DEFAULT_MIN_DURATION_MS,
    DEFAULT_PRODUCERS,
    DEFAULT_SEED_BASE,
    ClosedEnqueuePolicy,
    FairnessVerdict,
    WorkerState,
)


class RunConfig(BaseModel):
    """
    Configuration for a single harness run.

    Validated on construction so that an unusable configuration is rejected
    before any worker thread starts.
    """

    model_config = ConfigDict(frozen=True)

    capacity: int = Field(default=DEFAULT_CAPACITY, gt=0)
    producers: int = Field(default=DEFAULT_PRODUCERS, gt=0)
    consumers: int = Field(default=DEFAULT_CONSUMERS, gt=0)
    jobs_per_producer: int = Field(default=DEFAULT_JOBS_PER_PRODUCER, ge=0)
    seed_base: int = DEFAULT_SEED_BASE
    verbose: bool = False
    log_every: int = Field(default=DEFAULT_LOG_EVERY, ge=1)
    no_sleep: bool = False
    min_duration_ms: int = Field(default=DEFAULT_MIN_DURATION_MS, ge=0)
    max_duration_ms: int = Field(default=DEFAULT_MAX_DURATION_MS, ge=0)
    fairness_cv_threshold: float = Field(default=DEFAULT_FAIRNESS_CV_THRESHOLD, ge=0.0)
    closed_enqueue_policy: ClosedEnqueuePolicy = ClosedEnqueuePolicy.DISCARD
    shutdown_after_seconds: float | None = Field(default=None, gt=0.0)
    record_job_ids: bool = False

    @model_validator(mode="after")
    def check_duration_range(self) -> Self:
        """Ensure the simulated duration range is not inverted."""
        if self.max_duration_ms < self.min_duration_ms:
            raise ValueError(
                f"max_duration_ms ({self.max_duration_ms}) must be >= "
                f"min_duration_ms ({self.min_duration_ms})"
            )
        return self

    @property
    def expected_jobs(self) -> int:
        """Total jobs the producers will try to submit."""
        return self.producers * self.jobs_per_producer

    @classmethod
    def from_settings(cls, settings: Settings, **overrides) -> "RunConfig":
        """Build a run configuration from application settings."""
        values = {
            "capacity": settings.queue_capacity,
            "producers": settings.producers,
            "consumers": settings.consumers,
            "jobs_per_producer": settings.jobs_per_producer,
            "seed_base": settings.seed_base,
            "verbose": settings.verbose,
            "log_every": settings.log_every,
            "no_sleep": settings.no_sleep,
            "min_duration_ms": settings.min_duration_ms,
            "max_duration_ms": settings.max_duration_ms,
            "fairness_cv_threshold": settings.fairness_cv_threshold,
            "closed_enqueue_policy": settings.closed_enqueue_policy,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


class ConsumerStats(BaseModel):
    """Terminal counters of one consumer, read after its thread joined."""

    consumer_id: int
    processed_count: int
    state: WorkerState
    processed_ids: list[int] | None = None


class FairnessReport(BaseModel):
    """
    Throughput and fairness of job distribution across consumers.
    Produced by jobqueue.harness.fairness.summarize().
    """

    consumers: int
    total: int
    min: int
    max: int
    spread: int
    mean: float
    std_dev: float
    cv: float
    throughput: float
    jain: float
    gini: float
    min_share: float
    imbalance_ratio: float | None
    verdict: FairnessVerdict


class RunResult(BaseModel):
    """Outcome of one harness run."""

    config: RunConfig
    consumers: list[ConsumerStats]
    produced_total: int
    discarded_total: int
    elapsed_seconds: float
    report: FairnessReport
    cancelled: bool = False
    shutdown_early: bool = False

    @property
    def counts(self) -> list[int]:
        """Per-consumer processed counts in consumer id order."""
        return [c.processed_count for c in self.consumers]


class TrialSummary(BaseModel):
    """Worst-case fairness over repeated runs."""

    trials: list[RunResult]
    worst_jain: float
    worst_gini: float
    worst_min_share: float
    worst_trial: int
    worst_counts: list[int]

    @property
    def any_starvation(self) -> bool:
        return any(t.report.verdict == FairnessVerdict.STARVATION for t in self.trials)
