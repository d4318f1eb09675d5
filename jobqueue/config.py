"""
Application configuration using Pydantic Settings.
Loads configuration from environment variables with sensible defaults.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

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
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Queue
    queue_capacity: int = DEFAULT_CAPACITY
    closed_enqueue_policy: ClosedEnqueuePolicy = ClosedEnqueuePolicy.DISCARD

    # Workers
    producers: int = DEFAULT_PRODUCERS
    consumers: int = DEFAULT_CONSUMERS
    jobs_per_producer: int = DEFAULT_JOBS_PER_PRODUCER
    seed_base: int = DEFAULT_SEED_BASE
    min_duration_ms: int = DEFAULT_MIN_DURATION_MS
    max_duration_ms: int = DEFAULT_MAX_DURATION_MS
    no_sleep: bool = False
    verbose: bool = True
    log_every: int = DEFAULT_LOG_EVERY

    # Fairness
    fairness_cv_threshold: float = DEFAULT_FAIRNESS_CV_THRESHOLD

    # Observability
    otel_service_name: str = "jobqueue"
    otel_console_export: bool = False
    metrics_port: int | None = None
    log_level: str = "INFO"
    log_format: str = "console"  # json or console


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
