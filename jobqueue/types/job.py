"""
Job-related type definitions for internal use.
"""

from dataclasses import dataclass

from jobqueue.errors import InvalidConfigurationError


@dataclass(frozen=True, slots=True)
class Job:
    """
    Immutable unit of simulated work.

    Created by a producer, handed to the queue on enqueue and to exactly one
    consumer on dequeue. Read-only after construction, so it is never locked.
    """

    id: int
    duration_ms: int

    def __post_init__(self) -> None:
        if self.duration_ms < 0:
            raise InvalidConfigurationError(
                f"Job {self.id}: duration_ms must be >= 0, got {self.duration_ms}"
            )

    @property
    def duration_seconds(self) -> float:
        """Simulated processing cost in seconds."""
        return self.duration_ms / 1000.0
