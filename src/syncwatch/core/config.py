"""Configuration models for core domain components.

Pydantic-based configuration consolidating the watcher's settings, enabling
dependency injection and testability.
"""

from pydantic import BaseModel, Field


class WatchConfig(BaseModel):
    """Default timing for JobWatcher.

    Attributes:
        poll_interval: Seconds between job status requests (float for test flexibility)
        max_duration: Maximum seconds to wait for the job to reach a terminal state
    """

    poll_interval: float = Field(
        default=1.0,
        gt=0,
        description="Interval in seconds between job status polling requests"
    )

    max_duration: float = Field(
        default=60 * 60.0,
        gt=0,
        description="Maximum time in seconds to wait for job completion"
    )

    model_config = {
        "frozen": True,  # Immutable after creation
        "extra": "forbid",  # Reject unknown fields
    }

    @classmethod
    def from_app_settings(cls, settings) -> "WatchConfig":
        """Factory method to construct config from a SyncWatchSettings instance."""
        return cls(
            poll_interval=settings.SYNCWATCH_POLL_INTERVAL,
            max_duration=settings.SYNCWATCH_MAX_DURATION,
        )
