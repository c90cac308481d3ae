from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from enum import StrEnum


class JobStatus(StrEnum):
    pending = "pending"
    running = "running"
    incomplete = "incomplete"  # attempt failed, remote may start another one
    succeeded = "succeeded"
    failed = "failed"
    cancelled = "cancelled"

    @property
    def label(self) -> str:
        """User-facing status string, e.g. ``SUCCEEDED``."""
        return self.name.upper()


class LogSeverity(StrEnum):
    error = "error"
    debug = "debug"
    trace = "trace"
    info = "info"


class StreamStat(BaseModel):
    """Per-stream counters reported by one attempt.

    A counter left as ``None`` was not reported by the remote system and must
    not be treated as zero.
    """

    model_config = ConfigDict(frozen=True)

    stream_name: str
    records_committed: Optional[int] = Field(None, ge=0)
    records_emitted: Optional[int] = Field(None, ge=0)
    bytes_emitted: Optional[int] = Field(None, ge=0)
    state_messages_emitted: Optional[int] = Field(None, ge=0)


class Attempt(BaseModel):
    """One execution try of the remote job.

    Notes:
    - `index` is the 0-based position in the job's attempt list and never changes.
    - `log_lines` only grows between polls; a line seen once keeps its position.
    - `stream_stats` is usually populated near or at the terminal state.
    """

    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=0)
    failure_summary: Optional[str] = None
    log_lines: List[str] = Field(default_factory=list)
    stream_stats: Optional[List[StreamStat]] = None


class JobSnapshot(BaseModel):
    """Point-in-time view of a job, produced fresh on every poll."""

    model_config = ConfigDict(frozen=True)

    job_id: int = Field(ge=0)
    status: JobStatus
    attempts: List[Attempt] = Field(default_factory=list)

    @property
    def attempt_count(self) -> int:
        return len(self.attempts)


class WatchResult(BaseModel):
    job_id: int
    final_status: str
    attempt_count: int
    attempts: List[Attempt] = Field(default_factory=list)
