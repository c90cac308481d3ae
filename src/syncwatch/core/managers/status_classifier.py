"""Pure classification of job snapshots: terminal or not, success or not,
and what went wrong."""

from typing import FrozenSet, List

from syncwatch.core.models.job import JobSnapshot, JobStatus

TERMINAL_STATUSES: FrozenSet[JobStatus] = frozenset(
    {JobStatus.succeeded, JobStatus.failed, JobStatus.cancelled}
)


def is_terminal(status: JobStatus) -> bool:
    return status in TERMINAL_STATUSES


def is_success(status: JobStatus) -> bool:
    return status == JobStatus.succeeded


def collect_failure_summaries(snapshot: JobSnapshot) -> List[str]:
    """Non-empty failure summaries of all attempts, in attempt order."""
    ordered = sorted(snapshot.attempts, key=lambda a: a.index)
    return [a.failure_summary for a in ordered if a.failure_summary]


def build_failure_message(snapshot: JobSnapshot) -> str:
    message = (
        f"Failed run with status '{snapshot.status.label}' "
        f"after {snapshot.attempt_count} attempt(s)"
    )
    summaries = collect_failure_summaries(snapshot)
    if summaries:
        message += ": " + " | ".join(summaries)
    return message
