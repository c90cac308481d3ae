import pytest

from syncwatch.core.managers.status_classifier import (
    build_failure_message,
    collect_failure_summaries,
    is_success,
    is_terminal,
)
from syncwatch.core.models.job import Attempt, JobSnapshot, JobStatus


@pytest.mark.parametrize("status, terminal", [
    (JobStatus.pending, False),
    (JobStatus.running, False),
    (JobStatus.incomplete, False),
    (JobStatus.succeeded, True),
    (JobStatus.failed, True),
    (JobStatus.cancelled, True),
])
def test_is_terminal(status, terminal):
    assert is_terminal(status) is terminal


def test_only_succeeded_is_success():
    assert [s for s in JobStatus if is_success(s)] == [JobStatus.succeeded]


def test_collects_non_empty_summaries_in_attempt_order():
    snapshot = JobSnapshot(
        job_id=3,
        status=JobStatus.failed,
        attempts=[
            Attempt(index=0, failure_summary="first"),
            Attempt(index=1),
            Attempt(index=2, failure_summary=""),
            Attempt(index=3, failure_summary="last"),
        ],
    )

    assert collect_failure_summaries(snapshot) == ["first", "last"]
    assert build_failure_message(snapshot) == (
        "Failed run with status 'FAILED' after 4 attempt(s): first | last"
    )


def test_failure_message_without_summaries():
    snapshot = JobSnapshot(job_id=3, status=JobStatus.cancelled, attempts=[Attempt(index=0)])

    assert build_failure_message(snapshot) == (
        "Failed run with status 'CANCELLED' after 1 attempt(s)"
    )
