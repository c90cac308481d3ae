from syncwatch.core.interfaces.logging import LoggingPort
from syncwatch.core.managers.attempt_tracker import AttemptTracker
from syncwatch.core.models.job import Attempt, JobSnapshot, JobStatus


class WarningLog(LoggingPort):
    def __init__(self):
        self.warnings = []

    def info(self, msg):
        pass

    def warning(self, msg):
        self.warnings.append(msg)

    def error(self, msg):
        pass

    def debug(self, msg):
        pass

    def trace(self, msg):
        pass


def with_attempts(count):
    return JobSnapshot(
        job_id=5,
        status=JobStatus.running,
        attempts=[Attempt(index=i) for i in range(count)],
    )


def test_first_attempt_is_not_a_retry():
    log = WarningLog()
    tracker = AttemptTracker(log)

    for count in (0, 1, 1, 1):
        assert tracker.observe(with_attempts(count)) == 1

    assert log.warnings == []


def test_new_attempt_emits_single_warning():
    log = WarningLog()
    tracker = AttemptTracker(log)

    tracker.observe(with_attempts(1))
    assert tracker.observe(with_attempts(2)) == 2
    assert tracker.observe(with_attempts(2)) == 2

    assert log.warnings == ["Previous attempt failed, creating a new sync attempt ..."]


def test_reconciles_to_exact_count_when_several_attempts_appear():
    log = WarningLog()
    tracker = AttemptTracker(log)

    assert tracker.observe(with_attempts(4)) == 4
    assert len(log.warnings) == 3
    assert tracker.observe(with_attempts(4)) == 4
    assert len(log.warnings) == 3
