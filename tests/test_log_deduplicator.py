"""Tests for incremental exactly-once log delivery."""

import pytest

from syncwatch.core.interfaces.logging import LoggingPort
from syncwatch.core.managers.log_deduplicator import LogDeduplicator, classify_severity
from syncwatch.core.models.job import Attempt, JobSnapshot, JobStatus, LogSeverity


class RecordingLog(LoggingPort):
    def __init__(self):
        self.records = []

    def info(self, msg):
        self.records.append((LogSeverity.info, msg))

    def warning(self, msg):
        self.records.append(("warning", msg))

    def error(self, msg):
        self.records.append((LogSeverity.error, msg))

    def debug(self, msg):
        self.records.append((LogSeverity.debug, msg))

    def trace(self, msg):
        self.records.append((LogSeverity.trace, msg))


def snap(*line_lists, status=JobStatus.running):
    return JobSnapshot(
        job_id=1,
        status=status,
        attempts=[Attempt(index=i, log_lines=lines) for i, lines in enumerate(line_lists)],
    )


@pytest.mark.parametrize("line, expected", [
    ("2024-01-01 ERROR[main] boom", LogSeverity.error),
    ("2024-01-01 DEBUG[worker] details", LogSeverity.debug),
    ("2024-01-01 TRACE[worker] noise", LogSeverity.trace),
    ("2024-01-01 INFO[main] started", LogSeverity.info),
    ("plain text", LogSeverity.info),
    ("ERROR without bracket", LogSeverity.info),
])
def test_classify_severity(line, expected):
    assert classify_severity(line) == expected


def test_error_token_wins_over_later_tokens():
    assert classify_severity("ERROR[a] then DEBUG[b]") == LogSeverity.error


def test_emits_only_appended_lines():
    sink = RecordingLog()
    dedup = LogDeduplicator(sink)

    dedup.observe(snap(["a"]))
    dedup.observe(snap(["a", "b", "c"]))
    dedup.observe(snap(["a", "b", "c"]))
    dedup.observe(snap(["a", "b", "c", "d"]))

    assert [m for _, m in sink.records] == ["a", "b", "c", "d"]


def test_lines_are_never_re_emitted_even_if_identical():
    sink = RecordingLog()
    dedup = LogDeduplicator(sink)

    dedup.observe(snap(["same"]))
    dedup.observe(snap(["same", "same"]))

    assert [m for _, m in sink.records] == ["same", "same"]


def test_orders_by_attempt_then_position():
    sink = RecordingLog()
    dedup = LogDeduplicator(sink)

    dedup.observe(snap(["a1"]))
    dedup.observe(snap(["a1", "a2"], ["b1", "b2"]))
    dedup.observe(snap(["a1", "a2"], ["b1", "b2", "b3"], ["c1"]))

    assert [m for _, m in sink.records] == ["a1", "a2", "b1", "b2", "b3", "c1"]
    assert dedup.cursor(0) == 2
    assert dedup.cursor(1) == 3
    assert dedup.cursor(2) == 1
    assert dedup.cursor(3) == 0


def test_routes_lines_by_severity():
    sink = RecordingLog()
    dedup = LogDeduplicator(sink)

    emitted = dedup.observe(snap(["x ERROR[a] e", "x DEBUG[a] d", "x TRACE[a] t", "x i"]))

    assert emitted == 4
    assert [sev for sev, _ in sink.records] == [
        LogSeverity.error, LogSeverity.debug, LogSeverity.trace, LogSeverity.info,
    ]


def test_replay_through_fresh_deduplicator_is_deterministic():
    final = snap(["a", "ERROR[x] b"], ["c"], status=JobStatus.succeeded)

    first, second = LogDeduplicator(RecordingLog()), LogDeduplicator(RecordingLog())

    assert first.new_lines(final) == second.new_lines(final)
    assert first.new_lines(final) == []


def test_attempt_with_no_lines_gets_a_cursor():
    sink = RecordingLog()
    dedup = LogDeduplicator(sink)

    assert dedup.observe(snap([])) == 0
    assert dedup.observe(snap(["late"])) == 1
    assert sink.records == [(LogSeverity.info, "late")]


def test_sink_failure_keeps_undelivered_lines_for_next_snapshot():
    class FlakyLog(RecordingLog):
        def __init__(self):
            super().__init__()
            self.failures_left = 1

        def info(self, msg):
            if self.failures_left:
                self.failures_left -= 1
                raise RuntimeError("sink down")
            super().info(msg)

    sink = FlakyLog()
    dedup = LogDeduplicator(sink)
    current = snap(["a", "x ERROR[m] boom"], ["c"])

    with pytest.raises(RuntimeError):
        dedup.observe(current)
    assert dedup.cursor(0) == 0

    assert dedup.observe(current) == 3
    assert sink.records == [
        (LogSeverity.info, "a"),
        (LogSeverity.error, "x ERROR[m] boom"),
        (LogSeverity.info, "c"),
    ]
    assert (dedup.cursor(0), dedup.cursor(1)) == (2, 1)
