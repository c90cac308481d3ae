"""Incremental, exactly-once delivery of remote job log lines.

Each attempt's log is append-only on the remote side, so a per-attempt cursor
(the number of lines already delivered) is enough to find new output in the
next snapshot.
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Tuple

from syncwatch.core.interfaces.logging import LoggingPort
from syncwatch.core.models.job import JobSnapshot, LogSeverity

# Checked in order; a remote line carries at most one level marker.
SEVERITY_TOKENS: Tuple[Tuple[str, LogSeverity], ...] = (
    ("ERROR[", LogSeverity.error),
    ("DEBUG[", LogSeverity.debug),
    ("TRACE[", LogSeverity.trace),
)


def classify_severity(line: str) -> LogSeverity:
    for token, severity in SEVERITY_TOKENS:
        if token in line:
            return severity
    return LogSeverity.info


class LogDeduplicator:
    """Emits only lines appended since the previous snapshot.

    One instance belongs to one watch call; the cursors are never shared
    between jobs.
    """

    def __init__(self, sink: LoggingPort):
        self._sink = sink
        self._cursors: Dict[int, int] = {}

    def _pending(self, snapshot: JobSnapshot) -> Iterator[Tuple[int, int, LogSeverity, str]]:
        """Yield (attempt index, position, severity, line) for undelivered lines, in order."""
        for attempt in sorted(snapshot.attempts, key=lambda a: a.index):
            seen = self._cursors.setdefault(attempt.index, 0)
            for pos in range(seen, len(attempt.log_lines)):
                line = attempt.log_lines[pos]
                yield attempt.index, pos, classify_severity(line), line

    def new_lines(self, snapshot: JobSnapshot) -> List[Tuple[LogSeverity, str]]:
        """Return unseen lines in (attempt index, line position) order and advance cursors."""
        batch: List[Tuple[LogSeverity, str]] = []
        for index, pos, severity, line in self._pending(snapshot):
            batch.append((severity, line))
            self._cursors[index] = pos + 1
        return batch

    def observe(self, snapshot: JobSnapshot) -> int:
        """Emit new lines to the sink; returns how many were emitted.

        A cursor moves past a line only once the sink accepted it. If the sink
        raises, the error propagates and the remaining lines are delivered by
        the next snapshot.
        """
        emitted = 0
        for index, pos, severity, line in self._pending(snapshot):
            self._emit(severity, line)
            self._cursors[index] = pos + 1
            emitted += 1
        return emitted

    def _emit(self, severity: LogSeverity, line: str) -> None:
        if severity == LogSeverity.error:
            self._sink.error(line)
        elif severity == LogSeverity.debug:
            self._sink.debug(line)
        elif severity == LogSeverity.trace:
            self._sink.trace(line)
        else:
            self._sink.info(line)

    def cursor(self, attempt_index: int) -> int:
        return self._cursors.get(attempt_index, 0)
