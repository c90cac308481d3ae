"""JobWatcher: polls a remote job until it finishes or the deadline passes.

Responsibilities:
1. Validate the job id and timing before any request is made.
2. Fetch a snapshot, immediately and then every poll interval.
3. Route each snapshot through the snapshot observers (log deduplication,
   attempt tracking); their failures are logged and never stop polling.
4. Stop on a terminal status, or raise JobTimeoutError once the deadline
   passes. No fetch is started after the deadline and an in-flight fetch is
   abandoned when it is reached.
5. On success publish counter samples and return a WatchResult; otherwise
   raise JobFailedError with every attempt's failure summary.
"""

from __future__ import annotations

import asyncio
import re
from datetime import timedelta
from typing import List, Optional, Set

from syncwatch.core.config import WatchConfig
from syncwatch.core.exceptions import (
    ConfigurationError,
    JobFailedError,
    JobTimeoutError,
)
from syncwatch.core.interfaces.job_status import JobStatusClientPort
from syncwatch.core.interfaces.logging import LoggingPort
from syncwatch.core.interfaces.metrics import MetricsPort
from syncwatch.core.interfaces.observers import SnapshotObserver
from syncwatch.core.managers.attempt_tracker import AttemptTracker
from syncwatch.core.managers.log_deduplicator import LogDeduplicator
from syncwatch.core.managers.metrics_extractor import extract_metrics
from syncwatch.core.managers.status_classifier import (
    build_failure_message,
    collect_failure_summaries,
    is_success,
    is_terminal,
)
from syncwatch.core.models.job import JobSnapshot, WatchResult
from syncwatch.core.settings import logger

_JOB_ID_PATTERN = re.compile(r"[0-9]+")

Duration = float | int | timedelta


def parse_job_id(raw: str | int) -> int:
    """Parse a job identifier into a non-negative integer."""
    if isinstance(raw, bool):
        raise ConfigurationError(f"Invalid job id {raw!r}: expected a non-negative integer")
    if isinstance(raw, int):
        if raw < 0:
            raise ConfigurationError(f"Invalid job id {raw!r}: expected a non-negative integer")
        return raw
    text = str(raw).strip()
    if not _JOB_ID_PATTERN.fullmatch(text):
        raise ConfigurationError(f"Invalid job id {raw!r}: expected a non-negative integer")
    return int(text)


def _resolve_duration(name: str, value: Optional[Duration], default: float) -> float:
    if value is None:
        return default
    seconds = value.total_seconds() if isinstance(value, timedelta) else float(value)
    if not seconds > 0:
        raise ConfigurationError(f"{name} must be a positive duration, got {value!r}")
    return seconds


class JobWatcher:
    """Watches remote jobs through a JobStatusClientPort.

    The watcher itself holds no per-job state: cursors and attempt counters
    are created inside each `watch` call, so concurrent watches stay isolated.

    Attributes:
        config: Default poll interval and maximum duration
    """

    def __init__(
        self,
        job_status_client: JobStatusClientPort,
        metrics: MetricsPort,
        config: Optional[WatchConfig] = None,
        job_log: Optional[LoggingPort] = None,
    ) -> None:
        self._client = job_status_client
        self._metrics = metrics
        self.config = config or WatchConfig()
        # Remote job output and job-scoped notices; defaults to the service logger
        self._job_log = job_log or logger
        self._watch_tasks: Set[asyncio.Task] = set()

    def _create_observers(self) -> List[SnapshotObserver]:
        return [LogDeduplicator(self._job_log), AttemptTracker(self._job_log)]

    def _notify_snapshot(
        self, observers: List[SnapshotObserver], snapshot: JobSnapshot
    ) -> None:
        """Hand the snapshot to every observer; observer errors never stop polling."""
        for observer in observers:
            try:
                observer.observe(snapshot)
            except Exception as exc:
                logger.error(
                    f"[observer:error] observe failed observer={type(observer).__name__} "
                    f"job_id={snapshot.job_id} error={exc}"
                )

    async def watch(
        self,
        job_id: str | int,
        poll_interval: Optional[Duration] = None,
        max_duration: Optional[Duration] = None,
    ) -> WatchResult:
        """Poll job `job_id` until it reaches a terminal state.

        Raises ConfigurationError, TransportError (unchanged from the client),
        JobTimeoutError or JobFailedError. Cancelling the calling task aborts
        the sleep or the in-flight fetch immediately.
        """
        parsed_id = parse_job_id(job_id)
        interval = _resolve_duration("poll_interval", poll_interval, self.config.poll_interval)
        timeout = _resolve_duration("max_duration", max_duration, self.config.max_duration)

        logger.info(
            f"[watch:start] job_id={parsed_id} poll_interval={interval}s max_duration={timeout}s"
        )
        task = asyncio.current_task()
        if task is not None:
            self._watch_tasks.add(task)
        try:
            snapshot = await self._poll_until_terminal(parsed_id, interval, timeout)
        finally:
            if task is not None:
                self._watch_tasks.discard(task)
        return self._finalize(snapshot)

    async def _poll_until_terminal(
        self, job_id: int, interval: float, timeout: float
    ) -> JobSnapshot:
        loop = asyncio.get_running_loop()
        started = loop.time()
        deadline = started + timeout
        observers = self._create_observers()
        polls = 0

        while True:
            if loop.time() >= deadline:
                raise self._timeout_error(job_id, loop.time() - started, timeout, polls)

            try:
                async with asyncio.timeout_at(deadline) as fetch_window:
                    snapshot = await self._client.fetch_job(job_id)
            except TimeoutError:
                if fetch_window.expired():
                    raise self._timeout_error(
                        job_id, loop.time() - started, timeout, polls
                    ) from None
                raise
            polls += 1
            logger.debug(
                f"[watch:poll] job_id={job_id} poll={polls} status={snapshot.status} "
                f"attempts={snapshot.attempt_count}"
            )

            self._notify_snapshot(observers, snapshot)

            if is_terminal(snapshot.status):
                logger.info(
                    f"[watch:poll] terminal state reached job_id={job_id} "
                    f"status={snapshot.status.label} polls={polls}"
                )
                return snapshot

            delay = min(interval, deadline - loop.time())
            if delay > 0:
                await asyncio.sleep(delay)

    def _timeout_error(
        self, job_id: int, elapsed: float, timeout: float, polls: int
    ) -> JobTimeoutError:
        logger.warning(
            f"[watch:timeout] job_id={job_id} elapsed={elapsed:.1f}s > {timeout}s polls={polls}"
        )
        return JobTimeoutError(
            job_id=job_id,
            elapsed_seconds=elapsed,
            timeout_seconds=timeout,
            diagnostic=f"no terminal status after {polls} poll(s)",
        )

    def _finalize(self, snapshot: JobSnapshot) -> WatchResult:
        summaries = collect_failure_summaries(snapshot)
        for summary in summaries:
            self._job_log.warning(f"Failure with reason {summary}")

        if not is_success(snapshot.status):
            logger.warning(
                f"[watch:failed] job_id={snapshot.job_id} status={snapshot.status.label} "
                f"attempts={snapshot.attempt_count}"
            )
            raise JobFailedError(
                job_id=snapshot.job_id,
                status=snapshot.status.label,
                attempt_count=snapshot.attempt_count,
                failure_details=summaries,
                message=build_failure_message(snapshot),
            )

        self._publish_metrics(snapshot)
        return WatchResult(
            job_id=snapshot.job_id,
            final_status=snapshot.status.label,
            attempt_count=snapshot.attempt_count,
            attempts=list(snapshot.attempts),
        )

    def _publish_metrics(self, snapshot: JobSnapshot) -> None:
        for sample in extract_metrics(snapshot):
            try:
                self._metrics.counter(sample.name, sample.value, sample.tags or None)
            except Exception as exc:
                logger.error(
                    f"[metrics:error] counter failed name={sample.name} "
                    f"job_id={snapshot.job_id} error={exc}"
                )

    async def shutdown(self) -> None:
        """Cancel all watches currently running through this watcher."""
        for task in list(self._watch_tasks):
            task.cancel()
        if self._watch_tasks:
            await asyncio.gather(*self._watch_tasks, return_exceptions=True)
