"""Observer protocol for job snapshots.

Observers see every snapshot the watcher fetches. They produce side effects
(log emission, attempt notices) and never influence whether polling stops.
A fresh set of observers is created for each watch call, so any state they
hold belongs to exactly one job.
"""

from typing import Protocol

from syncwatch.core.models.job import JobSnapshot


class SnapshotObserver(Protocol):
    def observe(self, snapshot: JobSnapshot) -> object:
        """Called once per fetched snapshot, in poll order."""
        ...
