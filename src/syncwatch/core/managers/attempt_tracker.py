from syncwatch.core.interfaces.logging import LoggingPort
from syncwatch.core.models.job import JobSnapshot


class AttemptTracker:
    """Notices when the remote system has started an additional attempt.

    Seeded at 1: triggering a sync creates the first attempt automatically,
    so attempt 0 is never reported as a retry. The count reconciles to the
    exact number of attempts in the snapshot, with one warning per newly
    detected attempt even when several appeared between two polls.
    """

    def __init__(self, sink: LoggingPort, initial_count: int = 1):
        self._sink = sink
        self.count = initial_count

    def observe(self, snapshot: JobSnapshot) -> int:
        observed = snapshot.attempt_count
        while observed > self.count:
            self._sink.warning("Previous attempt failed, creating a new sync attempt ...")
            self.count += 1
        return self.count
