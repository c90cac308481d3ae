from abc import ABC, abstractmethod

from syncwatch.core.models.job import JobSnapshot


class JobStatusClientPort(ABC):
    @abstractmethod
    async def fetch_job(self, job_id: int) -> JobSnapshot:
        """Fetch the current job and attempt state with a single request.

        Raises TransportError on any network or decoding problem.
        """
        pass
