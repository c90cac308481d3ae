from typing import List, Optional
from syncwatch.core.models.api_error import ApiErrorResponse


class ConfigurationError(ValueError):
    """Raised for invalid watch input (malformed job id, non-positive duration).

    Detected before any request is made to the remote job API.
    """


class TransportError(Exception):
    """Any failure fetching a job snapshot (network, HTTP status, decoding)."""
    def __init__(self, response: ApiErrorResponse):
        self.response = response
        super().__init__(f"{response.title}: {response.detail}")


# Domain-specific job execution exceptions

class JobExecutionError(Exception):
    """Base exception for watch outcomes that are not a successful job.

    Attributes:
        message: Human-readable error description
        diagnostic: Technical diagnostic information for debugging
        job_id: Optional job identifier
    """
    def __init__(
        self,
        message: str,
        diagnostic: Optional[str] = None,
        job_id: Optional[int] = None
    ):
        self.message = message
        self.diagnostic = diagnostic
        self.job_id = job_id
        super().__init__(message)


class JobTimeoutError(JobExecutionError, TimeoutError):
    """Raised when no terminal snapshot was observed before the deadline.

    Also a builtin TimeoutError, so ``except TimeoutError`` catches a deadline
    expiry. A TimeoutError raised by the status client itself is never
    converted into this type.

    Attributes:
        elapsed_seconds: Time elapsed before timeout
        timeout_seconds: Configured maximum watch duration
    """
    def __init__(
        self,
        job_id: int,
        elapsed_seconds: float,
        timeout_seconds: float,
        diagnostic: Optional[str] = None
    ):
        self.elapsed_seconds = elapsed_seconds
        self.timeout_seconds = timeout_seconds
        message = f"Job {job_id} did not finish after {elapsed_seconds:.1f}s (limit: {timeout_seconds}s)"
        super().__init__(message=message, diagnostic=diagnostic, job_id=job_id)


class JobFailedError(JobExecutionError):
    """Raised when the job reached a terminal state other than succeeded.

    Attributes:
        status: Final status label (e.g. ``FAILED``, ``CANCELLED``)
        attempt_count: Number of attempts the remote system made
        failure_details: Non-empty failure summaries, in attempt order
    """
    def __init__(
        self,
        job_id: int,
        status: str,
        attempt_count: int,
        failure_details: List[str],
        message: Optional[str] = None,
    ):
        self.status = status
        self.attempt_count = attempt_count
        self.failure_details = list(failure_details)
        message = message or (
            f"Failed run with status '{status}' after {attempt_count} attempt(s)"
        )
        super().__init__(
            message=message,
            diagnostic="; ".join(self.failure_details) or None,
            job_id=job_id,
        )
