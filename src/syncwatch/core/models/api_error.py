from pydantic import BaseModel
from typing import List, Optional


class AdditionalInfo(BaseModel):
    requestId: Optional[str] = None
    finalStatus: Optional[str] = None
    attemptCount: Optional[int] = None
    failures: Optional[List[str]] = None


class ApiErrorResponse(BaseModel):
    """Problem details (RFC 7807 style) used for transport and API errors."""

    type: str
    title: str
    status: int
    detail: str
    instance: Optional[str] = None
    additional: Optional[AdditionalInfo] = None

    def with_request_id(self, request_id: str) -> "ApiErrorResponse":
        """Return copy that includes the given correlation/request id."""
        info = self.additional.model_copy() if self.additional else AdditionalInfo()
        info.requestId = request_id
        return self.model_copy(update={"additional": info})
