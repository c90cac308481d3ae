"""Job status client for the Airbyte configuration API.

Posts ``{"id": <job id>}`` to ``/api/v1/jobs/get`` and translates the
``JobInfoRead`` payload into a JobSnapshot:

    {"job": {"id": 970, "status": "running", ...},
     "attempts": [{"attempt": {"id": 0, "failureSummary": ...,
                               "streamStats": [{"streamName": "users",
                                                "stats": {"recordsEmitted": 10}}]},
                   "logs": {"logLines": ["..."]}}]}
"""

from __future__ import annotations

import base64
import json
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from syncwatch.core.exceptions import TransportError
from syncwatch.core.interfaces.http_client import HttpClientPort
from syncwatch.core.interfaces.job_status import JobStatusClientPort
from syncwatch.core.interfaces.retry import RetryPort
from syncwatch.core.models.api_error import ApiErrorResponse
from syncwatch.core.models.job import Attempt, JobSnapshot, StreamStat
from syncwatch.core.settings import logger

JOBS_GET_PATH = "/api/v1/jobs/get"
TRANSIENT_STATUSES = {502, 503, 504}


class TransientTransportError(TransportError):
    """Wrapper for transport errors worth retrying (502, 503, 504).

    Still a TransportError, so callers see the usual type once retries run out.
    """

    pass


def is_transient(exc: TransportError) -> bool:
    return exc.response.status in TRANSIENT_STATUSES


def _failure_text(summary: Any) -> Optional[str]:
    """Flatten an attempt failure summary to text (None when absent or empty)."""
    if summary is None:
        return None
    if isinstance(summary, str):
        return summary.strip() or None
    if isinstance(summary, dict) and isinstance(summary.get("failures"), list):
        failures = summary["failures"]
        if not failures:
            return None
        messages = [
            f.get("externalMessage") or f.get("internalMessage")
            for f in failures
            if isinstance(f, dict)
        ]
        messages = [m for m in messages if m]
        if messages:
            return "; ".join(messages)
    return json.dumps(summary, sort_keys=True, default=str)


def _stream_stats(raw: Optional[List[Dict[str, Any]]]) -> Optional[List[StreamStat]]:
    if raw is None:
        return None
    stats = []
    for entry in raw:
        counters = entry.get("stats") or {}
        stats.append(
            StreamStat(
                stream_name=entry["streamName"],
                records_committed=counters.get("recordsCommitted"),
                records_emitted=counters.get("recordsEmitted"),
                bytes_emitted=counters.get("bytesEmitted"),
                state_messages_emitted=counters.get("stateMessagesEmitted"),
            )
        )
    return stats


def snapshot_from_payload(job_id: int, payload: Dict[str, Any]) -> JobSnapshot:
    """Translate a JobInfoRead payload; raises TransportError when it cannot be decoded."""
    try:
        job = payload["job"]
        attempts = []
        for index, info in enumerate(payload.get("attempts") or []):
            attempt = info.get("attempt") or {}
            logs = info.get("logs") or {}
            attempts.append(
                Attempt(
                    index=index,
                    failure_summary=_failure_text(attempt.get("failureSummary")),
                    log_lines=list(logs.get("logLines") or []),
                    stream_stats=_stream_stats(attempt.get("streamStats")),
                )
            )
        return JobSnapshot(
            job_id=job.get("id", job_id),
            status=job["status"],
            attempts=attempts,
        )
    except (KeyError, TypeError, AttributeError, ValidationError) as exc:
        logger.error(f"[client:decode] invalid job payload job_id={job_id} error={exc}")
        raise TransportError(
            ApiErrorResponse(
                type="about:blank",
                title="Invalid Job Payload",
                status=502,
                detail=f"The job status response could not be decoded: {exc}",
            )
        ) from exc


class AirbyteJobStatusClient(JobStatusClientPort):
    """Fetches job snapshots over HTTP.

    Transient transport failures may be retried here through a RetryPort; the
    watcher above never retries.
    """

    def __init__(
        self,
        http_client: HttpClientPort,
        base_url: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        token: Optional[str] = None,
        request_timeout: Optional[float] = None,
        retry_port: Optional[RetryPort] = None,
        max_retries: int = 3,
    ) -> None:
        self._http = http_client
        self._url = str(base_url).rstrip("/") + JOBS_GET_PATH
        self._timeout = request_timeout
        self._retry = retry_port
        self._max_retries = max_retries
        self._headers = {"Accept": "application/json"}
        if token:
            self._headers["Authorization"] = f"Bearer {token}"
        elif username:
            credentials = f"{username}:{password or ''}".encode("utf-8")
            self._headers["Authorization"] = "Basic " + base64.b64encode(credentials).decode("ascii")

    async def fetch_job(self, job_id: int) -> JobSnapshot:
        if self._retry:
            resp = await self._retry.execute(
                self._post_classified,
                job_id,
                attempts=self._max_retries,
                exception_types=(TransientTransportError,),
            )
        else:
            resp = await self._post_classified(job_id)

        body = resp.get("body")
        if not isinstance(body, dict):
            raise TransportError(
                ApiErrorResponse(
                    type="about:blank",
                    title="Invalid Response Content",
                    status=502,
                    detail="The job status response was not a JSON object.",
                    instance=self._url,
                )
            )
        return snapshot_from_payload(job_id, body)

    async def _post_classified(self, job_id: int) -> Dict[str, Any]:
        """Single POST; errors are raised as transient or not for the retry policy."""
        try:
            resp = await self._http.post(
                self._url, json={"id": job_id}, timeout=self._timeout, headers=self._headers
            )
        except TransportError as exc:
            if is_transient(exc):
                raise TransientTransportError(exc.response) from exc
            raise

        status = resp.get("status") or 0
        if status >= 400:
            logger.debug(f"[client:fetch] upstream error job_id={job_id} status={status}")
            error = TransportError(
                ApiErrorResponse(
                    type="about:blank",
                    title="Upstream HTTP Error",
                    status=status,
                    detail=f"The job status request returned HTTP {status}: {str(resp.get('body'))[:200]}",
                    instance=self._url,
                )
            )
            if is_transient(error):
                raise TransientTransportError(error.response)
            raise error
        return resp
