# syncwatch/adapters/web/fastapi.py
from contextlib import asynccontextmanager
from typing import Callable, Optional

import uuid

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from syncwatch.adapters.metrics_inmemory import InMemoryMetricsAdapter
from syncwatch.core.exceptions import (
    ConfigurationError,
    JobFailedError,
    JobTimeoutError,
    TransportError,
)
from syncwatch.core.interfaces.http_client import HttpClientPort
from syncwatch.core.logging_config import correlation_id_var
from syncwatch.core.managers.job_watcher import JobWatcher
from syncwatch.core.models.api_error import AdditionalInfo, ApiErrorResponse
from syncwatch.core.settings import logger


class WatchResponse(BaseModel):
    jobId: int
    finalStatus: str
    attemptCount: int


# Note: this is a driver adapter; it depends on the core (JobWatcher) but the
# core does not depend on it.
def create_app(
    http_client: HttpClientPort,
    watcher_factory: Callable[[HttpClientPort], JobWatcher],
    metrics: Optional[InMemoryMetricsAdapter] = None,
) -> FastAPI:
    """Create the FastAPI app.

    Adapters and concrete infrastructure are assembled outside and passed in
    as factories. This keeps the web adapter focused on HTTP concerns and
    lifecycle orchestration.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        async with http_client as client:
            watcher = watcher_factory(client)
            app.state.watcher = watcher
            try:
                yield
            finally:
                await watcher.shutdown()

    app = FastAPI(title="SyncWatch", lifespan=lifespan)

    def render_problem(problem: ApiErrorResponse) -> JSONResponse:
        payload = jsonable_encoder(problem.model_dump(exclude_none=True))
        response = JSONResponse(
            status_code=problem.status,
            content=payload,
            media_type="application/problem+json",
        )
        if problem.additional and problem.additional.requestId:
            response.headers["X-Request-ID"] = problem.additional.requestId
        return response

    def build_problem(
        status: int,
        title: str,
        detail: str,
        request: Request,
        additional: Optional[AdditionalInfo] = None,
    ) -> ApiErrorResponse:
        problem = ApiErrorResponse(
            type="about:blank",
            title=title,
            status=status,
            detail=detail,
            instance=str(request.url),
            additional=additional,
        )
        return problem.with_request_id(correlation_id_var.get())

    # Correlation ID middleware: assigns per-request id (header override) and exposes it to logging
    @app.middleware("http")
    async def correlation_id_middleware(request: Request, call_next):
        incoming = request.headers.get("x-request-id")
        cid = incoming or uuid.uuid4().hex[:12]
        correlation_id_var.set(cid)
        try:
            response = await call_next(request)
        finally:
            # ensure context is reset to avoid leak across reused worker tasks
            correlation_id_var.set("-")
        response.headers["X-Request-ID"] = cid
        return response

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.get("/metrics")
    async def list_metrics():
        if metrics is None:
            return {"counters": []}
        counters = [
            {"name": name, "tags": dict(tags), "value": value}
            for (name, tags), value in metrics.totals().items()
        ]
        return {"counters": counters}

    @app.post("/jobs/{job_id}/watch", response_model=WatchResponse)
    async def watch_job(
        request: Request,
        job_id: str,
        poll_interval: Optional[float] = None,
        max_duration: Optional[float] = None,
    ):
        watcher: JobWatcher = request.app.state.watcher
        try:
            result = await watcher.watch(
                job_id, poll_interval=poll_interval, max_duration=max_duration
            )
        except ConfigurationError as exc:
            return render_problem(
                build_problem(400, "Invalid Watch Request", str(exc), request)
            )
        except JobFailedError as exc:
            return render_problem(
                build_problem(
                    409,
                    "Job Failed",
                    exc.message,
                    request,
                    additional=AdditionalInfo(
                        finalStatus=exc.status,
                        attemptCount=exc.attempt_count,
                        failures=exc.failure_details,
                    ),
                )
            )
        except JobTimeoutError as exc:
            return render_problem(build_problem(504, "Watch Timeout", exc.message, request))
        except TransportError as exc:
            logger.warning(f"[web:watch] transport error job_id={job_id} title={exc.response.title}")
            problem = exc.response.model_copy(update={"instance": str(request.url)})
            return render_problem(problem.with_request_id(correlation_id_var.get()))

        return WatchResponse(
            jobId=result.job_id,
            finalStatus=result.final_status,
            attemptCount=result.attempt_count,
        )

    return app
