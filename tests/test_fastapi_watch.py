"""Endpoint tests for the FastAPI driver adapter.

A fake HTTP client satisfies the lifespan context manager and a scripted job
status client stands in for the remote API, so no network is involved.
"""

from fastapi.testclient import TestClient

from syncwatch.adapters.metrics_inmemory import InMemoryMetricsAdapter
from syncwatch.adapters.web.fastapi import create_app
from syncwatch.core.config import WatchConfig
from syncwatch.core.exceptions import TransportError
from syncwatch.core.managers.job_watcher import JobWatcher
from syncwatch.core.models.api_error import ApiErrorResponse
from syncwatch.core.models.job import Attempt, JobSnapshot, JobStatus, StreamStat


class FakeHttpClient:
    def __init__(self):
        self.entered = False
        self.exited = False

    async def __aenter__(self):
        self.entered = True
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.exited = True
        return False

    async def post(self, url, json=None, timeout=None, headers=None):
        raise AssertionError("not used")

    async def close(self):
        return None


class ScriptedClient:
    def __init__(self, snapshots=None, error=None):
        self._snapshots = list(snapshots or [])
        self._error = error
        self.calls = 0

    async def fetch_job(self, job_id):
        self.calls += 1
        if self._error is not None:
            raise self._error
        return self._snapshots[min(self.calls, len(self._snapshots)) - 1]


def build(status_client, metrics=None):
    metrics = metrics if metrics is not None else InMemoryMetricsAdapter()
    http = FakeHttpClient()

    def watcher_factory(client):
        assert client is http
        return JobWatcher(
            status_client, metrics, config=WatchConfig(poll_interval=0.01, max_duration=2)
        )

    return create_app(http_client=http, watcher_factory=watcher_factory, metrics=metrics), http


def test_watch_returns_final_status():
    status_client = ScriptedClient([
        JobSnapshot(job_id=970, status=JobStatus.running, attempts=[Attempt(index=0)]),
        JobSnapshot(
            job_id=970,
            status=JobStatus.succeeded,
            attempts=[Attempt(index=0, stream_stats=[StreamStat(stream_name="users", records_emitted=10)])],
        ),
    ])
    app, http = build(status_client)

    with TestClient(app) as client:
        resp = client.post("/jobs/970/watch", headers={"X-Request-ID": "req-1"})
        metrics_resp = client.get("/metrics")

    assert resp.status_code == 200
    assert resp.json() == {"jobId": 970, "finalStatus": "SUCCEEDED", "attemptCount": 1}
    assert resp.headers["X-Request-ID"] == "req-1"
    counters = metrics_resp.json()["counters"]
    assert {"name": "records.emitted", "tags": {"stream": "users"}, "value": 10} in counters
    assert {"name": "attempts.count", "tags": {}, "value": 1} in counters
    assert http.entered and http.exited


def test_invalid_job_id_is_bad_request():
    status_client = ScriptedClient([JobSnapshot(job_id=1, status=JobStatus.succeeded)])
    app, _ = build(status_client)

    with TestClient(app) as client:
        resp = client.post("/jobs/abc/watch")

    assert resp.status_code == 400
    assert resp.json()["title"] == "Invalid Watch Request"
    assert status_client.calls == 0


def test_non_positive_poll_interval_is_bad_request():
    status_client = ScriptedClient([JobSnapshot(job_id=1, status=JobStatus.succeeded)])
    app, _ = build(status_client)

    with TestClient(app) as client:
        resp = client.post("/jobs/1/watch", params={"poll_interval": 0})

    assert resp.status_code == 400


def test_failed_job_reports_failures():
    status_client = ScriptedClient([
        JobSnapshot(
            job_id=970,
            status=JobStatus.failed,
            attempts=[Attempt(index=0, failure_summary="connector crashed")],
        )
    ])
    app, _ = build(status_client)

    with TestClient(app) as client:
        resp = client.post("/jobs/970/watch")

    assert resp.status_code == 409
    body = resp.json()
    assert body["additional"]["finalStatus"] == "FAILED"
    assert body["additional"]["attemptCount"] == 1
    assert body["additional"]["failures"] == ["connector crashed"]


def test_timeout_maps_to_gateway_timeout():
    status_client = ScriptedClient([JobSnapshot(job_id=7, status=JobStatus.running)])
    app, _ = build(status_client)

    with TestClient(app) as client:
        resp = client.post("/jobs/7/watch", params={"poll_interval": 0.01, "max_duration": 0.05})

    assert resp.status_code == 504
    assert resp.json()["title"] == "Watch Timeout"


def test_transport_error_keeps_upstream_status():
    error = TransportError(
        ApiErrorResponse(type="about:blank", title="Authentication Failed", status=401, detail="bad credentials")
    )
    app, _ = build(ScriptedClient(error=error))

    with TestClient(app) as client:
        resp = client.post("/jobs/7/watch")

    assert resp.status_code == 401
    assert resp.json()["title"] == "Authentication Failed"


def test_health():
    app, _ = build(ScriptedClient())

    with TestClient(app) as client:
        resp = client.get("/health")

    assert resp.json() == {"status": "ok"}
