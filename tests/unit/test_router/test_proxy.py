"""Tests for pool forwarding and the degraded fallback."""

from __future__ import annotations

import httpx
import pytest
from fastapi.testclient import TestClient

from cmdgate.domain.models import LifecycleState
from cmdgate.router.observer import RouterObserver
from cmdgate.router.proxy import FALLBACK_MESSAGE, InstancePool
from cmdgate.router.selector import InstanceSelector
from cmdgate.router.server import create_app
from cmdgate.router.state import InstanceStateStore

URLS = ["http://inst0:8080", "http://inst1:8080"]


class FixedSelector(InstanceSelector):
    """Always picks the same instance."""

    def __init__(self, instance_id: int = 0) -> None:
        self.instance_id = instance_id

    @property
    def name(self) -> str:
        return "fixed"

    def pick(self, pool_size: int) -> int:
        return self.instance_id


class RecordingObserver(RouterObserver):
    def __init__(self) -> None:
        self.events: list[tuple] = []

    def request_started(self, pool, method, path) -> None:
        self.events.append(("started", pool, method, path))

    def instance_selected(self, pool, instance_id) -> None:
        self.events.append(("selected", pool, instance_id))

    def forward_completed(self, pool, instance_id, status_code, error=None) -> None:
        self.events.append(("completed", pool, instance_id, status_code, error is not None))


def make_pool(clock, selector: InstanceSelector | None = None) -> InstancePool:
    return InstancePool(
        "backend",
        "/api",
        URLS,
        selector=selector or FixedSelector(0),
        store=InstanceStateStore(clock=clock),
    )


class TestInstancePool:
    def test_requires_instances(self) -> None:
        with pytest.raises(ValueError):
            InstancePool("empty", "/api", [])

    def test_ids_follow_url_order(self) -> None:
        pool = InstancePool("backend", "/api", URLS)
        assert [(i.id, i.base_url) for i in pool.instances] == [(0, URLS[0]), (1, URLS[1])]
        assert pool.size == 2

    def test_start_and_stop(self) -> None:
        pool = InstancePool("backend", "/api", URLS)
        pool.start()
        assert all(i.lifecycle.state is LifecycleState.RUNNING for i in pool.instances)
        pool.stop()
        assert all(i.lifecycle.state is LifecycleState.STOPPED for i in pool.instances)

    def test_stop_skips_never_started(self) -> None:
        pool = InstancePool("backend", "/api", URLS)
        pool.stop()
        assert all(i.lifecycle.state is LifecycleState.UNINITIALIZED for i in pool.instances)


class TestForwarding:
    def test_relays_method_path_query_and_headers(self, clock, echo_transport) -> None:
        pool = make_pool(clock)
        app = create_app(pools=[pool], client=httpx.AsyncClient(transport=echo_transport))
        with TestClient(app) as client:
            resp = client.get("/api/items?x=1&y=2")
        assert resp.status_code == 200
        assert resp.headers["x-upstream"] == "inst0"
        assert resp.json() == {
            "method": "GET",
            "host": "inst0",
            "path": "/api/items",
            "query": "x=1&y=2",
            "body": "",
        }

    def test_relays_body(self, clock, echo_transport) -> None:
        pool = make_pool(clock, FixedSelector(1))
        app = create_app(pools=[pool], client=httpx.AsyncClient(transport=echo_transport))
        with TestClient(app) as client:
            resp = client.post("/api", content=b"payload")
        data = resp.json()
        assert data["host"] == "inst1"
        assert data["method"] == "POST"
        assert data["path"] == "/api"
        assert data["body"] == "payload"

    def test_upstream_status_passes_through(self, clock) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(418, text="teapot"))
        app = create_app(pools=[make_pool(clock)], client=httpx.AsyncClient(transport=transport))
        with TestClient(app) as client:
            resp = client.delete("/api/thing")
        assert resp.status_code == 418
        assert resp.text == "teapot"

    def test_contact_is_recorded(self, clock, echo_transport) -> None:
        pool = make_pool(clock)
        app = create_app(pools=[pool], client=httpx.AsyncClient(transport=echo_transport))
        with TestClient(app) as client:
            client.get("/api/a")
        assert pool.store.last_contact(0) == clock.now
        assert pool.store.last_contact(1) is None

    def test_multiple_pools(self, clock, echo_transport) -> None:
        api = make_pool(clock)
        admin = InstancePool("admin", "/admin", ["http://adm:9000"])
        app = create_app(pools=[api, admin], client=httpx.AsyncClient(transport=echo_transport))
        with TestClient(app) as client:
            assert client.get("/admin/users").json()["host"] == "adm"
            assert client.get("/api/users").json()["host"] == "inst0"


class TestFallback:
    def test_first_contact_failure(self, clock, refusing_transport) -> None:
        pool = make_pool(clock)
        app = create_app(pools=[pool], client=httpx.AsyncClient(transport=refusing_transport))
        with TestClient(app) as client:
            resp = client.get("/api/x")
        assert resp.status_code == 500
        data = resp.json()
        assert data["message"] == FALLBACK_MESSAGE
        assert data["instance"] == 0
        assert data["last_request_timestamp"] is None
        assert "Connection refused" in data["error"]
        assert isinstance(data["timestamp"], float)

    def test_reports_previous_contact_and_recovers(self, clock) -> None:
        upstream = {"up": True}

        def handler(request: httpx.Request) -> httpx.Response:
            if not upstream["up"]:
                raise httpx.ConnectError("Connection refused", request=request)
            return httpx.Response(200, json={"ok": True})

        pool = make_pool(clock)
        app = create_app(
            pools=[pool], client=httpx.AsyncClient(transport=httpx.MockTransport(handler))
        )
        instance = pool.instance(0)
        with TestClient(app) as client:
            first_contact = clock.now
            assert client.get("/api/x").status_code == 200

            clock.advance(10)
            upstream["up"] = False
            resp = client.get("/api/x")
            assert resp.status_code == 500
            assert resp.json()["last_request_timestamp"] == first_contact
            assert instance.lifecycle.state is LifecycleState.FAULTED
            assert pool.store.last_contact(0) == first_contact + 10

            clock.advance(10)
            upstream["up"] = True
            assert client.get("/api/x").status_code == 200
            assert instance.lifecycle.state is LifecycleState.RUNNING

    def test_timeout_is_a_fallback(self, clock) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        app = create_app(
            pools=[make_pool(clock)],
            client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )
        with TestClient(app) as client:
            resp = client.get("/api/slow")
        assert resp.status_code == 500
        assert resp.json()["error"] == "timed out"

    def test_no_retry_on_other_instance(self, clock) -> None:
        hosts: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            hosts.append(request.url.host)
            raise httpx.ConnectError("Connection refused", request=request)

        app = create_app(
            pools=[make_pool(clock)],
            client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )
        with TestClient(app) as client:
            client.get("/api/x")
        assert hosts == ["inst0"]


class TestObserver:
    def test_hooks_in_order(self, clock, echo_transport) -> None:
        observer = RecordingObserver()
        app = create_app(
            pools=[make_pool(clock)],
            client=httpx.AsyncClient(transport=echo_transport),
            observer=observer,
        )
        with TestClient(app) as client:
            client.get("/api/ping")
        assert observer.events == [
            ("started", "backend", "GET", "/api/ping"),
            ("selected", "backend", 0),
            ("completed", "backend", 0, 200, False),
        ]

    def test_failure_reported(self, clock, refusing_transport) -> None:
        observer = RecordingObserver()
        app = create_app(
            pools=[make_pool(clock)],
            client=httpx.AsyncClient(transport=refusing_transport),
            observer=observer,
        )
        with TestClient(app) as client:
            client.get("/api/ping")
        assert observer.events[-1] == ("completed", "backend", 0, None, True)
