"""Integration tests for the FastAPI application."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from blastgraph.config import Settings
from blastgraph.main import create_app
from blastgraph.services.inventory_service import InMemoryInventoryStore
from blastgraph.services.scoring import compute_dep_id, compute_query_hash, compute_runtime_id
from blastgraph.utils.exceptions import UpstreamDataError


class CountingStore(InMemoryInventoryStore):
    def __init__(self, services=()) -> None:
        super().__init__(services)
        self.calls = 0

    async def list_services(self, organization_id):
        self.calls += 1
        return await super().list_services(organization_id)


class BrokenStore(InMemoryInventoryStore):
    async def list_services(self, organization_id):
        raise UpstreamDataError("inventory unavailable")

    async def health_check(self) -> bool:
        raise UpstreamDataError("inventory unavailable")


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def store(scenario_a_services):
    return CountingStore(scenario_a_services)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def client(store, clock):
    app = create_app(settings=Settings(), inventory_store=store, clock=clock)
    with TestClient(app) as c:
        yield c


def _graph(client, **params):
    query = {"organizationId": "org-1", "focusKind": "software", "focusId": "svc-api", "hops": "2"}
    query.update(params)
    return client.get("/api/v1/graph", params={k: v for k, v in query.items() if v is not None})


def test_health_endpoint(client):
    resp = client.get("/api/v1/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


def test_ready_endpoint(client):
    resp = client.get("/api/v1/ready")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ready", "inventory": True}


def test_graph_scenario_a(client):
    resp = _graph(client)
    assert resp.status_code == 200
    body = resp.json()

    assert set(body) == {"nodes", "edges", "focusNodeId", "truncated", "queryHash", "meta"}
    assert body["focusNodeId"] == "svc-api"
    assert body["truncated"] is False
    assert body["queryHash"] == compute_query_hash("org-1", "software", "svc-api", 2)
    assert body["meta"]["subgraphSize"] == 4

    hops = {n["nodeId"]: n["hopDistance"] for n in body["nodes"]}
    assert hops == {
        "svc-api": 0,
        "svc-billing": 1,
        compute_dep_id("left-pad"): 1,
        compute_runtime_id("kubernetes"): 2,
    }
    node_ids = set(hops)
    for edge in body["edges"]:
        assert set(edge) == {"fromId", "toId", "weight"}
        assert edge["fromId"] in node_ids and edge["toId"] in node_ids


def test_graph_defaults_hops(client):
    resp = _graph(client, hops=None)
    assert resp.status_code == 200
    assert resp.json()["queryHash"] == compute_query_hash("org-1", "software", "svc-api", 3)


@pytest.mark.parametrize("params", [
    {"hops": "0"},
    {"hops": "6"},
    {"hops": "two"},
    {"focusKind": "cluster"},
    {"focusId": None},
    {"organizationId": None},
    {"focusId": "   "},
])
def test_graph_rejects_bad_params(client, store, params):
    resp = _graph(client, **params)
    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "Invalid query parameters"
    assert body["details"]
    assert store.calls == 0


def test_graph_unknown_focus_is_404(client):
    resp = _graph(client, focusId="svc-does-not-exist")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Focus node not found"}


def test_graph_unknown_organization_is_404(client):
    resp = _graph(client, organizationId="org-elsewhere")
    assert resp.status_code == 404


def test_graph_served_from_cache_until_ttl(client, store, clock):
    first = _graph(client)
    second = _graph(client)
    assert first.json() == second.json()
    assert store.calls == 1

    clock.now += 31
    _graph(client)
    assert store.calls == 2


def test_graph_cache_is_keyed_by_hops(client, store):
    _graph(client, hops="1")
    _graph(client, hops="2")
    assert store.calls == 2


def test_upstream_failure_is_500():
    app = create_app(settings=Settings(), inventory_store=BrokenStore())
    with TestClient(app) as c:
        resp = _graph(c)
        ready = c.get("/api/v1/ready")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error"}
    assert ready.json()["status"] == "not_ready"


def test_request_id_is_echoed(client):
    resp = client.get("/api/v1/health", headers={"X-Request-ID": "req-123"})
    assert resp.headers["X-Request-ID"] == "req-123"
    assert client.get("/api/v1/health").headers["X-Request-ID"]


def test_sample_inventory_from_settings(sample_inventory_path, monkeypatch):
    monkeypatch.setenv("INVENTORY_FILE", str(sample_inventory_path))
    app = create_app(settings=Settings())
    with TestClient(app) as c:
        resp = c.get(
            "/api/v1/graph",
            params={"organizationId": "acme", "focusKind": "software", "focusId": "svc-checkout"},
        )
    assert resp.status_code == 200
    assert resp.json()["focusNodeId"] == "svc-checkout"
