"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from blastgraph.models.inventory import Service, ServiceDependency, ServiceInterface
from blastgraph.services.inventory_service import InMemoryInventoryStore

SAMPLE_INVENTORY = Path(__file__).resolve().parent.parent / "data" / "sample_inventory.json"


@pytest.fixture(autouse=True)
def _env_setup(monkeypatch):
    """Keep tests off any real database."""
    monkeypatch.setenv("INVENTORY_BACKEND", "memory")
    monkeypatch.setenv("INVENTORY_FILE", "")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    monkeypatch.setenv("LOG_FORMAT", "console")


def make_service(
    service_id: str,
    name: str | None = None,
    *,
    organization_id: str = "org-1",
    owner: str | None = "Platform",
    repository: str | None = "github.com/org/repo",
    description: str | None = "A service",
    language: str | None = "python",
    interfaces: list[tuple[str, str, str | None]] | None = None,
    dependencies: list[str] | None = None,
) -> Service:
    """Build a Service; interfaces are ``(domain, env, runtime_type)`` tuples."""
    return Service(
        id=service_id,
        name=name or service_id,
        organization_id=organization_id,
        owner=owner,
        repository=repository,
        description=description,
        language=language,
        interfaces=[
            ServiceInterface(id=f"{service_id}-if-{i}", domain=domain, env=env, runtime_type=runtime)
            for i, (domain, env, runtime) in enumerate(interfaces or [])
        ],
        dependencies=[
            ServiceDependency(id=f"{service_id}-dep-{i}", dependency_name=dep)
            for i, dep in enumerate(dependencies or [])
        ],
    )


@pytest.fixture
def scenario_a_services() -> list[Service]:
    """Focus service with one prod interface, two direct dependencies and a runtime two hops out."""
    return [
        make_service(
            "svc-api",
            interfaces=[("api.example.com", "production", None)],
            dependencies=["billing", "left-pad"],
        ),
        make_service(
            "svc-billing",
            name="billing",
            interfaces=[("billing.example.com", "staging", "kubernetes")],
        ),
    ]


@pytest.fixture
def inventory_store(scenario_a_services) -> InMemoryInventoryStore:
    return InMemoryInventoryStore(scenario_a_services)


@pytest.fixture
def sample_inventory_path() -> Path:
    return SAMPLE_INVENTORY


@pytest.fixture
def service_factory():
    return make_service
