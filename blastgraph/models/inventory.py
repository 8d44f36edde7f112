"""Inventory records read from the store: services, interfaces, dependencies."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class InventoryModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class ServiceInterface(InventoryModel):
    id: str
    domain: str | None = None
    env: str | None = None
    branch: str | None = None
    runtime_type: str | None = None
    runtime_id: str | None = None


class ServiceDependency(InventoryModel):
    id: str
    dependency_name: str


class Service(InventoryModel):
    id: str
    name: str
    organization_id: str
    owner: str | None = None
    repository: str | None = None
    description: str | None = None
    language: str | None = None
    interfaces: list[ServiceInterface] = Field(default_factory=list)
    dependencies: list[ServiceDependency] = Field(default_factory=list)


class Inventory(InventoryModel):
    """A JSON inventory document, as loaded by the in-memory store."""

    services: list[Service] = Field(default_factory=list)
