"""Read access to an organization's service inventory.

Access control is enforced by the store itself; nothing here re-checks it.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from blastgraph.graph_db.connection import Neo4jConnection
from blastgraph.graph_db.queries import SERVICES_FOR_ORGANIZATION
from blastgraph.models.inventory import Inventory, Service
from blastgraph.utils.exceptions import UpstreamDataError
from blastgraph.utils.logging import get_logger

logger = get_logger(__name__)


class InventoryStore(ABC):
    """Source of services with their interfaces and dependencies."""

    @abstractmethod
    async def list_services(self, organization_id: str) -> list[Service]:
        """Return every service in the organization.

        Raises UpstreamDataError when the store cannot be read.
        """

    async def health_check(self) -> bool:
        return True


class InMemoryInventoryStore(InventoryStore):
    """Inventory held in process, loaded from records or a JSON document."""

    def __init__(self, services: Iterable[Service] = ()) -> None:
        self._services: dict[str, list[Service]] = {}
        for service in services:
            self.add(service)

    def add(self, service: Service) -> None:
        self._services.setdefault(service.organization_id, []).append(service)

    async def list_services(self, organization_id: str) -> list[Service]:
        return list(self._services.get(organization_id, []))

    @classmethod
    def from_file(cls, path: str | Path) -> InMemoryInventoryStore:
        return cls(load_inventory_file(path).services)


class Neo4jInventoryStore(InventoryStore):
    """Inventory read from Service/Interface/Dependency nodes in Neo4j."""

    def __init__(self, conn: Neo4jConnection) -> None:
        self._conn = conn

    async def list_services(self, organization_id: str) -> list[Service]:
        try:
            rows = await self._conn.execute_read(
                SERVICES_FOR_ORGANIZATION, organization_id=organization_id
            )
        except Exception as exc:
            logger.error("inventory_query_failed", organization_id=organization_id, error=str(exc))
            raise UpstreamDataError("Inventory query failed") from exc

        try:
            return [
                Service.model_validate({
                    **row["service"],
                    "interfaces": row.get("interfaces") or [],
                    "dependencies": row.get("dependencies") or [],
                })
                for row in rows
            ]
        except (KeyError, TypeError, PydanticValidationError) as exc:
            logger.error("inventory_record_invalid", organization_id=organization_id, error=str(exc))
            raise UpstreamDataError("Inventory returned malformed records") from exc

    async def health_check(self) -> bool:
        return await self._conn.health_check()


def load_inventory_file(path: str | Path) -> Inventory:
    """Parse a JSON inventory document: ``{"services": [...]}``."""
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    inventory = Inventory.model_validate(raw)
    logger.info("inventory_file_loaded", path=str(path), services=len(inventory.services))
    return inventory
