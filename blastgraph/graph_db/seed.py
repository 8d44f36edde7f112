"""Schema initialization and inventory seeding from a JSON document."""

from __future__ import annotations

from blastgraph.graph_db.connection import Neo4jConnection
from blastgraph.graph_db.queries import (
    DELETE_ORGANIZATION_INVENTORY,
    MERGE_DEPENDENCY,
    MERGE_INTERFACE,
    MERGE_SERVICE,
)
from blastgraph.graph_db.schema import init_schema
from blastgraph.models.inventory import Inventory
from blastgraph.utils.logging import get_logger

logger = get_logger(__name__)


async def seed_inventory(conn: Neo4jConnection, inventory: Inventory, replace: bool = False) -> int:
    """Write every service, interface and dependency; returns the service count.

    With ``replace`` the organizations present in the document are wiped first.
    """
    await init_schema(conn)

    if replace:
        for organization_id in sorted({s.organization_id for s in inventory.services}):
            await conn.execute_write(DELETE_ORGANIZATION_INVENTORY, organization_id=organization_id)
            logger.info("organization_inventory_deleted", organization_id=organization_id)

    for service in inventory.services:
        await conn.execute_write(
            MERGE_SERVICE,
            id=service.id,
            properties=service.model_dump(
                by_alias=True, exclude={"interfaces", "dependencies"}, exclude_none=True
            ),
        )
        for iface in service.interfaces:
            await conn.execute_write(
                MERGE_INTERFACE,
                service_id=service.id,
                id=iface.id,
                properties=iface.model_dump(by_alias=True, exclude_none=True),
            )
        for dep in service.dependencies:
            await conn.execute_write(
                MERGE_DEPENDENCY,
                service_id=service.id,
                id=dep.id,
                properties=dep.model_dump(by_alias=True, exclude_none=True),
            )

    logger.info("seed_complete", services=len(inventory.services))
    return len(inventory.services)
