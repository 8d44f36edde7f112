"""Integration tests for Neo4j (requires running Neo4j instance)."""

from __future__ import annotations

import pytest

# These tests require a running Neo4j instance.
# Point NEO4J_URI at a running instance, then: pytest tests/integration/test_neo4j.py

pytestmark = pytest.mark.skipif(
    True,  # Skip by default; set to False when Neo4j is running
    reason="Requires running Neo4j instance",
)


@pytest.mark.asyncio
async def test_neo4j_connection():
    from blastgraph.config import get_settings
    from blastgraph.graph_db.connection import Neo4jConnection

    conn = Neo4jConnection(get_settings())
    await conn.connect()
    assert await conn.health_check() is True
    await conn.close()


@pytest.mark.asyncio
async def test_seed_and_resolve(sample_inventory_path):
    from blastgraph.config import get_settings
    from blastgraph.graph_db.connection import Neo4jConnection
    from blastgraph.graph_db.seed import seed_inventory
    from blastgraph.services.inventory_service import Neo4jInventoryStore, load_inventory_file
    from blastgraph.services.subgraph_service import SubgraphResolver

    conn = Neo4jConnection(get_settings())
    await conn.connect()
    try:
        count = await seed_inventory(conn, load_inventory_file(sample_inventory_path), replace=True)
        assert count == 4

        store = Neo4jInventoryStore(conn)
        response = await SubgraphResolver(store).resolve("acme", "software", "svc-checkout", 2)
        assert response.focus_node_id == "svc-checkout"
        assert response.meta.total_services_in_org == 4
    finally:
        await conn.close()
