"""Neo4j constraints and indexes for the inventory graph."""

from __future__ import annotations

from blastgraph.graph_db.connection import Neo4jConnection
from blastgraph.utils.logging import get_logger

logger = get_logger(__name__)

CONSTRAINTS = [
    "CREATE CONSTRAINT service_id IF NOT EXISTS FOR (s:Service) REQUIRE s.id IS UNIQUE",
    "CREATE CONSTRAINT interface_id IF NOT EXISTS FOR (i:Interface) REQUIRE i.id IS UNIQUE",
    "CREATE CONSTRAINT dependency_id IF NOT EXISTS FOR (d:Dependency) REQUIRE d.id IS UNIQUE",
]

INDEXES = [
    "CREATE INDEX service_org IF NOT EXISTS FOR (s:Service) ON (s.organizationId)",
    "CREATE INDEX service_name IF NOT EXISTS FOR (s:Service) ON (s.name)",
    "CREATE INDEX interface_domain IF NOT EXISTS FOR (i:Interface) ON (i.domain)",
]


async def init_schema(conn: Neo4jConnection) -> None:
    """Create all constraints and indexes on the Neo4j database."""
    for stmt in CONSTRAINTS:
        try:
            await conn.execute_write(stmt)
        except Exception as exc:
            logger.warning("constraint_create_skipped", statement=stmt, error=str(exc))

    for stmt in INDEXES:
        try:
            await conn.execute_write(stmt)
        except Exception as exc:
            logger.warning("index_create_skipped", statement=stmt, error=str(exc))

    logger.info("neo4j_schema_initialized")
