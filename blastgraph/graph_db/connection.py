"""Async Neo4j driver management for the inventory store."""

from __future__ import annotations

from typing import Any

from neo4j import AsyncDriver, AsyncGraphDatabase, AsyncManagedTransaction

from blastgraph.config import Settings
from blastgraph.utils.logging import get_logger

logger = get_logger(__name__)


async def _collect(tx: AsyncManagedTransaction, query: str, params: dict[str, Any]) -> list[dict]:
    result = await tx.run(query, params)
    return [record.data() async for record in result]


class Neo4jConnection:
    """Owns the async Neo4j driver for the lifetime of the app.

    Queries run as managed transactions so the driver retries transient
    failures. Writes are only used by seeding and the maintenance scripts.
    """

    def __init__(self, settings: Settings) -> None:
        self._uri = settings.NEO4J_URI
        self._auth = (settings.NEO4J_USER, settings.NEO4J_PASSWORD)
        self._driver: AsyncDriver | None = None

    @property
    def driver(self) -> AsyncDriver:
        if self._driver is None:
            raise RuntimeError("Neo4j driver not initialized, call connect() first")
        return self._driver

    async def connect(self) -> None:
        if self._driver is not None:
            return
        self._driver = AsyncGraphDatabase.driver(self._uri, auth=self._auth)
        await self._driver.verify_connectivity()
        logger.info("neo4j_connected", uri=self._uri)

    async def close(self) -> None:
        if self._driver is None:
            return
        await self._driver.close()
        self._driver = None
        logger.info("neo4j_disconnected")

    async def health_check(self) -> bool:
        rows = await self.execute_read("RETURN 1 AS ok")
        return bool(rows) and rows[0].get("ok") == 1

    async def execute_read(self, query: str, **params: Any) -> list[dict]:
        async with self.driver.session() as session:
            return await session.execute_read(_collect, query, params)

    async def execute_write(self, query: str, **params: Any) -> list[dict]:
        async with self.driver.session() as session:
            return await session.execute_write(_collect, query, params)
