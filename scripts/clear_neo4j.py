"""Delete one organization's inventory (services, interfaces, dependencies) from Neo4j."""

from __future__ import annotations

import argparse
import asyncio

from blastgraph.config import get_settings
from blastgraph.graph_db.connection import Neo4jConnection
from blastgraph.graph_db.queries import DELETE_ORGANIZATION_INVENTORY
from blastgraph.utils.logging import setup_logging


async def main(organization_id: str) -> None:
    setup_logging(log_level="INFO", log_format="console")

    conn = Neo4jConnection(get_settings())
    await conn.connect()

    try:
        await conn.execute_write(DELETE_ORGANIZATION_INVENTORY, organization_id=organization_id)
        print(f"Inventory for organization {organization_id!r} deleted from Neo4j.")
    finally:
        await conn.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("organization")
    asyncio.run(main(parser.parse_args().organization))
