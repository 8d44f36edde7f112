"""Load a JSON inventory document into Neo4j."""

from __future__ import annotations

import argparse
import asyncio

from blastgraph.config import get_settings
from blastgraph.graph_db.connection import Neo4jConnection
from blastgraph.graph_db.seed import seed_inventory
from blastgraph.services.inventory_service import load_inventory_file
from blastgraph.utils.logging import setup_logging


async def main(path: str, replace: bool) -> None:
    setup_logging(log_level="INFO", log_format="console")
    conn = Neo4jConnection(get_settings())
    await conn.connect()
    try:
        count = await seed_inventory(conn, load_inventory_file(path), replace=replace)
        print(f"Seeded {count} services from {path}")
    finally:
        await conn.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("path", nargs="?", default="data/sample_inventory.json")
    parser.add_argument("--replace", action="store_true", help="wipe the organizations first")
    args = parser.parse_args()
    asyncio.run(main(args.path, args.replace))
