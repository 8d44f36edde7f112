"""Resolve a blast-radius subgraph, lay it out, and write both to a JSON file."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

from blastgraph.api.v1.schemas.graph import DEFAULT_HOPS
from blastgraph.config import get_settings
from blastgraph.graph_db.connection import Neo4jConnection
from blastgraph.models.graph import FOCUS_KINDS
from blastgraph.services.inventory_service import (
    InMemoryInventoryStore,
    InventoryStore,
    Neo4jInventoryStore,
)
from blastgraph.services.layout_service import compute_layout
from blastgraph.services.subgraph_service import SubgraphResolver
from blastgraph.utils.exceptions import BlastGraphError
from blastgraph.utils.logging import setup_logging


async def main(args: argparse.Namespace) -> None:
    setup_logging(log_level="INFO", log_format="console")
    settings = get_settings()

    conn: Neo4jConnection | None = None
    store: InventoryStore
    if args.inventory:
        store = InMemoryInventoryStore.from_file(args.inventory)
    else:
        conn = Neo4jConnection(settings)
        await conn.connect()
        store = Neo4jInventoryStore(conn)

    try:
        resolver = SubgraphResolver(
            store,
            node_limit=settings.GRAPH_NODE_LIMIT,
            min_hops=settings.GRAPH_MIN_HOPS,
            max_hops=settings.GRAPH_MAX_HOPS,
        )
        try:
            response = await resolver.resolve(args.organization, args.focus_kind, args.focus_id, args.hops)
        except BlastGraphError as exc:
            print(f"Export failed: {exc}")
            sys.exit(1)

        layout = compute_layout(response.nodes, response.query_hash)
        output = {
            "graph": response.model_dump(mode="json", by_alias=True),
            "layout": layout.model_dump(mode="json", by_alias=True),
        }
        with open(args.output, "w") as f:
            json.dump(output, f, indent=2)
        print(f"Graph exported to {args.output}")
        print(f"  Nodes: {len(response.nodes)}")
        print(f"  Edges: {len(response.edges)}")
        print(f"  Truncated: {response.truncated}")
    finally:
        if conn is not None:
            await conn.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("organization")
    parser.add_argument("focus_kind", choices=FOCUS_KINDS)
    parser.add_argument("focus_id")
    parser.add_argument("--hops", type=int, default=DEFAULT_HOPS)
    parser.add_argument("--inventory", help="JSON inventory file; reads Neo4j when omitted")
    parser.add_argument("--output", default="graph_export.json")
    asyncio.run(main(parser.parse_args()))
