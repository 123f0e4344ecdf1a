"""
Maintenance commands for the sales database.

    python api/manage.py create-tables
    python api/manage.py create-orders
    python api/manage.py seed
    python api/manage.py clear
    python api/manage.py serve --port 8000

Setup commands run outside the request path and exit non-zero on failure.
"""

from __future__ import annotations

import argparse
import asyncio
import sys

import uvicorn

from core import db
from core.log import configure_logging

SETUP_COMMANDS = {
    "create-tables": "create_tables",
    "create-orders": "create_tables_orders",
    "seed": "insert_default_data",
    "clear": "clear_default_data",
}


async def run_setup(command: str, connector: db.Connector) -> int:
    operation = getattr(connector, SETUP_COMMANDS[command])
    try:
        result = await operation()
    finally:
        await connector.close()

    if result.ok:
        print(f"{result.operation}: ok rows={result.rows}")
        return 0
    print(f"{result.operation}: failed ({result.error})", file=sys.stderr)
    return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Sales items API maintenance")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("create-tables", help="Create the items table if missing")
    sub.add_parser("create-orders", help="Create the orders table if missing")
    sub.add_parser("seed", help="Insert demo items")
    sub.add_parser("clear", help="Delete every item")
    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", default=8000, type=int)
    return parser


def main(argv: list[str]) -> int:
    args = build_parser().parse_args(argv)
    connector = db.get_instance()
    configure_logging(connector.settings.log_level)

    if args.command == "serve":
        uvicorn.run("main:app", host=args.host, port=args.port, log_level="info")
        return 0

    return asyncio.run(run_setup(args.command, connector))


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
