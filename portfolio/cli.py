"""Command line entry point for the portfolio backend."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from .config.settings import Settings, setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Portfolio backend CLI")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (DEBUG, INFO, WARNING, ERROR, NONE); defaults to LOG_LEVEL",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default=None, help="Bind address")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port")
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes")

    subparsers.add_parser("status", help="Show database connection health")

    schema_parser = subparsers.add_parser("schema", help="Create missing tables")
    schema_parser.add_argument(
        "--remote", action="store_true", help="Target SQLite Cloud instead of the local file"
    )

    subparsers.add_parser("migrate", help="Copy local data to SQLite Cloud")

    seed_parser = subparsers.add_parser("seed", help="Add sample portfolio content")
    seed_parser.add_argument(
        "--local", action="store_true", help="Seed the local file instead of SQLite Cloud"
    )

    return parser


async def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    setup_logging(args.log_level)

    if args.command == "serve":
        from .commands.api import run_api_server

        return await run_api_server(
            host=args.host or Settings.PORTFOLIO_API_HOST,
            port=args.port or Settings.PORTFOLIO_API_PORT,
            reload=args.reload,
            log_level=(args.log_level or Settings.LOG_LEVEL).lower(),
        )

    from .commands import database

    if args.command == "status":
        return await database.show_status()
    if args.command == "schema":
        return await database.create_schema(remote=args.remote)
    if args.command == "migrate":
        return await database.migrate_to_cloud()
    if args.command == "seed":
        return await database.seed_database(local=args.local)

    parser.print_help()
    return 1


def app() -> None:
    """Entry point for the CLI application."""
    try:
        exit_code = asyncio.run(main())
        sys.exit(exit_code)
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        print(f"❌ Unexpected error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    app()
