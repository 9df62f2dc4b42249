#!/usr/bin/env python3
"""CLI for Explore With Me management tasks.

Usage:
    python -m cli <command>

Commands:
    migrate        Run database migrations for the main service
    create-stats   Create the statistics service tables
"""

import argparse
import asyncio
import logging
import sys

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def cmd_migrate() -> int:
    """Run database migrations."""
    from alembic import command
    from scripts.migrate import _get_alembic_config

    logger.info("Running database migrations...")
    cfg = _get_alembic_config()
    command.upgrade(cfg, "head")
    logger.info("Migrations complete")
    return 0


def cmd_create_stats() -> int:
    """Create the stats tables (the stats service also does this at startup)."""
    from core.database import create_engine, dispose_engine
    from stats.config import get_stats_settings
    from stats.models import create_tables

    async def _run() -> None:
        engine = create_engine(get_stats_settings())
        try:
            await create_tables(engine)
        finally:
            await dispose_engine(engine)

    logger.info("Creating stats tables...")
    asyncio.run(_run())
    logger.info("Stats tables ready")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Explore With Me CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("migrate", help="Run database migrations")
    subparsers.add_parser("create-stats", help="Create the stats service tables")

    args = parser.parse_args()

    if args.command == "migrate":
        return cmd_migrate()
    elif args.command == "create-stats":
        return cmd_create_stats()
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
