#!/usr/bin/env python3
"""Run Alembic migrations against the main service database (DATABASE_URL).

Usage:
    cd api
    python -m scripts.migrate upgrade
    python -m scripts.migrate upgrade --sql      # print SQL instead of running
    python -m scripts.migrate downgrade base
    python -m scripts.migrate current
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from alembic import command
from alembic.config import Config


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run Alembic migrations")
    sub = parser.add_subparsers(dest="cmd", required=True)

    upgrade = sub.add_parser("upgrade", help="Apply migrations")
    upgrade.add_argument("target", nargs="?", default="head")
    upgrade.add_argument(
        "--sql", action="store_true", help="Emit SQL without touching the database"
    )

    downgrade = sub.add_parser("downgrade", help="Revert migrations")
    downgrade.add_argument("target", nargs="?", default="-1")

    sub.add_parser("current", help="Show current revision")
    sub.add_parser("history", help="Show revision history")

    return parser.parse_args(argv)


def _get_alembic_config() -> Config:
    # Ensure we can import app modules regardless of cwd.
    api_dir = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(api_dir))

    cfg = Config(str(api_dir / "alembic.ini"))
    cfg.set_main_option("script_location", str(api_dir / "alembic"))
    return cfg


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    cfg = _get_alembic_config()

    match args.cmd:
        case "upgrade":
            command.upgrade(cfg, args.target, sql=args.sql)
        case "downgrade":
            command.downgrade(cfg, args.target)
        case "current":
            command.current(cfg)
        case "history":
            command.history(cfg)
        case _:
            raise ValueError(f"Unknown command: {args.cmd}")


if __name__ == "__main__":
    main()
