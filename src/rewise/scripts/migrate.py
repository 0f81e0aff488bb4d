# src/rewise/scripts/migrate.py
"""Apply Alembic migrations to the configured database."""
from __future__ import annotations

import argparse
import os

from alembic import command
from alembic.config import Config

from rewise.core.settings import settings

MIGRATIONS_DIR = os.path.abspath(
    os.path.join(os.path.dirname(__file__), "..", "..", "..", "migrations")
)


def build_config(database_url: str | None = None) -> Config:
    """Return an Alembic config pointing at the project's migrations folder."""
    cfg = Config()
    cfg.set_main_option("script_location", MIGRATIONS_DIR)
    cfg.set_main_option("sqlalchemy.url", database_url or settings.database_url_sync)
    return cfg


def run_upgrade_head(database_url: str | None = None) -> None:
    command.upgrade(build_config(database_url), "head")


def run_downgrade_base(database_url: str | None = None) -> None:
    command.downgrade(build_config(database_url), "base")


def main() -> None:
    parser = argparse.ArgumentParser(description="Migrate the configured database")
    parser.add_argument(
        "--url",
        default=None,
        help="Override database URL (defaults to DATABASE_URL)",
    )
    parser.add_argument(
        "--downgrade",
        action="store_true",
        help="Revert every migration instead of upgrading to head.",
    )
    args = parser.parse_args()
    if args.downgrade:
        run_downgrade_base(args.url)
    else:
        run_upgrade_head(args.url)


if __name__ == "__main__":
    main()
