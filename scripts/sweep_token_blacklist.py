#!/usr/bin/env python3
"""Token blacklist sweep for the Todo API.

Deletes blacklist entries whose token has expired on its own. The API server
already sweeps periodically while it runs; use this script from cron when the
server is stopped for long periods or runs with several workers.

Usage:
    python scripts/sweep_token_blacklist.py
    python scripts/sweep_token_blacklist.py --database-path /var/lib/todo/todo.db
"""

import argparse
import asyncio
import sys
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError

from todo_api.core.config import get_settings
from todo_api.core.database import Database
from todo_api.core.logging import setup_logging
from todo_api.services.token_blacklist import TokenBlacklistStore


async def _sweep(database_path: str) -> int:
    database = Database(f"sqlite+aiosqlite:///{database_path}")
    try:
        await database.create_all()
        return await TokenBlacklistStore(database).sweep()
    finally:
        await database.dispose()


def main():
    parser = argparse.ArgumentParser(description="Remove expired entries from the token blacklist")
    parser.add_argument(
        "--database-path",
        help="SQLite database file (default: from TODO_API_DATABASE_PATH env var)",
    )
    args = parser.parse_args()

    settings = get_settings()
    setup_logging(level=settings.log_level, format_type="dev")

    database_path = args.database_path or settings.database_path
    if not Path(database_path).exists():
        print(f"ERROR: Database file not found: {database_path}")
        sys.exit(1)

    try:
        removed = asyncio.run(_sweep(database_path))
    except SQLAlchemyError as e:
        print(f"ERROR: Sweep failed - {e}")
        sys.exit(1)

    print(f"Removed {removed} expired token blacklist entries.")


if __name__ == "__main__":
    main()
