#!/usr/bin/env python3
"""
Run Alembic against the mailsync schema (email_accounts, email_replies).

Usage:
    python migrate.py upgrade head              # Create or update the tables
    python migrate.py current                   # Show the applied revision
    python migrate.py downgrade -1              # Roll back one revision
    python migrate.py revision -m "Add column"  # New revision, autogenerated from mailsync.models
    python migrate.py history                   # List revisions

DATABASE_HOST and DATABASE_NAME are read from the environment or .env.
"""

import sys
from pathlib import Path

from alembic.config import main as alembic_main
from dotenv import load_dotenv

load_dotenv(override=True)

CONFIG_PATH = Path(__file__).parent / "migrations" / "alembic.ini"


def build_argv(args: list[str]) -> list[str]:
    # New revisions are always diffed against the models.
    if args and args[0] == "revision" and "--autogenerate" not in args:
        args = [args[0], "--autogenerate", *args[1:]]
    return ["-c", str(CONFIG_PATH), *args]


def main() -> None:
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)

    try:
        alembic_main(argv=build_argv(sys.argv[1:]), prog="migrate.py")
    except KeyboardInterrupt:
        print("\nMigration cancelled")
        sys.exit(1)


if __name__ == "__main__":
    main()
