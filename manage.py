#!/usr/bin/env python3
"""
Mailbox synchronization management commands.

Usage:
    python manage.py list
    python manage.py add --email user@example.com --imap-host imap.example.com --smtp-host smtp.example.com
    python manage.py sync

Commands:
    - list: List configured email accounts
    - add: Add an email account (the password is prompted for and stored encrypted)
    - sync: Fetch every sync-enabled account once and print the message counts
"""

import argparse
import asyncio
import getpass
import logging
import sys

from dotenv import load_dotenv

load_dotenv(override=True)
from logging_config import setup_logging  # noqa: E402
from mailsync.api.payloads import AccountCreateRequest  # noqa: E402
from mailsync.container import ApplicationContainer  # noqa: E402
from mailsync.db import database_context  # noqa: E402
from mailsync.exceptions import BaseError  # noqa: E402

setup_logging()

logger = logging.getLogger(__name__)

container = ApplicationContainer()


async def list_accounts() -> None:
    """List all accounts in the database."""
    async with database_context():
        accounts = await container.controllers.account_controller().list_accounts()

        if not accounts:
            print("No accounts found in database.")
            return

        print(f"Found {len(accounts)} accounts:")
        print("-" * 80)
        for i, account in enumerate(accounts, 1):
            last_sync = account.last_sync_at.isoformat() if account.last_sync_at else "never"
            enabled = "enabled" if account.sync_enabled else "disabled"
            print(f"{i:2d}. {account.email:30} {account.imap_host:25} {enabled:9} {last_sync}  {account.uuid}")
        print("-" * 80)


async def add_account(args: argparse.Namespace) -> None:
    password = args.password or getpass.getpass(f"Password for {args.email}: ")
    request = AccountCreateRequest(
        email=args.email,
        password=password,
        imap_host=args.imap_host,
        imap_port=args.imap_port,
        imap_secure=not args.imap_insecure,
        smtp_host=args.smtp_host,
        smtp_port=args.smtp_port,
        smtp_secure=not args.smtp_insecure,
        provider=args.provider,
    )

    async with database_context():
        account = await container.controllers.account_controller().create_account(request)
        print(f"Added {account.email}: {account.uuid}")


async def sync_accounts() -> None:
    async with database_context():
        response = await container.controllers.email_controller().sync_all()

    for result in response.results:
        if result.error:
            print(f"{result.email:30} error: {result.error}")
        else:
            print(f"{result.email:30} {result.count} messages")


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Mailbox synchronization management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="List email accounts")
    subparsers.add_parser("sync", help="Synchronize all sync-enabled accounts once")

    add_parser = subparsers.add_parser("add", help="Add an email account")
    add_parser.add_argument("--email", required=True)
    add_parser.add_argument("--password", help="Prompted for when omitted")
    add_parser.add_argument("--imap-host", required=True)
    add_parser.add_argument("--imap-port", type=int, default=993)
    add_parser.add_argument("--imap-insecure", action="store_true", help="Connect without TLS")
    add_parser.add_argument("--smtp-host", required=True)
    add_parser.add_argument("--smtp-port", type=int, default=465)
    add_parser.add_argument("--smtp-insecure", action="store_true", help="Connect without implicit TLS")
    add_parser.add_argument("--provider", default="imap")

    args = parser.parse_args()

    try:
        if args.command == "list":
            asyncio.run(list_accounts())
        elif args.command == "add":
            asyncio.run(add_account(args))
        elif args.command == "sync":
            asyncio.run(sync_accounts())
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except BaseError as e:
        logger.error(f"Command failed; {e}")
        sys.exit(1)
    except Exception:
        logger.exception("Command failed")
        sys.exit(1)


if __name__ == "__main__":
    main()
