"""
Adapter around an authenticated aioimaplib connection.

Everything above this module works with plain Python values: flags arrive
as ``frozenset[str]`` and messages as :class:`FetchedMessage`, whatever shape
the library or the server used on the wire.
"""

import asyncio
import logging
import re
from collections.abc import Awaitable, Iterable
from datetime import datetime
from typing import Any

from aioimaplib import IMAP4, IMAP4_SSL, Abort, CommandTimeout, Response

from mailsync.constants.emails import FLAG_SEEN
from mailsync.controllers.imap.folder_utils import FolderUtils
from mailsync.controllers.imap.models import FetchedMessage
from mailsync.exceptions import MailboxConnectionError

logger = logging.getLogger(__name__)

# PEEK keeps listing from setting \Seen as a side effect.
FETCH_ITEMS = "(UID FLAGS INTERNALDATE BODY.PEEK[])"

_FETCH_HEADER = re.compile(rb"^\d+ FETCH \(")
_UID = re.compile(rb"\bUID (\d+)")
_FLAGS = re.compile(rb"\bFLAGS \(([^)]*)\)")
_INTERNALDATE = re.compile(rb'\bINTERNALDATE "([^"]+)"')
_EXISTS = re.compile(rb"^(\d+) EXISTS")


def normalize_flags(flags: Any) -> frozenset[str]:
    """
    Convert any flag representation into a set of flag names.

    Accepts sets, lists, tuples, a space separated ``str``/``bytes`` (optionally
    wrapped in parentheses) or ``None``. Anything else yields an empty set.
    """
    if flags is None:
        return frozenset()
    if isinstance(flags, (bytes, bytearray)):
        flags = flags.decode("utf-8", errors="replace")
    if isinstance(flags, str):
        items: Iterable[Any] = flags.strip().strip("()").split()
    elif isinstance(flags, Iterable):
        items = flags
    else:
        return frozenset()

    normalized = set()
    for item in items:
        if isinstance(item, (bytes, bytearray)):
            item = item.decode("utf-8", errors="replace")
        if isinstance(item, str) and item.strip():
            normalized.add(item.strip())
    return frozenset(normalized)


def is_seen(flags: frozenset[str]) -> bool:
    # Flag names are case-insensitive per RFC 3501.
    return any(flag.lower() == FLAG_SEEN.lower() for flag in flags)


def parse_internal_date(value: bytes | str | None) -> datetime | None:
    """Parse an INTERNALDATE value such as ``17-Jul-1996 02:44:25 -0700``."""
    if not value:
        return None
    if isinstance(value, bytes):
        value = value.decode("ascii", errors="ignore")
    try:
        return datetime.strptime(value.strip(), "%d-%b-%Y %H:%M:%S %z")
    except ValueError:
        logger.debug(f"Unparseable INTERNALDATE: {value}")
        return None


def parse_fetch_response(lines: list[Any]) -> list[FetchedMessage]:
    """
    Parse messages from the lines of a FETCH response.

    aioimaplib yields, per message, a header line such as
    ``b'3 FETCH (UID 12 FLAGS (\\Seen) INTERNALDATE "..." BODY[] {1437}'``, the
    literal as a ``bytearray`` and a closing line that may carry the data items
    the server chose to send after the literal.
    """
    messages: list[FetchedMessage] = []
    i = 0
    while i < len(lines):
        line = lines[i]
        if not (isinstance(line, bytes) and _FETCH_HEADER.match(line)):
            i += 1
            continue

        meta = line
        raw: bytes | None = None
        i += 1
        if i < len(lines) and isinstance(lines[i], bytearray):
            raw = bytes(lines[i])
            i += 1
            if i < len(lines) and isinstance(lines[i], bytes) and not _FETCH_HEADER.match(lines[i]):
                meta += b" " + lines[i]
                i += 1

        uid_match = _UID.search(meta)
        if uid_match is None or raw is None:
            logger.warning(f"Skipping FETCH item without UID or body: {meta[:120]!r}")
            continue

        flags_match = _FLAGS.search(meta)
        date_match = _INTERNALDATE.search(meta)
        messages.append(
            FetchedMessage(
                uid=int(uid_match.group(1)),
                raw=raw,
                flags=normalize_flags(flags_match.group(1) if flags_match else None),
                internal_date=parse_internal_date(date_match.group(1) if date_match else None),
            )
        )

    return messages


def parse_exists(lines: list[Any]) -> int:
    """Number of messages reported by a SELECT response."""
    for line in lines:
        if isinstance(line, bytes):
            match = _EXISTS.match(line.strip())
            if match:
                return int(match.group(1))
    return 0


class ImapSession:
    """One authenticated IMAP session; not shared between operations."""

    def __init__(self, connection: IMAP4 | IMAP4_SSL, account_email: str) -> None:
        self._logger = logging.getLogger(__name__)
        self._connection = connection
        self._account_email = account_email
        self.selected_folder: str | None = None
        self.exists = 0

    async def select(self, folder: str) -> int | None:
        """
        Open a folder.

        Returns:
            The number of messages in the folder, or None if the server refused to open it
        """
        response = await self._call("SELECT", self._connection.select(FolderUtils.quote_mailbox(folder)))
        if response.result != "OK":
            self._logger.debug(f"SELECT {folder} refused for {self._account_email}: {response.result}")
            return None

        self.selected_folder = folder
        self.exists = parse_exists(response.lines)
        return self.exists

    async def fetch_all(self) -> list[FetchedMessage]:
        """Fetch every message of the selected folder."""
        response = await self._call("FETCH", self._connection.fetch("1:*", FETCH_ITEMS))
        self._check(response, "FETCH")
        return parse_fetch_response(response.lines)

    async def fetch_by_uid(self, uid: int) -> FetchedMessage | None:
        response = await self._call("UID FETCH", self._connection.uid("fetch", str(uid), FETCH_ITEMS))
        self._check(response, "UID FETCH")
        for message in parse_fetch_response(response.lines):
            if message.uid == uid:
                return message
        return None

    async def add_flags(self, uid: int, *flags: str) -> None:
        response = await self._call(
            "UID STORE", self._connection.uid("store", str(uid), "+FLAGS", f"({' '.join(flags)})")
        )
        self._check(response, "UID STORE")

    async def expunge(self) -> None:
        response = await self._call("EXPUNGE", self._connection.expunge())
        self._check(response, "EXPUNGE")

    async def append(self, message: bytes, folder: str, flags: str | None = None) -> None:
        response = await self._call(
            "APPEND", self._connection.append(message, mailbox=FolderUtils.quote_mailbox(folder), flags=flags)
        )
        self._check(response, "APPEND")

    async def logout(self) -> None:
        await self._connection.logout()

    def abort(self) -> None:
        """Drop the transport without a LOGOUT round trip."""
        transport = getattr(getattr(self._connection, "protocol", None), "transport", None)
        if transport is not None:
            transport.close()

    async def _call(self, command: str, request: Awaitable[Response]) -> Response:
        """Await one command; transport and protocol failures surface as MailboxConnectionError."""
        try:
            return await request
        except (asyncio.TimeoutError, CommandTimeout, Abort, OSError) as e:
            self._logger.warning(f"IMAP {command} failed for {self._account_email}: {e!r}")
            raise MailboxConnectionError(
                f"IMAP {command} failed for {self._account_email}", action=command
            ) from e

    def _check(self, response: Response, command: str) -> None:
        if response.result != "OK":
            raise MailboxConnectionError(
                f"IMAP {command} failed for {self._account_email}: {response.result}", action=command
            )
