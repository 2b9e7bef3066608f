import asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock

import pytest
from aioimaplib import Abort, Response

from mailsync.controllers.imap.session import (
    ImapSession,
    is_seen,
    normalize_flags,
    parse_exists,
    parse_fetch_response,
    parse_internal_date,
)
from mailsync.exceptions import MailboxConnectionError
from tests.factories import build_raw_email


class TestNormalizeFlags:
    @pytest.mark.parametrize(
        "flags, expected",
        [
            ({"\\Seen", "\\Answered"}, True),
            (["\\Seen"], True),
            (("\\Flagged",), False),
            ("(\\Seen \\Flagged)", True),
            (b"\\Seen", True),
            ([b"\\Seen"], True),
            (None, False),
            (42, False),
            ([], False),
        ],
    )
    def test_seen_detection_accepts_any_representation(self, flags, expected):
        assert is_seen(normalize_flags(flags)) is expected

    def test_returns_frozenset_of_names(self):
        assert normalize_flags("(\\Seen  $Label1)") == frozenset({"\\Seen", "$Label1"})

    def test_seen_is_case_insensitive(self):
        assert is_seen(frozenset({"\\seen"}))


class TestParseFetchResponse:
    def test_parses_messages_with_literal_bodies(self):
        raw_one = build_raw_email(subject="One")
        raw_two = build_raw_email(subject="Two")
        lines = [
            f'1 FETCH (UID 11 FLAGS (\\Seen) INTERNALDATE "03-Jan-2024 10:00:00 +0000" BODY[] {{{len(raw_one)}}}'.encode(),
            bytearray(raw_one),
            b")",
            f'2 FETCH (UID 12 FLAGS () INTERNALDATE " 4-Jan-2024 08:30:00 -0200" BODY[] {{{len(raw_two)}}}'.encode(),
            bytearray(raw_two),
            b")",
            b"FETCH completed.",
        ]

        messages = parse_fetch_response(lines)

        assert [message.uid for message in messages] == [11, 12]
        assert messages[0].raw == raw_one
        assert messages[0].flags == frozenset({"\\Seen"})
        assert messages[0].internal_date == datetime(2024, 1, 3, 10, 0, tzinfo=timezone.utc)
        assert messages[1].flags == frozenset()
        assert messages[1].internal_date is not None
        assert messages[1].internal_date.utcoffset().total_seconds() == -7200

    def test_reads_items_sent_after_the_literal(self):
        raw = build_raw_email()
        lines = [
            f"5 FETCH (UID 42 BODY[] {{{len(raw)}}}".encode(),
            bytearray(raw),
            b" FLAGS (\\Seen))",
            b"FETCH completed.",
        ]

        [message] = parse_fetch_response(lines)

        assert message.uid == 42
        assert is_seen(message.flags)
        assert message.internal_date is None

    def test_skips_items_without_uid_or_body(self):
        lines = [b"1 FETCH (FLAGS (\\Seen))", b"2 FETCH (UID 3 FLAGS ())", b"FETCH completed."]

        assert parse_fetch_response(lines) == []


def test_parse_exists_reads_select_response():
    lines = [b"FLAGS (\\Answered \\Seen)", b"3 EXISTS", b"0 RECENT", b"[READ-WRITE] SELECT completed."]

    assert parse_exists(lines) == 3
    assert parse_exists([b"SELECT completed."]) == 0


def test_parse_internal_date_rejects_garbage():
    assert parse_internal_date(b"not a date") is None
    assert parse_internal_date(None) is None


class TestImapSession:
    @pytest.fixture
    def connection(self):
        connection = Mock()
        connection.select = AsyncMock(return_value=Response("OK", [b"2 EXISTS", b"SELECT completed."]))
        connection.uid = AsyncMock(return_value=Response("OK", [b"UID completed."]))
        connection.expunge = AsyncMock(return_value=Response("OK", []))
        connection.append = AsyncMock(return_value=Response("OK", []))
        connection.logout = AsyncMock(return_value=Response("OK", []))
        return connection

    async def test_select_quotes_folder_and_returns_count(self, connection):
        session = ImapSession(connection, "team@example.com")

        assert await session.select("Sent Items") == 2

        connection.select.assert_awaited_once_with('"Sent Items"')
        assert session.selected_folder == "Sent Items"
        assert session.exists == 2

    async def test_select_refused_returns_none(self, connection):
        connection.select.return_value = Response("NO", [b"Mailbox does not exist"])
        session = ImapSession(connection, "team@example.com")

        assert await session.select("Sent") is None
        assert session.selected_folder is None

    async def test_add_flags_uses_uid_store(self, connection):
        session = ImapSession(connection, "team@example.com")

        await session.add_flags(7, "\\Seen")

        connection.uid.assert_awaited_once_with("store", "7", "+FLAGS", "(\\Seen)")

    async def test_failed_command_raises(self, connection):
        connection.expunge.return_value = Response("NO", [b"EXPUNGE failed"])
        session = ImapSession(connection, "team@example.com")

        with pytest.raises(MailboxConnectionError):
            await session.expunge()

    async def test_fetch_by_uid_returns_matching_message(self, connection):
        raw = build_raw_email()
        connection.uid.return_value = Response(
            "OK", [f"1 FETCH (UID 9 FLAGS () BODY[] {{{len(raw)}}}".encode(), bytearray(raw), b")", b"done"]
        )
        session = ImapSession(connection, "team@example.com")

        message = await session.fetch_by_uid(9)

        assert message is not None and message.raw == raw
        assert await session.fetch_by_uid(10) is None

    async def test_abort_closes_transport(self, connection):
        session = ImapSession(connection, "team@example.com")

        session.abort()

        connection.protocol.transport.close.assert_called_once()

    @pytest.mark.parametrize("error", [asyncio.TimeoutError(), Abort("connection lost"), ConnectionResetError()])
    async def test_transport_failure_raises_connection_error(self, connection, error):
        connection.uid.side_effect = error
        session = ImapSession(connection, "team@example.com")

        with pytest.raises(MailboxConnectionError) as raised:
            await session.fetch_by_uid(9)

        assert raised.value.__cause__ is error
