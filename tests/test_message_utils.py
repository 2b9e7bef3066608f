from datetime import datetime, timedelta, timezone

from mailsync.constants.emails import Mailbox
from mailsync.controllers.imap.message_utils import EPOCH, MessageUtils
from mailsync.controllers.imap.models import FetchedMessage
from tests.factories import build_raw_email


def test_convert_extracts_fields():
    date = datetime(2024, 1, 3, 9, 30, tzinfo=timezone.utc)
    raw = build_raw_email(
        subject="=?utf-8?q?Caf=C3=A9?=",
        date=date,
        sender="Bob Smith <bob@example.com>",
        text="Hi there",
        html="<p>Hi there</p>",
    )

    message = MessageUtils.convert_to_message(FetchedMessage(uid=5, raw=raw, flags=frozenset({"\\Seen"})), Mailbox.inbox)

    assert message.uid == 5
    assert message.mailbox == Mailbox.inbox
    assert message.subject == "Café"
    assert message.from_ == "Bob Smith <bob@example.com>"
    assert message.date == date
    assert message.text == "Hi there"
    assert message.html == "<p>Hi there</p>"
    assert message.is_read is True
    assert message.attachments == []


def test_sent_messages_are_always_read():
    message = MessageUtils.convert_to_message(FetchedMessage(uid=1, raw=build_raw_email()), Mailbox.sent)

    assert message.is_read is True


def test_inbox_message_without_seen_flag_is_unread():
    fetched = FetchedMessage(uid=1, raw=build_raw_email(), flags=frozenset({"\\Flagged"}))

    assert MessageUtils.convert_to_message(fetched, Mailbox.inbox).is_read is False


def test_missing_subject_is_none():
    message = MessageUtils.convert_to_message(FetchedMessage(uid=1, raw=build_raw_email(subject=None)), Mailbox.inbox)

    assert message.subject is None


def test_attachments_carry_section_numbers():
    raw = build_raw_email(
        text="See attached",
        attachments=[("report.pdf", "application/pdf", b"%PDF-1.4 data"), ("notes.txt", "text/plain", b"abc")],
    )

    message = MessageUtils.convert_to_message(FetchedMessage(uid=1, raw=raw), Mailbox.inbox)

    assert message.text == "See attached"
    assert [(item.part, item.filename, item.mime_type, item.size) for item in message.attachments] == [
        ("2", "report.pdf", "application/pdf", len(b"%PDF-1.4 data")),
        ("3", "notes.txt", "text/plain", 3),
    ]


def test_get_part_returns_decoded_content():
    raw = build_raw_email(attachments=[("image.png", "image/png", b"\x89PNG\r\n")])

    found = MessageUtils.get_part(raw, "2")

    assert found is not None
    descriptor, content = found
    assert descriptor.filename == "image.png"
    assert content == b"\x89PNG\r\n"
    assert MessageUtils.get_part(raw, "9") is None


def test_single_part_message_is_section_one():
    raw = build_raw_email(text="only text")

    [(section, part)] = list(MessageUtils.iter_parts(MessageUtils.parse(raw)))

    assert section == "1"
    assert part.get_content_type() == "text/plain"


class TestResolveDate:
    def test_prefers_date_header(self):
        internal = datetime(2020, 1, 1, tzinfo=timezone.utc)

        resolved = MessageUtils.resolve_date("Wed, 03 Jan 2024 10:00:00 +0100", internal)

        assert resolved == datetime(2024, 1, 3, 9, 0, tzinfo=timezone.utc)

    def test_falls_back_to_internal_date(self):
        internal = datetime(2020, 1, 1, tzinfo=timezone(timedelta(hours=2)))

        assert MessageUtils.resolve_date("garbage", internal) == internal

    def test_falls_back_to_epoch(self):
        assert MessageUtils.resolve_date(None, None) == EPOCH

    def test_naive_header_is_treated_as_utc(self):
        resolved = MessageUtils.resolve_date("Wed, 03 Jan 2024 10:00:00 -0000", None)

        assert resolved.tzinfo is not None
        assert resolved == datetime(2024, 1, 3, 10, 0, tzinfo=timezone.utc)


def test_threading_headers():
    raw = b"Message-ID: <abc@example.com>\r\nReferences: <one@example.com>\r\n <two@example.com>\r\nSubject: x\r\n\r\nbody"

    message_id, references = MessageUtils.get_threading_headers(raw)

    assert message_id == "<abc@example.com>"
    assert references == "<one@example.com> <two@example.com>"
