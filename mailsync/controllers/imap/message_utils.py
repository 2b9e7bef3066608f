import email
import logging
from collections.abc import Iterator
from datetime import datetime, timezone
from email.header import decode_header, make_header
from email.message import Message as PythonEmailMessage
from email.utils import parsedate_to_datetime

from mailsync.api.payloads.messages import Message, MessageAttachment
from mailsync.constants.emails import HEADER_MESSAGE_ID, HEADER_REFERENCES, Mailbox
from mailsync.controllers.imap.models import FetchedMessage
from mailsync.controllers.imap.session import is_seen

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class MessageUtils:
    """Utility class for converting raw IMAP messages to the normalized Message format."""

    @staticmethod
    def parse(raw: bytes) -> PythonEmailMessage:
        return email.message_from_bytes(raw)

    @staticmethod
    def convert_to_message(fetched: FetchedMessage, mailbox: Mailbox) -> Message:
        """
        Convert a fetched message into a normalized Message.

        Messages read from the Sent folder are always reported as read.
        """
        msg = MessageUtils.parse(fetched.raw)
        text, html = MessageUtils._extract_bodies(msg)

        return Message(
            uid=fetched.uid,
            mailbox=mailbox,
            from_=MessageUtils._decode_header(msg.get("From")) or "",
            subject=MessageUtils._decode_header(msg.get("Subject")),
            date=MessageUtils.resolve_date(msg.get("Date"), fetched.internal_date),
            text=text,
            html=html,
            is_read=True if mailbox == Mailbox.sent else is_seen(fetched.flags),
            attachments=MessageUtils._extract_attachments(msg),
        )

    @staticmethod
    def resolve_date(date_header: str | None, internal_date: datetime | None) -> datetime:
        """Date header, then INTERNALDATE, then the Unix epoch. Naive values are taken as UTC."""
        resolved = None
        if date_header:
            try:
                resolved = parsedate_to_datetime(str(date_header))
            except (TypeError, ValueError, IndexError):
                logger.debug(f"Unparseable Date header: {date_header}")
        if resolved is None:
            resolved = internal_date or EPOCH
        if resolved.tzinfo is None:
            resolved = resolved.replace(tzinfo=timezone.utc)
        return resolved

    @staticmethod
    def get_threading_headers(raw: bytes) -> tuple[str | None, str | None]:
        """Return the Message-ID and References headers of a raw message."""
        msg = MessageUtils.parse(raw)
        message_id = msg.get(HEADER_MESSAGE_ID)
        references = msg.get(HEADER_REFERENCES)
        return (
            str(message_id).strip() if message_id else None,
            " ".join(str(references).split()) if references else None,
        )

    @staticmethod
    def iter_parts(msg: PythonEmailMessage, section: str = "") -> Iterator[tuple[str, PythonEmailMessage]]:
        """
        Yield leaf parts with their IMAP body section number.

        A non-multipart message has a single section "1". Encapsulated messages
        (message/rfc822) are yielded as leaves.
        """
        if msg.is_multipart() and msg.get_content_type() != "message/rfc822":
            for index, part in enumerate(msg.get_payload(), start=1):
                yield from MessageUtils.iter_parts(part, f"{section}.{index}" if section else str(index))
        else:
            yield section or "1", msg

    @staticmethod
    def get_part(raw: bytes, part: str) -> tuple[MessageAttachment, bytes] | None:
        """Find a body section by number and return its descriptor and decoded content."""
        msg = MessageUtils.parse(raw)
        for section, leaf in MessageUtils.iter_parts(msg):
            if section == part:
                content = MessageUtils._part_bytes(leaf)
                descriptor = MessageAttachment(
                    part=section,
                    filename=MessageUtils._decode_header(leaf.get_filename()) or f"part-{section}",
                    mime_type=leaf.get_content_type(),
                    size=len(content),
                )
                return descriptor, content
        return None

    @staticmethod
    def _is_attachment(part: PythonEmailMessage) -> bool:
        if part.get_content_disposition() == "attachment":
            return True
        return bool(part.get_filename())

    @staticmethod
    def _extract_bodies(msg: PythonEmailMessage) -> tuple[str, str]:
        """First text/plain and first text/html parts that are not attachments."""
        text = ""
        html = ""
        for _, part in MessageUtils.iter_parts(msg):
            if MessageUtils._is_attachment(part):
                continue
            content_type = part.get_content_type()
            if content_type == "text/plain" and not text:
                text = MessageUtils._decode_text(part)
            elif content_type == "text/html" and not html:
                html = MessageUtils._decode_text(part)
        return text.strip(), html.strip()

    @staticmethod
    def _extract_attachments(msg: PythonEmailMessage) -> list[MessageAttachment]:
        attachments = []
        for section, part in MessageUtils.iter_parts(msg):
            if not MessageUtils._is_attachment(part):
                continue
            attachments.append(
                MessageAttachment(
                    part=section,
                    filename=MessageUtils._decode_header(part.get_filename()) or f"part-{section}",
                    mime_type=part.get_content_type(),
                    size=len(MessageUtils._part_bytes(part)),
                )
            )
        return attachments

    @staticmethod
    def _part_bytes(part: PythonEmailMessage) -> bytes:
        if part.get_content_type() == "message/rfc822":
            inner = part.get_payload()
            return inner[0].as_bytes() if isinstance(inner, list) and inner else b""
        payload = part.get_payload(decode=True)
        return payload if isinstance(payload, bytes) else b""

    @staticmethod
    def _decode_text(part: PythonEmailMessage) -> str:
        payload = MessageUtils._part_bytes(part)
        charset = part.get_content_charset() or "utf-8"
        try:
            return payload.decode(charset)
        except (UnicodeDecodeError, LookupError):
            return payload.decode("utf-8", errors="ignore")

    @staticmethod
    def _decode_header(value: str | None) -> str | None:
        """Decode RFC 2047 encoded words; malformed encodings are returned as-is."""
        if value is None:
            return None
        try:
            return str(make_header(decode_header(str(value))))
        except (UnicodeDecodeError, LookupError, ValueError):
            return str(value)
