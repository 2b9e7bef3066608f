import enum
from dataclasses import dataclass, field
from datetime import datetime

from mailsync.api.payloads.messages import Message, MessageAttachment
from mailsync.constants.emails import Mailbox


@dataclass
class EmailReply:
    id: str
    body: str
    created_at: datetime


@dataclass
class EmailMessage:
    """Client-side view of a message; mutated in place by optimistic updates."""

    id: str
    uid: int
    mailbox: Mailbox
    account_id: str
    subject: str | None
    from_email: str
    body_text: str
    body_html: str
    date_received: datetime
    is_read: bool
    attachments: list[MessageAttachment] = field(default_factory=list)
    replies: list[EmailReply] = field(default_factory=list)

    @staticmethod
    def make_id(account_id: str, mailbox: Mailbox, uid: int) -> str:
        # UIDs are only unique within one folder.
        return f"{account_id}:{mailbox.value}:{uid}"

    @classmethod
    def from_payload(cls, account_id: str, message: Message) -> "EmailMessage":
        return cls(
            id=cls.make_id(account_id, message.mailbox, message.uid),
            uid=message.uid,
            mailbox=message.mailbox,
            account_id=account_id,
            subject=message.subject,
            from_email=message.from_,
            body_text=message.text,
            body_html=message.html,
            date_received=message.date,
            is_read=message.is_read,
            attachments=list(message.attachments),
            replies=[EmailReply(id=reply.id, body=reply.body, created_at=reply.created_at) for reply in message.replies],
        )


@dataclass
class PaginationState:
    page: int = 1
    has_more: bool = False


class NotificationVariant(str, enum.Enum):
    default = "default"
    destructive = "destructive"


@dataclass(frozen=True)
class Notification:
    title: str
    description: str | None = None
    variant: NotificationVariant = NotificationVariant.default
