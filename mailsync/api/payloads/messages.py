"""
Pydantic models for the email endpoints.

The same models are used by the server to render responses and by the
client to validate them, so field aliases follow the wire format.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from mailsync.constants.emails import Mailbox


class MessageAttachment(BaseModel):
    """Attachment descriptor; ``part`` is the IMAP body section holding the content."""

    model_config = ConfigDict(populate_by_name=True)

    part: str
    filename: str
    mime_type: str = Field(alias="mimeType")
    size: int


class MessageReply(BaseModel):
    """Reply sent from the account in answer to a message."""

    id: str
    body: str
    created_at: datetime


class Message(BaseModel):
    """Normalized message, independent of the folder it was read from."""

    model_config = ConfigDict(populate_by_name=True)

    uid: int
    mailbox: Mailbox
    from_: str = Field("", alias="from")
    subject: str | None = None
    date: datetime
    text: str = ""
    html: str = ""
    is_read: bool = False
    attachments: list[MessageAttachment] = Field(default_factory=list)
    replies: list[MessageReply] = Field(default_factory=list)


class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page: int = 1
    limit: int | None = None
    total: int | None = None
    has_more: bool = Field(False, alias="hasMore")


class MessageListResponse(BaseModel):
    """Response model for listing messages."""

    data: list[Message] = Field(default_factory=list)
    pagination: Pagination = Field(default_factory=Pagination)


class MailboxMessageRequest(BaseModel):
    """Identifies one message of an account; ``mailbox`` is a tag (inbox/sent) or a folder name."""

    email_account_id: str
    uid: int
    mailbox: str = Mailbox.inbox.value


class MarkReadRequest(MailboxMessageRequest):
    pass


class DeleteMessageRequest(MailboxMessageRequest):
    pass


class ReplyRequest(BaseModel):
    """Request model for replying to a message."""

    email_account_id: str
    message_uid: int
    to_email: str
    subject: str | None = None
    body: str
    in_reply_to: str | None = None
    references: str | None = None


class AckResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message_id: str | None = Field(None, alias="messageId")


class AccountSyncResult(BaseModel):
    email_account_id: str
    email: str
    count: int | None = None
    error: str | None = None


class SyncResponse(BaseModel):
    """Response model for synchronizing every sync-enabled account."""

    results: list[AccountSyncResult] = Field(default_factory=list)
