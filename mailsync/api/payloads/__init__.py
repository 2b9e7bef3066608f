"""
API payloads package for Pydantic response/request models.
"""

from .accounts import (
    AccountCreateRequest,
    AccountListResponse,
    AccountResponse,
    AccountUpdateRequest,
)
from .error import APIError
from .messages import (
    AckResponse,
    AccountSyncResult,
    DeleteMessageRequest,
    MarkReadRequest,
    Message,
    MessageAttachment,
    MessageListResponse,
    MessageReply,
    Pagination,
    ReplyRequest,
    SyncResponse,
)

__all__ = [
    "APIError",
    "AccountCreateRequest",
    "AccountListResponse",
    "AccountResponse",
    "AccountSyncResult",
    "AccountUpdateRequest",
    "AckResponse",
    "DeleteMessageRequest",
    "MarkReadRequest",
    "Message",
    "MessageAttachment",
    "MessageListResponse",
    "MessageReply",
    "Pagination",
    "ReplyRequest",
    "SyncResponse",
]
