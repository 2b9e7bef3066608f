"""
Pydantic models for account management endpoints.

Responses are built from the ORM model through ``AccountResponse.from_model``,
which never copies the stored password.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from mailsync.models.account import EmailAccount


class AccountFields(BaseModel):
    email: str
    imap_host: str
    imap_port: int = Field(993, ge=1, le=65535)
    imap_secure: bool = True
    smtp_host: str
    smtp_port: int = Field(465, ge=1, le=65535)
    smtp_secure: bool = True
    provider: str = "imap"
    sync_enabled: bool = True


class AccountCreateRequest(AccountFields):
    password: str = Field(..., min_length=1)


class AccountUpdateRequest(BaseModel):
    email: str | None = None
    password: str | None = Field(None, min_length=1)
    imap_host: str | None = None
    imap_port: int | None = Field(None, ge=1, le=65535)
    imap_secure: bool | None = None
    smtp_host: str | None = None
    smtp_port: int | None = Field(None, ge=1, le=65535)
    smtp_secure: bool | None = None
    provider: str | None = None
    sync_enabled: bool | None = None


class AccountResponse(AccountFields):
    id: UUID
    last_sync_at: datetime | None = None

    @classmethod
    def from_model(cls, account: EmailAccount) -> "AccountResponse":
        return cls(
            id=account.uuid,
            email=account.email,
            imap_host=account.imap_host,
            imap_port=account.imap_port,
            imap_secure=account.imap_secure,
            smtp_host=account.smtp_host,
            smtp_port=account.smtp_port,
            smtp_secure=account.smtp_secure,
            provider=account.provider,
            sync_enabled=account.sync_enabled,
            last_sync_at=account.last_sync_at,
        )


class AccountListResponse(BaseModel):
    data: list[AccountResponse]
