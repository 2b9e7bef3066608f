from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.schema import UniqueConstraint

from .base import Base, TimestampMixin, WithUUID


class EmailAccount(Base, WithUUID, TimestampMixin):
    """Connection profile of a monitored mailbox."""

    __tablename__ = "email_accounts"

    email: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    password: Mapped[str] = mapped_column(sa.Text(), nullable=False, comment="Encrypted password")
    imap_host: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    imap_port: Mapped[int] = mapped_column(sa.Integer(), nullable=False, default=993)
    imap_secure: Mapped[bool] = mapped_column(sa.Boolean(), nullable=False, default=True)
    smtp_host: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    smtp_port: Mapped[int] = mapped_column(sa.Integer(), nullable=False, default=465)
    smtp_secure: Mapped[bool] = mapped_column(sa.Boolean(), nullable=False, default=True)
    provider: Mapped[str] = mapped_column(sa.String(50), nullable=False, default="imap")
    sync_enabled: Mapped[bool] = mapped_column(sa.Boolean(), nullable=False, default=True, index=True)
    last_sync_at: Mapped[datetime | None] = mapped_column(sa.DateTime(timezone=True), nullable=True)

    __table_args__ = (UniqueConstraint("email", name="uq_email_account_email"),)

    def __repr__(self) -> str:
        return f"<EmailAccount(email='{self.email}', provider='{self.provider}')>"
