import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin, WithUUID


class EmailReply(Base, WithUUID, TimestampMixin):
    """Reply sent from an account, kept so it can be shown next to the original message."""

    __tablename__ = "email_replies"

    email_account_id: Mapped[int] = mapped_column(
        sa.ForeignKey("email_accounts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    message_uid: Mapped[int] = mapped_column(sa.BigInteger(), nullable=False)
    to_email: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    subject: Mapped[str | None] = mapped_column(sa.Text(), nullable=True)
    body: Mapped[str] = mapped_column(sa.Text(), nullable=False)
