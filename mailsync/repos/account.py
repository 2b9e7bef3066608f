from datetime import datetime
from uuid import UUID

from sqlalchemy import ScalarResult

from mailsync.models.account import EmailAccount
from mailsync.repos.base import BaseRepo


class EmailAccountRepo(BaseRepo[EmailAccount]):
    """Repository for EmailAccount model operations."""

    def __init__(self) -> None:
        super().__init__(EmailAccount)

    async def get_by_uuid(self, uuid: UUID | str) -> EmailAccount | None:
        """Get account by its public identifier."""
        if isinstance(uuid, str):
            try:
                uuid = UUID(uuid)
            except ValueError:
                return None

        result = await self.execute(self.base_stmt.where(EmailAccount.uuid == uuid))
        return result.one_or_none()

    async def get_by_email(self, email: str) -> EmailAccount | None:
        """Get account by email address."""
        result = await self.execute(self.base_stmt.where(EmailAccount.email == email))
        return result.one_or_none()

    async def get_all(self) -> ScalarResult[EmailAccount]:
        """Get all accounts, newest first."""
        return await self.execute(self.base_stmt.order_by(EmailAccount.created_at.desc()))

    async def get_all_sync_enabled(self) -> ScalarResult[EmailAccount]:
        """Get the accounts that take part in bulk synchronization."""
        return await self.execute(
            self.base_stmt.where(EmailAccount.sync_enabled.is_(True)).order_by(EmailAccount.id)
        )

    async def mark_synced(self, account: EmailAccount, synced_at: datetime) -> EmailAccount:
        """Record the time of the last successful fetch."""
        return await self.update(account, {"last_sync_at": synced_at})
