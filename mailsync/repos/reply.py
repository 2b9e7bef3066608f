from collections import defaultdict

from mailsync.models.reply import EmailReply
from mailsync.repos.base import BaseRepo


class EmailReplyRepo(BaseRepo[EmailReply]):
    """Repository for EmailReply model operations."""

    def __init__(self) -> None:
        super().__init__(EmailReply)

    async def get_grouped_by_message_uid(self, email_account_id: int) -> dict[int, list[EmailReply]]:
        """Get the replies of an account grouped by the UID of the message they answer, oldest first."""
        result = await self.execute(
            self.base_stmt.where(EmailReply.email_account_id == email_account_id).order_by(
                EmailReply.created_at.asc(), EmailReply.id.asc()
            )
        )

        grouped: dict[int, list[EmailReply]] = defaultdict(list)
        for reply in result:
            grouped[reply.message_uid].append(reply)
        return dict(grouped)
