import logging
from datetime import datetime, timezone

from mailsync.api.payloads.messages import (
    AccountSyncResult,
    AckResponse,
    Message,
    MessageAttachment,
    MessageListResponse,
    Pagination,
    ReplyRequest,
    SyncResponse,
)
from mailsync.constants.emails import Mailbox
from mailsync.controllers.email.message import AttachmentData
from mailsync.controllers.imap.mailbox_fetcher import MailboxFetcher
from mailsync.controllers.smtp.smtp_controller import SMTPController
from mailsync.exceptions import BaseError
from mailsync.models import EmailReply
from mailsync.repos import EmailAccountRepo, EmailReplyRepo


class EmailController:
    """Controller for email operations."""

    def __init__(
        self,
        account_repo: EmailAccountRepo,
        reply_repo: EmailReplyRepo,
        mailbox_fetcher: MailboxFetcher,
        smtp_controller: SMTPController,
    ):
        self._logger = logging.getLogger(__name__)
        self._account_repo = account_repo
        self._reply_repo = reply_repo
        self._mailbox_fetcher = mailbox_fetcher
        self._smtp_controller = smtp_controller

    async def list_messages(self, account_id: str, page: int, limit: int, search: str | None = None) -> MessageListResponse:
        """
        Fetch the account's mailbox and return one page of it.

        The full mailbox is fetched on every call; search and paging are applied
        to the merged, newest-first list.
        """
        account = await self._mailbox_fetcher.get_account(account_id)
        messages = await self._mailbox_fetcher.fetch_account_messages(account)
        await self._account_repo.mark_synced(account, datetime.now(timezone.utc))

        if search:
            messages = self.filter_messages(messages, search)

        total = len(messages)
        start = (page - 1) * limit
        return MessageListResponse(
            data=messages[start : start + limit],
            pagination=Pagination(page=page, limit=limit, total=total, has_more=start + limit < total),
        )

    @staticmethod
    def filter_messages(messages: list[Message], search: str) -> list[Message]:
        """Case-insensitive substring match on sender, subject and plain text body."""
        needle = search.strip().lower()
        if not needle:
            return messages
        return [
            message
            for message in messages
            if needle in message.from_.lower()
            or needle in (message.subject or "").lower()
            or needle in message.text.lower()
        ]

    async def mark_read(self, account_id: str, mailbox: str, uid: int) -> AckResponse:
        await self._mailbox_fetcher.mark_as_read(account_id, mailbox, uid)
        return AckResponse(success=True)

    async def delete(self, account_id: str, mailbox: str, uid: int) -> AckResponse:
        await self._mailbox_fetcher.delete_message(account_id, mailbox, uid)
        return AckResponse(success=True)

    async def get_attachment(self, account_id: str, mailbox: str, uid: int, part: str) -> tuple[MessageAttachment, bytes]:
        return await self._mailbox_fetcher.get_attachment(account_id, mailbox, uid, part)

    async def reply(self, request: ReplyRequest) -> AckResponse:
        """Send a reply to an INBOX message and keep a record of it."""
        account = await self._mailbox_fetcher.get_account(request.email_account_id)

        in_reply_to, references = request.in_reply_to, request.references
        if not in_reply_to:
            try:
                in_reply_to, original_references = await self._mailbox_fetcher.get_message_headers(
                    request.email_account_id, Mailbox.inbox.value, request.message_uid
                )
                references = references or original_references
            except BaseError as e:
                # Threading headers are optional; the reply is still sent.
                self._logger.warning(f"Could not read threading headers of message {request.message_uid}: {e}")

        result = await self._smtp_controller.send_email(
            account,
            to=request.to_email,
            subject=request.subject,
            body=request.body,
            in_reply_to=in_reply_to,
            references=references,
        )

        await self._reply_repo.add(
            EmailReply(
                email_account_id=account.id,
                message_uid=request.message_uid,
                to_email=request.to_email,
                subject=request.subject,
                body=request.body,
            )
        )
        self._logger.info(f"Reply to message {request.message_uid} sent from {account.email}: {result.message_id}")
        return AckResponse(success=True, message_id=result.message_id)

    async def send(
        self,
        account_id: str,
        to_email: str,
        subject: str | None,
        body: str,
        attachments: list[AttachmentData] | None = None,
    ) -> AckResponse:
        account = await self._mailbox_fetcher.get_account(account_id)
        result = await self._smtp_controller.send_email(
            account, to=to_email, subject=subject, body=body, attachments=attachments
        )
        return AckResponse(success=True, message_id=result.message_id)

    async def sync_all(self) -> SyncResponse:
        """Fetch every sync-enabled account once; one account failing does not stop the others."""
        results = []
        for account in await self._account_repo.get_all_sync_enabled():
            try:
                messages = await self._mailbox_fetcher.fetch_account_messages(account)
                await self._account_repo.mark_synced(account, datetime.now(timezone.utc))
                results.append(AccountSyncResult(email_account_id=str(account.uuid), email=account.email, count=len(messages)))
            except Exception as e:
                self._logger.exception(f"Failed to sync {account.email}")
                error = e.message if isinstance(e, BaseError) else str(e)
                results.append(AccountSyncResult(email_account_id=str(account.uuid), email=account.email, error=error))

        return SyncResponse(results=results)
