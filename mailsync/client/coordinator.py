"""
Client-side synchronization of one page of messages with the API.

The coordinator keeps a single page in view. Fetches are single-flight per
coordinator: starting a fetch cancels the previous one, and a request epoch
makes sure a response that arrives anyway is discarded. Mutations are applied
locally before the request and are not rolled back when it fails.
"""

import asyncio
import logging
import time
from collections.abc import Callable
from datetime import datetime, timezone

from mailsync.api.payloads.messages import MessageListResponse
from mailsync.client.api_client import MailboxApiClient
from mailsync.client.models import EmailMessage, EmailReply, Notification, NotificationVariant, PaginationState
from mailsync.constants.emails import Mailbox
from mailsync.controllers.email.message import AttachmentData
from mailsync.exceptions import BaseError
from settings import settings

logger = logging.getLogger(__name__)

Notifier = Callable[[Notification], None]


def log_notification(notification: Notification) -> None:
    level = logging.ERROR if notification.variant == NotificationVariant.destructive else logging.INFO
    logger.log(level, f"{notification.title}: {notification.description}")


class SyncCoordinator:
    def __init__(
        self,
        api_client: MailboxApiClient,
        notifier: Notifier | None = None,
        page_limit: int | None = None,
    ) -> None:
        self._logger = logging.getLogger(__name__)
        self._api_client = api_client
        self._notifier = notifier or log_notification
        self._page_limit = page_limit or settings.client.page_limit

        self.messages: list[EmailMessage] = []
        self.loading = False
        self.syncing = False

        self._pagination: dict[str, PaginationState] = {}
        self._request_epoch = 0
        self._inflight: asyncio.Task[MessageListResponse] | None = None

    @property
    def unread_count(self) -> int:
        return sum(1 for message in self.messages if not message.is_read)

    def pagination_for(self, account_id: str) -> PaginationState:
        """Last known pagination of an account, page 1 if it was never fetched."""
        state = self._pagination.get(account_id)
        return PaginationState(page=state.page, has_more=state.has_more) if state else PaginationState()

    async def sync_emails(self, account_id: str, page: int = 1, search: str = "") -> bool:
        """
        Replace the message list with one page of an account.

        Returns:
            True if this request's result was applied; False if it failed or was superseded
        """
        self._request_epoch += 1
        epoch = self._request_epoch

        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()

        task = asyncio.ensure_future(
            self._api_client.list_messages(account_id, page=page, limit=self._page_limit, search=search)
        )
        self._inflight = task
        self.loading = True
        self.syncing = True

        try:
            response = await task
        except asyncio.CancelledError:
            if epoch != self._request_epoch:
                return False
            raise
        except Exception as e:
            if epoch != self._request_epoch:
                return False
            self._logger.warning(f"Failed to fetch emails for {account_id}: {e}")
            description = e.message if isinstance(e, BaseError) else str(e)
            self._notify("Error", description or "Failed to fetch emails", NotificationVariant.destructive)
            return False
        finally:
            if epoch == self._request_epoch:
                self.loading = False
                self.syncing = False
                self._inflight = None

        # Cancellation is best effort; the response may still arrive.
        if epoch != self._request_epoch:
            self._logger.debug(f"Discarding stale response for {account_id} page {page}")
            return False

        messages = [EmailMessage.from_payload(account_id, message) for message in response.data]
        messages.sort(key=lambda message: message.date_received, reverse=True)
        self.messages = messages
        self._pagination[account_id] = PaginationState(page=page, has_more=response.pagination.has_more)
        return True

    async def mark_as_read(self, message: EmailMessage) -> bool:
        current = self._find(message.id) or message
        if current.is_read:
            return True

        current.is_read = True
        message.is_read = True
        try:
            await self._api_client.mark_read(message.account_id, message.mailbox, message.uid)
        except Exception as e:
            self._logger.warning(f"Failed to mark {message.id} as read: {e}")
            self._notify("Error", "Failed to mark email as read", NotificationVariant.destructive)
            return False
        return True

    async def delete_message(self, message: EmailMessage) -> bool:
        self.messages = [item for item in self.messages if item.id != message.id]

        try:
            await self._api_client.delete_message(message.account_id, message.mailbox, message.uid)
        except Exception as e:
            self._logger.warning(f"Failed to delete {message.id}: {e}")
            self._notify("Error", "Failed to delete email", NotificationVariant.destructive)
            return False

        self._notify("Deleted", "Email deleted successfully")
        return True

    async def bulk_delete(self, messages: list[EmailMessage]) -> bool:
        ids = {message.id for message in messages}
        self.messages = [item for item in self.messages if item.id not in ids]

        try:
            await asyncio.gather(
                *(self._api_client.delete_message(message.account_id, message.mailbox, message.uid) for message in messages)
            )
        except Exception as e:
            self._logger.warning(f"Failed to delete {len(messages)} messages: {e}")
            self._notify("Error", "Failed to delete selected emails", NotificationVariant.destructive)
            return False

        self._notify("Deleted", "Selected emails deleted successfully")
        return True

    async def send_reply(self, message: EmailMessage, body: str) -> bool:
        if message.mailbox != Mailbox.inbox:
            # Replies are threaded against INBOX UIDs on the server.
            self._logger.warning(f"Refusing to reply to {message.id}: not an INBOX message")
            self._notify("Error", "Only received emails can be replied to", NotificationVariant.destructive)
            return False

        try:
            await self._api_client.reply(
                message.account_id, message.uid, to_email=message.from_email, subject=message.subject, body=body
            )
        except Exception as e:
            self._logger.warning(f"Failed to reply to {message.id}: {e}")
            self._notify("Error", "Failed to send reply", NotificationVariant.destructive)
            return False

        self._notify("Sent", "Reply sent successfully")
        reply = EmailReply(id=f"temp-{int(time.time() * 1000)}", body=body, created_at=datetime.now(timezone.utc))
        target = self._find(message.id)
        if target is not None:
            target.replies.append(reply)
        if target is not message:
            message.replies.append(reply)
        return True

    async def send_email(
        self,
        account_id: str,
        to: str,
        subject: str,
        body: str,
        attachments: list[AttachmentData] | None = None,
    ) -> bool:
        try:
            await self._api_client.send_email(account_id, to, subject, body, attachments=attachments)
        except Exception as e:
            self._logger.warning(f"Failed to send email from {account_id}: {e}")
            self._notify("Error", "Failed to send email", NotificationVariant.destructive)
            return False

        self._notify("Sent", "Email sent successfully")
        return True

    def _find(self, message_id: str) -> EmailMessage | None:
        return next((message for message in self.messages if message.id == message_id), None)

    def _notify(self, title: str, description: str | None, variant: NotificationVariant = NotificationVariant.default) -> None:
        self._notifier(Notification(title=title, description=description, variant=variant))
