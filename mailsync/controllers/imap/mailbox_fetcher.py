"""
Reads an account's INBOX and Sent folders over IMAP and returns one
normalized, newest-first message list.

Every public operation opens its own authenticated session and logs out on
every exit path.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from mailsync.api.payloads.messages import Message, MessageAttachment, MessageReply
from mailsync.constants.emails import FLAG_DELETED, FLAG_SEEN, INBOX_FOLDER, Mailbox
from mailsync.controllers.imap.connection import ConnectionManager
from mailsync.controllers.imap.folder_utils import FolderUtils
from mailsync.controllers.imap.message_utils import MessageUtils
from mailsync.controllers.imap.models import FetchedMessage
from mailsync.controllers.imap.session import ImapSession
from mailsync.exceptions import AccountNotFoundError, EntityNotFoundError, MailboxConnectionError
from mailsync.models import EmailAccount
from mailsync.repos import EmailAccountRepo, EmailReplyRepo


class MailboxFetcher:
    def __init__(
        self,
        account_repo: EmailAccountRepo,
        reply_repo: EmailReplyRepo,
        connection_manager: ConnectionManager,
    ) -> None:
        self._logger = logging.getLogger(__name__)
        self._account_repo = account_repo
        self._reply_repo = reply_repo
        self._connection_manager = connection_manager

    async def get_account(self, account_id: str) -> EmailAccount:
        account = await self._account_repo.get_by_uuid(account_id)
        if not account:
            raise AccountNotFoundError(account_id)
        return account

    async def fetch_messages(self, account_id: str) -> list[Message]:
        """
        Fetch every message of the account's INBOX and Sent folders.

        Args:
            account_id: Public identifier of the account

        Returns:
            Messages of both folders sorted by date, newest first

        Raises:
            AccountNotFoundError: Unknown account, raised before any network I/O
            AccountConfigurationError: Incomplete account, raised before any network I/O
            MailboxConnectionError: Connection, login or INBOX failure
        """
        return await self.fetch_account_messages(await self.get_account(account_id))

    async def fetch_account_messages(self, account: EmailAccount) -> list[Message]:
        """Same as fetch_messages for an already resolved account."""
        ConnectionManager.validate_account(account)

        async with self._session(account) as session:
            inbox = await self._read_inbox(session, account)
            sent = await self._read_sent(session, account)

        replies = await self._reply_repo.get_grouped_by_message_uid(account.id)
        for message in inbox:
            message.replies = [
                MessageReply(id=str(reply.uuid), body=reply.body, created_at=reply.created_at)
                for reply in replies.get(message.uid, [])
            ]

        messages = inbox + sent
        # sorted() is stable, so equal dates keep INBOX-then-Sent server order.
        messages = sorted(messages, key=lambda message: message.date, reverse=True)
        self._logger.info(f"Fetched {len(inbox)} inbox and {len(sent)} sent messages for {account.email}")
        return messages

    async def mark_as_read(self, account_id: str, mailbox: str, uid: int) -> None:
        account = await self.get_account(account_id)
        async with self._session(account) as session:
            await self._open(session, mailbox)
            await session.add_flags(uid, FLAG_SEEN)
        self._logger.info(f"Marked message {uid} in {mailbox} as read for {account.email}")

    async def delete_message(self, account_id: str, mailbox: str, uid: int) -> None:
        account = await self.get_account(account_id)
        async with self._session(account) as session:
            await self._open(session, mailbox)
            await session.add_flags(uid, FLAG_DELETED)
            await session.expunge()
        self._logger.info(f"Deleted message {uid} in {mailbox} for {account.email}")

    async def get_attachment(self, account_id: str, mailbox: str, uid: int, part: str) -> tuple[MessageAttachment, bytes]:
        """Return the descriptor and decoded content of one body section."""
        account = await self.get_account(account_id)
        async with self._session(account) as session:
            fetched = await self._fetch_one(session, mailbox, uid)

        found = MessageUtils.get_part(fetched.raw, part)
        if found is None:
            raise EntityNotFoundError(f"Attachment {part} not found", account_id=account_id, action="get_attachment")
        return found

    async def get_message_headers(self, account_id: str, mailbox: str, uid: int) -> tuple[str | None, str | None]:
        """Return the Message-ID and References headers of one message."""
        account = await self.get_account(account_id)
        async with self._session(account) as session:
            fetched = await self._fetch_one(session, mailbox, uid)
        return MessageUtils.get_threading_headers(fetched.raw)

    @asynccontextmanager
    async def _session(self, account: EmailAccount) -> AsyncIterator[ImapSession]:
        session = await self._connection_manager.open_session(account)
        try:
            yield session
        finally:
            await self._connection_manager.close_session(session, account)

    async def _open(self, session: ImapSession, mailbox: str) -> str:
        folder = await FolderUtils.open_mailbox(session, mailbox)
        if folder is None:
            raise EntityNotFoundError(f"Mailbox {mailbox} not found", action="select")
        return folder

    async def _fetch_one(self, session: ImapSession, mailbox: str, uid: int) -> FetchedMessage:
        await self._open(session, mailbox)
        fetched = await session.fetch_by_uid(uid)
        if fetched is None:
            raise EntityNotFoundError(f"Message {uid} not found in {mailbox}", action="fetch")
        return fetched

    async def _read_inbox(self, session: ImapSession, account: EmailAccount) -> list[Message]:
        # Failures here abort the whole fetch.
        exists = await session.select(INBOX_FOLDER)
        if exists is None:
            raise MailboxConnectionError(f"INBOX could not be opened for {account.email}", account_id=account.uuid)
        if exists == 0:
            return []
        return self._convert(await session.fetch_all(), Mailbox.inbox, account)

    async def _read_sent(self, session: ImapSession, account: EmailAccount) -> list[Message]:
        folder = await FolderUtils.open_sent_folder(session)
        if folder is None or session.exists == 0:
            return []

        try:
            fetched = await session.fetch_all()
        except Exception as e:
            self._logger.warning(f"Failed to fetch Sent folder {folder} for {account.email}: {e}")
            return []
        return self._convert(fetched, Mailbox.sent, account)

    def _convert(self, fetched: list[FetchedMessage], mailbox: Mailbox, account: EmailAccount) -> list[Message]:
        messages = []
        for item in fetched:
            try:
                messages.append(MessageUtils.convert_to_message(item, mailbox))
            except Exception:
                self._logger.exception(f"Skipping unparseable message {item.uid} in {mailbox.value} for {account.email}")
        return messages
