import asyncio
import logging

from aioimaplib import IMAP4, IMAP4_SSL

from mailsync.controllers.imap.session import ImapSession
from mailsync.exceptions import AccountConfigurationError, MailboxConnectionError
from mailsync.models import EmailAccount
from mailsync.utils.password import PasswordUtils
from settings import settings


class ConnectionManager:
    """Opens one authenticated IMAP session per operation; sessions are never pooled."""

    def __init__(self, timeout: int | None = None, logout_timeout: int | None = None) -> None:
        self._logger = logging.getLogger(__name__)
        self._timeout = timeout if timeout is not None else settings.imap.timeout
        self._logout_timeout = logout_timeout if logout_timeout is not None else settings.imap.logout_timeout

    @staticmethod
    def validate_account(account: EmailAccount) -> None:
        missing = [name for name in ("email", "password", "imap_host", "imap_port") if not getattr(account, name)]
        if missing:
            raise AccountConfigurationError(
                f"Email account is missing {', '.join(missing)}", account_id=account.uuid, action="imap_connect"
            )

    async def open_session(self, account: EmailAccount) -> ImapSession:
        """Connect and authenticate; raises before any network I/O if the account is incomplete."""
        self.validate_account(account)
        password = PasswordUtils.decrypt_password(account.password)
        imap_class = IMAP4_SSL if account.imap_secure else IMAP4

        try:
            connection = imap_class(host=account.imap_host, port=account.imap_port, timeout=self._timeout)
        except Exception as e:
            self._logger.error(f"Failed to create IMAP connection for {account.email}: {e}")
            raise MailboxConnectionError(
                f"Could not connect to {account.imap_host}", account_id=account.uuid, action="imap_connect"
            ) from e

        session = ImapSession(connection, account.email)
        try:
            await connection.wait_hello_from_server()
            response = await connection.login(account.email, password)
        except Exception as e:
            self._logger.error(f"Failed to open IMAP session for {account.email}: {e}")
            session.abort()
            raise MailboxConnectionError(
                f"Could not connect to {account.imap_host}", account_id=account.uuid, action="imap_connect"
            ) from e

        if response.result != "OK":
            self._logger.warning(f"Failed to login to {account.imap_host} for {account.email}: {response.result}")
            session.abort()
            raise MailboxConnectionError(
                f"IMAP login rejected for {account.email}", account_id=account.uuid, action="imap_login"
            )

        self._logger.debug(f"Created new IMAP connection for {account.email}")
        return session

    async def close_session(self, session: ImapSession, account: EmailAccount) -> None:
        """Log out, forcing the transport closed if the server does not answer in time. Never raises."""
        try:
            await asyncio.wait_for(session.logout(), timeout=self._logout_timeout)
            self._logger.debug(f"Closed connection for {account.email}")
        except asyncio.TimeoutError:
            self._logger.warning(f"Timeout closing connection for {account.email}, forcing close")
            session.abort()
        except Exception as e:
            self._logger.warning(f"Error closing connection for {account.email}: {e}")
            session.abort()
