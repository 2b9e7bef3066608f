"""
SMTP controller for sending emails.
"""

import logging
import uuid
from email.mime.application import MIMEApplication
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formatdate

import aiosmtplib

from mailsync.constants.emails import FLAG_SEEN, HEADER_IN_REPLY_TO, HEADER_MESSAGE_ID, HEADER_REFERENCES
from mailsync.controllers.email.message import AttachmentData, SendMessageResult
from mailsync.controllers.imap.connection import ConnectionManager
from mailsync.controllers.imap.folder_utils import FolderUtils
from mailsync.exceptions import AccountConfigurationError, SMTPSendError
from mailsync.models import EmailAccount
from mailsync.utils.password import PasswordUtils
from settings import settings


class SMTPController:
    """Controller for sending emails via SMTP."""

    def __init__(self, connection_manager: ConnectionManager) -> None:
        self._logger = logging.getLogger(__name__)
        self._connection_manager = connection_manager

    async def send_email(
        self,
        account: EmailAccount,
        to: str,
        subject: str | None,
        body: str,
        attachments: list[AttachmentData] | None = None,
        in_reply_to: str | None = None,
        references: str | None = None,
    ) -> SendMessageResult:
        """
        Send an email via SMTP.

        Args:
            account: The account to send from
            to: Recipient address
            subject: Email subject
            body: The plain text email body
            attachments: Optional files to attach
            in_reply_to: Message-ID of the message being answered
            references: References chain of the message being answered

        Returns:
            The generated Message-ID and the Sent folder a copy was saved to, if any
        """
        if not account.smtp_host or not account.smtp_port:
            raise AccountConfigurationError("SMTP host and port are required", account_id=account.uuid)

        message = self.create_message(account, to, subject, body, attachments, in_reply_to, references)
        message_id = message[HEADER_MESSAGE_ID]

        await self._send_smtp_message(account, message, to)

        sent_folder = None
        if settings.smtp.save_to_sent:
            sent_folder = await self._save_to_sent_folder(account, message)

        return SendMessageResult(message_id=message_id, folder=sent_folder)

    def create_message(
        self,
        account: EmailAccount,
        to: str,
        subject: str | None,
        body: str,
        attachments: list[AttachmentData] | None = None,
        in_reply_to: str | None = None,
        references: str | None = None,
    ) -> MIMEMultipart | MIMEText:
        """Create email message."""
        body_part = MIMEText(body, "plain", "utf-8")
        message: MIMEMultipart | MIMEText
        if attachments:
            message = MIMEMultipart("mixed")
            message.attach(body_part)
            for attachment in attachments:
                attachment_part = MIMEApplication(attachment.data, name=attachment.filename)
                attachment_part.add_header("Content-Disposition", "attachment", filename=attachment.filename)
                if attachment.content_type:
                    attachment_part.set_type(attachment.content_type)
                message.attach(attachment_part)
        else:
            message = body_part

        message["Subject"] = subject or ""
        message["From"] = account.email
        message["To"] = to
        message["Date"] = formatdate(localtime=True)
        message[HEADER_MESSAGE_ID] = f"<{uuid.uuid4()}@{account.email.split('@')[-1]}>"

        if in_reply_to:
            message[HEADER_IN_REPLY_TO] = in_reply_to
            message[HEADER_REFERENCES] = f"{references} {in_reply_to}" if references else in_reply_to

        return message

    async def _send_smtp_message(self, account: EmailAccount, message: MIMEMultipart | MIMEText, to: str) -> None:
        """Send message via SMTP; implicit TLS when the account is secure, opportunistic STARTTLS otherwise."""
        password = PasswordUtils.decrypt_password(account.password)
        try:
            async with aiosmtplib.SMTP(
                hostname=account.smtp_host,
                port=account.smtp_port,
                use_tls=account.smtp_secure,
                timeout=settings.smtp.timeout,
            ) as smtp:
                await smtp.login(account.email, password)
                await smtp.send_message(message, sender=account.email, recipients=[to])
        except aiosmtplib.SMTPException as e:
            self._logger.warning(f"Failed to send email from {account.email}: {e}")
            raise SMTPSendError(f"Failed to send email: {e}", account_id=account.uuid, action="smtp_send") from e
        except OSError as e:
            self._logger.warning(f"Could not reach SMTP server {account.smtp_host} for {account.email}: {e}")
            raise SMTPSendError(
                f"Could not connect to {account.smtp_host}", account_id=account.uuid, action="smtp_connect"
            ) from e

        self._logger.info(f"Email sent successfully: {message[HEADER_MESSAGE_ID]}")

    async def _save_to_sent_folder(self, account: EmailAccount, message: MIMEMultipart | MIMEText) -> str | None:
        """Append a copy of the sent message to the first Sent folder that exists. Failures are logged only."""
        try:
            session = await self._connection_manager.open_session(account)
        except Exception as e:
            self._logger.warning(f"Could not open IMAP session to save sent message for {account.email}: {e}")
            return None

        try:
            sent_folder = await FolderUtils.open_sent_folder(session)
            if not sent_folder:
                self._logger.warning(f"No existing sent folder found for {account.email}")
                return None

            # IMAP requires CRLF line endings
            payload = message.as_string().replace("\r\n", "\n").replace("\n", "\r\n").encode("utf-8")
            await session.append(payload, sent_folder, flags=f"({FLAG_SEEN})")
            return sent_folder
        except Exception as e:
            self._logger.error(f"Failed to save message to Sent folder for {account.email}: {e}")
            return None
        finally:
            await self._connection_manager.close_session(session, account)
