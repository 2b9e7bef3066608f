import logging
from typing import TYPE_CHECKING

from mailsync.constants.emails import INBOX_FOLDER, Mailbox
from settings import settings

if TYPE_CHECKING:
    from mailsync.controllers.imap.session import ImapSession

logger = logging.getLogger(__name__)


class FolderUtils:
    """Utility class for IMAP folder operations."""

    @staticmethod
    def quote_mailbox(folder: str) -> str:
        """
        Quote a folder name for use in a command.

        Names such as "Sent Items" contain spaces; RFC 3501 quoted strings escape
        backslashes and double quotes.
        """
        escaped = folder.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'

    @staticmethod
    def sent_folder_candidates() -> list[str]:
        return list(settings.imap.sent_folders)

    @staticmethod
    async def open_sent_folder(session: "ImapSession", candidates: list[str] | None = None) -> str | None:
        """
        Select the first Sent folder candidate the server accepts.

        Args:
            session: An authenticated session
            candidates: Folder names in probing order (default: configured candidates)

        Returns:
            The selected folder name, or None if no candidate exists
        """
        for folder in candidates if candidates is not None else FolderUtils.sent_folder_candidates():
            try:
                if await session.select(folder) is not None:
                    logger.debug(f"Using {folder} as Sent folder")
                    return folder
            except Exception as e:
                logger.debug(f"Sent folder candidate {folder} failed: {e}")

        logger.info("No Sent folder candidate could be opened")
        return None

    @staticmethod
    async def open_mailbox(session: "ImapSession", mailbox: str) -> str | None:
        """
        Select a folder given a mailbox tag (inbox/sent) or a literal folder name.

        Returns:
            The selected folder name, or None if it does not exist
        """
        if mailbox.lower() == Mailbox.inbox.value:
            folder = INBOX_FOLDER
        elif mailbox.lower() == Mailbox.sent.value:
            return await FolderUtils.open_sent_folder(session)
        else:
            folder = mailbox

        return folder if await session.select(folder) is not None else None
