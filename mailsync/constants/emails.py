from enum import Enum

HEADER_MESSAGE_ID = "Message-ID"
HEADER_REFERENCES = "References"
HEADER_IN_REPLY_TO = "In-Reply-To"

FLAG_SEEN = "\\Seen"
FLAG_DELETED = "\\Deleted"

INBOX_FOLDER = "INBOX"

# Probed in order; servers disagree on the name of the Sent folder.
DEFAULT_SENT_FOLDERS = ["Sent", "Sent Items", "INBOX.Sent", "INBOX.Sent Items"]


class Mailbox(str, Enum):
    """Originating mailbox of a normalized message."""

    inbox = "inbox"
    sent = "sent"
