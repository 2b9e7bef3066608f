from .account import EmailAccountRepo
from .reply import EmailReplyRepo

__all__ = [
    "EmailAccountRepo",
    "EmailReplyRepo",
]
