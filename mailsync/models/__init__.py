from .account import EmailAccount
from .base import Base
from .reply import EmailReply

__all__ = [
    "Base",
    "EmailAccount",
    "EmailReply",
]
