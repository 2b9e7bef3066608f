from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class FetchedMessage:
    """One message as returned by the server, before MIME parsing."""

    uid: int
    raw: bytes
    flags: frozenset[str] = field(default_factory=frozenset)
    internal_date: datetime | None = None
