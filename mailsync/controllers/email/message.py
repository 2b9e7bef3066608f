from dataclasses import dataclass


@dataclass
class AttachmentData:
    filename: str
    data: bytes
    content_type: str | None = None


@dataclass
class SendMessageResult:
    message_id: str
    folder: str | None = None
