from __future__ import annotations
from dataclasses import dataclass

@dataclass(frozen=True)
class AttachmentRef:
    # Metadata only; bytes are fetched lazily via MailboxProvider.get_attachment
    id: str
    filename: str
    mime_type: str
    size: int
