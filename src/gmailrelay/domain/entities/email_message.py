from __future__ import annotations
from dataclasses import dataclass, field
from typing import Mapping, Optional

from gmailrelay.domain.entities.attachment import AttachmentRef

@dataclass(frozen=True)
class NormalizedEmail:
    id: str
    thread_id: Optional[str]
    subject: str
    sender: str
    date: str
    plain_text: str
    html: str
    snippet: str
    attachments: tuple[AttachmentRef, ...] = ()
    headers: Mapping[str, str] = field(default_factory=dict)  # lower-cased names

    @property
    def has_body(self) -> bool:
        return bool(self.plain_text or self.html)
