"""Domain entities."""

from gmailrelay.domain.entities.attachment import AttachmentRef
from gmailrelay.domain.entities.email_message import NormalizedEmail
from gmailrelay.domain.entities.watermark import Watermark

__all__ = [
    "AttachmentRef",
    "NormalizedEmail",
    "Watermark",
]
