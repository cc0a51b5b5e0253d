"""Domain models, entities and errors."""

from gmailrelay.domain.entities import AttachmentRef, NormalizedEmail, Watermark
from gmailrelay.domain.errors import (
    CursorExpiredError,
    DecodeError,
    GmailRelayError,
    MalformedNotificationError,
    MissingCredentialsError,
    PartTreeTooDeepError,
)
from gmailrelay.domain.models import GmailNotification, parse_notification

__all__ = [
    "AttachmentRef",
    "NormalizedEmail",
    "Watermark",
    "GmailNotification",
    "parse_notification",
    "GmailRelayError",
    "MissingCredentialsError",
    "MalformedNotificationError",
    "DecodeError",
    "PartTreeTooDeepError",
    "CursorExpiredError",
]
