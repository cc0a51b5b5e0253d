"""Exceptions raised by the ingestion pipeline and its adapters."""


class GmailRelayError(Exception):
    """Base class for gmail-relay errors."""


class MissingCredentialsError(GmailRelayError):
    """OAuth credentials are not configured or were never set on the provider."""


class MalformedNotificationError(GmailRelayError):
    """A push message body could not be parsed into a Gmail notification."""


class DecodeError(GmailRelayError):
    """A provider message could not be normalized."""


class PartTreeTooDeepError(DecodeError):
    """The MIME part tree nests deeper than the configured limit."""

    def __init__(self, message_id: str, max_depth: int):
        super().__init__(f"Message {message_id} nests MIME parts deeper than {max_depth}")
        self.message_id = message_id
        self.max_depth = max_depth


class CursorExpiredError(GmailRelayError):
    """The provider no longer has history for the requested cursor."""

    def __init__(self, cursor: str):
        super().__init__(f"History cursor {cursor} is too old or invalid")
        self.cursor = cursor
