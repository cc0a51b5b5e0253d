"""Gmail API adapter."""

from gmailrelay.infrastructure.gmail.auth import GmailOAuthCredentials, build_credentials
from gmailrelay.infrastructure.gmail.client import GmailMailboxProvider

__all__ = [
    "GmailOAuthCredentials",
    "GmailMailboxProvider",
    "build_credentials",
]
