from __future__ import annotations
from dataclasses import dataclass

from google.oauth2.credentials import Credentials

from gmailrelay.domain.errors import MissingCredentialsError
from gmailrelay.infrastructure.settings import Settings

GMAIL_SCOPES = ["https://www.googleapis.com/auth/gmail.readonly"]


@dataclass(frozen=True)
class GmailOAuthCredentials:
    """
    OAuth client + refresh token for a single Gmail account.
    Obtaining the refresh token happens outside this service.
    """
    client_id: str
    client_secret: str
    refresh_token: str
    token_uri: str = "https://oauth2.googleapis.com/token"

    @classmethod
    def from_settings(cls, settings: Settings) -> "GmailOAuthCredentials":
        """Fail fast, before any network call, if any part is missing."""
        missing = [
            name
            for name, value in (
                ("GOOGLE_CLIENT_ID", settings.google_client_id),
                ("GOOGLE_CLIENT_SECRET", settings.google_client_secret),
                ("GOOGLE_REFRESH_TOKEN", settings.google_refresh_token),
            )
            if not value
        ]
        if missing:
            raise MissingCredentialsError(f"Missing OAuth settings: {', '.join(missing)}")

        return cls(
            client_id=settings.google_client_id,
            client_secret=settings.google_client_secret.get_secret_value(),
            refresh_token=settings.google_refresh_token.get_secret_value(),
            token_uri=settings.google_token_uri,
        )


def build_credentials(creds: GmailOAuthCredentials) -> Credentials:
    """
    Returns google-auth Credentials that refresh their access token on first use.
    No token is requested here.
    """
    return Credentials(
        token=None,
        refresh_token=creds.refresh_token,
        token_uri=creds.token_uri,
        client_id=creds.client_id,
        client_secret=creds.client_secret,
        scopes=GMAIL_SCOPES,
    )
