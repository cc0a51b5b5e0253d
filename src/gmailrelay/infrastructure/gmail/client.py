from __future__ import annotations
import base64
from datetime import datetime, timezone
from typing import Any, Optional, Sequence

from google.auth.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from loguru import logger

from gmailrelay.application.ports.mailbox import HistoryPage, MailboxProvider, RawMessage, WatchResponse
from gmailrelay.domain.errors import CursorExpiredError, MissingCredentialsError


class GmailMailboxProvider(MailboxProvider):
    """Gmail API v1 adapter.

    Every call requires credentials; without them it raises
    MissingCredentialsError before touching the network.
    """

    def __init__(self, credentials: Optional[Credentials] = None, user_id: str = "me") -> None:
        self.user_id = user_id
        self._credentials: Optional[Credentials] = None
        self._service: Any = None
        if credentials is not None:
            self.set_credentials(credentials)

    def set_credentials(self, credentials: Credentials) -> None:
        self._credentials = credentials
        # cache_discovery=False: the file cache is unavailable with google-auth credentials
        self._service = build("gmail", "v1", credentials=credentials, cache_discovery=False)

    def _users(self) -> Any:
        if self._service is None:
            raise MissingCredentialsError("Gmail credentials not set")
        return self._service.users()

    def watch(self, label_ids: Sequence[str], topic_name: str) -> WatchResponse:
        resp = self._users().watch(
            userId=self.user_id,
            body={
                "labelIds": list(label_ids),
                "topicName": topic_name,
                "labelFilterAction": "include",
            },
        ).execute()

        expiration_ms = int(resp.get("expiration") or 0)
        return WatchResponse(
            history_id=str(resp["historyId"]),
            expiration=datetime.fromtimestamp(expiration_ms / 1000, tz=timezone.utc),
        )

    def list_message_ids(
        self,
        label_ids: Optional[Sequence[str]] = None,
        max_results: int = 1,
        query: Optional[str] = None,
    ) -> list[str]:
        params: dict[str, Any] = {"userId": self.user_id, "maxResults": max_results}
        if label_ids:
            params["labelIds"] = list(label_ids)
        if query:
            params["q"] = query

        resp = self._users().messages().list(**params).execute()
        return [m["id"] for m in resp.get("messages") or [] if m.get("id")]

    def get_message(self, message_id: str) -> RawMessage:
        return self._users().messages().get(
            userId=self.user_id,
            id=message_id,
            format="full",
        ).execute()

    def history(
        self,
        start_history_id: str,
        history_types: Sequence[str],
        max_results: int,
        label_id: Optional[str] = None,
    ) -> HistoryPage:
        """Fetch all history records since ``start_history_id``, following pages."""
        events: list[dict[str, Any]] = []
        history_id = ""
        page_token: Optional[str] = None

        while True:
            params: dict[str, Any] = {
                "userId": self.user_id,
                "startHistoryId": start_history_id,
                "historyTypes": list(history_types),
                "maxResults": max_results,
            }
            if label_id:
                params["labelId"] = label_id
            if page_token:
                params["pageToken"] = page_token

            try:
                resp = self._users().history().list(**params).execute()
            except HttpError as e:
                if e.resp.status == 404:
                    raise CursorExpiredError(start_history_id) from e
                raise

            events.extend(resp.get("history") or [])
            history_id = str(resp.get("historyId") or history_id)
            page_token = resp.get("nextPageToken")
            if not page_token:
                break
            logger.debug(f"Following history page token after {len(events)} records")

        return HistoryPage(events=events, history_id=history_id)

    def get_attachment(self, message_id: str, attachment_id: str) -> bytes:
        resp = self._users().messages().attachments().get(
            userId=self.user_id,
            messageId=message_id,
            id=attachment_id,
        ).execute()
        data = resp.get("data") or ""
        return base64.urlsafe_b64decode(data + "=" * (-len(data) % 4))
