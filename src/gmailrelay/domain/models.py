"""Pydantic models for payloads received from Google."""

from __future__ import annotations

import json

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from gmailrelay.domain.errors import MalformedNotificationError


class GmailNotification(BaseModel):
    """Body of a Gmail push notification delivered through Pub/Sub."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    email_address: str | None = Field(default=None, alias="emailAddress")
    history_id: str = Field(alias="historyId")

    @field_validator("history_id", mode="before")
    @classmethod
    def _coerce_history_id(cls, value):
        # Gmail sends historyId as a JSON number
        if isinstance(value, bool) or value is None:
            raise ValueError("historyId must be a string or integer")
        value = str(value).strip()
        if not value:
            raise ValueError("historyId is empty")
        return value


def parse_notification(data: bytes | str) -> GmailNotification:
    """Parse a Pub/Sub message body into a GmailNotification.

    Raises:
        MalformedNotificationError: body is not UTF-8 JSON or lacks a historyId
    """
    try:
        text = data.decode("utf-8") if isinstance(data, bytes) else data
        return GmailNotification.model_validate(json.loads(text))
    except (UnicodeDecodeError, json.JSONDecodeError, ValidationError, TypeError) as e:
        raise MalformedNotificationError(f"Invalid Gmail notification: {e}") from e
