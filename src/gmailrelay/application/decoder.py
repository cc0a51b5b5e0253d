"""Normalize Gmail API ``users.messages.get(format="full")`` responses."""

from __future__ import annotations

import base64
from typing import Any, Optional

from loguru import logger

from gmailrelay.domain.entities.attachment import AttachmentRef
from gmailrelay.domain.entities.email_message import NormalizedEmail
from gmailrelay.domain.errors import PartTreeTooDeepError

DEFAULT_MAX_DEPTH = 32

NO_SUBJECT = "(No Subject)"
NO_FROM = "(No From)"
NO_DATE = "(No Date)"


def decode_body(data: Optional[str]) -> str:
    """Decode a base64url body to text. Gmail omits padding on some bodies."""
    if not data:
        return ""
    padded = data + "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(padded).decode("utf-8", errors="replace")


def extract_headers(headers: list[dict[str, Any]] | None) -> dict[str, str]:
    """Map lower-cased header names to values; the first occurrence of a name wins."""
    out: dict[str, str] = {}
    for h in headers or []:
        name = (h.get("name") or "").lower()
        if name and name not in out:
            out[name] = h.get("value") or ""
    return out


def decode_message(raw: dict[str, Any], max_depth: int = DEFAULT_MAX_DEPTH) -> NormalizedEmail:
    """Build a NormalizedEmail from a raw Gmail message.

    The top-level body is taken first, then the part tree is walked depth-first
    in document order. Only the first text/plain and first text/html part with
    inline data are kept. Every part carrying an attachmentId is recorded as an
    attachment reference; attachment bytes are not fetched or decoded.

    Raises:
        PartTreeTooDeepError: parts nest deeper than ``max_depth``
    """
    message_id = raw.get("id") or ""
    payload = raw.get("payload") or {}
    headers = extract_headers(payload.get("headers"))

    plain_text: Optional[str] = None
    html: Optional[str] = None
    attachments: list[AttachmentRef] = []

    # depth 0 is the payload itself
    stack: list[tuple[dict[str, Any], int]] = [(payload, 0)]
    while stack:
        part, depth = stack.pop()
        if depth > max_depth:
            raise PartTreeTooDeepError(message_id, max_depth)

        mime_type = (part.get("mimeType") or "").lower()
        body = part.get("body") or {}

        if body.get("attachmentId"):
            attachments.append(
                AttachmentRef(
                    id=body["attachmentId"],
                    filename=part.get("filename") or "",
                    mime_type=mime_type or "application/octet-stream",
                    size=int(body.get("size") or 0),
                )
            )
        elif body.get("data"):
            if mime_type == "text/plain" and plain_text is None:
                plain_text = decode_body(body["data"])
            elif mime_type == "text/html" and html is None:
                html = decode_body(body["data"])

        # reversed so the first child is popped first
        for child in reversed(part.get("parts") or []):
            stack.append((child, depth + 1))

    email = NormalizedEmail(
        id=message_id,
        thread_id=raw.get("threadId"),
        subject=headers.get("subject") or NO_SUBJECT,
        sender=headers.get("from") or NO_FROM,
        date=headers.get("date") or NO_DATE,
        plain_text=plain_text or "",
        html=html or "",
        snippet=raw.get("snippet") or "",
        attachments=tuple(attachments),
        headers=headers,
    )
    logger.debug(
        f"Decoded {message_id}: text={len(email.plain_text)}, "
        f"html={len(email.html)}, attachments={len(email.attachments)}"
    )
    return email
