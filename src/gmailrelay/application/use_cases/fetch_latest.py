"""Fetch the newest message on demand."""

from __future__ import annotations

from typing import Optional, Sequence

from loguru import logger

from gmailrelay.application.decoder import decode_message
from gmailrelay.application.ports.mailbox import MailboxProvider
from gmailrelay.domain.entities.email_message import NormalizedEmail


def fetch_latest(
    provider: MailboxProvider,
    label_ids: Optional[Sequence[str]] = None,
) -> Optional[NormalizedEmail]:
    """Decode the most recent message. Bypasses the dedup cache and watermark."""
    ids = provider.list_message_ids(label_ids=label_ids, max_results=1)
    if not ids:
        logger.info("Mailbox is empty")
        return None

    email = decode_message(provider.get_message(ids[0]))
    logger.info(f"Latest email: from={email.sender}, subject={email.subject}, date={email.date}")
    return email
