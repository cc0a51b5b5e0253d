"""Register the Gmail push watch and record its starting cursor."""

from __future__ import annotations

from typing import Sequence

from loguru import logger

from gmailrelay.application.ports.mailbox import MailboxProvider, WatchResponse
from gmailrelay.application.ports.watermark_store import WatermarkStore
from gmailrelay.application.watermark import advance_watermark


def watch_inbox(
    provider: MailboxProvider,
    store: WatermarkStore,
    label_ids: Sequence[str],
    topic_name: str,
) -> WatchResponse:
    """Start (or renew) the watch. Provider errors propagate to the caller."""
    response = provider.watch(label_ids, topic_name)
    logger.info("Gmail watch started")
    logger.info(f"  Expiration: {response.expiration.isoformat()}")
    logger.info(f"  Initial historyId: {response.history_id}")

    advance_watermark(store, response.history_id)
    return response
