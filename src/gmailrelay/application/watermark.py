"""Forward-only watermark updates."""

from __future__ import annotations

from loguru import logger

from gmailrelay.application.ports.watermark_store import WatermarkStore


def advance_watermark(store: WatermarkStore, cursor: str) -> bool:
    """Save ``cursor`` unless the stored watermark is already ahead of it.

    Pub/Sub does not preserve order, so an older notification can arrive after
    a newer one, possibly on another callback thread. The store does the
    compare and the write as one step. Returns True only if the cursor was
    written.
    """
    saved = store.save_if_newer(cursor)
    if not saved:
        logger.debug(f"Watermark not advanced to historyId {cursor}")
    return saved
