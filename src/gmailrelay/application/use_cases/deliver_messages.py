"""Fetch, deduplicate, decode and hand Gmail messages to a caller-supplied handler."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable

from loguru import logger

from gmailrelay.application.decoder import DEFAULT_MAX_DEPTH, decode_message
from gmailrelay.application.dedup import DedupCache
from gmailrelay.application.ports.mailbox import MailboxProvider
from gmailrelay.domain.entities.email_message import NormalizedEmail

EmailHandler = Callable[[NormalizedEmail, dict[str, Any]], None]


@dataclass
class DeliveryReport:
    """Outcome of one delivery batch."""

    candidates: int = 0
    delivered: int = 0
    skipped: int = 0
    failed: int = 0


class MessageDeliverer:
    """Shared per-message path used by the notification listener and gap recovery.

    Flow per id, in the order given:
    1. Claim it in the dedup cache, skipping ids already seen or in flight
    2. Fetch the full message (on failure the claim is released)
    3. Decode it
    4. Call ``handler(email, raw_message)``

    A failure at any step is logged and the batch moves on. The claim is the
    only step done under a lock, so a slow batch on one thread does not hold
    up deliveries on another.
    """

    def __init__(
        self,
        provider: MailboxProvider,
        dedup: DedupCache,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self.provider = provider
        self.dedup = dedup
        self.max_depth = max_depth

    def deliver(self, message_ids: Iterable[str], handler: EmailHandler) -> DeliveryReport:
        report = DeliveryReport()
        for message_id in message_ids:
            report.candidates += 1
            if not self.dedup.claim(message_id):
                logger.debug(f"Skipping already processed message: {message_id}")
                report.skipped += 1
                continue

            try:
                self._deliver_one(message_id, handler)
                report.delivered += 1
            except Exception as e:
                logger.error(f"Failed to process message {message_id}: {e}")
                report.failed += 1

        logger.info(
            f"Delivery batch: candidates={report.candidates}, delivered={report.delivered}, "
            f"skipped={report.skipped}, failed={report.failed}"
        )
        return report

    def _deliver_one(self, message_id: str, handler: EmailHandler) -> None:
        try:
            raw = self.provider.get_message(message_id)
        except Exception:
            self.dedup.release(message_id)
            raise
        email = decode_message(raw, max_depth=self.max_depth)
        handler(email, raw)
        logger.info(f"Delivered {message_id}: {email.subject[:50]} (from: {email.sender})")
