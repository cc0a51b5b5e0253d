"""Replay messages missed while the listener was down."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Literal, Optional

from loguru import logger

from gmailrelay.application.ports.mailbox import MailboxProvider
from gmailrelay.application.ports.watermark_store import WatermarkStore
from gmailrelay.application.use_cases.deliver_messages import EmailHandler, MessageDeliverer
from gmailrelay.application.watermark import advance_watermark

HISTORY_TYPES = ("messageAdded",)


@dataclass
class RecoveryResult:
    """Result of a recovery run. Failures are reported here, not raised."""

    success: bool
    strategy: Literal["cursor", "window"]
    emails_processed: int = 0
    total_found: Optional[int] = None
    new_cursor: Optional[str] = None
    error: Optional[str] = None


def message_ids_from_history(events: list[dict]) -> list[str]:
    """Unique ids of added messages, in the order they first appear."""
    ids: dict[str, None] = {}
    for event in events:
        for added in event.get("messagesAdded") or []:
            message_id = (added.get("message") or {}).get("id")
            if message_id:
                ids.setdefault(message_id, None)
    return list(ids)


class GapRecovery:
    """Catch up on messages whose push notifications were lost.

    The cursor strategy (Gmail history since the saved watermark) is the
    primary one. The time-window strategy (search ``after:<cutoff>``) is a
    fallback for when no watermark exists; callers pick it explicitly.
    Both strategies only look at ``label_id`` (None means the whole mailbox),
    which should match the label the listener lists.
    """

    def __init__(
        self,
        provider: MailboxProvider,
        deliverer: MessageDeliverer,
        watermark_store: WatermarkStore,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
        label_id: Optional[str] = "INBOX",
    ) -> None:
        self.provider = provider
        self.deliverer = deliverer
        self.watermark_store = watermark_store
        self.clock = clock
        self.label_id = label_id

    def recover(
        self,
        handler: EmailHandler,
        max_results: int = 10,
        window: Optional[timedelta] = None,
    ) -> RecoveryResult:
        if window is not None:
            return self.recover_window(handler, max_results, window)
        return self.recover_from_cursor(handler, max_results)

    def recover_from_cursor(self, handler: EmailHandler, max_results: int = 10) -> RecoveryResult:
        watermark = self.watermark_store.load()
        if watermark is None:
            logger.warning("No saved watermark; cursor-based recovery cannot run")
            return RecoveryResult(
                success=False,
                strategy="cursor",
                error="No saved watermark (historyId); register a watch or use window recovery",
            )

        logger.info(f"Starting history recovery from historyId {watermark.cursor}")
        try:
            page = self.provider.history(
                watermark.cursor, HISTORY_TYPES, max_results, label_id=self.label_id
            )
            message_ids = message_ids_from_history(page.events)
            logger.info(f"History returned {len(page.events)} records, {len(message_ids)} new messages")

            report = self.deliverer.deliver(message_ids, handler)
            new_cursor = page.history_id or watermark.cursor
            advance_watermark(self.watermark_store, new_cursor)
        except Exception as e:
            logger.error(f"History recovery failed: {e}")
            return RecoveryResult(success=False, strategy="cursor", error=str(e))

        logger.info(f"Recovery complete. Processed {report.delivered} emails.")
        return RecoveryResult(
            success=True,
            strategy="cursor",
            emails_processed=report.delivered,
            total_found=report.candidates,
            new_cursor=new_cursor,
        )

    def recover_window(
        self,
        handler: EmailHandler,
        max_results: int = 10,
        window: timedelta = timedelta(hours=24),
    ) -> RecoveryResult:
        cutoff = self.clock() - window
        query = f"after:{int(cutoff.timestamp())}"
        logger.info(f"Searching for emails after {cutoff.isoformat()} ({query})")

        try:
            message_ids = self.provider.list_message_ids(
                label_ids=[self.label_id] if self.label_id else None,
                max_results=max_results,
                query=query,
            )
            if not message_ids:
                logger.info("No emails found in the specified time range")
                return RecoveryResult(success=True, strategy="window", total_found=0)

            logger.info(f"Found {len(message_ids)} emails in the time range")
            report = self.deliverer.deliver(message_ids[:max_results], handler)
        except Exception as e:
            logger.error(f"Window recovery failed: {e}")
            return RecoveryResult(success=False, strategy="window", error=str(e))

        logger.info(f"Recovery complete. Processed {report.delivered} emails.")
        return RecoveryResult(
            success=True,
            strategy="window",
            emails_processed=report.delivered,
            total_found=report.candidates,
        )
