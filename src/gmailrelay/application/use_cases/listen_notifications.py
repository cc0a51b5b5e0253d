"""Consume Gmail push notifications from Pub/Sub."""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional, Sequence

from loguru import logger

from gmailrelay.application.ports.mailbox import MailboxProvider
from gmailrelay.application.ports.push_transport import PushMessage, PushTransport
from gmailrelay.application.ports.watermark_store import WatermarkStore
from gmailrelay.application.use_cases.deliver_messages import (
    DeliveryReport,
    EmailHandler,
    MessageDeliverer,
)
from gmailrelay.application.watermark import advance_watermark
from gmailrelay.domain.errors import MalformedNotificationError
from gmailrelay.domain.models import parse_notification


class ListenerState(str, Enum):
    """Lifecycle of the notification listener."""

    IDLE = "idle"
    SUBSCRIBED = "subscribed"
    FETCHING = "fetching"
    DECODING = "decoding"
    DELIVERED = "delivered"


class NotificationListener:
    """Turn Gmail push notifications into handler calls.

    Each push is acknowledged before anything else happens, so a failure
    while processing never makes Pub/Sub redeliver it. Messages missed that
    way are picked up by gap recovery.

    Pub/Sub runs callbacks on a thread pool, so several pushes can be in
    flight at once. ``state`` is the last transition made by any of them and
    is meant for logging and status checks, not for coordinating work.
    """

    def __init__(
        self,
        provider: MailboxProvider,
        transport: PushTransport,
        deliverer: MessageDeliverer,
        watermark_store: WatermarkStore,
        label_ids: Sequence[str] = ("INBOX",),
        max_results: int = 1,
    ) -> None:
        self.provider = provider
        self.transport = transport
        self.deliverer = deliverer
        self.watermark_store = watermark_store
        self.label_ids = list(label_ids)
        self.max_results = max_results
        self.state = ListenerState.IDLE
        self._future: Any = None

    def listen(self, subscription: str, handler: EmailHandler) -> Any:
        """Subscribe and route every push to ``handler``. Does not block."""
        self._future = self.transport.subscribe(
            subscription,
            lambda message: self.handle_push(message, handler),
        )
        self.state = ListenerState.SUBSCRIBED
        self._future.add_done_callback(self._on_closed)
        logger.info(f"Subscription '{subscription}' is listening for Gmail push events")
        return self._future

    def stop(self) -> None:
        if self._future is not None:
            self._future.cancel()

    def _on_closed(self, future: Any) -> None:
        # Re-subscribing is left to whoever owns the listener
        try:
            future.result()
        except Exception as e:
            logger.error(f"Pub/Sub listener error: {e}")
        else:
            logger.info("Pub/Sub listener stopped")
        self.state = ListenerState.IDLE

    def handle_push(self, message: PushMessage, handler: EmailHandler) -> Optional[DeliveryReport]:
        """Process one push message. Returns None when the event was dropped."""
        message.ack()

        try:
            notification = parse_notification(message.data)
        except MalformedNotificationError as e:
            logger.error(f"Dropping push message: {e}")
            return None

        logger.info(
            f"Gmail push notification: email={notification.email_address}, "
            f"historyId={notification.history_id}"
        )
        advance_watermark(self.watermark_store, notification.history_id)

        self.state = ListenerState.FETCHING
        try:
            message_ids = self.provider.list_message_ids(
                label_ids=self.label_ids,
                max_results=self.max_results,
            )
        except Exception as e:
            logger.error(f"Failed to list messages for historyId {notification.history_id}: {e}")
            self.state = ListenerState.SUBSCRIBED
            return None

        logger.info(f"Messages listed: {len(message_ids)}")
        self.state = ListenerState.DECODING
        report = self.deliverer.deliver(message_ids, handler)
        self.state = ListenerState.DELIVERED
        logger.debug(f"Processed message ids: {sorted(self.deliverer.dedup.snapshot())}")
        self.state = ListenerState.SUBSCRIBED
        return report
