"""Use cases of the ingestion pipeline."""

from gmailrelay.application.use_cases.deliver_messages import (
    DeliveryReport,
    EmailHandler,
    MessageDeliverer,
)
from gmailrelay.application.use_cases.fetch_latest import fetch_latest
from gmailrelay.application.use_cases.listen_notifications import ListenerState, NotificationListener
from gmailrelay.application.use_cases.recover_missed import GapRecovery, RecoveryResult
from gmailrelay.application.use_cases.watch_inbox import watch_inbox

__all__ = [
    "DeliveryReport",
    "EmailHandler",
    "MessageDeliverer",
    "NotificationListener",
    "ListenerState",
    "GapRecovery",
    "RecoveryResult",
    "watch_inbox",
    "fetch_latest",
]
