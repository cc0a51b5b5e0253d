"""Ports the ingestion core depends on."""

from gmailrelay.application.ports.mailbox import HistoryPage, MailboxProvider, RawMessage, WatchResponse
from gmailrelay.application.ports.push_transport import PushMessage, PushTransport
from gmailrelay.application.ports.scheduler import Scheduler
from gmailrelay.application.ports.watermark_store import WatermarkStore

__all__ = [
    "HistoryPage",
    "MailboxProvider",
    "RawMessage",
    "WatchResponse",
    "PushMessage",
    "PushTransport",
    "Scheduler",
    "WatermarkStore",
]
