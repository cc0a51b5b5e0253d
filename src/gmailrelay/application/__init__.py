"""Application layer - ingestion pipeline and the ports it depends on."""

from gmailrelay.application.decoder import decode_message
from gmailrelay.application.dedup import DedupCache
from gmailrelay.application.use_cases import (
    GapRecovery,
    MessageDeliverer,
    NotificationListener,
    RecoveryResult,
)

__all__ = [
    "decode_message",
    "DedupCache",
    "GapRecovery",
    "MessageDeliverer",
    "NotificationListener",
    "RecoveryResult",
]
