from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Protocol, Sequence

RawMessage = dict[str, Any]

@dataclass(frozen=True)
class WatchResponse:
    history_id: str
    expiration: datetime

@dataclass(frozen=True)
class HistoryPage:
    # Raw history records in provider order; history_id is the mailbox's current cursor
    events: list[dict[str, Any]] = field(default_factory=list)
    history_id: str = ""

class MailboxProvider(Protocol):
    def watch(self, label_ids: Sequence[str], topic_name: str) -> WatchResponse: ...
    def list_message_ids(
        self,
        label_ids: Optional[Sequence[str]] = None,
        max_results: int = 1,
        query: Optional[str] = None,
    ) -> list[str]: ...
    def get_message(self, message_id: str) -> RawMessage: ...
    def history(
        self,
        start_history_id: str,
        history_types: Sequence[str],
        max_results: int,
        label_id: Optional[str] = None,
    ) -> HistoryPage: ...
    def get_attachment(self, message_id: str, attachment_id: str) -> bytes: ...
