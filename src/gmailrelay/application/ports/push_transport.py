from __future__ import annotations
from typing import Any, Callable, Protocol

class PushMessage(Protocol):
    data: bytes
    def ack(self) -> None: ...

class PushTransport(Protocol):
    def subscribe(self, subscription: str, callback: Callable[[PushMessage], None]) -> Any:
        """Start delivering messages to ``callback``; returns a future-like handle
        exposing ``add_done_callback``, ``result`` and ``cancel``."""
        ...
