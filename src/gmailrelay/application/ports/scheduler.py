from __future__ import annotations
from typing import Any, Callable, Protocol

class Scheduler(Protocol):
    def every(self, interval_seconds: float, func: Callable[[], None], name: str) -> Any: ...
    def shutdown(self) -> None: ...
