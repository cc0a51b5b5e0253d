"""In-memory set of processed Gmail message ids with periodic reset."""

from __future__ import annotations

import threading
from typing import Any

from loguru import logger

from gmailrelay.application.ports.scheduler import Scheduler

DEFAULT_RESET_INTERVAL_SECONDS = 24 * 60 * 60


class DedupCache:
    """Tracks message ids already delivered to the handler.

    Single-process only: two workers consuming the same subscription each keep
    their own set. Clearing trades memory for possible re-delivery; it never
    causes a message to be dropped.
    """

    def __init__(self) -> None:
        self._ids: set[str] = set()
        self._lock = threading.Lock()
        self._reset_job: Any = None

    def seen(self, message_id: str) -> bool:
        with self._lock:
            return message_id in self._ids

    def mark_seen(self, message_id: str) -> None:
        with self._lock:
            self._ids.add(message_id)

    def claim(self, message_id: str) -> bool:
        """Atomically mark ``message_id`` seen. Returns False if it already was."""
        with self._lock:
            if message_id in self._ids:
                return False
            self._ids.add(message_id)
            return True

    def release(self, message_id: str) -> None:
        """Forget a claim so a later batch can retry the id."""
        with self._lock:
            self._ids.discard(message_id)

    def clear(self) -> None:
        with self._lock:
            count = len(self._ids)
            self._ids.clear()
        logger.info(f"Processed message id cache cleared ({count} ids)")

    def snapshot(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._ids)

    def __len__(self) -> int:
        with self._lock:
            return len(self._ids)

    def reset_periodically(
        self,
        scheduler: Scheduler,
        interval_seconds: float = DEFAULT_RESET_INTERVAL_SECONDS,
    ) -> Any:
        """Schedule an unconditional clear every ``interval_seconds``."""
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._reset_job = scheduler.every(interval_seconds, self.clear, name="dedup-cache-reset")
        logger.info(f"Dedup cache reset scheduled every {interval_seconds / 3600:g}h")
        return self._reset_job
