from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime

@dataclass(frozen=True)
class Watermark:
    # Gmail historyId: opaque to us, but numeric and monotonically increasing
    cursor: str
    saved_at: datetime


def is_older(candidate: str, current: str) -> bool:
    """True if ``candidate`` is strictly behind ``current``.

    Only numeric cursors can be ordered; anything else is never considered older.
    """
    if candidate.isdigit() and current.isdigit():
        return int(candidate) < int(current)
    return False
