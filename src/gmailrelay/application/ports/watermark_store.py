from __future__ import annotations
from typing import Optional, Protocol
from gmailrelay.domain.entities.watermark import Watermark

class WatermarkStore(Protocol):
    # save() reports failure instead of raising; load() returns None when nothing usable is stored
    def load(self) -> Optional[Watermark]: ...
    def save(self, cursor: str) -> bool: ...
    # Compare against the stored cursor and write in one atomic step; False if older or not saved
    def save_if_newer(self, cursor: str) -> bool: ...
