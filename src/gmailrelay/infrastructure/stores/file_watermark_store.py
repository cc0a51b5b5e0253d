"""JSON-file watermark store."""

from __future__ import annotations

import json
import os
import threading
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from loguru import logger

from gmailrelay.application.ports.watermark_store import WatermarkStore
from gmailrelay.domain.entities.watermark import Watermark, is_older


class FileWatermarkStore(WatermarkStore):
    """Persist the last historyId as ``{"historyId": ..., "timestamp": <epoch ms>}``.

    One lock guards every read and write, including the read-compare-write of
    ``save_if_newer``. It only covers threads of this process.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def load(self) -> Optional[Watermark]:
        """Load the watermark. Any read or parse failure means "no watermark"."""
        with self._lock:
            return self._read()

    def save(self, cursor: str) -> bool:
        """Write atomically via a temp file. Failures are logged, not raised."""
        with self._lock:
            return self._write(cursor)

    def save_if_newer(self, cursor: str) -> bool:
        with self._lock:
            current = self._read()
            if current is not None and is_older(cursor, current.cursor):
                logger.debug(f"Ignoring historyId {cursor}: watermark already at {current.cursor}")
                return False
            return self._write(cursor)

    def _read(self) -> Optional[Watermark]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            cursor = data["historyId"]
        except FileNotFoundError:
            logger.debug(f"No watermark file at {self.path}")
            return None
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.error(f"Failed to load historyId from {self.path}: {e}")
            return None

        if cursor is None or str(cursor) == "":
            return None

        timestamp = data.get("timestamp")
        if isinstance(timestamp, (int, float)):
            saved_at = datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc)
        else:
            saved_at = datetime.fromtimestamp(0, tz=timezone.utc)
        return Watermark(cursor=str(cursor), saved_at=saved_at)

    def _write(self, cursor: str) -> bool:
        body = json.dumps({"historyId": str(cursor), "timestamp": int(time.time() * 1000)})
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(body, encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError as e:
            logger.error(f"Failed to save historyId {cursor}: {e}")
            return False

        logger.info(f"Saved historyId: {cursor}")
        return True
