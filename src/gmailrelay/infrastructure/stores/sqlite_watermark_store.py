"""SQLite watermark store."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator, Optional

from loguru import logger

from gmailrelay.application.ports.watermark_store import WatermarkStore
from gmailrelay.domain.entities.watermark import Watermark, is_older


class SQLiteWatermarkStore(WatermarkStore):
    """One watermark row per inbox in a local SQLite database."""

    def __init__(self, db_path: str | Path = "data/watermarks.db", inbox: str = "me"):
        self.db_path = Path(db_path)
        self.inbox = inbox
        self._ensure_db()

    def _ensure_db(self) -> None:
        """Create database and table if they don't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        with self._connection() as conn:
            conn.executescript("""
                PRAGMA journal_mode=WAL;

                CREATE TABLE IF NOT EXISTS watermarks (
                    inbox TEXT PRIMARY KEY,
                    cursor TEXT NOT NULL,
                    saved_at TEXT NOT NULL
                );
            """)
            logger.info(f"SQLite watermark store initialized at {self.db_path}")

    @contextmanager
    def _connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Context manager for database connections."""
        conn = sqlite3.connect(self.db_path, timeout=30.0)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def load(self) -> Optional[Watermark]:
        try:
            with self._connection() as conn:
                row = self._select(conn)
        except sqlite3.Error as e:
            logger.error(f"Failed to load watermark for {self.inbox}: {e}")
            return None

        if row is None:
            logger.debug(f"No watermark stored for {self.inbox}")
            return None
        return self._to_watermark(row)

    def save(self, cursor: str) -> bool:
        try:
            with self._connection() as conn:
                self._upsert(conn, cursor)
        except sqlite3.Error as e:
            logger.error(f"Failed to save watermark {cursor} for {self.inbox}: {e}")
            return False

        logger.info(f"Saved historyId for {self.inbox}: {cursor}")
        return True

    def save_if_newer(self, cursor: str) -> bool:
        """Compare and write inside one ``BEGIN IMMEDIATE`` transaction."""
        try:
            with self._connection() as conn:
                conn.execute("BEGIN IMMEDIATE")
                row = self._select(conn)
                if row is not None and is_older(cursor, row["cursor"]):
                    logger.debug(f"Ignoring historyId {cursor}: watermark already at {row['cursor']}")
                    return False
                self._upsert(conn, cursor)
        except sqlite3.Error as e:
            logger.error(f"Failed to save watermark {cursor} for {self.inbox}: {e}")
            return False

        logger.info(f"Saved historyId for {self.inbox}: {cursor}")
        return True

    def _select(self, conn: sqlite3.Connection) -> Optional[sqlite3.Row]:
        return conn.execute(
            "SELECT cursor, saved_at FROM watermarks WHERE inbox = ?",
            (self.inbox,),
        ).fetchone()

    def _upsert(self, conn: sqlite3.Connection, cursor: str) -> None:
        now = datetime.now(timezone.utc).isoformat()
        conn.execute(
            """INSERT INTO watermarks (inbox, cursor, saved_at) VALUES (?, ?, ?)
               ON CONFLICT(inbox) DO UPDATE SET cursor = excluded.cursor, saved_at = excluded.saved_at""",
            (self.inbox, str(cursor), now),
        )

    def _to_watermark(self, row: sqlite3.Row) -> Watermark:
        try:
            saved_at = datetime.fromisoformat(row["saved_at"])
        except (TypeError, ValueError) as e:
            # The cursor is still usable without a valid timestamp
            logger.warning(f"Invalid saved_at for {self.inbox} ({e}); using epoch")
            saved_at = datetime.fromtimestamp(0, tz=timezone.utc)
        return Watermark(cursor=row["cursor"], saved_at=saved_at)
