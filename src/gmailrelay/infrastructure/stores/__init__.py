"""Watermark store implementations."""

from gmailrelay.infrastructure.stores.file_watermark_store import FileWatermarkStore
from gmailrelay.infrastructure.stores.sqlite_watermark_store import SQLiteWatermarkStore

__all__ = [
    "FileWatermarkStore",
    "SQLiteWatermarkStore",
]
