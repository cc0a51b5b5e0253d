"""Infrastructure layer - Google adapters, persistence, scheduling and configuration."""

from gmailrelay.infrastructure.settings import Settings, get_settings
from gmailrelay.infrastructure.stores import FileWatermarkStore, SQLiteWatermarkStore


def watermark_store_from_settings(settings: Settings):
    """Build the configured watermark store."""
    if settings.watermark_backend == "sqlite":
        return SQLiteWatermarkStore(db_path=settings.watermark_path, inbox=settings.gmail_user_id)
    return FileWatermarkStore(settings.watermark_path)


__all__ = [
    "Settings",
    "get_settings",
    "FileWatermarkStore",
    "SQLiteWatermarkStore",
    "watermark_store_from_settings",
]
