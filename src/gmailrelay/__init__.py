"""Gmail push-notification ingestion with watermark recovery and deduplication."""

__version__ = "0.1.0"
