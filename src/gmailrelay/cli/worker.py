"""Gmail relay worker - registers the watch and consumes push notifications until stopped."""

from __future__ import annotations

import signal
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from loguru import logger

from gmailrelay.application.dedup import DedupCache
from gmailrelay.application.use_cases import (
    GapRecovery,
    MessageDeliverer,
    NotificationListener,
    watch_inbox,
)
from gmailrelay.domain.entities.email_message import NormalizedEmail
from gmailrelay.domain.errors import MissingCredentialsError
from gmailrelay.infrastructure import Settings, get_settings, watermark_store_from_settings
from gmailrelay.infrastructure.gmail import GmailMailboxProvider, GmailOAuthCredentials, build_credentials
from gmailrelay.infrastructure.logging_setup import configure_logging
from gmailrelay.infrastructure.pubsub import PubSubPushTransport
from gmailrelay.infrastructure.scheduling import APSchedulerScheduler


def log_email(email: NormalizedEmail, raw: dict[str, Any]) -> None:
    """Default handler: log a summary of each delivered email."""
    logger.info("New email received")
    logger.info(f"  From: {email.sender}")
    logger.info(f"  Subject: {email.subject}")
    logger.info(f"  Date: {email.date}")
    logger.info(f"  Message ID: {email.id}")
    if email.attachments:
        logger.info(f"  Attachments: {', '.join(a.filename or a.id for a in email.attachments)}")


@dataclass
class WorkerStats:
    """Track worker statistics."""
    recovered: int = 0
    started_at: float = 0.0


class RelayWorker:
    """
    Long-running Gmail push consumer.

    Startup: register the watch, optionally replay history since the last
    watermark, then subscribe to Pub/Sub. The dedup cache is cleared on a
    schedule for the lifetime of the worker.
    """

    def __init__(self, settings: Settings, handler=log_email):
        self.settings = settings
        self.handler = handler
        self.running = False
        self.stats = WorkerStats()

        self._provider = None
        self._store = None
        self._scheduler = None
        self._transport = None
        self._listener = None
        self._recovery = None

    def _init_components(self) -> None:
        """Wire adapters and use cases. Raises MissingCredentialsError early."""
        s = self.settings
        creds = GmailOAuthCredentials.from_settings(s)
        if not s.topic_path or not s.subscription_path:
            raise ValueError("PUBSUB_TOPIC_NAME and PUBSUB_SUBSCRIPTION_NAME are required")

        provider = GmailMailboxProvider(build_credentials(creds), user_id=s.gmail_user_id)
        store = watermark_store_from_settings(s)
        dedup = DedupCache()

        self._scheduler = APSchedulerScheduler()
        dedup.reset_periodically(self._scheduler, s.dedup_reset_hours * 3600)

        deliverer = MessageDeliverer(provider, dedup, max_depth=s.max_part_depth)
        self._transport = PubSubPushTransport(service_account_path=s.pubsub_service_account_path)
        self._listener = NotificationListener(
            provider,
            self._transport,
            deliverer,
            store,
            label_ids=s.gmail_label_ids,
            max_results=s.listen_max_results,
        )
        self._recovery = GapRecovery(provider, deliverer, store, label_id=s.recovery_label_id)
        self._provider = provider
        self._store = store

    def _recover(self) -> None:
        result = self._recovery.recover(self.handler, max_results=self.settings.recovery_max_results)
        if not result.success:
            logger.warning(f"History recovery failed ({result.error}); falling back to time window")
            result = self._recovery.recover(
                self.handler,
                max_results=self.settings.recovery_max_results,
                window=timedelta(hours=self.settings.recovery_window_hours),
            )
        self.stats.recovered += result.emails_processed
        logger.info(
            f"Startup recovery ({result.strategy}): success={result.success}, "
            f"processed={result.emails_processed}, found={result.total_found}"
        )

    def _handle_shutdown(self, signum, frame) -> None:
        """Handle graceful shutdown."""
        logger.info(f"Received signal {signum}, shutting down...")
        self.running = False

    def run(self) -> int:
        """Run until SIGINT/SIGTERM or until the subscription closes."""
        signal.signal(signal.SIGTERM, self._handle_shutdown)
        signal.signal(signal.SIGINT, self._handle_shutdown)

        try:
            self._init_components()
        except (MissingCredentialsError, ValueError) as e:
            logger.error(f"Configuration error: {e}")
            return 1

        # Recovery first: the watch would move the watermark past the gap
        if self.settings.recover_on_startup:
            self._recover()

        watch_inbox(self._provider, self._store, self.settings.gmail_label_ids, self.settings.topic_path)

        future = self._listener.listen(self.settings.subscription_path, self.handler)
        self.running = True
        self.stats.started_at = time.time()

        while self.running and not future.done():
            time.sleep(1)

        self._listener.stop()
        self._scheduler.shutdown()
        self._transport.close()
        logger.info(
            f"Worker shutdown complete (recovered={self.stats.recovered}, "
            f"uptime={int(time.time() - self.stats.started_at)}s)"
        )
        return 0


def main() -> int:
    """Entry point for the relay worker."""
    settings = get_settings()
    configure_logging(settings.log_level)

    logger.info("=" * 60)
    logger.info(f"{settings.app_name} v{settings.app_version}")
    logger.info("=" * 60)

    return RelayWorker(settings).run()


if __name__ == "__main__":
    raise SystemExit(main())
