"""One-shot recovery of Gmail messages missed while the worker was down."""

from __future__ import annotations

import argparse
from datetime import timedelta

from loguru import logger

from gmailrelay.application.dedup import DedupCache
from gmailrelay.application.use_cases import GapRecovery, MessageDeliverer, fetch_latest
from gmailrelay.cli.worker import log_email
from gmailrelay.domain.errors import MissingCredentialsError
from gmailrelay.infrastructure import get_settings, watermark_store_from_settings
from gmailrelay.infrastructure.gmail import GmailMailboxProvider, GmailOAuthCredentials, build_credentials
from gmailrelay.infrastructure.logging_setup import configure_logging


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Recover missed Gmail messages")
    parser.add_argument("--window-hours", type=float, default=None,
                        help="Search the last N hours instead of replaying history since the watermark")
    parser.add_argument("--max-results", type=int, default=None, help="Maximum messages to fetch")
    parser.add_argument("--latest", action="store_true", help="Only show the newest message and exit")
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings.log_level)

    try:
        creds = GmailOAuthCredentials.from_settings(settings)
    except MissingCredentialsError as e:
        logger.error(str(e))
        return 1

    provider = GmailMailboxProvider(build_credentials(creds), user_id=settings.gmail_user_id)

    if args.latest:
        email = fetch_latest(provider)
        if email is not None:
            print(f"From: {email.sender}\nSubject: {email.subject}\nDate: {email.date}\n")
            print(email.plain_text or email.html or "(No body found)")
        return 0

    deliverer = MessageDeliverer(provider, DedupCache(), max_depth=settings.max_part_depth)
    recovery = GapRecovery(
        provider,
        deliverer,
        watermark_store_from_settings(settings),
        label_id=settings.recovery_label_id,
    )

    window = timedelta(hours=args.window_hours) if args.window_hours else None
    result = recovery.recover(
        log_email,
        max_results=args.max_results or settings.recovery_max_results,
        window=window,
    )

    if not result.success:
        print(f"Recovery failed: {result.error}")
        return 2

    print(f"Recovered {result.emails_processed} of {result.total_found} emails ({result.strategy})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
