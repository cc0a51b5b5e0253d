"""
Tests for the worker and one-shot recovery entry points.
"""

from unittest.mock import MagicMock, patch

import pytest

from conftest import FakeMailboxProvider, make_raw_message
from gmailrelay.application.use_cases import RecoveryResult
from gmailrelay.cli import recover_once
from gmailrelay.cli.worker import RelayWorker, log_email
from gmailrelay.application.decoder import decode_message
from gmailrelay.infrastructure.settings import Settings


@pytest.fixture
def configured(tmp_path):
    return Settings(
        google_client_id="cid",
        google_client_secret="secret",
        google_refresh_token="rt",
        gcp_project_id="proj",
        pubsub_topic_name="gmail",
        pubsub_subscription_name="gmail-sub",
        watermark_path=str(tmp_path / "lastHistoryId.json"),
    )


class TestRelayWorker:
    """Test worker startup paths."""

    def test_missing_credentials_exit_code(self, tmp_path):
        worker = RelayWorker(Settings(watermark_path=str(tmp_path / "wm.json")))
        assert worker.run() == 1

    def test_missing_pubsub_settings_exit_code(self, configured):
        configured.pubsub_subscription_name = None
        with patch("gmailrelay.cli.worker.GmailMailboxProvider"):
            assert RelayWorker(configured).run() == 1

    def test_startup_recovery_falls_back_to_window(self, configured):
        worker = RelayWorker(configured, handler=MagicMock())
        worker._recovery = MagicMock()
        worker._recovery.recover.side_effect = [
            RecoveryResult(success=False, strategy="cursor", error="No saved watermark"),
            RecoveryResult(success=True, strategy="window", emails_processed=3, total_found=4),
        ]

        worker._recover()

        assert worker._recovery.recover.call_count == 2
        assert worker._recovery.recover.call_args.kwargs["window"].total_seconds() == 24 * 3600
        assert worker.stats.recovered == 3

    def test_run_wires_watch_and_listener(self, configured):
        future = MagicMock()
        future.done.return_value = True
        with patch("gmailrelay.cli.worker.GmailMailboxProvider") as provider_cls, \
             patch("gmailrelay.cli.worker.PubSubPushTransport"), \
             patch("gmailrelay.cli.worker.APSchedulerScheduler") as scheduler_cls, \
             patch("gmailrelay.cli.worker.NotificationListener") as listener_cls:
            provider_cls.return_value = FakeMailboxProvider()
            listener_cls.return_value.listen.return_value = future

            assert RelayWorker(configured).run() == 0

        listener_cls.return_value.listen.assert_called_once()
        assert listener_cls.return_value.listen.call_args[0][0] == "projects/proj/subscriptions/gmail-sub"
        assert provider_cls.return_value.called("watch") == [("watch", ["INBOX"], "projects/proj/topics/gmail")]
        scheduler_cls.return_value.every.assert_called_once()
        scheduler_cls.return_value.shutdown.assert_called_once()


def test_log_email_accepts_decoded_message():
    raw = make_raw_message("m1")
    log_email(decode_message(raw), raw)


class TestRecoverOnce:
    """Test the one-shot recovery CLI."""

    def test_missing_credentials(self, tmp_path):
        with patch("gmailrelay.cli.recover_once.get_settings", return_value=Settings()):
            assert recover_once.main([]) == 1

    def test_absent_watermark_fails(self, configured):
        with patch("gmailrelay.cli.recover_once.get_settings", return_value=configured), \
             patch("gmailrelay.cli.recover_once.GmailMailboxProvider", return_value=FakeMailboxProvider()):
            assert recover_once.main([]) == 2

    def test_window_recovery(self, configured, capsys):
        provider = FakeMailboxProvider(messages={"m1": make_raw_message("m1")}, listed=["m1"])
        with patch("gmailrelay.cli.recover_once.get_settings", return_value=configured), \
             patch("gmailrelay.cli.recover_once.GmailMailboxProvider", return_value=provider):
            assert recover_once.main(["--window-hours", "2", "--max-results", "5"]) == 0

        assert "Recovered 1 of 1 emails (window)" in capsys.readouterr().out

    def test_latest(self, configured, capsys):
        provider = FakeMailboxProvider(messages={"m1": make_raw_message("m1", plain="hello there")}, listed=["m1"])
        with patch("gmailrelay.cli.recover_once.get_settings", return_value=configured), \
             patch("gmailrelay.cli.recover_once.GmailMailboxProvider", return_value=provider):
            assert recover_once.main(["--latest"]) == 0

        assert "hello there" in capsys.readouterr().out
