"""
Pytest configuration and shared fakes for the ingestion pipeline tests.
"""

import base64
import json
import threading
from datetime import datetime, timezone

import pytest

from gmailrelay.application.dedup import DedupCache
from gmailrelay.application.ports.mailbox import HistoryPage, WatchResponse
from gmailrelay.application.use_cases.deliver_messages import MessageDeliverer
from gmailrelay.domain.entities.watermark import Watermark, is_older


def b64(text):
    """Gmail-style base64url without padding."""
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii").rstrip("=")


def make_raw_message(message_id, subject="Hello", plain="Body", html=None, parts=None):
    """Build a minimal users.messages.get(format=full) response."""
    if parts is None:
        parts = [{"mimeType": "text/plain", "body": {"data": b64(plain), "size": len(plain)}}]
        if html is not None:
            parts.append({"mimeType": "text/html", "body": {"data": b64(html), "size": len(html)}})
    return {
        "id": message_id,
        "threadId": f"thread-{message_id}",
        "snippet": plain[:20] if plain else "",
        "payload": {
            "mimeType": "multipart/alternative",
            "headers": [
                {"name": "Subject", "value": subject},
                {"name": "From", "value": "sender@example.com"},
                {"name": "Date", "value": "Mon, 1 Jan 2024 10:00:00 +0000"},
            ],
            "body": {"size": 0},
            "parts": parts,
        },
    }


class FakeMailboxProvider:
    """In-memory MailboxProvider recording every call."""

    def __init__(self, messages=None, listed=None, history_page=None, failing=()):
        self.messages = dict(messages or {})
        self.listed = list(listed or [])
        self.history_page = history_page or HistoryPage(events=[], history_id="")
        self.failing = set(failing)
        self.calls = []

    def watch(self, label_ids, topic_name):
        self.calls.append(("watch", list(label_ids), topic_name))
        return WatchResponse(history_id="500", expiration=datetime(2024, 1, 8, tzinfo=timezone.utc))

    def list_message_ids(self, label_ids=None, max_results=1, query=None):
        self.calls.append(("list", label_ids, max_results, query))
        return self.listed[:max_results]

    def get_message(self, message_id):
        self.calls.append(("get", message_id))
        if message_id in self.failing:
            raise RuntimeError(f"fetch failed for {message_id}")
        return self.messages[message_id]

    def history(self, start_history_id, history_types, max_results, label_id=None):
        self.calls.append(("history", start_history_id, tuple(history_types), max_results, label_id))
        return self.history_page

    def get_attachment(self, message_id, attachment_id):
        self.calls.append(("attachment", message_id, attachment_id))
        return b""

    def called(self, name):
        return [c for c in self.calls if c[0] == name]


class InMemoryWatermarkStore:
    """WatermarkStore kept in memory."""

    def __init__(self, cursor=None, fail_saves=False):
        self.cursor = cursor
        self.fail_saves = fail_saves
        self.saves = []
        self._lock = threading.Lock()

    def load(self):
        if self.cursor is None:
            return None
        return Watermark(cursor=self.cursor, saved_at=datetime(2024, 1, 1, tzinfo=timezone.utc))

    def save(self, cursor):
        self.saves.append(cursor)
        if self.fail_saves:
            return False
        self.cursor = cursor
        return True

    def save_if_newer(self, cursor):
        with self._lock:
            current = self.load()
            if current is not None and is_older(cursor, current.cursor):
                return False
            return self.save(cursor)


class FakeScheduler:
    """Scheduler that runs jobs only when told to."""

    def __init__(self):
        self.jobs = {}
        self.stopped = False

    def every(self, interval_seconds, func, name):
        self.jobs[name] = (interval_seconds, func)
        return name

    def fire(self, name):
        self.jobs[name][1]()

    def shutdown(self):
        self.stopped = True


class FakePushMessage:
    """Stand-in for a Pub/Sub message."""

    def __init__(self, data):
        self.data = data
        self.acked = False

    def ack(self):
        self.acked = True


def push_for(history_id, email="me@example.com"):
    return FakePushMessage(json.dumps({"emailAddress": email, "historyId": history_id}).encode("utf-8"))


class RecordingHandler:
    """Handler that records (email, raw) pairs."""

    def __init__(self, fail_on=()):
        self.calls = []
        self.fail_on = set(fail_on)

    def __call__(self, email, raw):
        if email.id in self.fail_on:
            raise ValueError(f"handler rejected {email.id}")
        self.calls.append((email, raw))

    @property
    def ids(self):
        return [email.id for email, _ in self.calls]


@pytest.fixture
def handler():
    return RecordingHandler()


@pytest.fixture
def dedup():
    return DedupCache()


@pytest.fixture
def store():
    return InMemoryWatermarkStore()


@pytest.fixture
def provider():
    messages = {mid: make_raw_message(mid, subject=f"Subject {mid}") for mid in ("m1", "m2", "m3")}
    return FakeMailboxProvider(messages=messages, listed=["m1"])


@pytest.fixture
def deliverer(provider, dedup):
    return MessageDeliverer(provider, dedup)
