"""
Tests for the processed message id cache.
"""

import threading

import pytest

from conftest import FakeScheduler
from gmailrelay.application.dedup import DEFAULT_RESET_INTERVAL_SECONDS, DedupCache


class TestDedupCache:
    """Test membership, claiming and clearing."""

    def test_mark_and_seen(self, dedup):
        assert dedup.seen("m1") is False
        dedup.mark_seen("m1")
        assert dedup.seen("m1") is True
        assert len(dedup) == 1

    def test_claim_is_check_and_set(self, dedup):
        """Test only the first claim of an id succeeds."""
        assert dedup.claim("m1") is True
        assert dedup.claim("m1") is False
        assert dedup.seen("m1") is True

    def test_claim_from_many_threads(self, dedup):
        """Test concurrent claims of one id succeed exactly once."""
        results = []
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            results.append(dedup.claim("shared"))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count(True) == 1

    def test_release_makes_id_claimable_again(self, dedup):
        dedup.claim("m1")
        dedup.release("m1")

        assert dedup.seen("m1") is False
        assert dedup.claim("m1") is True

    def test_release_of_unknown_id_is_a_noop(self, dedup):
        dedup.release("never-seen")
        assert len(dedup) == 0

    def test_clear(self, dedup):
        dedup.mark_seen("m1")
        dedup.mark_seen("m2")
        dedup.clear()
        assert len(dedup) == 0
        assert dedup.seen("m1") is False

    def test_snapshot_is_a_copy(self, dedup):
        dedup.mark_seen("m1")
        snap = dedup.snapshot()
        dedup.mark_seen("m2")
        assert snap == frozenset({"m1"})


class TestPeriodicReset:
    """Test reset scheduling through the injected scheduler."""

    def test_default_interval_is_24h(self, dedup):
        scheduler = FakeScheduler()
        dedup.reset_periodically(scheduler)
        assert scheduler.jobs["dedup-cache-reset"][0] == DEFAULT_RESET_INTERVAL_SECONDS == 86400

    def test_scheduled_job_clears_unconditionally(self, dedup):
        """Test the scheduled job empties the cache regardless of its size."""
        scheduler = FakeScheduler()
        dedup.reset_periodically(scheduler, interval_seconds=60)
        dedup.mark_seen("m1")

        scheduler.fire("dedup-cache-reset")

        assert len(dedup) == 0

    def test_rejects_non_positive_interval(self, dedup):
        with pytest.raises(ValueError):
            dedup.reset_periodically(FakeScheduler(), interval_seconds=0)


def test_separate_instances_do_not_share_state():
    a, b = DedupCache(), DedupCache()
    a.mark_seen("m1")
    assert b.seen("m1") is False
