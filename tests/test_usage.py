"""Tests for usage counting."""

from concurrent.futures import ThreadPoolExecutor

from cmdclient.usage import UsageCounter


def test_unknown_command_has_zero_uses():
    assert UsageCounter().get("ping") == 0


def test_increment_returns_new_count():
    counter = UsageCounter()
    assert counter.increment("ping") == 1
    assert counter.increment("ping") == 2
    assert counter.get("ping") == 2
    assert counter.get("pong") == 0


def test_snapshot_is_a_copy():
    counter = UsageCounter()
    counter.increment("ping")
    snapshot = counter.snapshot()
    counter.increment("ping")
    assert snapshot == {"ping": 1}


def test_concurrent_increments_are_not_lost():
    counter = UsageCounter()

    def worker(_):
        for _ in range(1000):
            counter.increment("ping")

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(worker, range(8)))

    assert counter.get("ping") == 8000
