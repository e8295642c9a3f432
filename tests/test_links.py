"""Tests for the link cache and cascading deletion."""

from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock

import pytest

from cmdclient.links import LinkCache, delete_linked


class TestLinkCache:

    def test_fifo_eviction_at_capacity(self):
        cache = LinkCache(2)
        cache.link("A", "a1")
        cache.link("B", "b1")
        cache.link("C", "c1")

        assert cache.consume("A") == frozenset()
        assert cache.consume("B") == {"b1"}
        assert cache.consume("C") == {"c1"}

    def test_adding_to_existing_source_does_not_evict(self):
        cache = LinkCache(2)
        cache.link("A", "a1")
        cache.link("B", "b1")
        cache.link("A", "a2")

        assert len(cache) == 2
        assert cache.consume("A") == {"a1", "a2"}
        assert cache.consume("B") == {"b1"}

    def test_eviction_is_by_insertion_not_access(self):
        cache = LinkCache(2)
        cache.link("A", "a1")
        cache.link("B", "b1")
        cache.link("A", "a2")  # touching A must not refresh it
        cache.link("C", "c1")

        assert not cache.contains("A")
        assert cache.contains("B")
        assert cache.contains("C")

    def test_consume_removes_entry(self):
        cache = LinkCache(5)
        cache.link("A", "a1")
        assert cache.consume("A") == {"a1"}
        assert cache.consume("A") == frozenset()
        assert len(cache) == 0

    def test_zero_capacity_disables_tracking(self):
        cache = LinkCache(0)
        cache.link("A", "a1")
        assert not cache.enabled
        assert len(cache) == 0
        assert not cache.contains("A")
        assert cache.consume("A") == frozenset()

    def test_negative_capacity_rejected(self):
        with pytest.raises(ValueError):
            LinkCache(-1)

    def test_concurrent_links_respect_capacity(self):
        cache = LinkCache(50)

        def worker(i):
            for j in range(100):
                cache.link(f"s{i}-{j}", f"r{j}")

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(worker, range(8)))

        assert len(cache) == 50


class TestDeleteLinked:

    def test_bulk_delete_when_allowed_and_multiple(self):
        cache = LinkCache(10)
        cache.link("src", "r2")
        cache.link("src", "r1")
        deleter = MagicMock()

        count = delete_linked(cache, "src", deleter, channel_id="c", can_bulk_delete=True)

        assert count == 2
        deleter.delete_messages.assert_called_once_with("c", ["r1", "r2"])
        deleter.delete_message.assert_not_called()
        assert not cache.contains("src")

    def test_individual_deletes_without_bulk_permission(self):
        cache = LinkCache(10)
        cache.link("src", "r1")
        cache.link("src", "r2")
        deleter = MagicMock()

        delete_linked(cache, "src", deleter, channel_id="c", can_bulk_delete=False)

        assert deleter.delete_message.call_count == 2
        deleter.delete_messages.assert_not_called()

    def test_single_response_is_deleted_individually(self):
        cache = LinkCache(10)
        cache.link("src", "r1")
        deleter = MagicMock()

        delete_linked(cache, "src", deleter, channel_id="c", can_bulk_delete=True)

        deleter.delete_message.assert_called_once_with("c", "r1")
        deleter.delete_messages.assert_not_called()

    def test_untracked_source_deletes_nothing(self):
        deleter = MagicMock()
        assert delete_linked(LinkCache(10), "src", deleter) == 0
        deleter.delete_message.assert_not_called()
        deleter.delete_messages.assert_not_called()

    def test_failures_are_swallowed(self):
        cache = LinkCache(10)
        cache.link("src", "r1")
        cache.link("src", "r2")
        deleter = MagicMock()
        deleter.delete_message.side_effect = RuntimeError("gone")

        assert delete_linked(cache, "src", deleter) == 2
        assert deleter.delete_message.call_count == 2

    def test_bulk_failure_is_swallowed(self):
        cache = LinkCache(10)
        cache.link("src", "r1")
        cache.link("src", "r2")
        deleter = MagicMock()
        deleter.delete_messages.side_effect = RuntimeError("forbidden")

        assert delete_linked(cache, "src", deleter, can_bulk_delete=True) == 2
