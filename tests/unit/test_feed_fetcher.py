"""
Tests for concurrent feed fetching, retry and failure classification.
"""

import asyncio

import pytest

from assetpipe.processing.feed_fetcher import FeedFetcher
from assetpipe.recovery.retry_logic import RetryConfig
from assetpipe.storage.memory_sink import MemorySink
from assetpipe.utils.exceptions import (
    FeedFetchError,
    FeedNotFoundError,
    ObjectNotFoundError,
    StorageError,
)


class DelayedSink(MemorySink):
    """Memory sink whose reads finish in reverse order of the given delays."""

    def __init__(self, initial, delays):
        super().__init__(initial)
        self.delays = delays

    async def get(self, key):
        await asyncio.sleep(self.delays.get(key, 0))
        return await super().get(key)


@pytest.fixture
def fetcher():
    return FeedFetcher(max_concurrent=5, retry_config=RetryConfig(base_delay=0, max_delay=0))


@pytest.fixture
def stored_sink():
    return MemorySink({"a.json": b"[1]", "b.json": b"[2]", "c.json": b"[3]"})


class TestFetchFeed:
    """Single reads."""

    @pytest.mark.asyncio
    async def test_returns_bytes(self, fetcher, stored_sink):
        assert await fetcher.fetch_feed(stored_sink, "a.json") == b"[1]"

    @pytest.mark.asyncio
    async def test_missing_object_becomes_feed_not_found(self, fetcher, stored_sink):
        with pytest.raises(FeedNotFoundError) as exc_info:
            await fetcher.fetch_feed(stored_sink, "missing.json")

        assert exc_info.value.feed_id == "missing.json"
        assert isinstance(exc_info.value.__cause__, ObjectNotFoundError)


class TestFetchFeeds:
    """Batch reads with ordering, retry and classification."""

    @pytest.mark.asyncio
    async def test_preserves_request_order(self, fetcher, stored_sink):
        result = await fetcher.fetch_feeds(stored_sink, ["c.json", "a.json", "b.json"])
        assert result == [b"[3]", b"[1]", b"[2]"]

    @pytest.mark.asyncio
    async def test_order_independent_of_completion_order(self, fetcher):
        sink = DelayedSink(
            {"slow.json": b"slow", "fast.json": b"fast"},
            delays={"slow.json": 0.05, "fast.json": 0},
        )

        result = await fetcher.fetch_feeds(sink, ["slow.json", "fast.json"])
        assert result == [b"slow", b"fast"]

    @pytest.mark.asyncio
    async def test_duplicate_ids_are_fetched_for_each_position(self, fetcher, stored_sink):
        result = await fetcher.fetch_feeds(stored_sink, ["a.json", "a.json"])
        assert result == [b"[1]", b"[1]"]

    @pytest.mark.asyncio
    async def test_missing_json_feed_is_404(self, fetcher, stored_sink):
        with pytest.raises(FeedFetchError) as exc_info:
            await fetcher.fetch_feeds(stored_sink, ["a.json", "missing.json"], retries=3)

        error = exc_info.value
        assert error.status_code == 404
        assert isinstance(error.cause, FeedNotFoundError)
        assert error.cause.feed_id == "missing.json"

    @pytest.mark.asyncio
    async def test_missing_non_json_feed_is_500(self, fetcher, stored_sink):
        with pytest.raises(FeedFetchError) as exc_info:
            await fetcher.fetch_feeds(stored_sink, ["missing.js"])

        assert exc_info.value.status_code == 500
        assert isinstance(exc_info.value.cause, FeedNotFoundError)

    @pytest.mark.asyncio
    async def test_missing_feed_is_not_retried(self, fetcher, stored_sink, flaky_sink_factory):
        sink = flaky_sink_factory(stored_sink)

        with pytest.raises(FeedFetchError):
            await fetcher.fetch_feeds(sink, ["missing.json"], retries=3)

        assert sink.get_calls == ["missing.json"]

    @pytest.mark.asyncio
    async def test_transient_failure_is_retried(self, fetcher, stored_sink, flaky_sink_factory):
        sink = flaky_sink_factory(stored_sink, get_failures=2)

        result = await fetcher.fetch_feeds(sink, ["a.json"], retries=3)

        assert result == [b"[1]"]
        assert sink.get_calls == ["a.json"] * 3

    @pytest.mark.asyncio
    async def test_exhausted_retries_are_500_with_cause(self, fetcher, stored_sink, flaky_sink_factory):
        failure = StorageError("disk on fire", key="a.json")
        sink = flaky_sink_factory(stored_sink, get_failures=10, error=failure)

        with pytest.raises(FeedFetchError) as exc_info:
            await fetcher.fetch_feeds(sink, ["a.json"], retries=2)

        assert exc_info.value.status_code == 500
        assert exc_info.value.cause is failure
        assert len(sink.get_calls) == 3

    @pytest.mark.asyncio
    async def test_no_retries_by_default(self, fetcher, stored_sink, flaky_sink_factory):
        sink = flaky_sink_factory(stored_sink, get_failures=1)

        with pytest.raises(FeedFetchError):
            await fetcher.fetch_feeds(sink, ["a.json"])

        assert len(sink.get_calls) == 1

    @pytest.mark.asyncio
    async def test_concurrency_is_bounded(self, stored_sink):
        active = {"now": 0, "peak": 0}

        class CountingSink(MemorySink):
            async def get(self, key):
                active["now"] += 1
                active["peak"] = max(active["peak"], active["now"])
                await asyncio.sleep(0.01)
                active["now"] -= 1
                return await super().get(key)

        sink = CountingSink({f"{i}.json": b"[]" for i in range(6)})
        fetcher = FeedFetcher(max_concurrent=2, retry_config=RetryConfig(base_delay=0, max_delay=0))

        await fetcher.fetch_feeds(sink, [f"{i}.json" for i in range(6)])

        assert active["peak"] <= 2
