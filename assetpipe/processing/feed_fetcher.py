"""
Feed Fetcher
============

Concurrent, retrying reads of stored feeds from a sink.

Each id is fetched in its own task. A missing object aborts that id at once;
any other failure is retried with backoff. The first id that ultimately fails
cancels its siblings and fails the whole batch.
"""

import asyncio
from typing import List, Optional

from ..config.settings import get_settings
from ..recovery.retry_logic import RetryConfig, RetryManager
from ..storage.sink import Sink
from ..utils.exceptions import (
    FeedFetchError,
    FeedNotFoundError,
    ObjectNotFoundError,
)
from ..utils.logging import get_logger_for_component, PerformanceLogger


class FeedFetcher:
    """Fetches raw feeds from a sink with bounded, failure-aware retries."""

    def __init__(self, max_concurrent: int = None, retry_config: Optional[RetryConfig] = None):
        """Initialize feed fetcher.

        Args:
            max_concurrent: Maximum concurrent sink reads (default from config)
            retry_config: Backoff configuration; ``max_retries`` is overridden
                per call (default from config)
        """
        settings = get_settings()
        self.max_concurrent = max_concurrent or settings.pipeline.max_concurrent_fetches
        self.retry_config = retry_config or RetryConfig.from_settings(
            settings.pipeline, max_retries=settings.pipeline.fetch_retries
        )
        self.retry_manager = RetryManager(self.retry_config)
        self.logger = get_logger_for_component("feed_fetcher")

    async def fetch_feed(self, sink: Sink, feed_id: str) -> bytes:
        """Read a single feed once.

        Raises:
            FeedNotFoundError: the sink has no object named ``feed_id``
        """
        try:
            return await sink.get(feed_id)
        except ObjectNotFoundError as e:
            raise FeedNotFoundError(feed_id) from e

    async def fetch_feeds(self, sink: Sink, feed_ids: List[str], retries: int = 0) -> List[bytes]:
        """Fetch every feed in ``feed_ids`` concurrently.

        Args:
            sink: Storage to read from
            feed_ids: Feed ids; the result has the same order
            retries: Retries per id for failures other than not-found

        Returns:
            Raw feed bytes in the order of ``feed_ids``

        Raises:
            FeedFetchError: any id could not be fetched; 404 when the cause is
                a missing ``*.json`` feed, otherwise 500
        """
        config = RetryConfig(
            max_retries=retries,
            strategy=self.retry_config.strategy,
            base_delay=self.retry_config.base_delay,
            max_delay=self.retry_config.max_delay,
            exponential_base=self.retry_config.exponential_base,
            abort_on_exceptions=(FeedNotFoundError,),
        )
        semaphore = asyncio.Semaphore(self.max_concurrent)

        async def fetch_with_retry(feed_id: str) -> bytes:
            async with semaphore:
                return await self.retry_manager.retry_async(
                    self.fetch_feed,
                    sink,
                    feed_id,
                    config=config,
                    operation=f"fetch {feed_id}",
                )

        with PerformanceLogger(self.logger, f"fetch of {len(feed_ids)} feeds", feed_count=len(feed_ids)):
            try:
                async with asyncio.TaskGroup() as group:
                    tasks = [group.create_task(fetch_with_retry(feed_id)) for feed_id in feed_ids]
            except ExceptionGroup as group_error:
                cause = self._first_failure(group_error)
                raise FeedFetchError(
                    status_code=self._status_for(cause),
                    context={"feed_count": len(feed_ids), "cause": str(cause)},
                ) from cause

        return [task.result() for task in tasks]

    @staticmethod
    def _first_failure(group_error: ExceptionGroup) -> Exception:
        """Pick the failure to report, preferring a missing feed."""
        leaves = []
        pending = [group_error]
        while pending:
            current = pending.pop(0)
            if isinstance(current, BaseExceptionGroup):
                pending.extend(current.exceptions)
            else:
                leaves.append(current)

        for leaf in leaves:
            if isinstance(leaf, FeedNotFoundError):
                return leaf
        return leaves[0]

    @staticmethod
    def _status_for(cause: Exception) -> int:
        if isinstance(cause, FeedNotFoundError) and cause.feed_id.endswith("json"):
            return 404
        return 500
