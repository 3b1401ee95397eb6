"""
Bundle Pipeline Orchestrator
============================

Composes fetching, parsing, bundling, content addressing and uploading into
the two operations the HTTP layer exposes:

- ``bundle_and_upload``: combine stored feeds into one content-addressed bundle
- ``upload_raw_feed``: validate a new feed and store it content-addressed

Errors raised by the stages are already classified and propagate untouched.
"""

import json
from typing import Any, List, Optional

from ..config.settings import get_settings
from ..models import BundleOptions, UploadResult
from ..storage.sink import Sink
from ..utils.logging import get_logger_for_component, PerformanceLogger
from ..utils.validators import FeedValidator

from .addressing import content_address, stored_object_name
from .bundling import BundlingAdapter
from .feed_fetcher import FeedFetcher
from .feed_parser import FeedParser
from .uploader import FeedUploader


# Raw feeds are stored under this extension regardless of asset type
FEED_EXTENSION = "json"


class BundlePipeline:
    """Stateless fetch -> parse -> bundle -> address -> upload pipeline."""

    def __init__(
        self,
        fetcher: Optional[FeedFetcher] = None,
        parser: Optional[FeedParser] = None,
        bundler: Optional[BundlingAdapter] = None,
        uploader: Optional[FeedUploader] = None,
    ):
        """Initialize the pipeline.

        Args:
            fetcher: Feed fetcher (default built from settings)
            parser: Feed parser
            bundler: Bundling adapter with the default JS/CSS bundlers
            uploader: Artifact uploader (default built from settings)
        """
        self.settings = get_settings()
        self.logger = get_logger_for_component("pipeline")

        self.fetcher = fetcher or FeedFetcher()
        self.parser = parser or FeedParser()
        self.bundler = bundler or BundlingAdapter()
        self.uploader = uploader or FeedUploader()

    def default_options(self) -> BundleOptions:
        """Bundle options from the ``bundler`` settings section."""
        return BundleOptions(env=self.settings.bundler.env, minify=self.settings.bundler.minify)

    async def bundle_and_upload(
        self,
        sink: Sink,
        asset_type,
        feed_ids: List[str],
        uri: str,
        options: Optional[BundleOptions] = None,
    ) -> UploadResult:
        """Bundle the stored feeds ``feed_ids`` and store the result.

        Args:
            sink: Storage holding the feeds and receiving the bundle
            asset_type: ``AssetType`` (or its value) selecting the bundler
            feed_ids: Non-empty, validated list of feed ids
            uri: Public base uri the file name is appended to
            options: Bundler options (default from settings)

        Returns:
            ``UploadResult`` with ``file = <sha256>.<type>``

        Raises:
            ValueError: ``feed_ids`` is empty or not a list (caller bug)
            FeedFetchError, FeedParseError, BundlingError, UploadError
        """
        if not isinstance(feed_ids, list) or not feed_ids:
            raise ValueError(f"Expected at least 1 feed id, but got {feed_ids!r}")

        options = options or self.default_options()
        extension = getattr(asset_type, "value", asset_type)

        with PerformanceLogger(
            self.logger, f"bundling {len(feed_ids)} feeds as {extension}", asset_type=extension
        ):
            fetched = await self.fetcher.fetch_feeds(
                sink, feed_ids, retries=self.settings.pipeline.fetch_retries
            )
            parsed = self.parser.parse_feeds(fetched)
            content = await self.bundler.bundle_feeds(parsed, asset_type, options)
            file_name = stored_object_name(content_address(content), extension)
            await self.uploader.upload(
                sink, file_name, content, retries=self.settings.pipeline.upload_retries
            )

        return UploadResult(file=file_name, uri=uri + file_name)

    async def upload_raw_feed(self, sink: Sink, asset_type, payload: Any, uri: str) -> UploadResult:
        """Validate a new feed and store it under ``<sha256>.json``.

        Raises:
            ValidationError: the payload is not a non-empty list of records
            UploadError
        """
        feed = FeedValidator.validate_feed_payload(payload, asset_type)

        content = json.dumps(feed, separators=(",", ":"), ensure_ascii=False)
        content_hash = content_address(content)
        file_name = stored_object_name(content_hash, FEED_EXTENSION)

        await self.uploader.upload(
            sink, file_name, content, retries=self.settings.pipeline.upload_retries
        )
        self.logger.info(
            f"Stored {getattr(asset_type, 'value', asset_type)} feed {file_name} with {len(feed)} records"
        )

        return UploadResult(file=file_name, uri=uri + file_name, id=content_hash)
