"""
AssetPipe Processing Module
===========================

Pipeline components: fetching stored feeds, parsing, bundling, content
addressing and uploading.
"""

from .addressing import content_address, stored_object_name
from .feed_fetcher import FeedFetcher
from .feed_parser import FeedParser
from .bundling import BundlingAdapter
from .uploader import FeedUploader
from .pipeline import BundlePipeline

__all__ = [
    'content_address',
    'stored_object_name',
    'FeedFetcher',
    'FeedParser',
    'BundlingAdapter',
    'FeedUploader',
    'BundlePipeline',
]
