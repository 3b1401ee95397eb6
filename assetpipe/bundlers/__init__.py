"""
AssetPipe Bundlers
==================

Reference implementations of the bundler contract used by the pipeline.
"""

from .base import Bundler
from .css_bundler import CSSBundler
from .js_bundler import JSBundler

__all__ = [
    "Bundler",
    "CSSBundler",
    "JSBundler",
]
