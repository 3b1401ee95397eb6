"""
Routes parsed feeds to the JS or CSS bundler and normalizes its failures.
"""

import asyncio
from typing import Any, Optional, Sequence

from ..bundlers import Bundler, CSSBundler, JSBundler
from ..models import AssetType, BundleOptions
from ..utils.exceptions import BundlingError
from ..utils.logging import get_logger_for_component


class BundlingAdapter:
    """Dispatches to a bundler by asset type.

    Any type other than ``css`` goes to the JS bundler.
    """

    def __init__(self, js_bundler: Optional[Bundler] = None, css_bundler: Optional[Bundler] = None):
        self.js_bundler = js_bundler or JSBundler()
        self.css_bundler = css_bundler or CSSBundler()
        self.logger = get_logger_for_component("bundling")

    async def bundle_feeds(
        self,
        feeds: Sequence[Any],
        asset_type,
        options: Optional[BundleOptions] = None,
    ) -> str:
        """Bundle ``feeds`` in order.

        Args:
            feeds: Parsed feeds
            asset_type: ``AssetType`` or its string value
            options: Forwarded to the bundler unchanged

        Raises:
            BundlingError: the bundler raised; the original error is the cause
        """
        options = options or BundleOptions()

        if asset_type == AssetType.CSS:
            bundler, label = self.css_bundler, "CSS"
        else:
            bundler, label = self.js_bundler, "JS"

        try:
            # Bundling is CPU-bound; keep it off the event loop
            content = await asyncio.to_thread(bundler.bundle, feeds, options)
        except Exception as e:
            self.logger.warning(f"{label} bundler failed: {e}")
            raise BundlingError(
                f"Unable to bundle feeds as {label}.",
                asset_type=label.lower(),
            ) from e

        self.logger.debug(f"Bundled {len(feeds)} feeds as {label} ({len(content)} chars)")
        return content
