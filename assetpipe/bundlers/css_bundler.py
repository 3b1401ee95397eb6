"""
CSS bundler: concatenates stylesheet records in feed order.
"""

from typing import Any, Sequence

from ..models import BundleOptions, CSSModule
from .base import unique_records


class CSSBundler:
    """Joins the ``content`` of every unique stylesheet record."""

    def bundle(self, feeds: Sequence[Any], options: BundleOptions) -> str:
        records = unique_records(feeds, CSSModule)
        parts = []
        for record in records:
            content = record.content
            if not content.endswith("\n"):
                content += "\n"
            parts.append(content)
        return "".join(parts)
