"""
Decodes raw stored feeds into JSON structures.
"""

import json
from typing import Any, List, Sequence, Union

from ..utils.exceptions import FeedParseError
from ..utils.logging import get_logger_for_component


class FeedParser:
    """All-or-nothing JSON decoding of fetched feeds."""

    def __init__(self):
        self.logger = get_logger_for_component("feed_parser")

    def parse_feeds(self, raw_feeds: Sequence[Union[bytes, str]]) -> List[Any]:
        """Decode each raw feed in order.

        Raises:
            FeedParseError: any feed is not valid JSON; nothing is returned
        """
        parsed = []
        for index, raw in enumerate(raw_feeds):
            try:
                parsed.append(json.loads(raw))
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                self.logger.warning(f"Feed at position {index} is not valid JSON: {e}")
                raise FeedParseError(context={"position": index}) from e

        return parsed
