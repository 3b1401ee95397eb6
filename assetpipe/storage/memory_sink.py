"""
In-memory sink used as the default storage backend and in tests.
"""

from typing import Dict, Iterator, Optional

from ..utils.exceptions import ObjectNotFoundError
from ..utils.logging import get_logger_for_component


class MemorySink:
    """Dictionary-backed implementation of the ``Sink`` protocol."""

    def __init__(self, initial: Optional[Dict[str, bytes]] = None):
        self._objects: Dict[str, bytes] = {}
        self.logger = get_logger_for_component("memory_sink")
        for key, content in (initial or {}).items():
            self._objects[key] = self._as_bytes(content)

    @staticmethod
    def _as_bytes(content) -> bytes:
        if isinstance(content, str):
            return content.encode("utf-8")
        return bytes(content)

    async def get(self, key: str) -> bytes:
        try:
            return self._objects[key]
        except KeyError:
            raise ObjectNotFoundError(key) from None

    async def set(self, key: str, content: bytes) -> None:
        self._objects[key] = self._as_bytes(content)
        self.logger.debug(f"Stored {key} ({len(self._objects[key])} bytes)")

    def __contains__(self, key: str) -> bool:
        return key in self._objects

    def __iter__(self) -> Iterator[str]:
        return iter(self._objects)

    def __len__(self) -> int:
        return len(self._objects)
