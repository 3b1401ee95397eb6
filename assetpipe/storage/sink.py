"""
Sink contract
=============

A sink is a key/bytes blob store. Implementations must raise
``ObjectNotFoundError`` for absent keys and ``StorageError`` (or any other
exception) for transient failures; the pipeline relies on that distinction
to decide between aborting and retrying.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class Sink(Protocol):
    """Blob storage consumed by the pipeline."""

    async def get(self, key: str) -> bytes:
        """Return the stored bytes or raise ``ObjectNotFoundError``."""
        ...

    async def set(self, key: str, content: bytes) -> None:
        """Create or overwrite ``key``."""
        ...
