"""
AssetPipe Storage Layer
=======================

Sink contract, the in-memory sink and the meta record store.
"""

from .sink import Sink
from .memory_sink import MemorySink
from .meta_storage import MetaStorage

__all__ = [
    "Sink",
    "MemorySink",
    "MetaStorage",
]
