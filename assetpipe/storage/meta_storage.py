"""
Meta storage: maps caller-chosen ids onto stored feeds and bundles.
"""

import json
from typing import Optional

from ..models import UploadResult
from .sink import Sink
from ..utils.exceptions import MetaStorageError, ObjectNotFoundError
from ..utils.logging import get_logger_for_component


class MetaStorage:
    """Persists ``id -> {file, uri}`` records as JSON in a sink."""

    PREFIX = "meta/"

    def __init__(self, sink: Sink):
        self.sink = sink
        self.logger = get_logger_for_component("meta_storage")

    def key_for(self, meta_id: str) -> str:
        return f"{self.PREFIX}{meta_id}.json"

    async def set(self, meta_id: str, result: UploadResult) -> None:
        """Record ``result`` under ``meta_id``, replacing any earlier record.

        Raises:
            MetaStorageError: the sink write failed
        """
        record = {"file": result.file, "uri": result.uri}
        try:
            await self.sink.set(self.key_for(meta_id), json.dumps(record).encode("utf-8"))
        except Exception as e:
            raise MetaStorageError(
                f'Unable to store meta information for "{meta_id}"', meta_id=meta_id
            ) from e

        self.logger.info(f"Stored meta record {meta_id} -> {result.file}")

    async def get(self, meta_id: str) -> Optional[UploadResult]:
        """Return the record for ``meta_id`` or None when there is none."""
        try:
            raw = await self.sink.get(self.key_for(meta_id))
        except ObjectNotFoundError:
            return None
        except Exception as e:
            raise MetaStorageError(
                f'Unable to read meta information for "{meta_id}"', meta_id=meta_id
            ) from e

        return UploadResult.model_validate_json(raw)
