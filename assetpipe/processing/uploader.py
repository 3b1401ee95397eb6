"""
Retrying writes of artifacts to a sink.
"""

from typing import Optional, Union

from ..config.settings import get_settings
from ..recovery.retry_logic import RetryConfig, RetryManager
from ..storage.sink import Sink
from ..utils.exceptions import UploadError
from ..utils.logging import get_logger_for_component


class FeedUploader:
    """Writes a single named object, retrying every failure."""

    def __init__(self, retry_config: Optional[RetryConfig] = None):
        settings = get_settings()
        self.retry_config = retry_config or RetryConfig.from_settings(
            settings.pipeline, max_retries=settings.pipeline.upload_retries
        )
        self.retry_manager = RetryManager(self.retry_config)
        self.logger = get_logger_for_component("uploader")

    async def upload(self, sink: Sink, file_name: str, content: Union[str, bytes], retries: int = 0) -> None:
        """Store ``content`` under ``file_name``.

        Raises:
            UploadError: every attempt failed; the last error is the cause
        """
        if isinstance(content, str):
            content = content.encode("utf-8")

        config = RetryConfig(
            max_retries=retries,
            strategy=self.retry_config.strategy,
            base_delay=self.retry_config.base_delay,
            max_delay=self.retry_config.max_delay,
            exponential_base=self.retry_config.exponential_base,
        )

        try:
            await self.retry_manager.retry_async(
                sink.set,
                file_name,
                content,
                config=config,
                operation=f"upload {file_name}",
            )
        except Exception as e:
            raise UploadError(file_name) from e

        self.logger.info(f"Uploaded {file_name} ({len(content)} bytes)")
