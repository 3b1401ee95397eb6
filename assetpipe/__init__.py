"""
AssetPipe - Content-Addressed Asset Bundling Service
====================================================

Stores uploaded JS/CSS feeds and combines them into content-addressed
bundles served over HTTP.

Main Components:
- Processing: concurrent feed fetching, parsing, bundling and uploading
- Storage: sink contract, in-memory sink and meta records
- Bundlers: reference JS and CSS bundlers
- Server: aiohttp routes for feeds and bundles
- Configuration: environment variables with Pydantic validation
"""

__version__ = "1.0.0"
__description__ = "Content-addressed JS/CSS asset bundling service"

from .config.settings import get_settings
from .utils.logging import configure_application_logging, get_logger_for_component
from .utils.exceptions import AssetPipeError

__all__ = [
    "get_settings",
    "configure_application_logging",
    "get_logger_for_component",
    "AssetPipeError",
]
