"""
AssetPipe HTTP server.
"""

from .app import AssetServer, create_app

__all__ = ["AssetServer", "create_app"]
