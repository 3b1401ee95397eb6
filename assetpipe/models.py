"""
AssetPipe Data Models
=====================

Pydantic models for feed records, bundler options and upload results.
"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class AssetType(str, Enum):
    """Asset types the service can bundle."""
    JS = "js"
    CSS = "css"

    @property
    def mime_type(self) -> str:
        return MIME_TYPES[self.value]


MIME_TYPES: Dict[str, str] = {
    "js": "application/javascript",
    "css": "text/css",
    "json": "application/json",
}


class JSModule(BaseModel):
    """A single CommonJS module record inside a JS feed."""
    id: str = Field(..., min_length=1, description="Module id (usually a content hash)")
    entry: Optional[bool] = Field(default=None, description="Execute this module when the bundle loads")
    source: str = Field(..., description="Module source code")
    deps: Dict[str, str] = Field(default_factory=dict, description="require() specifier -> module id")
    file: str = Field(..., min_length=1, description="Original file path")

    model_config = {"extra": "allow"}


class CSSModule(BaseModel):
    """A single stylesheet record inside a CSS feed."""
    id: str = Field(..., min_length=1, description="Stylesheet id (usually a content hash)")
    name: str = Field(..., min_length=1, description="Owning package name")
    version: str = Field(..., min_length=1, description="Owning package version")
    file: str = Field(..., min_length=1, description="Original file path")
    content: str = Field(..., description="Stylesheet source")

    model_config = {"extra": "allow"}


class BundleOptions(BaseModel):
    """Options forwarded verbatim to the bundler.

    ``env`` and ``minify`` are understood by every bundler; anything
    bundler-specific goes in ``extensions``.
    """
    env: str = Field(default="development", min_length=1)
    minify: bool = Field(default=False)
    extensions: Dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}


class UploadResult(BaseModel):
    """Response body for a stored feed or bundle."""
    file: str
    uri: str
    id: Optional[str] = None

    def to_response(self) -> Dict[str, str]:
        return self.model_dump(exclude_none=True)
