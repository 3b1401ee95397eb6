"""
AssetPipe Custom Exceptions
===========================

Exception hierarchy for AssetPipe with error codes, HTTP status semantics,
context information and user-facing messages. Every pipeline stage raises
one of these from the underlying cause so the original error stays reachable
through ``__cause__``.
"""

from typing import Optional, Dict, Any
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for categorizing exceptions."""

    # Configuration errors (C001-C099)
    CONFIG_INVALID = "C001"
    CONFIG_MISSING = "C002"

    # Storage errors (S001-S099)
    STORAGE_NOT_FOUND = "S001"
    STORAGE_READ_FAILED = "S002"
    STORAGE_WRITE_FAILED = "S003"

    # Feed errors (F001-F099)
    FEED_NOT_FOUND = "F001"
    FEED_FETCH_FAILED = "F002"
    FEED_PARSE_ERROR = "F003"

    # Bundling errors (B001-B099)
    BUNDLE_FAILED = "B001"

    # Upload errors (U001-U099)
    UPLOAD_FAILED = "U001"

    # Meta storage errors (M001-M099)
    META_STORAGE_FAILED = "M001"

    # Validation errors (V001-V099)
    VALIDATION_REQUIRED_FIELD = "V001"
    VALIDATION_INVALID_FORMAT = "V002"
    VALIDATION_OUT_OF_RANGE = "V003"


class AssetPipeError(Exception):
    """Base exception for all AssetPipe errors."""

    default_status_code = 500

    def __init__(
        self,
        message: str,
        error_code: Optional[ErrorCode] = None,
        context: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None,
        recoverable: bool = False,
        status_code: Optional[int] = None,
    ):
        """Initialize AssetPipe error.

        Args:
            message: Technical error message for logging
            error_code: Categorized error code
            context: Additional context information
            user_message: Caller-facing error message
            recoverable: Whether retrying the operation may succeed
            status_code: HTTP status the error maps to
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}
        self.user_message = user_message or message
        self.recoverable = recoverable
        self.status_code = status_code or self.default_status_code

    @property
    def cause(self) -> Optional[BaseException]:
        """The underlying error this one was raised from, if any."""
        return self.__cause__

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code.value if self.error_code else None,
            "error_message": str(self),
            "user_message": self.user_message,
            "status_code": self.status_code,
            "context": self.context,
            "recoverable": self.recoverable,
            "cause": repr(self.cause) if self.cause else None,
        }

    def __str__(self) -> str:
        """String representation with error code."""
        if self.error_code:
            return f"[{self.error_code.value}] {super().__str__()}"
        return super().__str__()


def _passthrough(kwargs: Dict[str, Any], *consumed: str) -> Dict[str, Any]:
    return {k: v for k, v in kwargs.items() if k not in consumed}


class ConfigurationError(AssetPipeError):
    """Configuration-related errors."""

    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs):
        context = kwargs.get("context", {})
        if config_key:
            context["config_key"] = config_key

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.CONFIG_INVALID),
            context=context,
            user_message=kwargs.get("user_message", f"Configuration error: {message}"),
            **_passthrough(kwargs, "context", "error_code", "user_message"),
        )


class StorageError(AssetPipeError):
    """Sink read/write failure other than a missing object.

    Raised by sink implementations for transient I/O problems; the fetcher
    and uploader retry these.
    """

    def __init__(self, message: str, key: Optional[str] = None, **kwargs):
        context = kwargs.get("context", {})
        if key:
            context["key"] = key
        self.key = key

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.STORAGE_READ_FAILED),
            context=context,
            user_message=kwargs.get("user_message", "Storage operation failed"),
            recoverable=kwargs.get("recoverable", True),
            **_passthrough(kwargs, "context", "error_code", "user_message", "recoverable"),
        )


class ObjectNotFoundError(StorageError):
    """The requested key does not exist in the sink."""

    default_status_code = 404

    def __init__(self, key: str, **kwargs):
        super().__init__(
            message=kwargs.pop("message", f'No file with name "{key}"'),
            key=key,
            error_code=ErrorCode.STORAGE_NOT_FOUND,
            user_message=kwargs.pop("user_message", f'File "{key}" not found.'),
            recoverable=False,
            **kwargs,
        )


class FeedNotFoundError(AssetPipeError):
    """A referenced feed is absent from storage. Never retried."""

    default_status_code = 404

    def __init__(self, feed_id: str, **kwargs):
        context = kwargs.get("context", {})
        context["feed_id"] = feed_id
        self.feed_id = feed_id

        super().__init__(
            message=f'File "{feed_id}" not found.',
            error_code=ErrorCode.FEED_NOT_FOUND,
            context=context,
            user_message=kwargs.get("user_message", f'File "{feed_id}" not found.'),
            recoverable=False,
            **_passthrough(kwargs, "context", "user_message"),
        )


class FeedFetchError(AssetPipeError):
    """One or more feeds could not be fetched from storage."""

    def __init__(self, message: str = "Unable to fetch one or more feeds from storage.", **kwargs):
        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.FEED_FETCH_FAILED),
            context=kwargs.get("context", {}),
            user_message=kwargs.get("user_message", message),
            recoverable=kwargs.get("recoverable", False),
            **_passthrough(kwargs, "context", "error_code", "user_message", "recoverable"),
        )


class FeedParseError(AssetPipeError):
    """A stored feed is not valid JSON."""

    def __init__(self, message: str = "Unable to parse one or more feeds as JSON.", **kwargs):
        super().__init__(
            message=message,
            error_code=ErrorCode.FEED_PARSE_ERROR,
            context=kwargs.get("context", {}),
            user_message=kwargs.get("user_message", message),
            **_passthrough(kwargs, "context", "user_message"),
        )


class BundlingError(AssetPipeError):
    """The underlying bundler rejected its input."""

    def __init__(self, message: str, asset_type: Optional[str] = None, **kwargs):
        context = kwargs.get("context", {})
        if asset_type:
            context["asset_type"] = asset_type

        super().__init__(
            message=message,
            error_code=ErrorCode.BUNDLE_FAILED,
            context=context,
            user_message=kwargs.get("user_message", message),
            **_passthrough(kwargs, "context", "user_message"),
        )


class UploadError(AssetPipeError):
    """Writing an artifact to storage failed after all retries."""

    def __init__(self, file_name: str, **kwargs):
        context = kwargs.get("context", {})
        context["file_name"] = file_name
        self.file_name = file_name
        message = f'Unable to upload file with name "{file_name}" to storage.'

        super().__init__(
            message=message,
            error_code=ErrorCode.UPLOAD_FAILED,
            context=context,
            user_message=kwargs.get("user_message", message),
            **_passthrough(kwargs, "context", "user_message"),
        )


class MetaStorageError(AssetPipeError):
    """Persisting or reading a meta record failed."""

    def __init__(self, message: str, meta_id: Optional[str] = None, **kwargs):
        context = kwargs.get("context", {})
        if meta_id:
            context["meta_id"] = meta_id

        super().__init__(
            message=message,
            error_code=ErrorCode.META_STORAGE_FAILED,
            context=context,
            user_message=kwargs.get("user_message", "Unable to store meta information"),
            **_passthrough(kwargs, "context", "user_message"),
        )


class ValidationError(AssetPipeError):
    """Client-supplied data failed validation."""

    default_status_code = 400

    def __init__(self, message: str, field_name: Optional[str] = None, **kwargs):
        context = kwargs.get("context", {})
        if field_name:
            context["field_name"] = field_name

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.VALIDATION_INVALID_FORMAT),
            context=context,
            user_message=kwargs.get("user_message", message),
            recoverable=False,
            **_passthrough(kwargs, "context", "error_code", "user_message", "recoverable"),
        )


def get_user_friendly_message(exception: Exception) -> str:
    """Get caller-facing error message for any exception."""
    if isinstance(exception, AssetPipeError):
        return exception.user_message

    return "An internal server error occurred"
