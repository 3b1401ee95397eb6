"""
AssetPipe Input Validators
==========================

Validation of client-supplied file names, feed id lists and feed payloads.
Every failure is raised as ``ValidationError`` so the HTTP layer answers 400.
"""

import re
from typing import Any, List

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from ..models import AssetType, CSSModule, JSModule
from .exceptions import ValidationError, ErrorCode


class FileNameValidator:
    """File name validation for stored feeds and bundles."""

    # Feed names: "<name>.json" or "<name>.js"
    FEED_PATTERN = re.compile(r'^[a-zA-Z0-9._-]+\.(json|js)$')

    # Bundle names: "<name>.js" or "<name>.css"
    BUNDLE_PATTERN = re.compile(r'^[a-zA-Z0-9._-]+\.(js|css)$')

    @classmethod
    def validate_feed_name(cls, value: Any) -> str:
        """Validate a feed file name; returns it trimmed and lowercased.

        Raises:
            ValidationError: If the name is missing or malformed
        """
        return cls._validate(value, cls.FEED_PATTERN, "file")

    @classmethod
    def validate_bundle_name(cls, value: Any) -> str:
        """Validate a bundle file name; returns it trimmed and lowercased."""
        return cls._validate(value, cls.BUNDLE_PATTERN, "file")

    @staticmethod
    def _validate(value: Any, pattern: re.Pattern, field_name: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(
                f"{field_name} is required and must be a non-empty string",
                field_name=field_name,
                error_code=ErrorCode.VALIDATION_REQUIRED_FIELD,
            )

        value = value.strip().lower()
        if not pattern.match(value):
            raise ValidationError(
                f'"{value}" is not a valid file name',
                field_name=field_name,
                error_code=ErrorCode.VALIDATION_INVALID_FORMAT,
            )

        return value


class FeedValidator:
    """Validation for feed id lists and raw feed payloads."""

    MIN_IDS = 1
    MAX_IDS = 100

    _record_adapters = {
        AssetType.JS: TypeAdapter(List[JSModule]),
        AssetType.CSS: TypeAdapter(List[CSSModule]),
    }

    @classmethod
    def validate_feed_ids(cls, value: Any) -> List[str]:
        """Validate a bundle request body: 1-100 non-empty strings.

        Returns:
            The ids unchanged and in order

        Raises:
            ValidationError: If the list is missing, empty, too long or holds
                anything other than non-empty strings
        """
        if not isinstance(value, list):
            raise ValidationError(
                "Feed ids must be given as an array",
                field_name="ids",
                error_code=ErrorCode.VALIDATION_REQUIRED_FIELD,
                user_message="Invalid feed data given in POST-body.",
            )

        if not cls.MIN_IDS <= len(value) <= cls.MAX_IDS:
            raise ValidationError(
                f"Expected between {cls.MIN_IDS} and {cls.MAX_IDS} feed ids, got {len(value)}",
                field_name="ids",
                error_code=ErrorCode.VALIDATION_OUT_OF_RANGE,
                user_message="Invalid feed data given in POST-body.",
            )

        for position, feed_id in enumerate(value):
            if not isinstance(feed_id, str) or not feed_id:
                raise ValidationError(
                    f"Feed id at position {position} must be a non-empty string",
                    field_name="ids",
                    error_code=ErrorCode.VALIDATION_INVALID_FORMAT,
                    user_message="Invalid feed data given in POST-body.",
                    context={"position": position},
                )

        return list(value)

    @classmethod
    def validate_feed_payload(cls, value: Any, asset_type) -> List[dict]:
        """Validate a raw feed upload: a non-empty array of module records.

        Records are checked against the JS or CSS record shape (CSS for
        ``css``, JS otherwise) but returned as given so the stored bytes
        reflect exactly what the client sent.
        """
        if not isinstance(value, list) or not value:
            raise ValidationError(
                "Feed must be a non-empty array of module records",
                field_name="feed",
                error_code=ErrorCode.VALIDATION_REQUIRED_FIELD,
                user_message="Invalid feed data given in POST-body.",
            )

        adapter = cls._record_adapters[AssetType.CSS if asset_type == AssetType.CSS else AssetType.JS]
        try:
            adapter.validate_python(value)
        except PydanticValidationError as e:
            raise ValidationError(
                f"Feed records are invalid: {e.error_count()} error(s)",
                field_name="feed",
                error_code=ErrorCode.VALIDATION_INVALID_FORMAT,
                user_message="Invalid feed data given in POST-body.",
                context={"errors": e.errors(include_url=False)},
            ) from e

        return value

    @classmethod
    def validate_asset_type(cls, value: Any) -> AssetType:
        """Validate an asset type route segment.

        An unknown type names no resource, so it is reported as 404.
        """
        try:
            return AssetType(value)
        except ValueError:
            raise ValidationError(
                f'Unsupported asset type "{value}"',
                field_name="type",
                error_code=ErrorCode.VALIDATION_INVALID_FORMAT,
                user_message="Not Found",
                status_code=404,
            ) from None
