"""
Content addressing for stored feeds and bundles.
"""

import hashlib
from typing import Union


def content_address(content: Union[str, bytes]) -> str:
    """Return the lowercase hex SHA-256 of ``content``.

    Text is hashed as UTF-8 so a bundle hashes the same whether it is held
    as ``str`` or as the bytes written to the sink.
    """
    if isinstance(content, str):
        content = content.encode("utf-8")
    return hashlib.sha256(content).hexdigest()


def stored_object_name(content_hash: str, extension) -> str:
    """Compose the sink key ``<hash>.<extension>``."""
    extension = getattr(extension, "value", extension)
    return f"{content_hash}.{extension}"
