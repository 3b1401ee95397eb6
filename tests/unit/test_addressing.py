"""
Tests for content addressing of feeds and bundles.
"""

import hashlib

from assetpipe.models import AssetType
from assetpipe.processing.addressing import content_address, stored_object_name


class TestContentAddress:
    """SHA-256 addressing of artifact content."""

    def test_known_digest(self):
        expected = hashlib.sha256(b"console.log(1);").hexdigest()
        assert content_address("console.log(1);") == expected

    def test_same_content_same_address(self):
        content = "body { margin: 0; }"
        assert content_address(content) == content_address(content)

    def test_str_and_utf8_bytes_agree(self):
        content = "/* ünïcödé */"
        assert content_address(content) == content_address(content.encode("utf-8"))

    def test_different_content_different_address(self):
        assert content_address("a") != content_address("b")

    def test_lowercase_hex_64_chars(self):
        address = content_address("x")
        assert len(address) == 64
        assert address == address.lower()
        int(address, 16)


class TestStoredObjectName:
    """Composition of ``<hash>.<type>`` sink keys."""

    def test_with_asset_type(self):
        assert stored_object_name("abc", AssetType.CSS) == "abc.css"

    def test_with_plain_extension(self):
        assert stored_object_name("abc", "json") == "abc.json"
