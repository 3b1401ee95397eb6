"""
PyTest Configuration and Fixtures
=================================

Shared fixtures and configuration for AssetPipe tests.
"""

import os
import sys
import tempfile
from pathlib import Path

import pytest

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set test environment variables before any imports
os.environ["ASSETPIPE_PIPELINE__RETRY_BASE_DELAY"] = "0"
os.environ["ASSETPIPE_PIPELINE__RETRY_MAX_DELAY"] = "0"
os.environ["ASSETPIPE_LOGGING__FILE_PATH"] = str(
    Path(tempfile.gettempdir()) / "assetpipe_tests" / "assetpipe.log"
)


class FlakySink:
    """Sink wrapper that fails ``get``/``set`` a fixed number of times first.

    Records every call so tests can count attempts per key.
    """

    def __init__(self, inner, get_failures: int = 0, set_failures: int = 0, error=None):
        self.inner = inner
        self.get_failures = get_failures
        self.set_failures = set_failures
        self.error = error or ConnectionError("storage temporarily unavailable")
        self.get_calls = []
        self.set_calls = []

    async def get(self, key):
        self.get_calls.append(key)
        if self.get_failures > 0:
            self.get_failures -= 1
            raise self.error
        return await self.inner.get(key)

    async def set(self, key, content):
        self.set_calls.append(key)
        if self.set_failures > 0:
            self.set_failures -= 1
            raise self.error
        await self.inner.set(key, content)


@pytest.fixture
def js_feed_a():
    """JS feed with an entry module depending on a helper module."""
    return [
        {
            "id": "a1",
            "entry": True,
            "source": 'var hello = require("./hello");\nconsole.log(hello.world());',
            "deps": {"./hello": "a2"},
            "file": "./assets/js/main.js",
        },
        {
            "id": "a2",
            "source": '"use strict";module.exports.world=function(){return"world"};',
            "deps": {},
            "file": "./assets/js/hello.js",
        },
    ]


@pytest.fixture
def js_feed_b():
    """JS feed with a single entry module reading NODE_ENV."""
    return [
        {
            "id": "b1",
            "entry": True,
            "source": "console.log(process.env.NODE_ENV);",
            "deps": {},
            "file": "./assets/js/env.js",
        },
    ]


@pytest.fixture
def css_feed():
    """CSS feed with two stylesheets."""
    return [
        {
            "id": "c1",
            "name": "my-module-1",
            "version": "1.0.1",
            "file": "my-module-1/main.css",
            "content": "/* my-module-1/main.css */\n.a { color: red; }\n",
        },
        {
            "id": "c2",
            "name": "my-module-2",
            "version": "2.0.0",
            "file": "my-module-2/main.css",
            "content": ".b { color: blue; }",
        },
    ]


@pytest.fixture
def memory_sink():
    """Empty in-memory sink."""
    from assetpipe.storage.memory_sink import MemorySink

    return MemorySink()


@pytest.fixture
def flaky_sink_factory():
    """Build a ``FlakySink`` around another sink."""
    return FlakySink
