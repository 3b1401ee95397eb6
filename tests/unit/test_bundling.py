"""
Tests for the bundling adapter: dispatch, option forwarding and error wrapping.
"""

from unittest.mock import Mock

import pytest

from assetpipe.models import AssetType, BundleOptions
from assetpipe.processing.bundling import BundlingAdapter
from assetpipe.utils.exceptions import BundlingError


@pytest.fixture
def mock_bundlers():
    js = Mock()
    js.bundle.return_value = "js-output"
    css = Mock()
    css.bundle.return_value = "css-output"
    return js, css


class TestBundlingAdapter:
    """Bundler selection and failure normalization."""

    @pytest.mark.asyncio
    async def test_css_goes_to_css_bundler(self, mock_bundlers):
        js, css = mock_bundlers
        adapter = BundlingAdapter(js_bundler=js, css_bundler=css)

        assert await adapter.bundle_feeds([[]], AssetType.CSS) == "css-output"
        css.bundle.assert_called_once()
        js.bundle.assert_not_called()

    @pytest.mark.asyncio
    async def test_js_goes_to_js_bundler(self, mock_bundlers):
        js, css = mock_bundlers
        adapter = BundlingAdapter(js_bundler=js, css_bundler=css)

        assert await adapter.bundle_feeds([[]], "js") == "js-output"
        js.bundle.assert_called_once()
        css.bundle.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_type_falls_back_to_js(self, mock_bundlers):
        js, css = mock_bundlers
        adapter = BundlingAdapter(js_bundler=js, css_bundler=css)

        assert await adapter.bundle_feeds([[]], "banana") == "js-output"

    @pytest.mark.asyncio
    async def test_feeds_and_options_forwarded_unchanged(self, mock_bundlers):
        js, css = mock_bundlers
        adapter = BundlingAdapter(js_bundler=js, css_bundler=css)
        feeds = [[{"id": "1"}], [{"id": "2"}]]
        options = BundleOptions(env="production", minify=True, extensions={"sourcemap": False})

        await adapter.bundle_feeds(feeds, AssetType.JS, options)

        js.bundle.assert_called_once_with(feeds, options)

    @pytest.mark.asyncio
    async def test_js_failure_is_wrapped(self, mock_bundlers):
        js, css = mock_bundlers
        js.bundle.side_effect = SyntaxError("unexpected token")
        adapter = BundlingAdapter(js_bundler=js, css_bundler=css)

        with pytest.raises(BundlingError) as exc_info:
            await adapter.bundle_feeds([[]], AssetType.JS)

        error = exc_info.value
        assert error.message == "Unable to bundle feeds as JS."
        assert error.status_code == 500
        assert error.context["asset_type"] == "js"
        assert isinstance(error.cause, SyntaxError)

    @pytest.mark.asyncio
    async def test_css_failure_is_wrapped(self, mock_bundlers):
        js, css = mock_bundlers
        css.bundle.side_effect = ValueError("bad css")
        adapter = BundlingAdapter(js_bundler=js, css_bundler=css)

        with pytest.raises(BundlingError) as exc_info:
            await adapter.bundle_feeds([[]], AssetType.CSS)

        assert exc_info.value.message == "Unable to bundle feeds as CSS."

    @pytest.mark.asyncio
    async def test_default_bundlers_honour_env(self, js_feed_b):
        adapter = BundlingAdapter()

        output = await adapter.bundle_feeds([js_feed_b], AssetType.JS, BundleOptions(env="production"))

        assert '"production"' in output
