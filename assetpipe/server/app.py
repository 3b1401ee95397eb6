"""
AssetPipe HTTP Server
=====================

aiohttp routes for uploading feeds, building bundles and serving both back:

    POST /feed/{type}            store a feed, respond {file, uri, id}
    POST /feed/{type}/{id}       ... and record it under a meta id
    GET  /feed/{file}            serve a stored feed
    POST /bundle/{type}          bundle stored feeds, respond {file, uri}
    POST /bundle/{type}/{id}     ... and record it under a meta id
    GET  /bundle/{file}          serve a stored bundle
    GET  /test/{file}            HTML page that loads a stored bundle
    GET  /sync                   public base urls for bundles and feeds
"""

import html
import json
import uuid
from http import HTTPStatus
from typing import Optional

from aiohttp import web

from ..config.settings import AssetPipeSettings, get_settings
from ..models import MIME_TYPES, AssetType, BundleOptions, UploadResult
from ..processing.pipeline import BundlePipeline
from ..storage.memory_sink import MemorySink
from ..storage.meta_storage import MetaStorage
from ..storage.sink import Sink
from ..utils.exceptions import AssetPipeError, ValidationError, ErrorCode
from ..utils.logging import get_logger_for_component
from ..utils.validators import FeedValidator, FileNameValidator


TRACK_KEY = web.RequestKey("track", str)
FILE_KEY = web.RequestKey("file", str)

TEST_PAGE = """<!doctype html>
<html>
<head>
<meta charset="utf-8">
<title>Bundle test: {file}</title>
{asset}
</head>
<body>
<h1>Bundle test: {file}</h1>
</body>
</html>
"""


class AssetServer:
    """Request handlers around a sink, a meta store and the pipeline."""

    def __init__(
        self,
        sink: Optional[Sink] = None,
        meta_storage: Optional[MetaStorage] = None,
        pipeline: Optional[BundlePipeline] = None,
        settings: Optional[AssetPipeSettings] = None,
        bundle_options: Optional[BundleOptions] = None,
    ):
        self.settings = settings or get_settings()
        self.sink = sink if sink is not None else MemorySink()
        self.meta_storage = meta_storage or MetaStorage(self.sink)
        self.pipeline = pipeline or BundlePipeline()
        self.bundle_options = bundle_options or BundleOptions(
            env=self.settings.bundler.env, minify=self.settings.bundler.minify
        )
        self.logger = get_logger_for_component("server")

    def build_uri(self, request: web.Request, kind: str) -> str:
        """Base uri under which stored objects of ``kind`` are served."""
        if self.settings.server.public_url:
            return f"{self.settings.server.public_url}/{kind}/"
        return f"{request.scheme}://{request.host}/{kind}/"

    @staticmethod
    async def read_json_body(request: web.Request):
        """Decode the JSON request body; a missing or invalid body is a 400."""
        try:
            return await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ValidationError(
                f"Request body is not valid JSON: {e}",
                field_name="body",
                error_code=ErrorCode.VALIDATION_REQUIRED_FIELD,
                user_message="No feed data given in POST-body.",
            ) from e

    async def _record_meta(self, request: web.Request, result: UploadResult) -> None:
        meta_id = request.match_info.get("id")
        if meta_id:
            await self.meta_storage.set(meta_id, result)

    async def post_feed(self, request: web.Request) -> web.Response:
        asset_type = FeedValidator.validate_asset_type(request.match_info["type"])
        payload = await self.read_json_body(request)

        result = await self.pipeline.upload_raw_feed(
            self.sink, asset_type, payload, self.build_uri(request, "feed")
        )
        await self._record_meta(request, result)

        request[FILE_KEY] = result.file
        return web.json_response(result.to_response())

    async def post_bundle(self, request: web.Request) -> web.Response:
        asset_type = FeedValidator.validate_asset_type(request.match_info["type"])
        payload = await self.read_json_body(request)
        feed_ids = FeedValidator.validate_feed_ids(payload)

        result = await self.pipeline.bundle_and_upload(
            self.sink,
            asset_type,
            feed_ids,
            self.build_uri(request, "bundle"),
            options=self.bundle_options,
        )
        await self._record_meta(request, result)

        request[FILE_KEY] = result.file
        return web.json_response(result.to_response())

    async def get_feed(self, request: web.Request) -> web.Response:
        file_name = FileNameValidator.validate_feed_name(request.match_info["file"])
        return await self._serve(request, file_name)

    async def get_bundle(self, request: web.Request) -> web.Response:
        file_name = FileNameValidator.validate_bundle_name(request.match_info["file"])
        return await self._serve(request, file_name)

    async def get_test_page(self, request: web.Request) -> web.Response:
        """Minimal page that includes a bundle, for checking it in a browser."""
        file_name = FileNameValidator.validate_bundle_name(request.match_info["file"])
        src = html.escape(self.build_uri(request, "bundle") + file_name, quote=True)

        if file_name.endswith(f".{AssetType.CSS.value}"):
            asset = f'<link rel="stylesheet" href="{src}">'
        else:
            asset = f'<script src="{src}"></script>'

        request[FILE_KEY] = file_name
        return web.Response(
            text=TEST_PAGE.format(file=html.escape(file_name), asset=asset),
            content_type="text/html",
        )

    async def sync(self, request: web.Request) -> web.Response:
        """Public base urls clients should use for bundles and feeds."""
        public_url = self.settings.server.public_url
        if public_url:
            return web.json_response({"publicBundleUrl": public_url, "publicFeedUrl": public_url})

        return web.json_response({
            "publicBundleUrl": self.build_uri(request, "bundle"),
            "publicFeedUrl": self.build_uri(request, "feed"),
        })

    async def _serve(self, request: web.Request, file_name: str) -> web.Response:
        content = await self.sink.get(file_name)
        extension = file_name.rsplit(".", 1)[-1]

        request[FILE_KEY] = file_name
        return web.Response(
            body=content,
            content_type=MIME_TYPES.get(extension, "application/octet-stream"),
            charset="utf-8",
        )


SERVER_KEY = web.AppKey("assetpipe_server", AssetServer)


def _preferred_format(request: web.Request) -> Optional[str]:
    """Pick ``json``, ``html`` or ``text`` from the Accept header.

    No header, or an XHR request, means JSON; None means nothing acceptable.
    """
    if request.headers.get("X-Requested-With", "").lower() == "xmlhttprequest":
        return "json"

    accept = request.headers.get("Accept")
    if not accept:
        return "json"

    ranges = []
    for position, part in enumerate(accept.split(",")):
        media_type, _, params = part.strip().partition(";")
        quality = 1.0
        for param in params.split(";"):
            name, _, value = param.strip().partition("=")
            if name == "q":
                try:
                    quality = float(value)
                except ValueError:
                    quality = 0.0
        if quality > 0:
            ranges.append((-quality, position, media_type.strip().lower()))

    formats = {
        "application/json": "json",
        "application/*": "json",
        "*/*": "json",
        "text/html": "html",
        "text/plain": "text",
        "text/*": "text",
    }
    for _, _, media_type in sorted(ranges):
        if media_type in formats:
            return formats[media_type]
    return None


def render_error(request: web.Request, status: int, message: str) -> web.Response:
    """Error response in the format the client asked for."""
    phrase = HTTPStatus(status).phrase
    response_format = _preferred_format(request)

    if response_format == "json":
        return web.json_response(
            {"statusCode": status, "error": phrase, "message": message}, status=status
        )
    if response_format == "html":
        return web.Response(
            text=f"<html><body><h1>{html.escape(phrase)}</h1></body></html>",
            content_type="text/html",
            status=status,
        )
    if response_format == "text":
        return web.Response(text=phrase, status=status)
    return web.Response(text=HTTPStatus.NOT_ACCEPTABLE.phrase, status=HTTPStatus.NOT_ACCEPTABLE)


@web.middleware
async def error_middleware(request: web.Request, handler):
    """Render every failure as an error document."""
    logger = get_logger_for_component("server", track=request.get(TRACK_KEY))
    try:
        return await handler(request)
    except AssetPipeError as e:
        if e.status_code >= 500:
            logger.error(f"{request.method} {request.path} failed: {e}", extra=e.to_dict())
        else:
            logger.info(f"{request.method} {request.path} rejected: {e}")
        return render_error(request, e.status_code, e.user_message)
    except web.HTTPException as e:
        if e.status < 400:
            raise
        return render_error(request, e.status, e.reason)
    except Exception:
        logger.exception(f"{request.method} {request.path} failed with an unexpected error")
        return render_error(request, 500, "An internal server error occurred")


@web.middleware
async def tracking_middleware(request: web.Request, handler):
    """Tag each request with a tracking id and log its outcome."""
    request[TRACK_KEY] = uuid.uuid4().hex
    logger = get_logger_for_component("server", track=request[TRACK_KEY])

    response = await handler(request)
    context = {
        "method": request.method,
        "path": request.path,
        "status": response.status,
        "file": request.get(FILE_KEY),
    }
    if response.status < 400:
        logger.info(f"request success {request.method} {request.path}", extra=context)
    else:
        logger.info(f"request failure {request.method} {request.path} ({response.status})", extra=context)

    response.headers["X-Request-Track"] = request[TRACK_KEY]
    return response


def create_app(
    sink: Optional[Sink] = None,
    meta_storage: Optional[MetaStorage] = None,
    settings: Optional[AssetPipeSettings] = None,
    pipeline: Optional[BundlePipeline] = None,
) -> web.Application:
    """Build the aiohttp application.

    Args:
        sink: Storage for feeds and bundles (default: a new ``MemorySink``)
        meta_storage: Meta record store (default: backed by ``sink``)
        settings: Settings (default: global settings)
        pipeline: Pipeline (default: built from settings)
    """
    settings = settings or get_settings()
    server = AssetServer(sink=sink, meta_storage=meta_storage, pipeline=pipeline, settings=settings)

    app = web.Application(
        middlewares=[tracking_middleware, error_middleware],
        client_max_size=settings.server.client_max_size_mb * 1024 * 1024,
    )
    app[SERVER_KEY] = server

    # Unknown types reach the handlers and are rejected there as 404
    app.router.add_post("/feed/{type}", server.post_feed)
    app.router.add_post("/feed/{type}/{id}", server.post_feed)
    app.router.add_get("/feed/{file}", server.get_feed)
    app.router.add_post("/bundle/{type}", server.post_bundle)
    app.router.add_post("/bundle/{type}/{id}", server.post_bundle)
    app.router.add_get("/bundle/{file}", server.get_bundle)
    app.router.add_get("/test/{file}", server.get_test_page)
    app.router.add_get("/sync", server.sync)

    return app
