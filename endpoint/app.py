"""
Probe endpoint -- ``aiohttp.web`` application.

Protocol (single path, addressed by the ``mode`` query parameter)::

    GET  ?mode=ping   ->  200 "pong"
    GET  ?mode=down   ->  200 <shared payload>, application/octet-stream
    POST ?mode=up     ->  200 {"received": <bytes in body>}
    anything else     ->  200 host page

The handlers keep no state between requests.  Download probes hand the
same immutable buffer to the transport every time.
"""
from __future__ import annotations

import logging

from aiohttp import web

from .constants import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    DOWNLOAD_PAYLOAD_SIZE,
    MODE_DOWN,
    MODE_PING,
    MODE_UP,
    NO_CACHE_HEADERS,
    READ_CHUNK_SIZE,
)
from .page import HOST_PAGE
from .payload import shared_payload

LOGGER = logging.getLogger(__name__)

PAYLOAD_KEY = web.AppKey("payload", bytes)

_PREFLIGHT_HEADERS = {
    **NO_CACHE_HEADERS,
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


# ---------------------------------------------------------------------------
# Probe handlers
# ---------------------------------------------------------------------------

async def handle_ping(request: web.Request) -> web.Response:
    return web.Response(text="pong", headers=NO_CACHE_HEADERS)


async def handle_download(request: web.Request) -> web.Response:
    return web.Response(
        body=request.app[PAYLOAD_KEY],
        content_type="application/octet-stream",
        headers=NO_CACHE_HEADERS,
    )


async def handle_upload(request: web.Request) -> web.Response:
    """Drain the whole body, counting and discarding it, then confirm."""
    received = 0
    async for chunk in request.content.iter_chunked(READ_CHUNK_SIZE):
        received += len(chunk)
    return web.json_response({"received": received}, headers=NO_CACHE_HEADERS)


async def handle_page(request: web.Request) -> web.Response:
    return web.Response(text=HOST_PAGE, content_type="text/html", charset="utf-8")


async def handle_request(request: web.Request) -> web.StreamResponse:
    """Dispatch on ``?mode=``; everything unrecognised gets the host page."""
    mode = request.query.get("mode")

    if request.method == "OPTIONS":
        return web.Response(status=204, headers=_PREFLIGHT_HEADERS)
    if mode == MODE_PING:
        return await handle_ping(request)
    if mode == MODE_DOWN:
        return await handle_download(request)
    if mode == MODE_UP and request.method == "POST":
        return await handle_upload(request)
    return await handle_page(request)


# ---------------------------------------------------------------------------
# Error handling
# ---------------------------------------------------------------------------

@web.middleware
async def error_middleware(request: web.Request, handler) -> web.StreamResponse:  # noqa: ANN001
    """Turn any unhandled fault into a 500 carrying the fault's message."""
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except Exception as exc:
        LOGGER.exception("Error handling %s %s", request.method, request.path_qs)
        return web.Response(status=500, text=str(exc), content_type="text/plain")


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

def create_app(payload_size: int = DOWNLOAD_PAYLOAD_SIZE) -> web.Application:
    app = web.Application(middlewares=[error_middleware])
    app[PAYLOAD_KEY] = shared_payload(payload_size)
    app.router.add_route("*", "/{tail:.*}", handle_request)
    return app


def run_server(
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    payload_size: int = DOWNLOAD_PAYLOAD_SIZE,
) -> None:
    """Serve the probe endpoint until interrupted."""
    app = create_app(payload_size)
    LOGGER.info(
        "Probe endpoint on http://%s:%d/ (download payload %d bytes)",
        host, port, payload_size,
    )
    web.run_app(app, host=host, port=port, print=None)
