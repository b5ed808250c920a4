"""ASGI middleware serving compiled assets under the configured path prefix."""

from __future__ import annotations

import logging
import re

from starlette.concurrency import run_in_threadpool
from starlette.responses import Response
from starlette.types import ASGIApp, Receive, Scope, Send

from .engine import CompilerEngine, EngineFailure, Found, LookupResult, NotFound
from .resolver import AssetResolver

logger = logging.getLogger(__name__)

CACHE_CONTROL = "public, max-age=31536000"
_FINGERPRINT_RE = re.compile(r"-[a-f0-9]+(\.[^.]+)$")


def strip_fingerprint(name: str) -> str | None:
    """Return ``name`` without its ``-<hex>`` segment, or None if it has none."""
    if not _FINGERPRINT_RE.search(name):
        return None
    return _FINGERPRINT_RE.sub(r"\1", name, count=1)


class AssetsMiddleware:
    """Serve ``<path_prefix>/<name>`` from the resolver's engine.

    Fingerprinted names the engine does not know are retried under their
    logical name, so stale ``app-<hex>.css`` URLs keep working.
    """

    def __init__(self, app: ASGIApp, resolver: AssetResolver) -> None:
        self.app = app
        self.resolver = resolver

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not self._is_asset_request(scope["path"]):
            await self.app(scope, receive, send)
            return
        response = await run_in_threadpool(self._serve, scope["path"])
        await response(scope, receive, send)

    def _is_asset_request(self, path: str) -> bool:
        return path.startswith(self.resolver.config.path_prefix)

    def _serve(self, path: str) -> Response:
        prefix = self.resolver.config.path_prefix
        name = path.replace(prefix + "/", "", 1)
        engine = self.resolver.engine
        try:
            result = _lookup(engine, name)
        except Exception as exc:
            logger.exception("asset lookup failed for %s", name)
            return _error_response(str(exc))

        if isinstance(result, Found):
            asset = result.asset
            headers = {
                "Content-Type": asset.content_type,
                "Content-Length": str(asset.bytesize),
                "ETag": f'"{asset.etag}"',
                "Cache-Control": CACHE_CONTROL,
            }
            return Response(asset.source, status_code=200, headers=headers)
        if isinstance(result, EngineFailure):
            logger.error("asset engine failure for %s: %s", result.name, result.detail)
            return _error_response(result.detail)
        return Response(b"Asset not found", status_code=404, headers={"Content-Type": "text/plain"})


def _lookup(engine: CompilerEngine, name: str) -> LookupResult:
    result = engine.find_asset(name)
    if not isinstance(result, NotFound):
        return result
    logical_name = strip_fingerprint(name)
    if logical_name is None:
        return result
    logger.debug("retrying %s as %s", name, logical_name)
    return engine.find_asset(logical_name)


def _error_response(message: str) -> Response:
    return Response(
        f"Asset error: {message}".encode("utf-8"),
        status_code=500,
        headers={"Content-Type": "text/plain"},
    )
