"""Artifact routes.

One catch-all route classifies the request by path suffix:

    *.js    → runtime script for /<version>/...
    *.wasm  → runtime binary for /<version>/...
    *.zip   → source bundle for /<version>/<org>/<repo>/<release>/...
    *.ico   → empty favicon
    else    → static landing page

Upstream failures are not handled here; they propagate as
``UpstreamError`` and become a plaintext 500 in `create_app()`.
"""

import logging
from functools import lru_cache
from importlib import resources

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from carimbo_cdn.bundles.service import BundleService
from carimbo_cdn.paths import parse_request_path
from carimbo_cdn.runtimes.cache import RuntimeCache

logger = logging.getLogger(__name__)

router = APIRouter(tags=["artifacts"])

IMMUTABLE_CACHE_CONTROL = "public, max-age=31536000"


def get_runtime_cache(request: Request) -> RuntimeCache:
    return request.app.state.runtime_cache


def get_bundle_service(request: Request) -> BundleService:
    return request.app.state.bundle_service


@lru_cache(maxsize=1)
def landing_page() -> bytes:
    """The bundled ``static/index.html``, read once."""
    return resources.files("carimbo_cdn").joinpath("static/index.html").read_bytes()


def _immutable(content: bytes, media_type: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Cache-Control": IMMUTABLE_CACHE_CONTROL},
    )


async def serve_script(path: str, cache: RuntimeCache) -> Response:
    runtime = await cache.get(parse_request_path(path).version or "")
    return _immutable(runtime.script, "application/javascript")


async def serve_binary(path: str, cache: RuntimeCache) -> Response:
    runtime = await cache.get(parse_request_path(path).version or "")
    return _immutable(runtime.binary, "application/wasm")


async def serve_bundle(path: str, bundles: BundleService) -> Response:
    params = parse_request_path(path)
    bundle = await bundles.get(params.org or "", params.repo or "", params.release or "")
    return _immutable(bundle, "application/zip")


def serve_favicon() -> Response:
    return _immutable(b"", "image/x-icon")


def serve_landing_page() -> Response:
    return Response(content=landing_page(), media_type="text/html")


@router.api_route("/{path:path}", methods=["GET", "HEAD"])
async def dispatch(
    request: Request,
    path: str,
    cache: RuntimeCache = Depends(get_runtime_cache),
    bundles: BundleService = Depends(get_bundle_service),
) -> Response:
    """Route an artifact request by its path suffix."""
    url_path = request.url.path

    if url_path.endswith(".js"):
        return await serve_script(url_path, cache)
    if url_path.endswith(".wasm"):
        return await serve_binary(url_path, cache)
    if url_path.endswith(".zip"):
        return await serve_bundle(url_path, bundles)
    if url_path.endswith(".ico"):
        return serve_favicon()
    return serve_landing_page()
