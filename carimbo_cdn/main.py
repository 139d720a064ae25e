import logging
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from carimbo_cdn.bundles.service import BundleService
from carimbo_cdn.core.config import Settings, get_settings
from carimbo_cdn.core.middleware import RequestIdMiddleware, SecurityHeadersMiddleware
from carimbo_cdn.errors import UpstreamError
from carimbo_cdn.router import router as artifacts_router
from carimbo_cdn.runtimes.cache import RuntimeCache
from carimbo_cdn.upstream.client import UpstreamFetcher

logger = logging.getLogger(__name__)


async def upstream_error_handler(request: Request, exc: UpstreamError) -> PlainTextResponse:
    """Surface any fetch/transform failure verbatim as a plaintext 500."""
    logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return PlainTextResponse(str(exc), status_code=500)


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Build the proxy application.

    Args:
        settings: Overrides the environment-derived settings.
        transport: httpx transport for upstream calls; tests pass a
            ``MockTransport`` here so no real network is touched.
    """
    settings = settings or get_settings()

    _app = FastAPI(
        title="carimbo CDN",
        description="Caching proxy for carimbo runtime modules and source bundles",
        version="0.1.0",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    # ---------------------------------------------------------------------------
    # Middleware (registered outermost → innermost; executed innermost → outermost)
    # ---------------------------------------------------------------------------

    _app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "HEAD"],
        allow_headers=["*"],
    )

    _app.add_middleware(SecurityHeadersMiddleware)

    # Request ID — inject / forward X-Request-ID and bind to ContextVar
    _app.add_middleware(RequestIdMiddleware)

    # ---------------------------------------------------------------------------
    # Sentry — initialised here so it captures startup errors too
    # ---------------------------------------------------------------------------
    from carimbo_cdn.core.sentry import init_sentry

    init_sentry(
        dsn=settings.sentry_dsn,
        environment="development" if settings.debug else "production",
    )

    # ---------------------------------------------------------------------------
    # Logging — configure structlog before any route logs anything
    # ---------------------------------------------------------------------------
    from carimbo_cdn.core.logging import configure_structlog

    configure_structlog(debug=settings.debug)

    # ---------------------------------------------------------------------------
    # Upstream + cache — one instance per app, shared by every request
    # ---------------------------------------------------------------------------
    fetcher = UpstreamFetcher(
        timeout=settings.upstream_timeout,
        strict_status=settings.upstream_strict_status,
        transport=transport,
    )
    _app.state.settings = settings
    _app.state.runtime_cache = RuntimeCache(fetcher.fetch, settings.runtime_url_template)
    _app.state.bundle_service = BundleService(fetcher.fetch, settings.bundle_url_template)

    _app.add_exception_handler(UpstreamError, upstream_error_handler)

    # ---------------------------------------------------------------------------
    # Routes — /health first, the artifact catch-all takes everything else
    # ---------------------------------------------------------------------------

    @_app.get("/health")
    async def health_check() -> dict:
        return {
            "status": "ok",
            "cached_runtimes": len(_app.state.runtime_cache),
        }

    _app.include_router(artifacts_router)

    return _app


app = create_app()
