"""ASGI middleware for the proxy.

Registered in order (outermost → innermost):
  1. CORSMiddleware            — handled by FastAPI directly (not here)
  2. RequestIdMiddleware       — injects / forwards X-Request-ID; stores it in a ContextVar
  3. SecurityHeadersMiddleware — adds security response headers

The ContextVar `_request_id_var` is read by the logging layer so every log
line emitted while serving a request carries its ID.
"""

import uuid
from contextvars import ContextVar
from typing import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

_request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def get_request_id() -> str:
    """Return the current request's ID, or an empty string outside a request."""
    return _request_id_var.get()


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Read or generate X-Request-ID and make it available for the request lifetime.

    A client-supplied ID is reused as-is; otherwise a fresh UUID4 is
    generated. The ID is always echoed back in the response header.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        token = _request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            _request_id_var.reset(token)

        response.headers["X-Request-ID"] = request_id
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Attach security-related headers to every outgoing response.

      X-Content-Type-Options: nosniff
        — Browsers must honour the declared type. WebAssembly streaming
          compilation already requires an exact ``application/wasm``.

      Referrer-Policy: strict-origin-when-cross-origin
        — Only the origin is sent to third parties linked from the landing page.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response
