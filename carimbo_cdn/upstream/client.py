"""HTTP client for the upstream artifact host.

Uses httpx for async HTTP calls. A fresh ``AsyncClient`` is opened per
fetch; there is no retry and no caching at this layer. Redirects are
followed because GitHub release downloads answer with a 302 to object
storage.

Status handling:
  strict_status=True  — any non-2xx answer raises ``TransportFailure``
                        carrying the status code.
  strict_status=False — the body is returned whatever the status, and a
                        404 page fails later when it is decoded as a zip.
"""

import logging
from typing import Awaitable, Callable, Optional

import httpx

from carimbo_cdn.errors import ReadFailure, TransportFailure

logger = logging.getLogger(__name__)

# httpx's own default, applied to connect/read/write/pool alike.
DEFAULT_TIMEOUT = 5.0

Fetch = Callable[[str], Awaitable[bytes]]


class UpstreamFetcher:
    """Retrieve raw bytes from a fully-formed upstream URL."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        strict_status: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self.strict_status = strict_status
        self._transport = transport

    async def fetch(self, url: str) -> bytes:
        """GET ``url`` and return the full response body.

        Raises:
            TransportFailure: On connection or protocol errors, and on
                non-2xx responses when ``strict_status`` is set.
            ReadFailure: If the response body cannot be fully read.
        """
        async with httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            try:
                async with client.stream("GET", url) as response:
                    if self.strict_status and not response.is_success:
                        raise TransportFailure(
                            f"GET {url} returned HTTP {response.status_code}",
                            status_code=response.status_code,
                        )
                    try:
                        body = await response.aread()
                    except httpx.HTTPError as exc:
                        raise ReadFailure(f"reading {url}: {exc}", cause=exc) from exc
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                raise TransportFailure(f"GET {url}: {exc}", cause=exc) from exc

        logger.info(
            "Fetched %s (HTTP %d, %d bytes)",
            url, response.status_code, len(body),
        )
        return body

