"""Version-keyed, fetch-once cache of runtime releases.

A runtime release is a zip published on the carimbo GitHub releases page.
The first request for a version downloads it, pulls ``carimbo.js`` and
``carimbo.wasm`` out of it, and keeps the pair for the life of the process.

Concurrency:
  Requests for the same version that arrive while its download is still in
  flight attach to that download instead of starting another one. Different
  versions download in parallel. The shared download runs as its own task
  and is shielded from the callers, so a client hanging up does not cancel
  a fetch other callers are waiting on.

Failure:
  A failed download raises ``FetchFailure`` and leaves nothing behind; the
  next request for that version starts over. Missing entries are not a
  failure: the bundle is stored with an empty field and a warning is logged.
"""

import asyncio
import logging
from typing import Optional

from carimbo_cdn.archive.transform import open_archive, read_entry
from carimbo_cdn.errors import FetchFailure, UpstreamError
from carimbo_cdn.runtimes.types import BINARY_ENTRY, SCRIPT_ENTRY, RuntimeBundle
from carimbo_cdn.upstream.client import Fetch

logger = logging.getLogger(__name__)

DEFAULT_RUNTIME_URL = (
    "https://github.com/carimbolabs/carimbo/releases/download/v{version}/WebAssembly.zip"
)


def extract_runtime(data: bytes) -> RuntimeBundle:
    """Pull the script and binary entries out of a runtime release archive.

    Entries other than ``carimbo.js`` and ``carimbo.wasm`` are ignored.

    Raises:
        FetchFailure: stage ``decode`` if ``data`` is not a zip archive,
            stage ``read`` if a matching entry cannot be decompressed.
    """
    contents: dict[str, bytes] = {}
    try:
        with open_archive(data) as archive:
            for info in archive.infolist():
                if info.filename in (SCRIPT_ENTRY, BINARY_ENTRY):
                    contents[info.filename] = read_entry(archive, info)
    except UpstreamError as exc:
        raise FetchFailure.wrap(exc) from exc

    for entry in (SCRIPT_ENTRY, BINARY_ENTRY):
        if entry not in contents:
            logger.warning("Runtime archive has no %s; serving an empty body", entry)

    return RuntimeBundle(
        script=contents.get(SCRIPT_ENTRY, b""),
        binary=contents.get(BINARY_ENTRY, b""),
    )


class RuntimeCache:
    """Serve ``RuntimeBundle`` values by version, downloading each at most once."""

    def __init__(self, fetch: Fetch, url_template: str = DEFAULT_RUNTIME_URL):
        self._fetch = fetch
        self._url_template = url_template
        self._runtimes: dict[str, RuntimeBundle] = {}
        self._inflight: dict[str, asyncio.Future[RuntimeBundle]] = {}

    def __contains__(self, version: object) -> bool:
        return version in self._runtimes

    def __len__(self) -> int:
        return len(self._runtimes)

    def versions(self) -> list[str]:
        """Return the cached versions in the order they were first stored."""
        return list(self._runtimes)

    def locator(self, version: str) -> str:
        return self._url_template.format(version=version)

    async def get(self, version: str) -> RuntimeBundle:
        """Return the bundle for ``version``, downloading it on first use.

        The key is used verbatim; an empty or malformed version simply
        produces an upstream URL that fails to fetch.

        Raises:
            FetchFailure: If the download or archive decoding fails.
        """
        cached = self._runtimes.get(version)
        if cached is not None:
            return cached

        pending: Optional[asyncio.Future[RuntimeBundle]] = self._inflight.get(version)
        if pending is None:
            pending = asyncio.ensure_future(self._populate(version))
            pending.add_done_callback(_consume_result)
            self._inflight[version] = pending
        else:
            logger.debug("Runtime %s: joining in-flight download", version)

        return await asyncio.shield(pending)

    async def _populate(self, version: str) -> RuntimeBundle:
        try:
            bundle = await self._load(version)
            self._runtimes[version] = bundle
            logger.info(
                "Cached runtime %s (script=%d bytes, binary=%d bytes)",
                version, len(bundle.script), len(bundle.binary),
            )
            return bundle
        finally:
            # Runs before the future resolves, so no caller can observe a
            # finished download that is still registered as in flight.
            self._inflight.pop(version, None)

    async def _load(self, version: str) -> RuntimeBundle:
        url = self.locator(version)
        logger.info("Runtime %s: fetching %s", version, url)

        try:
            body = await self._fetch(url)
        except UpstreamError as exc:
            logger.warning("Runtime %s: fetch failed: %s", version, exc)
            raise FetchFailure.wrap(exc) from exc

        return await asyncio.to_thread(extract_runtime, body)


def _consume_result(future: asyncio.Future) -> None:
    """Mark a download's outcome as retrieved even if every caller went away."""
    if not future.cancelled():
        future.exception()
