"""Source bundle service: fetch a tagged release archive and flatten it.

Bundles are not cached; every request downloads the tag archive again and
re-encodes it with ``strip_root_dir()``. The re-encoding is CPU-bound zip
work and runs in a worker thread.
"""

import asyncio
import logging

from carimbo_cdn.archive.transform import strip_root_dir
from carimbo_cdn.errors import FetchFailure, TransformFailure, UpstreamError
from carimbo_cdn.upstream.client import Fetch

logger = logging.getLogger(__name__)

DEFAULT_BUNDLE_URL = "https://github.com/{org}/{repo}/archive/refs/tags/v{release}.zip"


class BundleService:
    def __init__(self, fetch: Fetch, url_template: str = DEFAULT_BUNDLE_URL):
        self._fetch = fetch
        self._url_template = url_template

    def locator(self, org: str, repo: str, release: str) -> str:
        return self._url_template.format(org=org, repo=repo, release=release)

    async def get(self, org: str, repo: str, release: str) -> bytes:
        """Return the release archive for ``org/repo@v{release}`` without its root folder.

        Raises:
            FetchFailure: If the archive cannot be downloaded.
            TransformFailure: If it cannot be decoded or re-encoded.
        """
        url = self.locator(org, repo, release)
        logger.info("Bundle %s/%s@%s: fetching %s", org, repo, release, url)

        try:
            body = await self._fetch(url)
        except UpstreamError as exc:
            raise FetchFailure.wrap(exc) from exc

        try:
            bundle = await asyncio.to_thread(strip_root_dir, body)
        except UpstreamError as exc:
            logger.warning("Bundle %s/%s@%s: transform failed: %s", org, repo, release, exc)
            raise TransformFailure.wrap(exc) from exc

        logger.info(
            "Bundle %s/%s@%s: served %d bytes (upstream %d bytes)",
            org, repo, release, len(bundle), len(body),
        )
        return bundle
