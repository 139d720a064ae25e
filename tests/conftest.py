"""Shared test fixtures for the carimbo CDN test suite.

Upstream GitHub is replaced by an ``httpx.MockTransport`` serving canned
zip archives keyed by URL. Every request the proxy makes is recorded so
tests can count fetches.
"""

import io
import zipfile
from collections.abc import AsyncGenerator

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from carimbo_cdn.core.config import Settings
from carimbo_cdn.main import create_app

RUNTIME_URL = "https://upstream.test/runtime/v{version}/WebAssembly.zip"
BUNDLE_URL = "https://upstream.test/{org}/{repo}/archive/refs/tags/v{release}.zip"

SCRIPT = b"console.log('carimbo');"
BINARY = b"\x00asm\x01\x00\x00\x00"


def make_zip(entries: dict[str, bytes], compression: int = zipfile.ZIP_DEFLATED) -> bytes:
    """Build an in-memory zip archive from name → content."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=compression) as archive:
        for name, content in entries.items():
            archive.writestr(name, content)
    return buffer.getvalue()


def read_zip(data: bytes) -> dict[str, bytes]:
    """Decode a zip archive into name → content."""
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        return {info.filename: archive.read(info) for info in archive.infolist()}


def runtime_archive(script: bytes = SCRIPT, binary: bytes = BINARY) -> bytes:
    return make_zip({
        "carimbo.js": script,
        "carimbo.wasm": binary,
        "README.md": b"release notes",
    })


class FakeUpstream:
    """Canned upstream host: URL → (status, body), with a request log."""

    def __init__(self) -> None:
        self.routes: dict[str, tuple[int, bytes]] = {}
        self.requests: list[str] = []

    def add(self, url: str, body: bytes, status: int = 200) -> None:
        self.routes[url] = (status, body)

    def count(self, url: str) -> int:
        return self.requests.count(url)

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)
        status, body = self.routes.get(url, (404, b"Not Found"))
        return httpx.Response(status, content=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def upstream() -> FakeUpstream:
    fake = FakeUpstream()
    fake.add(RUNTIME_URL.format(version="1.0.0"), runtime_archive())
    fake.add(
        BUNDLE_URL.format(org="acme", repo="widget", release="2.3.1"),
        make_zip({
            "widget-2.3.1/": b"",
            "widget-2.3.1/main.lua": b"print('hi')",
            "widget-2.3.1/assets/logo.png": b"\x89PNG",
        }),
    )
    return fake


@pytest.fixture
def settings() -> Settings:
    return Settings(
        runtime_url_template=RUNTIME_URL,
        bundle_url_template=BUNDLE_URL,
        sentry_dsn="",
        debug=False,
    )


@pytest.fixture
def app(settings, upstream):
    """Create the app with upstream HTTP routed to the fake host."""
    return create_app(settings, transport=upstream.transport)


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Provide an async HTTP client wired to the test app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
