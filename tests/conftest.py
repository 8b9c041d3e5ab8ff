"""
Shared fixtures for the Rankify test-suite.

No network: the platform handle is the in-memory ``FakePlatform`` and the
HTTP API is exercised through httpx's ASGI transport.  Readiness timings are
shrunk to milliseconds so timeout paths run quickly.
"""
from __future__ import annotations

from typing import AsyncGenerator

import fitz  # PyMuPDF
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from rankify.main import app
from rankify.platform.client import PlatformClient
from rankify.platform.locator import PlatformLocator
from rankify.platform.types import UploadedFile
from tests.fakes import FakePlatform

POLL_INTERVAL_MS = 10
LOAD_TIMEOUT_MS = 100


# ---------------------------------------------------------------------------
# Platform fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def fake_platform() -> FakePlatform:
    return FakePlatform()


@pytest.fixture
def platform_client(fake_platform: FakePlatform) -> PlatformClient:
    """A client whose handle is bound from the start."""
    return PlatformClient(
        locator=PlatformLocator(fake_platform),
        poll_interval_ms=POLL_INTERVAL_MS,
        timeout_ms=LOAD_TIMEOUT_MS,
    )


@pytest.fixture
def unbound_client() -> PlatformClient:
    """A client whose handle has not appeared (yet)."""
    return PlatformClient(
        poll_interval_ms=POLL_INTERVAL_MS,
        timeout_ms=LOAD_TIMEOUT_MS,
    )


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_pdf_bytes() -> bytes:
    """A one-page PDF generated in memory."""
    doc = fitz.open()
    page = doc.new_page()
    page.insert_text((72, 72), "Jane Doe - Senior Software Engineer")
    page.insert_text((72, 100), "Python, FastAPI, PostgreSQL, AWS")
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def sample_resume(sample_pdf_bytes: bytes) -> UploadedFile:
    return UploadedFile(
        name="jane-doe.pdf", content=sample_pdf_bytes, content_type="application/pdf"
    )


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def client(platform_client: PlatformClient) -> AsyncGenerator[AsyncClient, None]:
    """
    httpx AsyncClient wired to the FastAPI app with ``app.state.platform``
    pointing at the fake-backed client (the lifespan does not run).
    """
    app.state.platform = platform_client

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.state.platform = None


@pytest_asyncio.fixture
async def signed_in_client(
    client: AsyncClient, fake_platform: FakePlatform, platform_client: PlatformClient
) -> AsyncClient:
    fake_platform.auth.signed_in = True
    await platform_client.auth.check_auth_status()
    return client

