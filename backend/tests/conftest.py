"""
BaseDrop Backend — Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── storage: Isolated image/ and base/ directories wired into the service singletons
    ├── sample_png_bytes: Fake image content for upload tests
    ├── make_upload: Builds Starlette UploadFile objects
    └── test_client: HTTPX AsyncClient for API endpoint testing
"""

import asyncio
import io
import os
import tempfile
from collections import defaultdict
from types import SimpleNamespace

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from starlette.datastructures import Headers, UploadFile


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Keep import-time singletons away from the working directory
_session_root = tempfile.mkdtemp(prefix="basedrop_test_")
os.environ["IMAGE_DIR"] = os.path.join(_session_root, "image")
os.environ["BASE_DIR"] = os.path.join(_session_root, "base")
os.environ["LOG_LEVEL"] = "WARNING"


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def storage(tmp_path, monkeypatch):
    """
    Points the service singletons at fresh per-test directories.

    The directories are NOT created up front, so tests also cover
    create-on-demand behaviour.
    """
    from app.services.file_service import file_service
    from app.services.record_store import category_store

    image_dir = (tmp_path / "image").resolve()
    base_dir = (tmp_path / "base").resolve()
    monkeypatch.setattr(file_service, "image_dir", image_dir)
    monkeypatch.setattr(category_store, "base_dir", base_dir)
    monkeypatch.setattr(category_store, "_locks", defaultdict(asyncio.Lock))
    return SimpleNamespace(image_dir=image_dir, base_dir=base_dir)


@pytest.fixture
def sample_png_bytes():
    """The 8-byte PNG signature plus padding; enough for an upload body."""
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.fixture
def make_upload():
    """Factory for UploadFile objects as FastAPI would hand them to a route."""
    def _make(filename="base.png", content=b"\x89PNG\r\n\x1a\n", content_type="image/png"):
        return UploadFile(
            file=io.BytesIO(content),
            size=len(content),
            filename=filename,
            headers=Headers({"content-type": content_type}),
        )
    return _make


@pytest_asyncio.fixture
async def test_client(storage):
    """
    HTTPX AsyncClient talking to the FastAPI app through ASGITransport.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
    """
    from app.main import app
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
