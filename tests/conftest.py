# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up environment variables before any imports
# - Gives every test its own data directory and ConfigStore
# - Provides an API client plus CSRF/login helpers
# =============================================================================

import asyncio
import os
import tempfile

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-session-tokens")
os.environ.setdefault("ADMIN_KEY", "test-admin-key")
os.environ.setdefault("DATA_DIR", tempfile.mkdtemp(prefix="portfolio-test-"))
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient

from app.config import settings
from app.dependencies import get_config_store
from core.services.config_store import ConfigStore
from core.services.profile_repository import ProfileRepository
from core.services.project_repository import ProjectRepository


# PNG signature padded to 1 KiB; the guard checks declared type, not content
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 1016


def run(coro):
    """Run a coroutine to completion in a fresh event loop."""
    return asyncio.run(coro)


# =============================================================================
# Storage Fixtures
# =============================================================================

@pytest.fixture
def data_dir(tmp_path):
    """Empty data directory for one test."""
    return tmp_path / "data"


@pytest.fixture
def store(data_dir):
    """ConfigStore writing into the test's data directory."""
    config_store = ConfigStore(data_dir, timeout=5.0)
    config_store.ensure_layout()
    return config_store


@pytest.fixture
def profiles(store):
    return ProfileRepository(store)


@pytest.fixture
def projects(store):
    return ProjectRepository(store)


# =============================================================================
# API Fixtures
# =============================================================================

@pytest.fixture
def client(store):
    """TestClient whose ConfigStore is the test's store."""
    from app.main import app

    app.dependency_overrides[get_config_store] = lambda: store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def csrf_headers(client: TestClient) -> dict:
    """Fetch the session's CSRF token and return it as a request header."""
    response = client.get("/api/csrf-token")
    assert response.status_code == 200
    return {"X-CSRF-Token": response.json()["token"]}


def login(client: TestClient, key: str | None = None) -> dict:
    """Log the client in and return the CSRF header for later writes."""
    headers = csrf_headers(client)
    response = client.post(
        "/api/admin/login",
        json={"key": key or settings.ADMIN_KEY},
        headers=headers,
    )
    assert response.status_code == 200, response.text
    return headers


@pytest.fixture
def admin_headers(client):
    """CSRF header of a logged-in client."""
    return login(client)


@pytest.fixture
def sample_project_payload():
    """Sample project data for testing."""
    return {
        "title": "Site generator",
        "description": "Static site generator",
        "longDescription": "Builds the site from markdown.",
        "tags": "python, cli",
        "githubUrl": "https://github.com/example/gen",
        "order": "1",
    }
