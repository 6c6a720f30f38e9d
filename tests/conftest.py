"""Pytest configuration and fixtures.

Provides environment isolation, marker registration, and the fake backend
client used across the suite. All fixtures here are autouse unless noted.
"""

from __future__ import annotations

import logging
import os

import pytest

from gembridge.provider import GoogleGenAIProvider
from tests.helpers import FakeClient

GEMINI_MODEL = "gemini-2.0-flash-001"

# =============================================================================
# Environment Isolation (Autouse)
# =============================================================================


@pytest.fixture(autouse=True)
def isolate_provider_env(request, monkeypatch):
    """Ensure a clean credential environment for each test.

    Clears GEMINI_* and GOOGLE_* env vars to prevent test pollution.
    Opt-out: @pytest.mark.allow_env_pollution or @pytest.mark.api
    """
    if request.node.get_closest_marker("allow_env_pollution") or (
        "api" in request.node.keywords
    ):
        return

    for key in list(os.environ.keys()):
        if key.startswith(("GEMINI_", "GOOGLE_")):
            monkeypatch.delenv(key, raising=False)


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def quiet_noisy_libraries():
    """Suppress noisy third-party loggers."""
    logging.getLogger("google_genai").setLevel(logging.ERROR)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# =============================================================================
# Pytest Hooks
# =============================================================================

API_TESTS_REASON = "API tests require ENABLE_API_TESTS=1"


def pytest_configure(config):
    """Configure custom markers for test organization."""
    markers = [
        "unit: Fast, isolated unit tests",
        "contract: Backend request/response shape characterization",
        "api: Real API integration tests (requires API key)",
        "allow_env_pollution: Keep the caller's environment untouched",
    ]
    for marker in markers:
        config.addinivalue_line("markers", marker)


def pytest_collection_modifyitems(items):
    """Automatically skip API tests when not explicitly enabled."""
    if os.getenv("ENABLE_API_TESTS"):
        return
    skip_api = pytest.mark.skip(reason=API_TESTS_REASON)
    for item in items:
        if "api" in item.keywords:
            item.add_marker(skip_api)


# =============================================================================
# Shared Fixtures
# =============================================================================


@pytest.fixture
def gemini_model() -> str:
    return GEMINI_MODEL


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def provider(fake_client: FakeClient) -> GoogleGenAIProvider:
    """Provider wired to the fake client (no network)."""
    return GoogleGenAIProvider(api_key="test-api-key", client=fake_client)


@pytest.fixture
def gemini_api_key():
    """Return GEMINI_API_KEY or skip the test if unavailable."""
    key = os.getenv("GEMINI_API_KEY")
    if not key:
        pytest.skip("GEMINI_API_KEY not set")
    return key
