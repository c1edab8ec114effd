"""
Shared pytest fixtures and configuration for uri-fetch tests.
"""

from __future__ import annotations

import pytest

from core.models import CacheEntry, TargetReference
from fetcher.cache import InMemoryValidatorCache
from fetcher.target import parse_target


# ============================================================================
# Fixtures: Environment
# ============================================================================

@pytest.fixture
def no_proxy_env(monkeypatch):
    """Remove proxy variables so tests always connect directly."""
    for name in ("HTTP_PROXY", "http_proxy", "HTTPS_PROXY", "https_proxy"):
        monkeypatch.delenv(name, raising=False)


# ============================================================================
# Fixtures: Targets and Cache
# ============================================================================

@pytest.fixture
def sample_target() -> TargetReference:
    """Sample parsed target."""
    return parse_target("https://example.com/docs?page=2")


@pytest.fixture
def validator_cache() -> InMemoryValidatorCache:
    """Cache pre-loaded with validators for the sample target."""
    cache = InMemoryValidatorCache()
    cache.upsert(
        "https://example.com/docs?page=2",
        CacheEntry(etag="abc", last_modified="Wed, 21 Oct 2015 07:28:00 GMT"),
    )
    return cache


# ============================================================================
# Fixtures: Event Capture
# ============================================================================

@pytest.fixture
def events() -> list[tuple[str, dict[str, object]]]:
    """Sink for event_hook payloads."""
    return []


@pytest.fixture
def capture_event(events):
    """event_hook that appends to `events`."""
    def _capture(event_type: str, payload: dict[str, object]) -> None:
        events.append((event_type, payload))

    return _capture


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "contract: model and configuration contract tests")
    config.addinivalue_line("markers", "integration: end-to-end integration tests")
    config.addinivalue_line("markers", "unit: unit tests")
