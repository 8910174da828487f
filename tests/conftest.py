"""
Pytest configuration and shared fixtures for the HireScout test suite.

Scrapers under test get configs with no pacing, single-attempt retries and a
generous rate limit, and talk to httpx.MockTransport instead of the network.
"""

import os
import sys
from typing import Any, Callable, Dict, List

import httpx
import pytest

# Add project root to Python path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

from hirescout.config.environment import ENV_PREFIX, reset_environment_manager  # noqa: E402
from hirescout.config.platforms import ScraperConfig  # noqa: E402
from hirescout.core.resilience import RateLimitConfig, RetryPolicy  # noqa: E402


def pytest_collection_modifyitems(config: Any, items: Any) -> None:
    """Automatically categorize tests based on their names."""
    for item in items:
        name = item.nodeid.lower()

        # Mark scraper tests
        if any(keyword in name for keyword in ["scraper", "reddit", "twitter", "google", "remoteok", "manager"]):
            item.add_marker("scraper")

        # Mark contact discovery tests
        if any(keyword in name for keyword in ["email", "discovery", "contact"]):
            item.add_marker("contacts")

        # Mark rate limiting tests
        if any(keyword in name for keyword in ["rate", "retry"]):
            item.add_marker("rate_limit")

        # Mark as unit tests by default
        if not any(item.iter_markers()):
            item.add_marker("unit")


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch):
    """Hide HIRESCOUT_* variables from the developer's shell and reset cached config."""
    for key in list(os.environ):
        if key.startswith(ENV_PREFIX):
            monkeypatch.delenv(key, raising=False)
    reset_environment_manager()
    yield
    reset_environment_manager()


def make_test_config(**overrides: Any) -> ScraperConfig:
    """Scraper config that never sleeps and never retries."""
    values: Dict[str, Any] = {
        "rate_limit": RateLimitConfig(requests=10_000, period=60.0),
        "retry": RetryPolicy(attempts=1, delay=0.0),
        "request_delay": 0.0,
    }
    values.update(overrides)
    return ScraperConfig(**values)


@pytest.fixture
def scraper_config() -> Callable[..., ScraperConfig]:
    return make_test_config


@pytest.fixture
def mock_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.Client]:
    """Factory for httpx clients backed by a request handler."""
    clients: List[httpx.Client] = []

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.Client:
        client = httpx.Client(transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield factory
    for client in clients:
        client.close()


@pytest.fixture
def recorded_sleeps() -> List[float]:
    return []


@pytest.fixture
def fake_sleep(recorded_sleeps: List[float]) -> Callable[[float], None]:
    return recorded_sleeps.append
