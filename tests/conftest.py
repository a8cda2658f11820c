"""Shared test fixtures for kraken-check tests.

- mock_exchange: in-process exchange served through httpx.ASGITransport
- make_client: builds a KrakenClient wired to the mock exchange
- credentials: API credentials accepted by the mock exchange
"""

import logging
from collections.abc import Callable

import httpx
import pytest
import structlog

from kraken_check.client import KrakenClient
from kraken_check.shared.auth import Credentials
from tests.mocks.mock_exchange import TEST_API_KEY, TEST_API_SECRET, MockExchange

MOCK_BASE_URL = "https://mock.exchange"


@pytest.fixture
def mock_exchange() -> MockExchange:
    """Fresh mock exchange per test."""
    return MockExchange()


@pytest.fixture
def make_client(mock_exchange: MockExchange) -> Callable[..., KrakenClient]:
    """Factory for clients routed into the mock exchange.

    Pass ``transport=`` to use a different transport (e.g. httpx.MockTransport).
    """

    def _make(transport: httpx.AsyncBaseTransport | None = None, **kwargs) -> KrakenClient:
        return KrakenClient(
            kwargs.pop("base_url", MOCK_BASE_URL),
            transport=transport or mock_exchange.transport(),
            **kwargs,
        )

    return _make


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(api_key=TEST_API_KEY, api_secret=TEST_API_SECRET)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    """Keep real credentials and ~/.kraken-check out of tests."""
    for var in (
        "API_Public_Key",
        "API_Private_Key",
        "OTP",
        "OTP_Setup_Key",
        "KRAKEN_CHECK_API_URL",
        "KRAKEN_CHECK_TIMEOUT",
        "KRAKEN_CHECK_CONCURRENCY",
        "KRAKEN_CHECK_SCENARIOS",
        "KRAKEN_CHECK_LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr("kraken_check.config.CONFIG_FILE", tmp_path / "config.yaml")


@pytest.fixture(autouse=True)
def _reset_logging():
    """Drop handlers the CLI installed on the root logger."""
    yield
    structlog.contextvars.clear_contextvars()
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
