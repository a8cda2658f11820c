"""Test mocks for kraken-check.

Provides mock implementations for testing:
- MockExchange: Simulates the exchange REST API in-process
"""

from .mock_exchange import MockExchange

__all__ = ["MockExchange"]
