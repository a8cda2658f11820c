"""HTTP client for the exchange REST API.

Sends one scenario request and hands back the raw status and parsed body.
Status and shape checks belong to the validators, so non-2xx answers are
returned rather than raised.
"""

import time
from dataclasses import dataclass
from typing import Any

import httpx

from .errors import ConfigError, TransportError
from .scenarios import Request
from .shared.auth import Credentials, NonceSource, signed_form
from .shared.logging import get_logger

DEFAULT_API_URL = "https://api.kraken.com"
DEFAULT_USER_AGENT = "Kraken REST API"

logger = get_logger(__name__)


@dataclass(frozen=True)
class Response:
    """Status and decoded JSON body (None if the body was not JSON)."""

    status: int
    body: Any
    elapsed: float = 0.0


class KrakenClient:
    """Async HTTP client for the exchange REST API.

    Use as an async context manager; one instance is shared by all
    scenarios of a run.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize client.

        Args:
            base_url: API root (e.g., https://api.kraken.com)
            timeout: Request timeout in seconds
            user_agent: User-Agent header sent with every request
            transport: Optional httpx transport (tests mount a mock exchange here)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.user_agent = user_agent
        self._transport = transport
        self._nonces = NonceSource()
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "KrakenClient":
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers={"User-Agent": self.user_agent},
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Ensure client is initialized."""
        if not self._client:
            raise RuntimeError("Client not initialized. Use 'async with' context.")
        return self._client

    async def send(self, request: Request, credentials: Credentials | None = None) -> Response:
        """Send a scenario request.

        Args:
            request: Request to send
            credentials: Required when request.authenticated is set

        Returns:
            Response with status, decoded body and elapsed seconds

        Raises:
            ConfigError: Authenticated request without credentials
            TransportError: No response (connection, DNS, timeout)
        """
        client = self._ensure_client()

        content: str | None = None
        headers: dict[str, str] = {}
        if request.authenticated:
            if credentials is None:
                raise ConfigError(f"Credentials required for {request.path}")
            content, headers = signed_form(credentials, request.path, self._nonces.next())

        start = time.perf_counter()
        try:
            response = await client.request(
                request.method, request.url, content=content, headers=headers
            )
        except httpx.TimeoutException as e:
            raise TransportError(
                f"Request to {request.url} timed out after {self.timeout}s",
                details={"url": request.url},
            ) from e
        except httpx.ConnectError as e:
            raise TransportError(
                f"Cannot connect to {self.base_url}: {e}",
                details={"url": request.url},
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(f"Request to {request.url} failed: {e}", details={"url": request.url}) from e
        elapsed = time.perf_counter() - start

        try:
            body = response.json()
        except ValueError:
            body = None

        logger.debug(
            "response_received",
            method=request.method,
            url=request.url,
            status=response.status_code,
            elapsed=round(elapsed, 3),
        )
        return Response(status=response.status_code, body=body, elapsed=elapsed)
