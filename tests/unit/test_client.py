"""Unit tests for kraken_check.client."""

import httpx
import pytest

from kraken_check.client import DEFAULT_USER_AGENT, KrakenClient
from kraken_check.errors import ConfigError, TransportError
from kraken_check.scenarios import Request
from tests.mocks.mock_exchange import TEST_API_KEY, TIME_RESULT


class TestPublicRequests:
    @pytest.mark.asyncio
    async def test_get_time(self, make_client, mock_exchange):
        async with make_client() as client:
            response = await client.send(Request("GET", "/0/public/Time"))

        assert response.status == 200
        assert response.body == {"error": [], "result": TIME_RESULT}
        assert response.elapsed >= 0
        assert mock_exchange.requests[0]["headers"]["user-agent"] == DEFAULT_USER_AGENT

    @pytest.mark.asyncio
    async def test_query_string_is_sent(self, make_client, mock_exchange):
        async with make_client() as client:
            await client.send(Request("GET", "/0/public/Ticker?pair=xbtusd"))

        assert mock_exchange.requests[0]["query"] == {"pair": "xbtusd"}

    @pytest.mark.asyncio
    async def test_error_status_is_returned_not_raised(self, make_client, mock_exchange):
        mock_exchange.force("/0/public/Time", 500, {"error": ["EService:Unavailable"]})

        async with make_client() as client:
            response = await client.send(Request("GET", "/0/public/Time"))

        assert response.status == 500
        assert response.body == {"error": ["EService:Unavailable"]}

    @pytest.mark.asyncio
    async def test_non_json_body(self, make_client, mock_exchange):
        mock_exchange.force("/0/public/Time", 502, "<html>Bad Gateway</html>")

        async with make_client() as client:
            response = await client.send(Request("GET", "/0/public/Time"))

        assert response.status == 502
        assert response.body is None

    @pytest.mark.asyncio
    async def test_requires_context_manager(self):
        client = KrakenClient()

        with pytest.raises(RuntimeError, match="async with"):
            await client.send(Request("GET", "/0/public/Time"))


class TestPrivateRequests:
    @pytest.mark.asyncio
    async def test_signed_request_accepted(self, make_client, mock_exchange, credentials):
        mock_exchange.add_order("OQCLML-BW3P3-BUCMWZ")

        async with make_client() as client:
            response = await client.send(
                Request("POST", "/0/private/OpenOrders", authenticated=True), credentials
            )

        assert response.body["error"] == []
        assert list(response.body["result"]["open"]) == ["OQCLML-BW3P3-BUCMWZ"]
        sent = mock_exchange.requests[0]
        assert sent["headers"]["api-key"] == TEST_API_KEY
        assert sent["body"].startswith("nonce=")

    @pytest.mark.asyncio
    async def test_consecutive_nonces_accepted(self, make_client, mock_exchange, credentials):
        request = Request("POST", "/0/private/OpenOrders", authenticated=True)

        async with make_client() as client:
            first = await client.send(request, credentials)
            second = await client.send(request, credentials)

        assert first.body["error"] == []
        assert second.body["error"] == []

    @pytest.mark.asyncio
    async def test_wrong_secret_rejected_by_exchange(self, make_client, mock_exchange, credentials):
        mock_exchange.api_secret = "c2VjcmV0"

        async with make_client() as client:
            response = await client.send(
                Request("POST", "/0/private/OpenOrders", authenticated=True), credentials
            )

        assert response.body["error"] == ["EAPI:Invalid signature"]

    @pytest.mark.asyncio
    async def test_missing_credentials(self, make_client, mock_exchange):
        async with make_client() as client:
            with pytest.raises(ConfigError):
                await client.send(Request("POST", "/0/private/OpenOrders", authenticated=True))

        assert mock_exchange.requests == []


class TestTransportErrors:
    @pytest.mark.asyncio
    async def test_connection_refused(self, make_client):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        async with make_client(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(TransportError, match="Cannot connect"):
                await client.send(Request("GET", "/0/public/Time"))

    @pytest.mark.asyncio
    async def test_timeout(self, make_client):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        async with make_client(transport=httpx.MockTransport(handler), timeout=0.5) as client:
            with pytest.raises(TransportError, match="timed out after 0.5s"):
                await client.send(Request("GET", "/0/public/Time"))

    @pytest.mark.asyncio
    async def test_other_transport_failure(self, make_client):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.RemoteProtocolError("peer closed connection", request=request)

        async with make_client(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(TransportError) as exc:
                await client.send(Request("GET", "/0/public/Time"))

        assert exc.value.details == {"url": "/0/public/Time"}
