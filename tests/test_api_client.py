"""Tests for the HTTP accessor, mocked at the transport boundary."""

import base64
import logging

import httpx
import pytest

from commit_counter.api_client import APIClient
from commit_counter.models import Empty, Ok


def make_client(handler, **kwargs) -> APIClient:
    return APIClient(
        username="testuser",
        access_token="test_token",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


class TestAPIClient:
    """Test APIClient.get_from_api."""

    def test_client_initialization(self):
        """Test client initialization with default values."""
        client = APIClient(username="testuser", access_token="test_token")

        assert client.username == "testuser"
        assert client.access_token == "test_token"
        assert client.timeout == 30.0
        assert client.headers["Content-Type"] == "application/json"
        assert client.api_calls == 0

    @pytest.mark.asyncio
    async def test_sends_basic_auth_headers_and_params(self):
        """Test that the request carries basic auth, JSON content type and params."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["request"] = request
            return httpx.Response(200, json=[{"id": 1}])

        async with make_client(handler) as client:
            result = await client.get_from_api(
                "https://api.example.com/repos", {"page": 2, "per_page": 100}
            )

        request = seen["request"]
        expected = base64.b64encode(b"testuser:test_token").decode()
        assert request.method == "GET"
        assert request.headers["Authorization"] == f"Basic {expected}"
        assert request.headers["Content-Type"] == "application/json"
        assert request.url.params["page"] == "2"
        assert request.url.params["per_page"] == "100"
        assert result == Ok([{"id": 1}])
        assert client.api_calls == 1

    @pytest.mark.asyncio
    async def test_extra_options_override_defaults(self):
        """Test that caller options are merged last and win."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["request"] = request
            return httpx.Response(200, json={"ok": True})

        async with make_client(handler) as client:
            await client.get_from_api(
                "https://api.example.com/user",
                {"page": 1},
                {"headers": {"PRIVATE-TOKEN": "abc"}, "auth": None, "params": {"x": "y"}},
            )

        request = seen["request"]
        assert request.headers["PRIVATE-TOKEN"] == "abc"
        assert "Authorization" not in request.headers
        assert "page" not in request.url.params
        assert request.url.params["x"] == "y"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [b"", b"null", b"[]", b"{}"])
    async def test_empty_body_is_empty(self, body):
        """Test that empty or null bodies come back as Empty, not as data."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=body)

        async with make_client(handler) as client:
            result = await client.get_from_api("https://api.example.com/repos")

        assert isinstance(result, Empty)

    @pytest.mark.asyncio
    async def test_http_error_is_absorbed_and_logged(self, caplog):
        """Test that a non-2xx response is logged with its payload and not raised."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"message": "Bad credentials"})

        with caplog.at_level(logging.WARNING):
            async with make_client(handler) as client:
                result = await client.get_from_api("https://api.example.com/repos")

        assert isinstance(result, Empty)
        assert "HTTPStatusError" in result.reason
        assert "Failed call to https://api.example.com/repos" in caplog.text
        assert "Bad credentials" in caplog.text
        assert "APIClient - " in caplog.text

    @pytest.mark.asyncio
    async def test_transport_error_is_absorbed(self):
        """Test that network failures come back as Empty."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with make_client(handler) as client:
            result = await client.get_from_api("https://api.example.com/repos")

        assert isinstance(result, Empty)
        assert "ConnectError" in result.reason

    @pytest.mark.asyncio
    async def test_malformed_json_is_absorbed(self):
        """Test that an undecodable body comes back as Empty."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"<html>oops</html>")

        async with make_client(handler) as client:
            result = await client.get_from_api("https://api.example.com/repos")

        assert isinstance(result, Empty)

    @pytest.mark.asyncio
    async def test_injected_logger_is_used(self, caplog):
        """Test that failures are reported through the injected logger."""
        injected = logging.getLogger("tests.injected")

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="boom")

        with caplog.at_level(logging.WARNING, logger="tests.injected"):
            async with make_client(handler, logger=injected) as client:
                await client.get_from_api("https://api.example.com/repos")

        assert any(r.name == "tests.injected" for r in caplog.records)
        assert "boom" in caplog.text

    @pytest.mark.asyncio
    async def test_close_releases_http_client(self):
        """Test that the pooled client is dropped on close."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[1])

        client = make_client(handler)
        await client.get_from_api("https://api.example.com/repos")
        assert client._http_client is not None

        await client.close()
        assert client._http_client is None
