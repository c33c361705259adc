"""Authenticated HTTP accessor for code-hosting platform APIs."""

from typing import Any

import httpx

from commit_counter.log import LoggerLike, counter_logger
from commit_counter.models import APIResult, Empty, Ok

DEFAULT_TIMEOUT = 30.0


class APIClient:
    """GET-only client that turns every failure into an ``Empty`` result."""

    def __init__(
        self,
        username: str = "",
        access_token: str = "",
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
        logger: LoggerLike | None = None,
    ) -> None:
        """Initialize the API client.

        Args:
            username: Username for basic authentication
            access_token: Access token used as the basic-auth password
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (tests pass a MockTransport)
            logger: Logger for diagnostics (module logger if None)
        """
        self.username = username
        self.access_token = access_token
        self.timeout = timeout
        self.headers = {"Content-Type": "application/json"}
        self.logger = counter_logger(__name__, type(self).__name__, logger)
        self.api_calls = 0

        self._transport = transport
        # Persistent HTTP client for connection reuse
        self._http_client: httpx.AsyncClient | None = None

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
                limits=httpx.Limits(max_keepalive_connections=10, max_connections=20),
            )
        return self._http_client

    def _error_payload(self, error: Exception) -> Any:
        """Return the server's error body for an HTTP status error, if any."""
        if not isinstance(error, httpx.HTTPStatusError):
            return ""
        try:
            return error.response.json()
        except ValueError:
            return error.response.text

    async def get_from_api(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
        extra_options: dict[str, Any] | None = None,
    ) -> APIResult:
        """GET an endpoint and return its decoded JSON body.

        Args:
            endpoint: The full URL to call
            params: Query parameters to send
            extra_options: httpx request option overrides, merged last

        Returns:
            Ok with the decoded body, or Empty when the body is empty or the
            call failed. This method never raises.
        """
        options: dict[str, Any] = {
            "params": params or {},
            "headers": self.headers,
            "auth": httpx.BasicAuth(self.username, self.access_token),
            **(extra_options or {}),
        }

        self.api_calls += 1
        try:
            response = await self._get_http_client().request("GET", endpoint, **options)
            response.raise_for_status()
            data = response.json() if response.content else None
        except Exception as error:
            payload = self._error_payload(error)
            self.logger.warning(
                f"Failed call to {endpoint} with error: {error} {payload}".rstrip()
            )
            return Empty(reason=f"{type(error).__name__}: {error}")

        if not data:
            self.logger.debug(f"Empty response from {endpoint}")
            return Empty()
        return Ok(data)

    async def close(self) -> None:
        """Close the HTTP client and clean up resources."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> "APIClient":
        """Async context manager entry."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Async context manager exit with cleanup."""
        await self.close()

