"""Base API Client.

Provides the common HTTP session, bearer authentication, and error
classification shared by the upstream API clients.
"""

import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)


class APIClientError(Exception):
    """Base exception for API client errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class UpstreamError(APIClientError):
    """Upstream returned an unexpected status or an undecodable body."""

    pass


class NetworkError(APIClientError):
    """Exception raised when the upstream cannot be reached."""

    pass


class UpstreamTimeoutError(NetworkError):
    """Exception raised when an upstream request times out."""

    pass


class BaseAPIClient:
    """Async HTTP client with bearer authentication.

    TLS certificate verification is configurable per client. The GitLab
    client turns it off so that self-signed internal servers work; this is
    a known security tradeoff and is logged when the session is created.
    """

    def __init__(
        self,
        base_url: str,
        access_token: str,
        timeout: float = 30.0,
        verify_ssl: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize base API client.

        Args:
            base_url: Base URL of the upstream server
            access_token: Token sent as ``Authorization: Bearer``
            timeout: Total request timeout in seconds
            verify_ssl: Whether to verify TLS certificates
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.access_token = access_token
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self._transport = transport
        self._session: Optional[httpx.AsyncClient] = None

    @property
    def session(self) -> httpx.AsyncClient:
        """Get or create the HTTP session."""
        if self._session is None or self._session.is_closed:
            if not self.verify_ssl:
                logger.warning(
                    f"TLS certificate verification disabled for {self.base_url}"
                )
            self._session = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                headers={"Content-Type": "application/json"},
                verify=self.verify_ssl,
                follow_redirects=True,
                transport=self._transport,
            )
        return self._session

    def _auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.access_token}"}

    async def _authenticated_request(
        self, method: str, endpoint: str, **kwargs: Any
    ) -> httpx.Response:
        """Make an authenticated request and classify transport failures.

        Status codes are not interpreted here; callers decide what a 404 or
        a 5xx means for their operation.

        Raises:
            UpstreamTimeoutError: If the request times out
            NetworkError: If the connection fails
        """
        url = f"{self.base_url}{endpoint}"
        headers = kwargs.pop("headers", {})
        headers.update(self._auth_headers())

        try:
            response = await self.session.request(method, url, headers=headers, **kwargs)
        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError(
                f"Request to {self.base_url} timed out after {self.timeout}s: {e}"
            )
        except httpx.HTTPError as e:
            raise NetworkError(f"Cannot reach {self.base_url}: {e}")

        logger.debug(f"{method} {endpoint} -> {response.status_code}")
        return response

    async def get(self, endpoint: str, **kwargs: Any) -> httpx.Response:
        """Make authenticated GET request."""
        return await self._authenticated_request("GET", endpoint, **kwargs)

    @staticmethod
    def _decode_json(response: httpx.Response, what: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(f"Invalid JSON in {what} response: {e}", response.status_code)

    async def close(self) -> None:
        """Close HTTP session."""
        if self._session and not self._session.is_closed:
            await self._session.aclose()
        self._session = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
