"""
Base API Client

Provides unified HTTP request handling and error translation for the external
API clients in the MoodTunes system.

Requests are made exactly once: a failure is translated into the client's
``error_class`` and surfaced immediately.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Type

import aiohttp
import structlog

from ..errors import MoodTunesError

logger = structlog.get_logger(__name__)

# Upstream bodies are logged truncated to this many characters
MAX_LOGGED_BODY = 500


class BaseAPIClient(ABC):
    """
    Base HTTP client with unified request handling and error handling.

    Clients either receive a shared ``aiohttp.ClientSession`` (which they do not
    close) or open their own through the async context manager.
    """

    error_class: Type[MoodTunesError] = MoodTunesError

    def __init__(
        self,
        base_url: str,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: float = 10.0,
        service_name: str = "api"
    ):
        """
        Initialize base API client.

        Args:
            base_url: Base URL for the API
            session: Shared HTTP session (optional)
            timeout: Request timeout in seconds
            service_name: Service name for logging and identification
        """
        self.base_url = base_url.rstrip('/')
        self.session = session
        self.timeout = timeout
        self.service_name = service_name
        self._owns_session = False

        self.logger = logger.bind(
            service=service_name,
            component=type(self).__name__,
            base_url=self.base_url
        )

        self.logger.debug("API client initialized", timeout=timeout)

    async def __aenter__(self):
        """Async context manager entry."""
        if self.session is None:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
            self._owns_session = True
            self.logger.debug("API client session started")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        if self.session and self._owns_session:
            await self.session.close()
            self.session = None
            self._owns_session = False
            self.logger.debug("API client session closed")

    async def _make_request(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        method: str = "GET",
        headers: Optional[Dict[str, str]] = None,
        data: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Make a single HTTP request and return the decoded JSON body.

        Args:
            endpoint: API endpoint (relative to base_url)
            params: Query parameters
            method: HTTP method (GET, POST, etc.)
            headers: Additional headers
            data: Form-encoded body

        Returns:
            Parsed JSON response data

        Raises:
            MoodTunesError: ``error_class`` for any transport, status or body failure
        """
        if not self.session:
            self.logger.error("Client not initialized")
            raise self.error_class(
                f"{self.service_name} client not initialized. Use async context manager."
            )

        url = f"{self.base_url}/{endpoint.lstrip('/')}" if endpoint else self.base_url
        request_headers = dict(headers or {})
        request_headers.setdefault('User-Agent', f'MoodTunes-{self.service_name}/1.0')

        self.logger.debug(
            "Making API request",
            method=method,
            endpoint=endpoint,
            param_count=len(params or {})
        )

        try:
            async with self.session.request(
                method=method,
                url=url,
                params=params,
                data=data,
                headers=request_headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as response:
                if response.status != 200:
                    await self._handle_http_error(response, endpoint)

                payload = await self._parse_response(response)

        except asyncio.TimeoutError:
            self.logger.warning("Request timeout", endpoint=endpoint, timeout=self.timeout)
            raise self.error_class(
                f"{self.service_name} request timed out after {self.timeout}s"
            )

        except aiohttp.ClientError as e:
            self.logger.error(
                "HTTP client error",
                error=str(e),
                error_type=type(e).__name__,
                endpoint=endpoint
            )
            raise self.error_class(f"{self.service_name} client error: {e}") from e

        error_info = self._extract_api_error(payload)
        if error_info:
            self.logger.error("API error in response body", error=error_info, endpoint=endpoint)
            raise self.error_class(f"{self.service_name} API error: {error_info}")

        self.logger.debug("API request successful", endpoint=endpoint)
        return payload

    async def _parse_response(self, response: aiohttp.ClientResponse) -> Dict[str, Any]:
        """
        Parse API response. Can be overridden by subclasses for custom parsing.

        Args:
            response: HTTP response object

        Returns:
            Parsed response data
        """
        try:
            payload = await response.json(content_type=None)
        except ValueError as e:
            self.logger.error(f"{self.service_name} invalid JSON response", error=str(e))
            raise self.error_class(f"{self.service_name} returned invalid JSON") from e

        if not isinstance(payload, dict):
            raise self.error_class(f"{self.service_name} returned a non-object JSON body")
        return payload

    async def _handle_http_error(self, response: aiohttp.ClientResponse, endpoint: str):
        """
        Log the upstream error body and raise.

        Args:
            response: HTTP response object
            endpoint: Request endpoint
        """
        body = await response.text()
        self.logger.error(
            f"{self.service_name} HTTP error",
            status=response.status,
            endpoint=endpoint,
            body=body[:MAX_LOGGED_BODY]
        )
        raise self.error_class(
            f"{self.service_name} HTTP error: {response.status}",
            upstream_status=response.status
        )

    @abstractmethod
    def _extract_api_error(self, data: Dict[str, Any]) -> Optional[str]:
        """
        Extract API-specific error information from response data.

        Args:
            data: Parsed response data

        Returns:
            Error message if found, None otherwise
        """
        pass
