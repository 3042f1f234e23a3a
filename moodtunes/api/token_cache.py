"""
Spotify Token Cache

Owns the single bearer credential used for Spotify Web API calls. The
credential is fetched lazily with the client-credentials flow, reused until it
expires, and refreshed by at most one in-flight request at a time.
"""

import asyncio
import base64
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import aiohttp

from ..errors import UpstreamAuthError
from .base_client import BaseAPIClient

DEFAULT_TOKEN_LIFETIME = 3600


@dataclass(frozen=True)
class Credential:
    """Bearer token and the clock reading at which it stops being valid."""
    token: str
    expires_at: float

    def is_valid(self, now: float) -> bool:
        return now < self.expires_at


class CatalogTokenCache(BaseAPIClient):
    """
    Process-wide cache for the Spotify client-credentials token.

    One instance is built at startup and handed to every client that needs a
    bearer token. Concurrent callers that find the cache empty or expired share
    a single refresh request.
    """

    AUTH_BASE_URL = "https://accounts.spotify.com/api"
    error_class = UpstreamAuthError

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: float = 10.0,
        clock: Callable[[], float] = time.monotonic,
        auth_base_url: str = AUTH_BASE_URL
    ):
        """
        Initialize token cache.

        Args:
            client_id: Spotify client ID
            client_secret: Spotify client secret
            session: Shared HTTP session (optional)
            timeout: Token request timeout in seconds
            clock: Monotonic clock returning seconds
            auth_base_url: Accounts service base URL
        """
        super().__init__(
            base_url=auth_base_url,
            session=session,
            timeout=timeout,
            service_name="SpotifyAuth"
        )

        self.client_id = client_id
        self.client_secret = client_secret
        self.clock = clock
        self._credential: Optional[Credential] = None
        self._refresh_lock = asyncio.Lock()

    @property
    def credential(self) -> Optional[Credential]:
        return self._credential

    def _extract_api_error(self, data: Dict[str, Any]) -> Optional[str]:
        # Accounts service errors are {"error": "...", "error_description": "..."}
        if "error" in data:
            return data.get("error_description") or str(data["error"])
        return None

    async def get_token(self) -> str:
        """
        Return a valid bearer token, fetching a new one if needed.

        Returns:
            Access token string

        Raises:
            UpstreamAuthError: If the token endpoint is unreachable or rejects us
        """
        credential = self._credential
        if credential and credential.is_valid(self.clock()):
            return credential.token

        async with self._refresh_lock:
            # Another caller may have refreshed while we waited for the lock
            credential = self._credential
            if credential and credential.is_valid(self.clock()):
                return credential.token

            self._credential = await self._fetch_credential()
            return self._credential.token

    def invalidate(self, token: Optional[str] = None) -> None:
        """
        Drop the cached credential so the next call fetches a new one.

        Args:
            token: The rejected token. When given, the cache is only cleared if
                it still holds this token, so a newer one fetched meanwhile survives.
        """
        credential = self._credential
        if credential is None:
            return
        if token is not None and credential.token != token:
            self.logger.debug("Rejected token already replaced, keeping cache")
            return
        self._credential = None

    async def _fetch_credential(self) -> Credential:
        """Perform the client-credentials exchange."""
        if not self.client_id or not self.client_secret:
            self.logger.error("Spotify client credentials are not configured")
            raise UpstreamAuthError("Spotify client ID/secret missing")

        auth_str = f"{self.client_id}:{self.client_secret}"
        auth_b64 = base64.b64encode(auth_str.encode()).decode()

        headers = {
            "Authorization": f"Basic {auth_b64}",
            "Content-Type": "application/x-www-form-urlencoded"
        }

        token_data = await self._make_request(
            "token",
            method="POST",
            headers=headers,
            data={"grant_type": "client_credentials"}
        )

        access_token = token_data.get("access_token")
        if not access_token or not isinstance(access_token, str):
            self.logger.error("Token response missing access_token", keys=list(token_data))
            raise UpstreamAuthError("Spotify token response missing access_token")

        try:
            expires_in = float(token_data.get("expires_in", DEFAULT_TOKEN_LIFETIME))
        except (TypeError, ValueError):
            raise UpstreamAuthError(
                f"Spotify token response has invalid expires_in: {token_data.get('expires_in')!r}"
            )

        self.logger.info("Spotify authentication successful", expires_in=expires_in)

        return Credential(token=access_token, expires_at=self.clock() + expires_in)
