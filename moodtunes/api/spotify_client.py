"""
Spotify Web API Client

Text search against the Spotify catalog, authenticated with the shared
client-credentials token cache.
"""

from typing import Any, Dict, List, Optional

import aiohttp

from ..errors import UpstreamSearchError
from ..models.track_models import Track
from .base_client import BaseAPIClient
from .token_cache import CatalogTokenCache


class SpotifyClient(BaseAPIClient):
    """
    Spotify Web API client.

    Inherits from BaseAPIClient for consistent HTTP handling; bearer tokens come
    from the injected CatalogTokenCache.
    """

    BASE_URL = "https://api.spotify.com/v1"
    DEFAULT_SEARCH_LIMIT = 10
    error_class = UpstreamSearchError

    def __init__(
        self,
        token_cache: CatalogTokenCache,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: float = 10.0,
        base_url: str = BASE_URL
    ):
        """
        Initialize Spotify client.

        Args:
            token_cache: Shared credential cache
            session: Shared HTTP session (optional)
            timeout: Request timeout in seconds
            base_url: Web API base URL
        """
        super().__init__(
            base_url=base_url,
            session=session,
            timeout=timeout,
            service_name="Spotify"
        )

        self.token_cache = token_cache

        self.logger.info("Spotify client initialized")

    def _extract_api_error(self, data: Dict[str, Any]) -> Optional[str]:
        """
        Extract Spotify API error information from response data.

        Args:
            data: Parsed response data

        Returns:
            Error message if found, None otherwise
        """
        if "error" in data:
            error_info = data["error"]
            if isinstance(error_info, dict):
                return error_info.get("message", f"Error {error_info.get('status', 'unknown')}")
            return str(error_info)
        return None

    async def _make_spotify_request(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Make authenticated request to Spotify API.

        A 401 drops the rejected token from the cache so the next request
        fetches a fresh one; the failed request is not retried.

        Args:
            endpoint: API endpoint (without base URL)
            params: Query parameters

        Returns:
            API response data
        """
        token = await self.token_cache.get_token()

        headers = {"Authorization": f"Bearer {token}"}

        try:
            return await self._make_request(endpoint=endpoint, params=params, headers=headers)
        except UpstreamSearchError as e:
            if e.upstream_status == 401:
                self.logger.warning("Bearer token rejected, invalidating cache", endpoint=endpoint)
                self.token_cache.invalidate(token)
            raise

    async def search_tracks(
        self,
        query: str,
        limit: int = DEFAULT_SEARCH_LIMIT
    ) -> List[Track]:
        """
        Search for tracks with a free-text query.

        Results keep Spotify's relevance order.

        Args:
            query: Search query
            limit: Number of results

        Returns:
            List of normalized tracks

        Raises:
            UpstreamAuthError: If no bearer token could be obtained
            UpstreamSearchError: If the search call fails or the payload is malformed
        """
        data = await self._make_spotify_request(
            "search",
            {
                "q": query,
                "type": "track",
                "limit": limit
            }
        )

        try:
            items = data["tracks"]["items"]
            tracks = [Track.from_spotify_item(item) for item in items]
        except (KeyError, TypeError, AttributeError, IndexError, ValueError) as e:
            self.logger.error(
                "Malformed Spotify search payload",
                query=query,
                error=repr(e)
            )
            raise UpstreamSearchError(f"Malformed Spotify search payload: {e!r}") from e

        self.logger.info(
            "Spotify search completed",
            query=query,
            results_count=len(tracks)
        )

        return tracks
