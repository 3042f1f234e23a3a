"""
API Client Factory

Builds the process-wide clients and services from configuration: one shared
HTTP session, one Spotify token cache, the Spotify client, the Gemini model and
the two services the HTTP layer calls.
"""

from contextlib import AsyncExitStack
from typing import Optional

import aiohttp
import google.generativeai as genai
import structlog

from ..models.config_models import SystemConfig
from ..services.keyword_service import KeywordExtractor
from ..services.llm_utils import LLMUtils
from ..services.playlist_service import PlaylistService
from .spotify_client import SpotifyClient
from .token_cache import CatalogTokenCache

logger = structlog.get_logger(__name__)


class APIClientFactory:
    """
    Factory for creating configured API clients and services.

    Every object it builds is meant to live for the whole process; the caller
    owns the ``AsyncExitStack`` that closes the shared HTTP session.
    """

    def __init__(self, system_config: SystemConfig):
        """
        Initialize client factory.

        Args:
            system_config: System configuration
        """
        self.system_config = system_config
        self.logger = logger.bind(service="APIClientFactory")

    async def create_http_session(self, stack: AsyncExitStack) -> aiohttp.ClientSession:
        """Open the shared HTTP session and register it for closing."""
        session = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self.system_config.request_timeout_seconds)
        )
        return await stack.enter_async_context(session)

    def create_token_cache(self, session: Optional[aiohttp.ClientSession] = None) -> CatalogTokenCache:
        """Create the process-wide Spotify token cache."""
        config = self.system_config
        if not config.has_spotify_credentials:
            self.logger.warning("SPOTIFY_CLIENT_ID/SPOTIFY_CLIENT_SECRET not set; /playlist will fail")

        return CatalogTokenCache(
            client_id=config.spotify_client_id,
            client_secret=config.spotify_client_secret,
            session=session,
            timeout=config.request_timeout_seconds
        )

    def create_spotify_client(
        self,
        token_cache: CatalogTokenCache,
        session: Optional[aiohttp.ClientSession] = None
    ) -> SpotifyClient:
        """Create a Spotify client bound to the shared token cache."""
        return SpotifyClient(
            token_cache=token_cache,
            session=session,
            timeout=self.system_config.request_timeout_seconds
        )

    async def create_playlist_service(self, stack: AsyncExitStack) -> PlaylistService:
        """
        Create the playlist service with its full client chain.

        Args:
            stack: Exit stack owning the shared HTTP session

        Returns:
            Configured PlaylistService
        """
        session = await self.create_http_session(stack)
        token_cache = self.create_token_cache(session)
        spotify_client = self.create_spotify_client(token_cache, session)

        self.logger.info(
            "Playlist service created",
            search_limit=self.system_config.search_limit
        )
        return PlaylistService(spotify_client, search_limit=self.system_config.search_limit)

    def create_gemini_model(self) -> Optional[genai.GenerativeModel]:
        """
        Configure the Gemini SDK and create the model.

        Returns:
            GenerativeModel, or None when no API key is configured
        """
        config = self.system_config
        if not config.gemini_api_key:
            self.logger.warning("GEMINI_API_KEY not set; /mood will fail")
            return None

        genai.configure(api_key=config.gemini_api_key)
        return genai.GenerativeModel(config.gemini_model)

    def create_keyword_extractor(self) -> KeywordExtractor:
        """Create the keyword extractor around the Gemini model."""
        llm_utils = LLMUtils(
            self.create_gemini_model(),
            timeout=self.system_config.request_timeout_seconds
        )

        self.logger.info("Keyword extractor created", model=self.system_config.gemini_model)
        return KeywordExtractor(llm_utils)
