"""
API Module

External service clients and the HTTP application.
Provides consistent HTTP handling and error translation.
"""

from .base_client import BaseAPIClient
from .spotify_client import SpotifyClient
from .token_cache import CatalogTokenCache, Credential

__all__ = [
    # Base infrastructure
    "BaseAPIClient",

    # Spotify
    "CatalogTokenCache",
    "Credential",
    "SpotifyClient",
]
