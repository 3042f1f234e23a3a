"""
Playlist Service

Validates a search query, fetches matching tracks from Spotify and returns them
in uniformly random order. Spotify ranks results by relevance, so without the
shuffle every caller would see the same ordering for the same query.
"""

import random
from typing import Any, List, MutableSequence, Optional, TypeVar

import structlog

from ..api.spotify_client import SpotifyClient
from ..errors import ValidationError
from ..models.track_models import Track

logger = structlog.get_logger(__name__)

T = TypeVar("T")

QUERY_REQUIRED = "A query parameter is required."


def fisher_yates_shuffle(items: MutableSequence[T], rng: Optional[random.Random] = None) -> MutableSequence[T]:
    """
    Shuffle ``items`` in place with the Fisher-Yates algorithm.

    Every permutation is equally likely provided ``rng`` is uniform.

    Args:
        items: Sequence to permute
        rng: Random source (defaults to the module-level generator)

    Returns:
        The same sequence, for chaining
    """
    randrange = (rng or random).randrange
    for i in range(len(items) - 1, 0, -1):
        j = randrange(i + 1)
        items[i], items[j] = items[j], items[i]
    return items


class PlaylistService:
    """Search adapter combining the Spotify client with result shuffling."""

    def __init__(
        self,
        spotify_client: SpotifyClient,
        search_limit: int = SpotifyClient.DEFAULT_SEARCH_LIMIT,
        rng: Optional[random.Random] = None
    ):
        """
        Initialize the playlist service.

        Args:
            spotify_client: Authenticated Spotify client
            search_limit: Number of tracks requested per search
            rng: Random source for shuffling (optional)
        """
        self.spotify_client = spotify_client
        self.search_limit = search_limit
        self.rng = rng or random.Random()
        self.logger = logger.bind(service="PlaylistService")

    async def search(self, query_text: Any) -> List[Track]:
        """
        Search Spotify and return the tracks in random order.

        Args:
            query_text: Free-text search query

        Returns:
            Shuffled list of normalized tracks

        Raises:
            ValidationError: If query_text is not a non-empty string
            UpstreamAuthError: If no bearer token could be obtained
            UpstreamSearchError: If the search fails
        """
        if not isinstance(query_text, str) or not query_text.strip():
            raise ValidationError(QUERY_REQUIRED)

        tracks = await self.spotify_client.search_tracks(query_text, limit=self.search_limit)
        fisher_yates_shuffle(tracks, self.rng)

        self.logger.info("Playlist built", query=query_text, track_count=len(tracks))
        return tracks
