"""
Track and Keyword Models

Normalized shapes returned to API callers. Tracks are rebuilt from raw Spotify
search results on every request and never persisted.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Track:
    """
    Normalized catalog track.

    Field names match the JSON shape served by ``GET /playlist``.
    """
    name: str
    artist: str
    album: str
    url: str
    image: Optional[str] = None
    preview_url: Optional[str] = None

    @classmethod
    def from_spotify_item(cls, item: Dict[str, Any]) -> "Track":
        """
        Build a track from a raw Spotify ``tracks.items[*]`` record.

        Args:
            item: Raw track object from the Spotify search API

        Returns:
            Normalized Track

        Raises:
            KeyError: If a required field is missing from the record
            TypeError: If a nested field has the wrong type
            ValueError: If the record lists no artists
        """
        album = item["album"]
        images = album.get("images") or []

        artist_names = [artist["name"] for artist in item["artists"]]
        if not artist_names:
            raise ValueError(f"Track {item.get('id')!r} has no artists")

        return cls(
            name=item["name"],
            artist=", ".join(artist_names),
            album=album["name"],
            url=item["external_urls"]["spotify"],
            image=images[0].get("url") if images else None,
            preview_url=item.get("preview_url"),
        )

    def to_dict(self) -> Dict[str, Optional[str]]:
        """Serialize to the public JSON shape."""
        return {
            "name": self.name,
            "artist": self.artist,
            "album": self.album,
            "image": self.image,
            "url": self.url,
            "preview_url": self.preview_url,
        }


@dataclass
class KeywordSet:
    """Search keywords extracted from one mood description."""
    keywords: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, List[str]]:
        return asdict(self)
