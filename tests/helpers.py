"""
Test doubles for outbound HTTP.

FakeSession stands in for ``aiohttp.ClientSession``: responses are registered
per (method, url) and every request is recorded for assertions.
"""

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

TOKEN_URL = "https://accounts.spotify.com/api/token"
SEARCH_URL = "https://api.spotify.com/v1/search"


class FakeResponse:
    """Minimal async-context-manager response."""

    def __init__(
        self,
        status: int = 200,
        payload: Any = None,
        text: Optional[str] = None,
        delay: float = 0.0
    ):
        self.status = status
        self._payload = payload
        self._text = text
        self._delay = delay

    async def __aenter__(self):
        if self._delay:
            await asyncio.sleep(self._delay)
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    async def json(self, content_type=None):
        if self._text is not None:
            return json.loads(self._text)
        return self._payload

    async def text(self):
        if self._text is not None:
            return self._text
        return json.dumps(self._payload)


@dataclass
class RecordedCall:
    method: str
    url: str
    params: Optional[Dict[str, Any]] = None
    data: Optional[Dict[str, Any]] = None
    headers: Dict[str, str] = field(default_factory=dict)


class FakeSession:
    """Records requests and replays registered responses in order."""

    def __init__(self):
        self.routes: Dict[tuple, List[Any]] = {}
        self.calls: List[RecordedCall] = []

    def add(self, method: str, url: str, *responses: Any) -> None:
        """Register responses (or exceptions to raise); the last one repeats."""
        self.routes.setdefault((method, url), []).extend(responses)

    def request(self, method, url, params=None, data=None, headers=None, **kwargs):
        self.calls.append(RecordedCall(method, url, params, data, dict(headers or {})))
        queue = self.routes.get((method, url))
        if not queue:
            raise AssertionError(f"Unexpected request: {method} {url}")
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, BaseException):
            raise item
        return item

    def calls_to(self, method: str, url: str) -> List[RecordedCall]:
        return [call for call in self.calls if call.method == method and call.url == url]


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_spotify_item(
    index: int,
    artists: Optional[List[str]] = None,
    with_image: bool = True,
    preview_url: Optional[str] = "https://p.scdn.co/mp3-preview/{index}"
) -> Dict[str, Any]:
    """Build a raw Spotify search result item."""
    images = [
        {"url": f"https://i.scdn.co/image/{index}-640", "height": 640, "width": 640},
        {"url": f"https://i.scdn.co/image/{index}-300", "height": 300, "width": 300},
    ] if with_image else []

    return {
        "id": f"track{index}",
        "name": f"Track {index}",
        "artists": [{"name": name} for name in (artists or [f"Artist {index}"])],
        "album": {"name": f"Album {index}", "images": images},
        "external_urls": {"spotify": f"https://open.spotify.com/track/track{index}"},
        "preview_url": preview_url.format(index=index) if preview_url else None,
    }


def make_search_payload(count: int) -> Dict[str, Any]:
    return {"tracks": {"items": [make_spotify_item(i) for i in range(count)]}}


def make_token_payload(token: str = "token-1", expires_in: int = 3600) -> Dict[str, Any]:
    return {"access_token": token, "token_type": "Bearer", "expires_in": expires_in}
