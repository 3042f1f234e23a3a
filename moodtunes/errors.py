"""
MoodTunes Error Taxonomy

Every error raised by the services carries the HTTP status it maps to and a
client-safe public message. Upstream details stay in the logs; only
``public_message`` is ever returned to the caller.
"""

from typing import Optional


class MoodTunesError(Exception):
    """Base class for all MoodTunes errors."""

    status_code: int = 500
    default_public_message: str = "Internal server error"

    def __init__(
        self,
        message: str,
        public_message: Optional[str] = None,
        upstream_status: Optional[int] = None
    ):
        """
        Initialize error.

        Args:
            message: Internal description (logged, never returned)
            public_message: Message safe to return to the caller
            upstream_status: HTTP status returned by the upstream service, if any
        """
        super().__init__(message)
        self.message = message
        self.public_message = public_message or self.default_public_message
        self.upstream_status = upstream_status


class ValidationError(MoodTunesError):
    """Bad or missing caller input."""

    status_code = 400

    def __init__(self, message: str):
        # Validation messages describe the caller's own input, so they are public.
        super().__init__(message, public_message=message)


class UpstreamAuthError(MoodTunesError):
    """Catalog token endpoint unreachable or rejected the client credentials."""

    default_public_message = "Spotify error"


class UpstreamSearchError(MoodTunesError):
    """Catalog search call failed or returned an unusable payload."""

    default_public_message = "Spotify error"


class UpstreamAIError(MoodTunesError):
    """Generative model call failed or timed out."""

    default_public_message = "Gemini error"


class AIResponseError(MoodTunesError):
    """Model reply could not be parsed into the expected shape."""

    default_public_message = "Failed to process AI response."
