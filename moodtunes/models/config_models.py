"""
Configuration Models

Process configuration for MoodTunes, read from environment variables.
"""

import os
from typing import List, Optional

from pydantic import BaseModel, Field

DEFAULT_ALLOWED_ORIGINS = ["http://localhost:5173"]


class SystemConfig(BaseModel):
    """Overall system configuration"""

    # API configurations
    gemini_api_key: str = Field(default="", description="Gemini API key")
    gemini_model: str = Field(default="gemini-2.5-flash", description="Gemini model name")
    spotify_client_id: str = Field(default="", description="Spotify client ID")
    spotify_client_secret: str = Field(default="", description="Spotify client secret")

    # Server
    host: str = Field(default="0.0.0.0", description="Listen address")
    port: int = Field(default=3001, description="Listen port")
    allowed_origins: List[str] = Field(
        default_factory=lambda: list(DEFAULT_ALLOWED_ORIGINS),
        description="Origins allowed by CORS"
    )

    # Outbound calls
    request_timeout_seconds: float = Field(
        default=10.0, gt=0, description="Timeout for every outbound call"
    )
    search_limit: int = Field(default=10, ge=1, le=50, description="Catalog page size")

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    log_dir: Optional[str] = Field(default=None, description="Directory for log files")

    @classmethod
    def from_env(cls) -> "SystemConfig":
        """
        Build configuration from environment variables.

        Unset variables fall back to the field defaults.

        Returns:
            Populated SystemConfig
        """
        values = {
            "gemini_api_key": os.getenv("GEMINI_API_KEY"),
            "gemini_model": os.getenv("GEMINI_MODEL"),
            "spotify_client_id": os.getenv("SPOTIFY_CLIENT_ID"),
            "spotify_client_secret": os.getenv("SPOTIFY_CLIENT_SECRET"),
            "host": os.getenv("HOST"),
            "port": os.getenv("PORT"),
            "request_timeout_seconds": os.getenv("REQUEST_TIMEOUT_SECONDS"),
            "search_limit": os.getenv("SEARCH_LIMIT"),
            "log_level": os.getenv("LOG_LEVEL"),
            "log_dir": os.getenv("LOG_DIR"),
        }

        origins = os.getenv("ALLOWED_ORIGINS")
        if origins:
            values["allowed_origins"] = parse_origins(origins)

        return cls(**{key: value for key, value in values.items() if value})

    @property
    def has_spotify_credentials(self) -> bool:
        return bool(self.spotify_client_id and self.spotify_client_secret)


def parse_origins(raw: str) -> List[str]:
    """Split a comma-separated origin list, dropping blanks and trailing slashes."""
    return [origin.strip().rstrip("/") for origin in raw.split(",") if origin.strip()]
