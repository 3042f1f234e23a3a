"""
FastAPI Backend for MoodTunes

REST endpoints:
- POST /mood      mood text -> three Spotify search keywords (Gemini)
- GET  /playlist  search query -> shuffled Spotify tracks
- GET  /health    liveness
"""

from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any, Dict, List, Optional

import structlog
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, Field

from ..errors import MoodTunesError
from ..models.config_models import SystemConfig
from ..services.keyword_service import KeywordExtractor
from ..services.playlist_service import PlaylistService
from ..utils.logging_config import setup_logging
from .client_factory import APIClientFactory
from .logging_middleware import LoggingMiddleware

logger = structlog.get_logger(__name__)

router = APIRouter()


# Response Models
class TrackResponse(BaseModel):
    """Normalized track as returned to the client."""
    name: str
    artist: str = Field(..., description="Contributor names joined with ', '")
    album: str
    image: Optional[str] = Field(None, description="First album image URL")
    url: str = Field(..., description="Spotify web URL")
    preview_url: Optional[str] = Field(None, description="30 second preview URL")


class PlaylistResponse(BaseModel):
    """Response model for playlist search."""
    tracks: List[TrackResponse]


class MoodResponse(BaseModel):
    """Response model for keyword extraction."""
    keywords: List[str]


class ErrorResponse(BaseModel):
    """Error body for every non-2xx response."""
    error: str


ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


# Dependencies
def get_keyword_extractor(request: Request) -> KeywordExtractor:
    return request.app.state.keyword_extractor


def get_playlist_service(request: Request) -> PlaylistService:
    return request.app.state.playlist_service


async def _read_json_object(request: Request) -> Dict[str, Any]:
    """Return the request body as a dict, or an empty dict if it is not a JSON object."""
    try:
        payload = await request.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


# API Endpoints
@router.get("/health", response_class=PlainTextResponse)
async def health_check():
    """Liveness probe."""
    return "OK"


@router.post("/mood", response_model=MoodResponse, responses=ERROR_RESPONSES)
async def analyze_mood(
    request: Request,
    extractor: KeywordExtractor = Depends(get_keyword_extractor)
):
    """
    Translate a free-text mood into three search keywords.

    Body: ``{"text": "<mood>"}``. The body is read manually so that every kind
    of bad input (missing, non-JSON, non-string text) yields the same 400.
    """
    payload = await _read_json_object(request)
    keyword_set = await extractor.extract(payload.get("text"))
    return keyword_set.to_dict()


@router.get("/playlist", response_model=PlaylistResponse, responses=ERROR_RESPONSES)
async def get_playlist(
    query: Optional[str] = None,
    service: PlaylistService = Depends(get_playlist_service)
):
    """Search Spotify for ``query`` and return the tracks in random order."""
    tracks = await service.search(query)
    return {"tracks": [track.to_dict() for track in tracks]}


# Error handlers
async def moodtunes_error_handler(request: Request, exc: MoodTunesError):
    """Map service errors to their status and public message."""
    if exc.status_code >= 500:
        logger.error(
            "Request failed",
            path=request.url.path,
            error_type=type(exc).__name__,
            error=exc.message
        )
    else:
        logger.info("Request rejected", path=request.url.path, error=exc.message)

    return JSONResponse(status_code=exc.status_code, content={"error": exc.public_message})


async def general_exception_handler(request: Request, exc: Exception):
    """General exception handler for unexpected errors."""
    logger.exception("Unexpected error", path=request.url.path, error_type=type(exc).__name__)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(
    system_config: Optional[SystemConfig] = None,
    keyword_extractor: Optional[KeywordExtractor] = None,
    playlist_service: Optional[PlaylistService] = None
) -> FastAPI:
    """
    Build the FastAPI application.

    Services not passed in are built from ``system_config`` during startup and
    torn down on shutdown.

    Args:
        system_config: Configuration (read from the environment if None)
        keyword_extractor: Pre-built keyword extractor (optional)
        playlist_service: Pre-built playlist service (optional)

    Returns:
        Configured FastAPI application
    """
    config = system_config or SystemConfig.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager for startup and shutdown."""
        setup_logging(log_dir=config.log_dir, log_level=config.log_level)
        factory = APIClientFactory(config)

        async with AsyncExitStack() as stack:
            if app.state.playlist_service is None:
                app.state.playlist_service = await factory.create_playlist_service(stack)
            if app.state.keyword_extractor is None:
                app.state.keyword_extractor = factory.create_keyword_extractor()

            logger.info(
                "MoodTunes started",
                allowed_origins=config.allowed_origins,
                gemini_model=config.gemini_model
            )
            yield

        logger.info("MoodTunes shut down")

    app = FastAPI(
        title="MoodTunes API",
        description="Mood-to-playlist proxy over Gemini and Spotify",
        version="1.0.0",
        lifespan=lifespan
    )

    app.state.keyword_extractor = keyword_extractor
    app.state.playlist_service = playlist_service

    app.add_middleware(
        LoggingMiddleware,
        exclude_paths=["/health"],
        error_handler=general_exception_handler
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
        expose_headers=["X-Request-ID"],
    )

    app.add_exception_handler(MoodTunesError, moodtunes_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.include_router(router)

    return app
