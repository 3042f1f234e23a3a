"""
FastAPI Logging Middleware for MoodTunes

Logs every API request and response:
- Request/response timing
- Status codes and error tracking
- Request IDs for tracing (echoed in ``X-Request-ID``)
"""

import time
import uuid
from typing import Awaitable, Callable, List, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..utils.logging_config import clear_request_context, get_logger, set_request_context


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to log all API requests and responses.

    Requests to ``exclude_paths`` still get a request id but are not logged.
    Unhandled exceptions are turned into a response by ``error_handler`` here,
    inside CORS, so error responses keep the request id and CORS headers.
    """

    def __init__(
        self,
        app,
        exclude_paths: Optional[List[str]] = None,
        slow_request_threshold: float = 5.0,
        error_handler: Optional[Callable[[Request, Exception], Awaitable[Response]]] = None
    ):
        """
        Initialize logging middleware.

        Args:
            app: ASGI application
            exclude_paths: List of paths to exclude from logging
            slow_request_threshold: Seconds after which a request is logged as slow
            error_handler: Builds the response for an unhandled exception
                (re-raised if None)
        """
        super().__init__(app)
        self.logger = get_logger("api.middleware")
        self.exclude_paths = exclude_paths if exclude_paths is not None else ["/health"]
        self.slow_request_threshold = slow_request_threshold
        self.error_handler = error_handler

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and response with logging."""
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        should_log = request.url.path not in self.exclude_paths

        set_request_context(request_id=request_id, client_ip=self._get_client_ip(request))
        start_time = time.time()

        if should_log:
            self.logger.info(
                "api_request_start",
                method=request.method,
                path=request.url.path
            )

        try:
            response = await call_next(request)
        except Exception as e:
            self.logger.error(
                "api_request_error",
                method=request.method,
                path=request.url.path,
                error_type=type(e).__name__,
                error_message=str(e),
                duration_seconds=round(time.time() - start_time, 4)
            )
            if self.error_handler is None:
                clear_request_context()
                raise
            response = await self.error_handler(request, e)

        duration = time.time() - start_time

        if should_log:
            self.logger.info(
                "api_request_complete",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_seconds=round(duration, 4)
            )
            if duration > self.slow_request_threshold:
                self.logger.warning(
                    "slow_request",
                    path=request.url.path,
                    duration_seconds=round(duration, 4),
                    threshold_seconds=self.slow_request_threshold
                )

        response.headers["X-Request-ID"] = request_id
        clear_request_context()
        return response

    def _get_client_ip(self, request: Request) -> str:
        """Get client IP address from request."""
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip

        return request.client.host if request.client else "unknown"
