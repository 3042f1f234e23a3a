"""
MoodTunes Logging Configuration

Structured logging for the MoodTunes service:
- structlog on top of stdlib logging
- Console output for development
- Optional rotating log files
- Per-request context (request id) via contextvars
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars

# HTTP libraries that log every connection at INFO/DEBUG
NOISY_LOGGERS = ["aiohttp.access", "aiohttp.client", "urllib3", "httpx", "uvicorn.access"]


class MoodTunesLogger:
    """
    Centralized logging configuration for MoodTunes.

    Provides structured logging with:
    - Console renderer on stdout
    - Size-based file rotation when a log directory is configured
    - A separate errors-only file
    """

    def __init__(
        self,
        log_dir: Optional[str] = None,
        log_level: str = "INFO",
        enable_console: bool = True,
        max_file_size: int = 10 * 1024 * 1024,  # 10MB
        backup_count: int = 5
    ):
        """
        Initialize the logging system.

        Args:
            log_dir: Directory to store log files (no file logging if None)
            log_level: Default log level
            enable_console: Whether to enable console logging
            max_file_size: Maximum size per log file before rotation
            backup_count: Number of backup files to keep
        """
        self.log_dir = Path(log_dir) if log_dir else None
        self.log_level = getattr(logging, log_level.upper(), logging.INFO)
        self.enable_console = enable_console
        self.max_file_size = max_file_size
        self.backup_count = backup_count

        if self.log_dir:
            self.log_dir.mkdir(parents=True, exist_ok=True)

        self._setup_logging()

    def _setup_logging(self):
        """Configure the complete logging system."""
        logging.getLogger().handlers.clear()

        self._configure_structlog()

        if self.log_dir:
            self._setup_file_handlers()

        if self.enable_console:
            self._setup_console_handler()

        self._configure_noisy_loggers()

        logging.getLogger().setLevel(self.log_level)

    def _configure_structlog(self):
        """Configure structlog for structured logging."""
        shared_processors = [
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="ISO"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
        ]

        structlog.configure(
            processors=shared_processors + [
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

    def _setup_file_handlers(self):
        """Setup rotating file handlers for the main and error logs."""
        main_handler = self._create_rotating_file_handler(
            filename="moodtunes.log",
            level=self.log_level
        )

        error_handler = self._create_rotating_file_handler(
            filename="errors.log",
            level=logging.ERROR
        )

        root_logger = logging.getLogger()
        for handler in [main_handler, error_handler]:
            root_logger.addHandler(handler)

    def _create_rotating_file_handler(
        self,
        filename: str,
        level: int
    ) -> logging.handlers.RotatingFileHandler:
        """Create a rotating file handler with JSON formatting."""
        handler = logging.handlers.RotatingFileHandler(
            filename=self.log_dir / filename,
            maxBytes=self.max_file_size,
            backupCount=self.backup_count,
            encoding='utf-8'
        )
        handler.setLevel(level)
        handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=structlog.processors.JSONRenderer(),
            )
        )
        return handler

    def _setup_console_handler(self):
        """Setup console handler for development."""
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(self.log_level)
        console_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()),
            )
        )
        logging.getLogger().addHandler(console_handler)

    def _configure_noisy_loggers(self):
        """Keep third-party HTTP loggers at WARNING unless we are debugging."""
        if self.log_level == logging.DEBUG:
            return
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


# Global logger instance
_logger_instance: Optional[MoodTunesLogger] = None


def setup_logging(
    log_dir: Optional[str] = None,
    log_level: str = "INFO",
    enable_console: bool = True,
    **kwargs
) -> MoodTunesLogger:
    """
    Setup the global logging configuration.

    Args:
        log_dir: Directory to store log files (optional)
        log_level: Default log level
        enable_console: Whether to enable console logging
        **kwargs: Additional arguments for MoodTunesLogger

    Returns:
        Configured logger instance
    """
    global _logger_instance

    _logger_instance = MoodTunesLogger(
        log_dir=log_dir,
        log_level=log_level,
        enable_console=enable_console,
        **kwargs
    )

    return _logger_instance


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger for a specific component."""
    return structlog.get_logger(name)


def set_request_context(request_id: str, client_ip: Optional[str] = None):
    """Bind per-request context into every log line of the current task."""
    clear_contextvars()
    bind_contextvars(request_id=request_id, client_ip=client_ip)


def clear_request_context():
    clear_contextvars()
