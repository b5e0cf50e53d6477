"""Logging configuration for the application."""

import logging
import sys

from app.core.config import Settings, get_settings

# Third-party loggers that are noisy at DEBUG.
_QUIET_LOGGERS = ("asyncio", "redis", "httpcore", "httpx")


def setup_logging(settings: Settings | None = None) -> None:
    """Configure application-wide logging.

    Level is DEBUG when settings.debug is True, otherwise INFO. Output goes
    to stdout. Per-lookup cache messages (HIT/MISS/INVALIDATE) are DEBUG,
    so they appear only in debug mode and only while CACHE_LOG_OPERATIONS
    is on. SQL statements are logged when DATABASE_ECHO is set.
    """
    settings = settings or get_settings()
    log_level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.INFO))
    if not settings.cache_log_operations:
        logging.getLogger("app.infrastructure.cache").setLevel(max(log_level, logging.INFO))
