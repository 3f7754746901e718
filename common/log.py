"""Shared logging utilities for FastAPI applications."""

import logging
import os

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'


class HealthCheckFilter(logging.Filter):
    """Filter out health check requests from uvicorn access logs."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Return False to suppress health check log entries."""
        return '/health' not in record.getMessage()


def resolve_level(level: str | int | None = None) -> int:
    """Turn a level name (or the LOG_LEVEL env var) into a logging level.

    Unknown names fall back to INFO.
    """
    if level is None:
        level = os.environ.get('LOG_LEVEL', 'INFO')
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(level: str | int | None = None) -> None:
    """Configure root logging and suppress health check access entries."""
    logging.basicConfig(level=resolve_level(level), format=LOG_FORMAT)
    logging.getLogger('uvicorn.access').addFilter(HealthCheckFilter())
