"""Logging module with structured logging and request tracking."""

from clinicdesk.core.logging.config import configure_logging
from clinicdesk.core.logging.middleware import RequestLoggingMiddleware


__all__ = [
    "RequestLoggingMiddleware",
    "configure_logging",
]
