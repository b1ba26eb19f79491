"""Logging configuration."""

from chatbridge.infrastructure.logging.structlog_config import (
    configure_logging,
    redact_sensitive,
    resolve_log_level,
)

__all__ = ["configure_logging", "redact_sensitive", "resolve_log_level"]
