"""structlog setup shared by the CLI and embedding hosts."""

from __future__ import annotations

import logging
import os
import re
import sys
from collections.abc import Mapping
from typing import Any

import structlog

REDACTED = "[REDACTED]"

_SENSITIVE_KEY = re.compile(r"token|password|secret|key|auth", re.IGNORECASE)
_SENSITIVE_VALUE_PATTERNS = (
    re.compile(
        r"(?:token|api[_-]?key|secret|password|auth)\s*[=:]\s*[\"']?[\w\-.]+[\"']?",
        re.IGNORECASE,
    ),
    re.compile(r"Bearer\s+[\w\-.]+", re.IGNORECASE),
    # long base64-like runs, likely tokens
    re.compile(r"[A-Za-z0-9+/]{40,}"),
)

# structlog bookkeeping keys are never redacted
_RESERVED_KEYS = frozenset({"event", "level", "logger", "timestamp"})


def _mask(value: Any) -> Any:
    if isinstance(value, str):
        for pattern in _SENSITIVE_VALUE_PATTERNS:
            value = pattern.sub(REDACTED, value)
        return value
    if isinstance(value, Mapping):
        return {
            k: REDACTED if _SENSITIVE_KEY.search(str(k)) else _mask(v)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [_mask(item) for item in value]
    return value


def redact_sensitive(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """structlog processor masking credentials in log context.

    Values stored under keys that look sensitive are replaced entirely;
    other strings have token-like substrings masked, recursively.
    """
    for key, value in list(event_dict.items()):
        if key in _RESERVED_KEYS:
            continue
        if _SENSITIVE_KEY.search(key):
            event_dict[key] = REDACTED
        else:
            event_dict[key] = _mask(value)
    return event_dict


def resolve_log_level(level: str | None = None) -> int:
    """Map a level name to a ``logging`` constant, defaulting to ``LOG_LEVEL`` or INFO."""
    name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(level: str | None = None, json_output: bool = False) -> None:
    """Configure stdlib logging and structlog with the same level."""
    log_level = resolve_log_level(level)

    logging.basicConfig(level=log_level, format="%(message)s")

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        redact_sensitive,
        structlog.processors.format_exc_info,
    ]
    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )
