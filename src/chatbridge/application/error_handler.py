"""Helpers for running best-effort operations."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog

from chatbridge.core.domain.errors import ChatbridgeError

T = TypeVar("T")


async def safe_execute(
    operation: Callable[[], Awaitable[T]],
    *,
    module: str,
    action: str,
) -> T | None:
    """Await ``operation`` and return its result, or ``None`` if it raised.

    The failure is logged under ``module``. Typed errors are logged with
    their serialized payload. Cancellation is not caught.
    """
    try:
        return await operation()
    except ChatbridgeError as exc:
        structlog.get_logger(module).error("operation.failed", action=action, **exc.to_dict())
    except Exception as exc:
        structlog.get_logger(module).error(
            "operation.failed",
            action=action,
            error=str(exc),
            error_type=type(exc).__name__,
            exc_info=True,
        )
    return None
