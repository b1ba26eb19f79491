"""Domain-specific exception types for chatbridge."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import IntEnum
from typing import Any, Dict


class ErrorCode(IntEnum):
    """Stable numeric error codes, grouped by family."""

    # Configuration (1xxx)
    CONFIG_NOT_FOUND = 1001
    CONFIG_INVALID = 1002
    CONFIG_MISSING_FIELD = 1003

    # Platform (2xxx)
    PLATFORM_CONNECTION_FAILED = 2001
    PLATFORM_AUTH_FAILED = 2002
    PLATFORM_API_ERROR = 2003
    PLATFORM_RATE_LIMITED = 2004

    # Memory (4xxx)
    MEMORY_READ_FAILED = 4001
    MEMORY_WRITE_FAILED = 4002
    MEMORY_INVALID_FORMAT = 4003

    # Workspace (6xxx)
    WORKSPACE_ACCESS_DENIED = 6001
    WORKSPACE_NOT_FOUND = 6002
    WORKSPACE_INVALID_PATH = 6003


@dataclass
class ChatbridgeError(Exception):
    """Base exception for chatbridge domain errors."""

    message: str
    code: ErrorCode = ErrorCode.CONFIG_INVALID
    details: Dict[str, Any] | None = None
    retryable: bool = False

    def __post_init__(self) -> None:
        super().__init__(self.message)
        if self.details is None:
            self.details = {}
        self.timestamp = datetime.now(UTC).isoformat()

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the error for structured logs and API payloads."""
        return {
            "name": type(self).__name__,
            "code": int(self.code),
            "message": self.message,
            "timestamp": self.timestamp,
            "details": dict(self.details or {}),
            "retryable": self.retryable,
        }


class ConfigError(ChatbridgeError):
    """Error raised for configuration failures."""

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode = ErrorCode.CONFIG_INVALID,
        details: Dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, code=code, details=details)


class PlatformError(ChatbridgeError):
    """Error raised by a chat platform integration.

    Connection failures and rate limits are retryable by the caller.
    """

    _RETRYABLE_CODES = frozenset(
        {ErrorCode.PLATFORM_CONNECTION_FAILED, ErrorCode.PLATFORM_RATE_LIMITED}
    )

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode = ErrorCode.PLATFORM_API_ERROR,
        details: Dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=code,
            details=details,
            retryable=code in self._RETRYABLE_CODES,
        )


class PlatformSendError(PlatformError):
    """The platform adapter reported that a message could not be sent."""

    def __init__(
        self,
        message: str,
        *,
        channel_id: str | None = None,
        details: Dict[str, Any] | None = None,
    ) -> None:
        details = dict(details or {})
        if channel_id:
            details.setdefault("channel_id", channel_id)
        super().__init__(message, code=ErrorCode.PLATFORM_API_ERROR, details=details)


class MemoryStoreError(ChatbridgeError):
    """Base error for memory log failures."""

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode = ErrorCode.MEMORY_READ_FAILED,
        details: Dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, code=code, details=details)


class MemoryReadError(MemoryStoreError):
    """A memory could not be located or read."""

    def __init__(self, message: str, *, details: Dict[str, Any] | None = None) -> None:
        super().__init__(message, code=ErrorCode.MEMORY_READ_FAILED, details=details)


class MemoryWriteError(MemoryStoreError):
    """A memory write was rejected, e.g. private memory outside a DM."""

    def __init__(self, message: str, *, details: Dict[str, Any] | None = None) -> None:
        super().__init__(message, code=ErrorCode.MEMORY_WRITE_FAILED, details=details)


class WorkspaceError(ChatbridgeError):
    """Base error for workspace boundary and lookup failures."""

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode = ErrorCode.WORKSPACE_INVALID_PATH,
        details: Dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, code=code, details=details)


class WorkspaceAccessDeniedError(WorkspaceError):
    """A path resolved outside of its allowed boundary."""

    def __init__(self, message: str, *, details: Dict[str, Any] | None = None) -> None:
        super().__init__(message, code=ErrorCode.WORKSPACE_ACCESS_DENIED, details=details)


class WorkspaceNotFoundError(WorkspaceError):
    """A file inside a workspace does not exist."""

    def __init__(self, message: str, *, details: Dict[str, Any] | None = None) -> None:
        super().__init__(message, code=ErrorCode.WORKSPACE_NOT_FOUND, details=details)


def error_payload(
    error: BaseException, extra: Dict[str, Any] | None = None
) -> Dict[str, Any]:
    """Convert an exception into a standardized failure payload."""
    payload: Dict[str, Any] = {
        "success": False,
        "error": str(error),
        "error_type": type(error).__name__,
    }
    if isinstance(error, ChatbridgeError):
        payload["code"] = int(error.code)
        payload["details"] = dict(error.details or {})
    if extra:
        payload.update(extra)
    return payload
