"""Tests for the typed error hierarchy."""

from chatbridge.core.domain.errors import (
    ChatbridgeError,
    ConfigError,
    ErrorCode,
    MemoryReadError,
    MemoryStoreError,
    PlatformError,
    PlatformSendError,
    WorkspaceAccessDeniedError,
    WorkspaceError,
    error_payload,
)


def test_to_dict_contains_code_and_details():
    error = MemoryReadError("Memory not found: mem_x", details={"target_id": "mem_x"})

    data = error.to_dict()

    assert data["name"] == "MemoryReadError"
    assert data["code"] == 4001
    assert data["message"] == "Memory not found: mem_x"
    assert data["details"] == {"target_id": "mem_x"}
    assert data["retryable"] is False
    assert data["timestamp"]


def test_str_is_the_message():
    assert str(ConfigError("bad config")) == "bad config"


def test_hierarchy():
    assert isinstance(MemoryReadError("x"), MemoryStoreError)
    assert isinstance(WorkspaceAccessDeniedError("x"), WorkspaceError)
    assert isinstance(PlatformSendError("x"), PlatformError)
    assert isinstance(WorkspaceError("x"), ChatbridgeError)


def test_platform_retryable_codes():
    assert PlatformError("x", code=ErrorCode.PLATFORM_RATE_LIMITED).retryable is True
    assert PlatformError("x", code=ErrorCode.PLATFORM_CONNECTION_FAILED).retryable is True
    assert PlatformError("x", code=ErrorCode.PLATFORM_AUTH_FAILED).retryable is False


def test_platform_send_error_records_channel():
    error = PlatformSendError("send failed", channel_id="c1")
    assert error.details == {"channel_id": "c1"}
    assert error.code == ErrorCode.PLATFORM_API_ERROR


def test_error_payload_for_typed_and_untyped_errors():
    typed = error_payload(WorkspaceAccessDeniedError("denied"))
    untyped = error_payload(RuntimeError("boom"), extra={"channel_id": "c1"})

    assert typed == {
        "success": False,
        "error": "denied",
        "error_type": "WorkspaceAccessDeniedError",
        "code": 6001,
        "details": {},
    }
    assert untyped == {
        "success": False,
        "error": "boom",
        "error_type": "RuntimeError",
        "channel_id": "c1",
    }
