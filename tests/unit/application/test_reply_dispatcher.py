"""Tests for ReplyDispatcher and the single-reply rule."""

import pytest
from structlog.testing import capture_logs

from chatbridge.application.reply_dispatcher import ERROR_REPLY_MESSAGE, ReplyDispatcher
from chatbridge.core.domain.errors import ErrorCode
from chatbridge.core.domain.session import DUPLICATE_EVENT_ERROR, SessionResponse


@pytest.fixture
def dispatcher():
    return ReplyDispatcher()


class TestDispatchErrorIfNeeded:
    @pytest.mark.asyncio
    async def test_successful_response_sends_nothing(self, dispatcher, fake_adapter):
        response = SessionResponse(success=True, reply_sent=True)

        assert await dispatcher.dispatch_error_if_needed(fake_adapter, "c1", response) is False
        assert fake_adapter.sent == []

    @pytest.mark.asyncio
    async def test_reply_already_sent_wins_over_error(self, dispatcher, fake_adapter):
        response = SessionResponse(success=False, reply_sent=True, error="Agent timeout")

        assert await dispatcher.dispatch_error_if_needed(fake_adapter, "c2", response) is False
        assert fake_adapter.sent == []

    @pytest.mark.asyncio
    async def test_failure_without_reply_sends_apology(self, dispatcher, fake_adapter):
        response = SessionResponse.failed("Agent crashed")

        dispatched = await dispatcher.dispatch_error_if_needed(
            fake_adapter, "channel_3", response, reply_to_message_id="original_msg_id"
        )

        assert dispatched is True
        [(channel_id, content, options)] = fake_adapter.sent
        assert channel_id == "channel_3"
        assert content == ERROR_REPLY_MESSAGE
        assert "encountered an issue" in content
        assert options.reply_to_message_id == "original_msg_id"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [DUPLICATE_EVENT_ERROR, "Session was cancelled", "Request CANCELLED by user"],
    )
    async def test_expected_errors_are_suppressed(self, dispatcher, fake_adapter, error):
        response = SessionResponse.failed(error)

        assert await dispatcher.dispatch_error_if_needed(fake_adapter, "c4", response) is False
        assert fake_adapter.sent == []

    @pytest.mark.asyncio
    async def test_failed_send_returns_false(self, dispatcher, make_adapter):
        adapter = make_adapter(succeed=False)

        dispatched = await dispatcher.dispatch_error_if_needed(
            adapter, "c5", SessionResponse.failed("boom")
        )

        assert dispatched is False
        assert len(adapter.sent) == 1

    @pytest.mark.asyncio
    async def test_adapter_exception_returns_false(self, dispatcher, make_adapter):
        adapter = make_adapter(raise_error=ConnectionError("network down"))

        dispatched = await dispatcher.dispatch_error_if_needed(
            adapter, "c6", SessionResponse.failed("boom")
        )

        assert dispatched is False

    @pytest.mark.asyncio
    async def test_failure_without_error_text_still_notifies(self, dispatcher, fake_adapter):
        response = SessionResponse(success=False)

        assert await dispatcher.dispatch_error_if_needed(fake_adapter, "c7", response) is True
        assert fake_adapter.sent[0][2].reply_to_message_id is None

    @pytest.mark.asyncio
    async def test_custom_message(self, fake_adapter):
        dispatcher = ReplyDispatcher(error_message="Oops")

        await dispatcher.dispatch_error_if_needed(fake_adapter, "c8", SessionResponse.failed("x"))

        assert fake_adapter.sent[0][1] == "Oops"


class TestFailureLogging:
    @pytest.mark.asyncio
    async def test_rejected_send_is_logged_as_platform_send_error(self, dispatcher, make_adapter):
        adapter = make_adapter(succeed=False)

        with capture_logs() as logs:
            await dispatcher.dispatch_error_if_needed(adapter, "c9", SessionResponse.failed("x"))

        [rejected] = [e for e in logs if e["event"] == "reply_dispatcher.send_rejected"]
        assert rejected["log_level"] == "warning"
        assert rejected["name"] == "PlatformSendError"
        assert rejected["code"] == int(ErrorCode.PLATFORM_API_ERROR)
        assert rejected["message"] == "send failed"
        assert rejected["details"] == {"channel_id": "c9"}

    @pytest.mark.asyncio
    async def test_adapter_exception_is_logged_with_type(self, dispatcher, make_adapter):
        adapter = make_adapter(raise_error=ConnectionError("network down"))

        with capture_logs() as logs:
            await dispatcher.dispatch_error_if_needed(adapter, "c10", SessionResponse.failed("x"))

        [failed] = [e for e in logs if e["event"] == "reply_dispatcher.send_failed"]
        assert failed["log_level"] == "error"
        assert failed["error"] == "network down"
        assert failed["error_type"] == "ConnectionError"
        assert failed["channel_id"] == "c10"
