"""Fallback error replies.

A channel receives at most one bot message per inbound event: either the
reply produced while processing, or the fallback notice sent here.
"""

from __future__ import annotations

import structlog

from chatbridge.core.domain.errors import PlatformSendError, error_payload
from chatbridge.core.domain.platform import ReplyOptions
from chatbridge.core.domain.session import SessionResponse
from chatbridge.core.interfaces.platform import PlatformAdapterProtocol

logger = structlog.get_logger(__name__)

ERROR_REPLY_MESSAGE = (
    "Sorry, I encountered an issue while processing your message. "
    "Please try again later."
)

# failures the user does not need to hear about
SUPPRESSED_ERROR_MARKERS = ("already being processed", "cancelled")


class ReplyDispatcher:
    """Sends the generic apology when processing failed without replying."""

    def __init__(self, error_message: str = ERROR_REPLY_MESSAGE) -> None:
        self._error_message = error_message

    async def dispatch_error_if_needed(
        self,
        adapter: PlatformAdapterProtocol,
        channel_id: str,
        response: SessionResponse,
        reply_to_message_id: str | None = None,
    ) -> bool:
        """Send the fallback notice if required.

        Returns:
            True only if a fallback message was sent and the adapter
            confirmed delivery.
        """
        if response.success or response.reply_sent:
            return False

        if self._is_suppressed(response.error):
            logger.debug(
                "reply_dispatcher.suppressed",
                channel_id=channel_id,
                error=response.error,
            )
            return False

        try:
            result = await adapter.send_reply(
                channel_id,
                self._error_message,
                ReplyOptions(reply_to_message_id=reply_to_message_id),
            )
        except Exception as exc:
            logger.error(
                "reply_dispatcher.send_failed",
                **error_payload(exc, extra={"channel_id": channel_id}),
            )
            return False

        if not result.success:
            error = PlatformSendError(
                result.error or "Reply was not delivered", channel_id=channel_id
            )
            logger.warning("reply_dispatcher.send_rejected", **error.to_dict())
            return False

        logger.info(
            "reply_dispatcher.error_reply_sent",
            channel_id=channel_id,
            original_error=response.error,
        )
        return True

    @staticmethod
    def _is_suppressed(error: str | None) -> bool:
        if not error:
            return False
        lowered = error.lower()
        return any(marker in lowered for marker in SUPPRESSED_ERROR_MARKERS)
