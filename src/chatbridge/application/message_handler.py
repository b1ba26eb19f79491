"""Admission control for inbound events."""

from __future__ import annotations

import structlog

from chatbridge.core.domain.errors import error_payload
from chatbridge.core.domain.events import NormalizedEvent, Platform
from chatbridge.core.domain.session import DUPLICATE_EVENT_ERROR, SessionResponse
from chatbridge.core.domain.workspace import WorkspaceInfo
from chatbridge.core.interfaces.platform import PlatformAdapterProtocol
from chatbridge.core.interfaces.session import SessionProcessorProtocol

logger = structlog.get_logger(__name__)


class MessageHandler:
    """Runs each ``(platform, message_id)`` at most once at a time.

    A second delivery of an event that is still in flight is rejected
    immediately with a failed ``SessionResponse``; it does not wait for the
    first one. Distinct events run fully in parallel.

    Usage::

        handler = MessageHandler(processor)
        response = await handler.handle_event(event, adapter)
    """

    def __init__(self, processor: SessionProcessorProtocol) -> None:
        self._processor = processor
        self._in_flight: set[tuple[str, str]] = set()

    async def handle_event(
        self,
        event: NormalizedEvent,
        platform_adapter: PlatformAdapterProtocol,
        workspace: WorkspaceInfo | None = None,
    ) -> SessionResponse:
        """Admit the event and run the processor, or reject it as a duplicate.

        An exception raised by the processor becomes a failed response
        carrying its message. Cancellation still propagates. The event is
        released either way.
        """
        key = self._event_key(event.platform, event.message_id)
        if key in self._in_flight:
            logger.info(
                "message_handler.duplicate_rejected",
                platform=key[0],
                message_id=event.message_id,
            )
            return SessionResponse.failed(DUPLICATE_EVENT_ERROR)

        self._in_flight.add(key)
        logger.debug(
            "message_handler.admitted",
            platform=key[0],
            message_id=event.message_id,
            active=len(self._in_flight),
        )
        try:
            return await self._processor.process_message(event, platform_adapter, workspace)
        except Exception as exc:
            logger.error(
                "message_handler.processing_failed",
                platform=key[0],
                message_id=event.message_id,
                **error_payload(exc),
            )
            return SessionResponse.failed(str(exc) or type(exc).__name__)
        finally:
            self._in_flight.discard(key)

    def is_processing(self, platform: Platform | str, message_id: str) -> bool:
        return self._event_key(platform, message_id) in self._in_flight

    def get_active_count(self) -> int:
        return len(self._in_flight)

    @staticmethod
    def _event_key(platform: Platform | str, message_id: str) -> tuple[str, str]:
        return Platform(platform).value, message_id
