"""Protocol for the agent processing pipeline."""

from __future__ import annotations

from typing import Protocol

from chatbridge.core.domain.events import NormalizedEvent
from chatbridge.core.domain.session import SessionResponse
from chatbridge.core.domain.workspace import WorkspaceInfo
from chatbridge.core.interfaces.platform import PlatformAdapterProtocol


class SessionProcessorProtocol(Protocol):
    """Processes one admitted event, typically by running the external agent.

    Implementations report whether a reply was already sent so that the
    reply dispatcher never sends a second message for the same event.
    ``workspace`` is the conversation's resolved workspace, or ``None`` when
    the caller did not resolve one.
    """

    async def process_message(
        self,
        event: NormalizedEvent,
        platform_adapter: PlatformAdapterProtocol,
        workspace: WorkspaceInfo | None = None,
    ) -> SessionResponse:
        ...
