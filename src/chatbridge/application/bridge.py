"""End-to-end handling of one inbound event."""

from __future__ import annotations

from chatbridge.application.error_handler import safe_execute
from chatbridge.application.message_handler import MessageHandler
from chatbridge.application.reply_dispatcher import ReplyDispatcher
from chatbridge.core.domain.events import NormalizedEvent
from chatbridge.core.domain.session import SessionResponse
from chatbridge.core.interfaces.memory_store import MemoryStoreProtocol
from chatbridge.core.interfaces.platform import PlatformAdapterProtocol
from chatbridge.infrastructure.workspace.workspace_manager import WorkspaceManager


class ConversationBridge:
    """Workspace resolution, admission control and fallback reply in one place.

    Flow for every event:

    1. Resolve (or create) the conversation workspace.
    2. Run the event through the :class:`MessageHandler`.
    3. Let the :class:`ReplyDispatcher` send the fallback notice if needed.

    A workspace failure in step 1 becomes a failed ``SessionResponse`` here;
    the handler does the same for processor failures in step 2, so the
    channel still gets exactly one message.
    """

    def __init__(
        self,
        *,
        workspace_manager: WorkspaceManager,
        memory_store: MemoryStoreProtocol,
        message_handler: MessageHandler,
        reply_dispatcher: ReplyDispatcher | None = None,
    ) -> None:
        self.workspace_manager = workspace_manager
        self.memory_store = memory_store
        self.message_handler = message_handler
        self.reply_dispatcher = reply_dispatcher or ReplyDispatcher()

    async def handle(
        self, event: NormalizedEvent, adapter: PlatformAdapterProtocol
    ) -> SessionResponse:
        workspace = await safe_execute(
            lambda: self.workspace_manager.get_or_create_workspace(event),
            module=__name__,
            action="resolve workspace",
        )

        if workspace is None:
            response = SessionResponse.failed("Failed to resolve workspace")
        else:
            response = await self.message_handler.handle_event(event, adapter, workspace)

        await self.reply_dispatcher.dispatch_error_if_needed(
            adapter,
            event.channel_id,
            response,
            reply_to_message_id=event.message_id,
        )
        return response
