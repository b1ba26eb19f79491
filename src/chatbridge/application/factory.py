"""Composition root."""

from __future__ import annotations

from chatbridge.application.bridge import ConversationBridge
from chatbridge.application.message_handler import MessageHandler
from chatbridge.application.reply_dispatcher import ReplyDispatcher
from chatbridge.core.domain.config_schema import BridgeConfig
from chatbridge.core.interfaces.session import SessionProcessorProtocol
from chatbridge.infrastructure.memory.jsonl_memory_store import JsonlMemoryStore
from chatbridge.infrastructure.search.text_search import TextSearcher
from chatbridge.infrastructure.workspace.workspace_manager import WorkspaceManager


def build_workspace_manager(config: BridgeConfig) -> WorkspaceManager:
    return WorkspaceManager(
        repo_path=config.workspace.repo_path,
        workspaces_dir=config.workspace.workspaces_dir,
    )


def build_memory_store(
    config: BridgeConfig,
    workspace_manager: WorkspaceManager,
    searcher: TextSearcher | None = None,
) -> JsonlMemoryStore:
    return JsonlMemoryStore(
        workspace_manager,
        search_limit=config.memory.search_limit,
        max_chars=config.memory.max_chars,
        searcher=searcher,
    )


def build_bridge(
    config: BridgeConfig,
    processor: SessionProcessorProtocol,
    *,
    searcher: TextSearcher | None = None,
) -> ConversationBridge:
    """Wire every collaborator from a validated config."""
    workspace_manager = build_workspace_manager(config)
    return ConversationBridge(
        workspace_manager=workspace_manager,
        memory_store=build_memory_store(config, workspace_manager, searcher),
        message_handler=MessageHandler(processor),
        reply_dispatcher=ReplyDispatcher(),
    )
