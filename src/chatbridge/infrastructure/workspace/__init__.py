"""Workspace directory management."""

from chatbridge.infrastructure.workspace.workspace_manager import WorkspaceManager

__all__ = ["WorkspaceManager"]
