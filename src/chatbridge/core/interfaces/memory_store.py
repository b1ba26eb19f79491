"""Interfaces for memory stores."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from chatbridge.core.domain.memory import (
    MemoryEntry,
    MemoryImportance,
    MemoryPatch,
    MemoryVisibility,
    ResolvedMemory,
)
from chatbridge.core.domain.workspace import WorkspaceInfo


class MemoryStoreProtocol(Protocol):
    """Protocol for workspace-scoped memory persistence."""

    async def add_memory(
        self,
        workspace: WorkspaceInfo,
        content: str,
        *,
        visibility: MemoryVisibility | str = MemoryVisibility.PUBLIC,
        importance: MemoryImportance | str = MemoryImportance.NORMAL,
    ) -> MemoryEntry:
        """Append a new memory."""
        ...

    async def patch_memory(
        self,
        workspace: WorkspaceInfo,
        target_id: str,
        *,
        enabled: bool | None = None,
        visibility: MemoryVisibility | str | None = None,
        importance: MemoryImportance | str | None = None,
    ) -> MemoryPatch:
        """Append a patch for an existing memory."""
        ...

    async def disable_memory(self, workspace: WorkspaceInfo, memory_id: str) -> MemoryPatch:
        """Shortcut for ``patch_memory(..., enabled=False)``."""
        ...

    async def load_all_memories(
        self, workspace: WorkspaceInfo, visibility: MemoryVisibility | str
    ) -> list[ResolvedMemory]:
        """Resolve every memory of one log file."""
        ...

    async def list_memories(
        self, workspace: WorkspaceInfo, *, include_disabled: bool = False
    ) -> list[ResolvedMemory]:
        """All memories visible in the workspace, oldest first."""
        ...

    async def find_memory_by_id(
        self, workspace: WorkspaceInfo, memory_id: str
    ) -> ResolvedMemory | None:
        """Resolved memory by id, public log first."""
        ...

    async def get_important_memories(self, workspace: WorkspaceInfo) -> list[ResolvedMemory]:
        """Enabled high-importance memories, oldest first."""
        ...

    async def search_memories(
        self,
        workspace: WorkspaceInfo,
        keywords: Sequence[str],
        *,
        max_results: int | None = None,
        max_chars: int | None = None,
    ) -> list[ResolvedMemory]:
        """Enabled memories whose log lines match any keyword."""
        ...
