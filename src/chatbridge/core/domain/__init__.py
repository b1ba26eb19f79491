"""
Domain Models

Events, workspaces, the memory log and its resolution, search results,
session outcomes, errors and the configuration schema.
"""

from chatbridge.core.domain.events import NormalizedEvent, Platform, PlatformMessage
from chatbridge.core.domain.memory import (
    MemoryEntry,
    MemoryImportance,
    MemoryPatch,
    MemoryVisibility,
    ResolvedMemory,
    resolve_memories,
)
from chatbridge.core.domain.session import SessionResponse
from chatbridge.core.domain.workspace import MemoryFileType, WorkspaceInfo, WorkspaceKeyComponents

__all__ = [
    "MemoryEntry",
    "MemoryFileType",
    "MemoryImportance",
    "MemoryPatch",
    "MemoryVisibility",
    "NormalizedEvent",
    "Platform",
    "PlatformMessage",
    "ResolvedMemory",
    "SessionResponse",
    "WorkspaceInfo",
    "WorkspaceKeyComponents",
    "resolve_memories",
]
