"""Workspace domain models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path

from chatbridge.core.domain.events import Platform


class MemoryFileType(str, Enum):
    """Memory log files inside a workspace."""

    PUBLIC = "memory.public.jsonl"
    PRIVATE = "memory.private.jsonl"


@dataclass(frozen=True)
class WorkspaceKeyComponents:
    """Identifies one trust boundary: a conversation of a user in a channel."""

    platform: Platform | str
    user_id: str
    channel_id: str


@dataclass(frozen=True)
class WorkspaceInfo:
    """Resolved workspace for one conversation.

    Attributes:
        key: ``platform/user_id/channel_id`` with sanitized components.
        components: Unsanitized components the key was derived from.
        path: Absolute workspace directory.
        is_dm: Whether private memory is available.
        created_at: Best-effort creation time of the directory.
    """

    key: str
    components: WorkspaceKeyComponents
    path: Path
    is_dm: bool
    created_at: datetime | None = None
