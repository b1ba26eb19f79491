"""Memory log domain models.

A memory log is an append-only sequence of events. Creation events carry the
immutable content; patch events may change ``enabled``, ``visibility`` and
``importance`` of their target. The current state of a memory is a pure fold
over those events (:func:`resolve_memories`).
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any


class MemoryVisibility(str, Enum):
    """Which log file a memory is written to."""

    PUBLIC = "public"
    PRIVATE = "private"


class MemoryImportance(str, Enum):
    """High-importance memories are always included in context."""

    HIGH = "high"
    NORMAL = "normal"


class MemoryEventType(str, Enum):
    """Discriminator of a log line."""

    MEMORY = "memory"
    PATCH = "patch"


@dataclass(frozen=True)
class MemoryEntry:
    """Creation event. ``content`` never changes for the lifetime of ``id``."""

    id: str
    ts: str
    enabled: bool
    visibility: MemoryVisibility
    importance: MemoryImportance
    content: str

    @property
    def type(self) -> MemoryEventType:
        return MemoryEventType.MEMORY

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "ts": self.ts,
            "type": MemoryEventType.MEMORY.value,
            "enabled": self.enabled,
            "visibility": self.visibility.value,
            "importance": self.importance.value,
            "content": self.content,
        }


@dataclass(frozen=True)
class MemoryPatch:
    """Patch event. Fields left as ``None`` are not changed on the target."""

    id: str
    ts: str
    target_id: str
    enabled: bool | None = None
    visibility: MemoryVisibility | None = None
    importance: MemoryImportance | None = None

    @property
    def type(self) -> MemoryEventType:
        return MemoryEventType.PATCH

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "ts": self.ts,
            "type": MemoryEventType.PATCH.value,
            "targetId": self.target_id,
        }
        if self.enabled is not None:
            data["enabled"] = self.enabled
        if self.visibility is not None:
            data["visibility"] = self.visibility.value
        if self.importance is not None:
            data["importance"] = self.importance.value
        return data


MemoryLogEvent = MemoryEntry | MemoryPatch


@dataclass
class ResolvedMemory:
    """Current state of a memory after all patches. Never persisted."""

    id: str
    enabled: bool
    visibility: MemoryVisibility
    importance: MemoryImportance
    content: str
    created_at: str
    last_modified_at: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "enabled": self.enabled,
            "visibility": self.visibility.value,
            "importance": self.importance.value,
            "content": self.content,
            "created_at": self.created_at,
            "last_modified_at": self.last_modified_at,
        }


def _require_str(data: Mapping[str, Any], key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise ValueError(f"Field '{key}' must be a string")
    return value


def _optional_bool(data: Mapping[str, Any], key: str) -> bool | None:
    value = data.get(key)
    if value is not None and not isinstance(value, bool):
        raise ValueError(f"Field '{key}' must be a boolean")
    return value


def memory_event_from_dict(data: Mapping[str, Any]) -> MemoryLogEvent:
    """Build a log event from one decoded JSON line.

    Raises:
        KeyError: If a required field is missing.
        ValueError: If a field has the wrong type or an unknown value.
    """
    if not isinstance(data, Mapping):
        raise ValueError("Memory log line must be a JSON object")

    event_type = MemoryEventType(data["type"])
    if event_type is MemoryEventType.MEMORY:
        enabled = _optional_bool(data, "enabled")
        return MemoryEntry(
            id=_require_str(data, "id"),
            ts=_require_str(data, "ts"),
            enabled=True if enabled is None else enabled,
            visibility=MemoryVisibility(data["visibility"]),
            importance=MemoryImportance(data["importance"]),
            content=_require_str(data, "content"),
        )

    visibility = data.get("visibility")
    importance = data.get("importance")
    return MemoryPatch(
        id=_require_str(data, "id"),
        ts=_require_str(data, "ts"),
        target_id=_require_str(data, "targetId"),
        enabled=_optional_bool(data, "enabled"),
        visibility=MemoryVisibility(visibility) if visibility is not None else None,
        importance=MemoryImportance(importance) if importance is not None else None,
    )


def resolve_memories(events: Iterable[MemoryLogEvent]) -> list[ResolvedMemory]:
    """Fold patch events onto their creation events.

    Patches for a target are applied in ascending ``ts`` order (string
    comparison); equal timestamps keep file order. Patches whose target has
    no creation event are dropped. Results keep creation order.
    """
    memories: dict[str, ResolvedMemory] = {}
    patches: dict[str, list[MemoryPatch]] = {}

    for event in events:
        if isinstance(event, MemoryEntry):
            memories[event.id] = ResolvedMemory(
                id=event.id,
                enabled=event.enabled,
                visibility=event.visibility,
                importance=event.importance,
                content=event.content,
                created_at=event.ts,
                last_modified_at=event.ts,
            )
        else:
            patches.setdefault(event.target_id, []).append(event)

    for target_id, target_patches in patches.items():
        memory = memories.get(target_id)
        if memory is None:
            continue
        for patch in sorted(target_patches, key=lambda p: p.ts):
            if patch.enabled is not None:
                memory.enabled = patch.enabled
            if patch.visibility is not None:
                memory.visibility = patch.visibility
            if patch.importance is not None:
                memory.importance = patch.importance
            memory.last_modified_at = patch.ts

    return list(memories.values())
