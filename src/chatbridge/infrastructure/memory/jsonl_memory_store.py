"""
Append-only JSONL memory store.

Each workspace keeps one log per visibility::

    <workspace>/memory.public.jsonl    - always
    <workspace>/memory.private.jsonl   - DM workspaces only

Lines are creation events (``"type": "memory"``) or patch events
(``"type": "patch"``). Nothing is ever rewritten or deleted; the current state
of a memory is obtained by folding its patches over its creation event.

Patches are appended to the file holding the target's creation event, even
when the patch changes ``visibility``. The resolved label changes, the file
placement of the id does not.
"""

from __future__ import annotations

import asyncio
import json
import secrets
import string
import weakref
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import structlog

from chatbridge.core.domain.errors import (
    MemoryReadError,
    MemoryWriteError,
    WorkspaceNotFoundError,
)
from chatbridge.core.domain.memory import (
    MemoryEntry,
    MemoryImportance,
    MemoryLogEvent,
    MemoryPatch,
    MemoryVisibility,
    ResolvedMemory,
    memory_event_from_dict,
    resolve_memories,
)
from chatbridge.core.domain.search import SearchOptions
from chatbridge.core.domain.workspace import MemoryFileType, WorkspaceInfo
from chatbridge.core.interfaces.memory_store import MemoryStoreProtocol
from chatbridge.core.utils.time import IsoClock
from chatbridge.infrastructure.search.text_search import TextSearcher
from chatbridge.infrastructure.workspace.workspace_manager import WorkspaceManager

logger = structlog.get_logger(__name__)

_BASE36 = string.digits + string.ascii_lowercase


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def _file_type(visibility: MemoryVisibility) -> MemoryFileType:
    if visibility is MemoryVisibility.PRIVATE:
        return MemoryFileType.PRIVATE
    return MemoryFileType.PUBLIC


class JsonlMemoryStore(MemoryStoreProtocol):
    """Workspace-scoped memory log backed by JSON Lines files.

    All mutations of a workspace run under a per-workspace ``asyncio.Lock``,
    so the read-resolve-append sequence of a patch never interleaves with
    another write to the same conversation.

    Args:
        workspace_manager: Owner of workspace paths and boundary checks.
        search_limit: Default maximum number of search results.
        max_chars: Default character budget for raw line search.
        searcher: Line searcher used for keyword recall.
        clock: Timestamp source for new events.
    """

    def __init__(
        self,
        workspace_manager: WorkspaceManager,
        *,
        search_limit: int = 10,
        max_chars: int = 2000,
        searcher: TextSearcher | None = None,
        clock: IsoClock | None = None,
    ) -> None:
        self._workspace_manager = workspace_manager
        self._search_limit = search_limit
        self._max_chars = max_chars
        self._searcher = searcher or TextSearcher()
        self._clock = clock or IsoClock()
        # Entries vanish once no coroutine holds or awaits the lock
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def add_memory(
        self,
        workspace: WorkspaceInfo,
        content: str,
        *,
        visibility: MemoryVisibility | str = MemoryVisibility.PUBLIC,
        importance: MemoryImportance | str = MemoryImportance.NORMAL,
    ) -> MemoryEntry:
        """
        Append a creation event.

        Raises:
            MemoryWriteError: If private memory is requested outside a DM.
        """
        visibility = MemoryVisibility(visibility)
        importance = MemoryImportance(importance)

        if self._memory_path(workspace, visibility) is None:
            raise MemoryWriteError(
                "Cannot write private memory in non-DM context",
                details={"workspace": workspace.key, "visibility": visibility.value},
            )

        async with self._lock_for(workspace):
            entry = MemoryEntry(
                id=self._generate_id(),
                ts=self._clock.now_iso(),
                enabled=True,
                visibility=visibility,
                importance=importance,
                content=content,
            )
            await self._append_event(workspace, _file_type(visibility), entry)

        logger.info(
            "memory.added",
            workspace=workspace.key,
            memory_id=entry.id,
            visibility=visibility.value,
            importance=importance.value,
        )
        return entry

    async def patch_memory(
        self,
        workspace: WorkspaceInfo,
        target_id: str,
        *,
        enabled: bool | None = None,
        visibility: MemoryVisibility | str | None = None,
        importance: MemoryImportance | str | None = None,
    ) -> MemoryPatch:
        """
        Append a patch event for an existing memory.

        Raises:
            MemoryReadError: If ``target_id`` exists in neither log.
        """
        async with self._lock_for(workspace):
            located = await self._locate(workspace, target_id)
            if located is None:
                raise MemoryReadError(
                    f"Memory not found: {target_id}",
                    details={"workspace": workspace.key, "target_id": target_id},
                )
            _, source_visibility = located

            patch = MemoryPatch(
                id=self._generate_id(),
                ts=self._clock.now_iso(),
                target_id=target_id,
                enabled=enabled,
                visibility=MemoryVisibility(visibility) if visibility is not None else None,
                importance=MemoryImportance(importance) if importance is not None else None,
            )
            await self._append_event(workspace, _file_type(source_visibility), patch)

        logger.info(
            "memory.patched",
            workspace=workspace.key,
            target_id=target_id,
            patch=patch.to_dict(),
        )
        return patch

    async def disable_memory(self, workspace: WorkspaceInfo, memory_id: str) -> MemoryPatch:
        return await self.patch_memory(workspace, memory_id, enabled=False)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def load_all_memories(
        self,
        workspace: WorkspaceInfo,
        visibility: MemoryVisibility | str,
    ) -> list[ResolvedMemory]:
        """
        Resolve every memory of one log file.

        Malformed lines are logged and skipped. A missing file, or private
        memory outside a DM, yields an empty list.
        """
        visibility = MemoryVisibility(visibility)
        if self._memory_path(workspace, visibility) is None:
            return []

        file_type = _file_type(visibility)
        try:
            content = await self._workspace_manager.read_workspace_file(workspace, file_type.value)
        except WorkspaceNotFoundError:
            return []

        events = self._parse_memory_log(content, workspace, file_type)
        return resolve_memories(events)

    async def list_memories(
        self, workspace: WorkspaceInfo, *, include_disabled: bool = False
    ) -> list[ResolvedMemory]:
        """All memories visible in this workspace, oldest first."""
        memories = await self._load_visible(workspace)
        if not include_disabled:
            memories = [m for m in memories if m.enabled]
        return sorted(memories, key=lambda m: m.created_at)

    async def find_memory_by_id(
        self, workspace: WorkspaceInfo, memory_id: str
    ) -> ResolvedMemory | None:
        located = await self._locate(workspace, memory_id)
        return located[0] if located else None

    async def get_important_memories(self, workspace: WorkspaceInfo) -> list[ResolvedMemory]:
        """
        Enabled high-importance memories, sorted by creation time.

        No size cap is applied; callers enforce their own context budget.
        """
        memories = await self._load_visible(workspace)
        important = [
            m for m in memories if m.enabled and m.importance is MemoryImportance.HIGH
        ]
        return sorted(important, key=lambda m: m.created_at)

    async def search_memories(
        self,
        workspace: WorkspaceInfo,
        keywords: Sequence[str],
        *,
        max_results: int | None = None,
        max_chars: int | None = None,
    ) -> list[ResolvedMemory]:
        """
        Keyword recall over the raw logs.

        Matching creation lines are re-resolved to their current state, so a
        memory disabled after it was written never resurfaces. Results are
        deduplicated by id and capped at ``max_results``.
        """
        terms = [k for k in keywords if k and k.strip()]
        if not terms:
            return []

        options = SearchOptions(
            max_results=max_results if max_results is not None else self._search_limit,
            max_chars=max_chars if max_chars is not None else self._max_chars,
            case_insensitive=True,
        )

        visibilities = [MemoryVisibility.PUBLIC]
        if workspace.is_dm:
            visibilities.append(MemoryVisibility.PRIVATE)

        results: list[ResolvedMemory] = []
        seen_ids: set[str] = set()

        for visibility in visibilities:
            file_type = _file_type(visibility)
            path = self._workspace_manager.resolve_workspace_file(workspace, file_type.value)
            hits = await self._searcher.search_multiple_keywords(path, terms, options)
            if not hits:
                continue

            resolved = {m.id: m for m in await self.load_all_memories(workspace, visibility)}
            for hit in hits:
                memory_id = self._creation_id(hit.content)
                if memory_id is None or memory_id in seen_ids:
                    continue
                seen_ids.add(memory_id)
                memory = resolved.get(memory_id)
                if memory is not None and memory.enabled:
                    results.append(memory)

        logger.debug(
            "memory.searched",
            workspace=workspace.key,
            keywords=terms,
            result_count=len(results),
        )
        return results[: options.max_results]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _lock_for(self, workspace: WorkspaceInfo) -> asyncio.Lock:
        lock = self._locks.get(workspace.key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[workspace.key] = lock
        return lock

    def _generate_id(self) -> str:
        timestamp = _to_base36(int(self._clock.now().timestamp() * 1000))
        suffix = "".join(secrets.choice(_BASE36) for _ in range(6))
        return f"mem_{timestamp}_{suffix}"

    def _memory_path(
        self, workspace: WorkspaceInfo, visibility: MemoryVisibility
    ) -> Path | None:
        return self._workspace_manager.get_memory_file_path(workspace, _file_type(visibility))

    async def _append_event(
        self,
        workspace: WorkspaceInfo,
        file_type: MemoryFileType,
        event: MemoryLogEvent,
    ) -> None:
        line = json.dumps(event.to_dict(), ensure_ascii=False) + "\n"
        await self._workspace_manager.append_workspace_file(workspace, file_type.value, line)

    async def _load_visible(self, workspace: WorkspaceInfo) -> list[ResolvedMemory]:
        memories = await self.load_all_memories(workspace, MemoryVisibility.PUBLIC)
        if workspace.is_dm:
            memories += await self.load_all_memories(workspace, MemoryVisibility.PRIVATE)
        return memories

    async def _locate(
        self, workspace: WorkspaceInfo, memory_id: str
    ) -> tuple[ResolvedMemory, MemoryVisibility] | None:
        """Find a memory and the log file its creation event lives in."""
        visibilities = [MemoryVisibility.PUBLIC]
        if workspace.is_dm:
            visibilities.append(MemoryVisibility.PRIVATE)

        for visibility in visibilities:
            for memory in await self.load_all_memories(workspace, visibility):
                if memory.id == memory_id:
                    return memory, visibility
        return None

    @staticmethod
    def _parse_memory_log(
        content: str, workspace: WorkspaceInfo, file_type: MemoryFileType
    ) -> list[MemoryLogEvent]:
        events: list[MemoryLogEvent] = []
        for line_number, line in enumerate(content.split("\n"), start=1):
            if not line.strip():
                continue
            try:
                events.append(memory_event_from_dict(json.loads(line)))
            except (json.JSONDecodeError, KeyError, ValueError, TypeError) as exc:
                logger.warning(
                    "memory.malformed_line",
                    workspace=workspace.key,
                    file=file_type.value,
                    line_number=line_number,
                    line=line[:100],
                    error=str(exc),
                )
        return events

    @staticmethod
    def _creation_id(raw_line: str) -> str | None:
        """Id of a creation event line, or None for patches and garbage."""
        try:
            data: Any = json.loads(raw_line)
        except json.JSONDecodeError:
            return None
        if not isinstance(data, dict) or data.get("type") != "memory":
            return None
        memory_id = data.get("id")
        return memory_id if isinstance(memory_id, str) else None
