"""
Workspace Manager

Single source of truth for where a conversation may read and write files.

Directory layout::

    <repo_path>/<workspaces_dir>/<platform>/<user_id>/<channel_id>/
        memory.public.jsonl    - always present
        memory.private.jsonl   - DM workspaces only

Every file operation re-validates its resolved path against the workspace
directory before touching the disk, even for internally derived paths.
"""

from __future__ import annotations

import os
from datetime import UTC, datetime
from pathlib import Path

import aiofiles
import aiofiles.os
import structlog

from chatbridge.core.domain.errors import ErrorCode, WorkspaceError, WorkspaceNotFoundError
from chatbridge.core.domain.events import NormalizedEvent, Platform
from chatbridge.core.domain.workspace import (
    MemoryFileType,
    WorkspaceInfo,
    WorkspaceKeyComponents,
)
from chatbridge.core.utils.paths import (
    ensure_directory,
    path_exists,
    sanitize_component,
    validate_within_boundary,
)

logger = structlog.get_logger(__name__)


class WorkspaceManager:
    """
    Resolve, create and guard per-conversation workspaces.

    Workspace info is re-derived on every call and never cached, so a
    restarted process sees exactly what is on disk.

    Example:
        >>> manager = WorkspaceManager(repo_path="./data", workspaces_dir="workspaces")
        >>> workspace = await manager.get_or_create_workspace(event)
        >>> await manager.append_workspace_file(workspace, "notes.txt", "hello\\n")
    """

    def __init__(self, repo_path: str | Path = ".", workspaces_dir: str = "workspaces") -> None:
        self.repo_path = Path(os.path.abspath(repo_path))
        self.workspaces_root = Path(os.path.normpath(self.repo_path / workspaces_dir))
        logger.info(
            "workspace_manager.initialized",
            repo_path=str(self.repo_path),
            workspaces_root=str(self.workspaces_root),
        )

    # ------------------------------------------------------------------
    # Key derivation
    # ------------------------------------------------------------------

    def compute_workspace_key(self, components: WorkspaceKeyComponents) -> str:
        """Return ``platform/user_id/channel_id`` with every part sanitized.

        Raises:
            WorkspaceError: If a component is empty after sanitizing, which
                would collapse a directory level.
        """
        platform = (
            components.platform.value
            if isinstance(components.platform, Platform)
            else str(components.platform)
        )
        parts = (
            sanitize_component(platform),
            sanitize_component(components.user_id),
            sanitize_component(components.channel_id),
        )
        if not all(parts):
            raise WorkspaceError(
                "Workspace key component is empty after sanitizing",
                code=ErrorCode.WORKSPACE_INVALID_PATH,
                details={"components": [platform, components.user_id, components.channel_id]},
            )
        return "/".join(parts)

    def get_workspace_key_from_event(self, event: NormalizedEvent) -> str:
        return self.compute_workspace_key(self._components_from_event(event))

    def get_workspace_path(self, workspace_key: str) -> Path:
        """Absolute directory of a workspace, checked against the workspaces root."""
        return validate_within_boundary(self.workspaces_root / workspace_key, self.workspaces_root)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def get_or_create_workspace(self, event: NormalizedEvent) -> WorkspaceInfo:
        """
        Resolve the workspace for an event, creating it on first contact.

        Idempotent: concurrent calls for the same key tolerate the directory
        and memory files already existing.

        Args:
            event: Normalized inbound event.

        Returns:
            WorkspaceInfo for the event's conversation.
        """
        components = self._components_from_event(event)
        key = self.compute_workspace_key(components)
        path = self.get_workspace_path(key)

        created_at: datetime | None
        if not await path_exists(path):
            logger.info("workspace.creating", workspace=key, is_dm=event.is_dm)
            await ensure_directory(path)
            created_at = datetime.now(UTC)
            await self._initialize_workspace_files(path, event.is_dm)
        else:
            created_at = await self._stat_created_at(path)

        return WorkspaceInfo(
            key=key,
            components=components,
            path=path,
            is_dm=event.is_dm,
            created_at=created_at,
        )

    async def open_workspace(self, workspace_key: str, *, is_dm: bool = False) -> WorkspaceInfo:
        """
        Open an existing workspace by key without creating anything.

        Raises:
            WorkspaceError: If the key is not ``platform/user/channel``.
            WorkspaceNotFoundError: If the workspace directory does not exist.
        """
        parts = workspace_key.strip("/").split("/")
        if len(parts) != 3 or not all(parts):
            raise WorkspaceError(
                f"Invalid workspace key: {workspace_key}",
                code=ErrorCode.WORKSPACE_INVALID_PATH,
                details={"workspace": workspace_key},
            )
        key = "/".join(parts)
        path = self.get_workspace_path(key)
        if not await path_exists(path):
            raise WorkspaceNotFoundError(
                f"Workspace not found: {key}",
                details={"workspace": key},
            )

        platform, user_id, channel_id = parts
        return WorkspaceInfo(
            key=key,
            components=WorkspaceKeyComponents(
                platform=platform, user_id=user_id, channel_id=channel_id
            ),
            path=path,
            is_dm=is_dm,
            created_at=await self._stat_created_at(path),
        )

    async def list_workspaces(self, platform: str | None = None) -> list[str]:
        """
        List workspace keys found on disk.

        Args:
            platform: Only list workspaces of this platform.

        Returns:
            Sorted ``platform/user/channel`` keys; empty when the root is missing.
        """
        keys: list[str] = []
        try:
            platform_entries = await aiofiles.os.scandir(self.workspaces_root)
        except FileNotFoundError:
            return []

        with platform_entries:
            platform_dirs = [e for e in platform_entries if e.is_dir()]
        for platform_entry in platform_dirs:
            if platform and platform_entry.name != platform:
                continue
            for user_dir in await self._subdirectories(Path(platform_entry.path)):
                for channel_dir in await self._subdirectories(user_dir):
                    keys.append(f"{platform_entry.name}/{user_dir.name}/{channel_dir.name}")

        return sorted(keys)

    # ------------------------------------------------------------------
    # Memory files
    # ------------------------------------------------------------------

    def get_memory_file_path(
        self, workspace: WorkspaceInfo, file_type: MemoryFileType
    ) -> Path | None:
        """Path of a memory log, or None for private memory outside a DM."""
        if file_type is MemoryFileType.PRIVATE and not workspace.is_dm:
            logger.warning(
                "workspace.private_memory_denied",
                workspace=workspace.key,
            )
            return None
        return workspace.path / file_type.value

    # ------------------------------------------------------------------
    # Boundary-checked file access
    # ------------------------------------------------------------------

    def validate_file_access(self, file_path: str | Path, workspace: WorkspaceInfo) -> Path:
        """Raise WorkspaceAccessDeniedError unless ``file_path`` is inside the workspace."""
        return validate_within_boundary(file_path, workspace.path)

    def resolve_workspace_file(self, workspace: WorkspaceInfo, relative_path: str | Path) -> Path:
        """Absolute, boundary-checked path of a file inside the workspace."""
        return self.validate_file_access(workspace.path / relative_path, workspace)

    async def read_workspace_file(self, workspace: WorkspaceInfo, relative_path: str | Path) -> str:
        """
        Read a text file inside the workspace.

        Raises:
            WorkspaceAccessDeniedError: If the path escapes the workspace.
            WorkspaceNotFoundError: If the file does not exist.
        """
        absolute_path = self.resolve_workspace_file(workspace, relative_path)
        try:
            async with aiofiles.open(absolute_path, encoding="utf-8", errors="replace") as f:
                return await f.read()
        except FileNotFoundError as exc:
            raise WorkspaceNotFoundError(
                f"File not found: {relative_path}",
                details={"workspace": workspace.key, "relative_path": str(relative_path)},
            ) from exc

    async def write_workspace_file(
        self, workspace: WorkspaceInfo, relative_path: str | Path, content: str
    ) -> None:
        """Write a text file inside the workspace, creating parent directories."""
        absolute_path = self.resolve_workspace_file(workspace, relative_path)
        await ensure_directory(absolute_path.parent)
        async with aiofiles.open(absolute_path, "w", encoding="utf-8") as f:
            await f.write(content)

    async def append_workspace_file(
        self, workspace: WorkspaceInfo, relative_path: str | Path, content: str
    ) -> None:
        """Append text to a file inside the workspace, creating it if needed."""
        absolute_path = self.resolve_workspace_file(workspace, relative_path)
        async with aiofiles.open(absolute_path, "a", encoding="utf-8") as f:
            await f.write(content)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _components_from_event(event: NormalizedEvent) -> WorkspaceKeyComponents:
        return WorkspaceKeyComponents(
            platform=event.platform,
            user_id=event.user_id,
            channel_id=event.channel_id,
        )

    async def _initialize_workspace_files(self, workspace_path: Path, is_dm: bool) -> None:
        file_types = [MemoryFileType.PUBLIC]
        if is_dm:
            file_types.append(MemoryFileType.PRIVATE)

        for file_type in file_types:
            memory_path = workspace_path / file_type.value
            if await path_exists(memory_path):
                continue
            # "a" creates the file without truncating one written concurrently
            async with aiofiles.open(memory_path, "a", encoding="utf-8"):
                pass

        logger.debug("workspace.files_initialized", workspace_path=str(workspace_path), is_dm=is_dm)

    @staticmethod
    async def _stat_created_at(path: Path) -> datetime | None:
        try:
            stat = await aiofiles.os.stat(path)
        except OSError:
            return None
        timestamp = getattr(stat, "st_birthtime", None) or stat.st_mtime
        return datetime.fromtimestamp(timestamp, UTC)

    @staticmethod
    async def _subdirectories(path: Path) -> list[Path]:
        try:
            entries = await aiofiles.os.scandir(path)
        except (FileNotFoundError, NotADirectoryError):
            return []
        with entries:
            return sorted(Path(entry.path) for entry in entries if entry.is_dir())
