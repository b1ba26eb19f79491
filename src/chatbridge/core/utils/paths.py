"""
Path boundary utilities.

Every filesystem path that is derived from untrusted input (platform ids,
relative paths requested by downstream callers) goes through this module
before it touches the disk.
"""

import os
import re
from pathlib import Path

import aiofiles.os
import structlog

from chatbridge.core.domain.errors import WorkspaceAccessDeniedError

logger = structlog.get_logger(__name__)

_SEPARATORS = re.compile(r"[/\\]")
_LEADING_DOTS = re.compile(r"^\.+")


def validate_within_boundary(target: str | Path, boundary: str | Path) -> Path:
    """
    Ensure ``target`` resolves to a location inside ``boundary``.

    Both paths are made absolute and normalized (``..`` segments collapsed)
    without following symlinks, then the relative path from boundary to
    target is computed. The boundary itself counts as inside.

    Args:
        target: Path to check, absolute or relative to the current directory.
        boundary: Directory that must contain ``target``.

    Returns:
        The normalized absolute target path.

    Raises:
        WorkspaceAccessDeniedError: If the target escapes the boundary.
    """
    normalized_target = os.path.normpath(os.path.abspath(target))
    normalized_boundary = os.path.normpath(os.path.abspath(boundary))

    try:
        relative = os.path.relpath(normalized_target, normalized_boundary)
    except ValueError:
        # different drives on Windows
        relative = normalized_target
    parts = Path(relative).parts
    if (parts and parts[0] == os.pardir) or os.path.isabs(relative):
        logger.warning(
            "path.boundary_violation",
            target=str(target),
            boundary=str(boundary),
        )
        raise WorkspaceAccessDeniedError(
            f"Path access denied: {target} is outside workspace boundary",
            details={"target_path": str(target), "boundary_path": str(boundary)},
        )
    return Path(normalized_target)


def sanitize_component(component: str) -> str:
    """
    Map one untrusted identifier to a safe single path segment.

    Path separators and ``..`` sequences become ``_`` and leading dots are
    stripped. Only meant for key derivation; arbitrary relative paths must
    go through :func:`validate_within_boundary` instead.
    """
    sanitized = _SEPARATORS.sub("_", component)
    sanitized = sanitized.replace("..", "_")
    sanitized = _LEADING_DOTS.sub("", sanitized)
    return sanitized.strip()


async def path_exists(path: str | Path) -> bool:
    """Return True if ``path`` exists. Errors other than not-found propagate."""
    try:
        await aiofiles.os.stat(path)
    except FileNotFoundError:
        return False
    return True


async def ensure_directory(path: str | Path) -> None:
    """Create ``path`` and its parents; an existing directory is not an error."""
    await aiofiles.os.makedirs(path, exist_ok=True)
