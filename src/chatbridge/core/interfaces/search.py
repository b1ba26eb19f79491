"""Protocol for the keyword search fast path."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from chatbridge.core.domain.search import SearchResult


class FastPathSearchProtocol(Protocol):
    """External line search, e.g. ripgrep.

    Returns ``None`` when the tool is unavailable or failed, which makes the
    caller fall back to the built-in scan. An empty list means "no matches".
    """

    async def search(
        self,
        path: Path,
        query: str,
        *,
        max_results: int,
        case_insensitive: bool,
    ) -> list[SearchResult] | None:
        ...
