"""
Keyword line search over text files.

Tries an external fast path (ripgrep by default) and falls back to a
line-by-line substring scan. Both paths return the same ``SearchResult``
shape and are capped by result count and a cumulative character budget.
"""

from __future__ import annotations

import asyncio
import json
import shutil
from collections.abc import Sequence
from pathlib import Path

import aiofiles
import structlog

from chatbridge.core.domain.search import SearchOptions, SearchResult
from chatbridge.core.interfaces.search import FastPathSearchProtocol

logger = structlog.get_logger(__name__)

# ripgrep exits with 1 when nothing matched
_RG_OK_CODES = (0, 1)


class RipgrepSearch(FastPathSearchProtocol):
    """Fixed-string search through the ``rg`` binary."""

    def __init__(self, executable: str = "rg") -> None:
        self._executable = executable

    async def search(
        self,
        path: Path,
        query: str,
        *,
        max_results: int,
        case_insensitive: bool,
    ) -> list[SearchResult] | None:
        executable = shutil.which(self._executable)
        if executable is None:
            return None

        args = [
            "--json",
            "--fixed-strings",
            "--max-count",
            str(max_results),
            "--ignore-case" if case_insensitive else "--case-sensitive",
            "--",
            query,
            str(path),
        ]
        try:
            process = await asyncio.create_subprocess_exec(
                executable,
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout, _ = await process.communicate()
        except OSError as exc:
            logger.debug("text_search.ripgrep_failed", error=str(exc))
            return None

        if process.returncode not in _RG_OK_CODES:
            return None

        return self._parse_output(stdout.decode("utf-8", errors="replace"), query)

    @staticmethod
    def _parse_output(output: str, query: str) -> list[SearchResult]:
        results: list[SearchResult] = []
        for raw_line in output.splitlines():
            if not raw_line.strip():
                continue
            try:
                message = json.loads(raw_line)
            except json.JSONDecodeError:
                continue
            if message.get("type") != "match":
                continue
            data = message.get("data", {})
            text = data.get("lines", {}).get("text")
            if text is None:
                # non UTF-8 line, reported as base64 bytes
                continue
            submatches = data.get("submatches") or []
            matched = submatches[0].get("match", {}).get("text", query) if submatches else query
            results.append(
                SearchResult(
                    line_number=int(data["line_number"]),
                    content=text.strip(),
                    matched_text=matched,
                )
            )
        return results


def limit_results(
    results: Sequence[SearchResult], max_results: int, max_chars: int
) -> list[SearchResult]:
    """Keep results in order until either the count or the character cap is hit."""
    limited: list[SearchResult] = []
    total_chars = 0
    for result in results:
        if len(limited) >= max_results:
            break
        if total_chars + len(result.content) > max_chars:
            break
        limited.append(result)
        total_chars += len(result.content)
    return limited


class TextSearcher:
    """Line search with a pluggable fast path and a built-in fallback.

    Args:
        fast_path: External searcher to try first. Defaults to ripgrep.
        enable_fast_path: Set to False to always use the built-in scan.
    """

    def __init__(
        self,
        fast_path: FastPathSearchProtocol | None = None,
        *,
        enable_fast_path: bool = True,
    ) -> None:
        if not enable_fast_path:
            self._fast_path: FastPathSearchProtocol | None = None
        else:
            self._fast_path = fast_path or RipgrepSearch()

    async def search_in_file(
        self,
        path: str | Path,
        query: str,
        options: SearchOptions | None = None,
    ) -> list[SearchResult]:
        """Return lines of ``path`` containing ``query``.

        A missing file yields no results. A blank query matches nothing.
        """
        opts = options or SearchOptions()
        file_path = Path(path)
        if not query.strip():
            return []

        if self._fast_path is not None:
            try:
                fast_results = await self._fast_path.search(
                    file_path,
                    query,
                    max_results=opts.max_results,
                    case_insensitive=opts.case_insensitive,
                )
            except Exception as exc:
                logger.debug("text_search.fast_path_error", error=str(exc))
                fast_results = None
            if fast_results is not None:
                return limit_results(fast_results, opts.max_results, opts.max_chars)

        logger.debug("text_search.builtin_fallback", path=str(file_path))
        return await self._builtin_search(file_path, query, opts)

    async def search_multiple_keywords(
        self,
        path: str | Path,
        keywords: Sequence[str],
        options: SearchOptions | None = None,
    ) -> list[SearchResult]:
        """OR-search: merge per-keyword hits, dedupe by line, sort by line number."""
        opts = options or SearchOptions()
        merged: dict[int, SearchResult] = {}
        for keyword in keywords:
            for result in await self.search_in_file(path, keyword, opts):
                merged.setdefault(result.line_number, result)

        ordered = sorted(merged.values(), key=lambda r: r.line_number)
        return limit_results(ordered, opts.max_results, opts.max_chars)

    async def _builtin_search(
        self, path: Path, query: str, opts: SearchOptions
    ) -> list[SearchResult]:
        try:
            async with aiofiles.open(path, encoding="utf-8", errors="replace") as f:
                content = await f.read()
        except FileNotFoundError:
            return []

        needle = query.lower() if opts.case_insensitive else query
        results: list[SearchResult] = []
        total_chars = 0

        for index, line in enumerate(content.split("\n")):
            if len(results) >= opts.max_results:
                break
            haystack = line.lower() if opts.case_insensitive else line
            if needle not in haystack:
                continue
            stripped = line.strip()
            if total_chars + len(stripped) > opts.max_chars:
                break
            results.append(
                SearchResult(line_number=index + 1, content=stripped, matched_text=query)
            )
            total_chars += len(stripped)

        return results
