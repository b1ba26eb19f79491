"""Keyword search result and option types."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SearchOptions:
    """Limits for a line search.

    Attributes:
        max_results: Maximum number of matching lines.
        max_chars: Cumulative character budget over matched line contents.
        case_insensitive: Compare case-insensitively.
    """

    max_results: int = 10
    max_chars: int = 2000
    case_insensitive: bool = True


@dataclass(frozen=True)
class SearchResult:
    """One matching line. ``line_number`` is 1-based."""

    line_number: int
    content: str
    matched_text: str
