"""Keyword search implementations."""

from chatbridge.infrastructure.search.text_search import RipgrepSearch, TextSearcher

__all__ = ["RipgrepSearch", "TextSearcher"]
