"""Tests for TextSearcher and the ripgrep fast path."""

import json
import shutil

import pytest

from chatbridge.core.domain.search import SearchOptions, SearchResult
from chatbridge.infrastructure.search.text_search import (
    RipgrepSearch,
    TextSearcher,
    limit_results,
)


class FakeFastPath:
    """Fast path returning canned results, None, or raising."""

    def __init__(self, results=None, error: Exception | None = None) -> None:
        self.results = results
        self.error = error
        self.calls: list[tuple[str, int, bool]] = []

    async def search(self, path, query, *, max_results, case_insensitive):
        self.calls.append((query, max_results, case_insensitive))
        if self.error is not None:
            raise self.error
        return self.results


@pytest.fixture
def sample_file(tmp_path):
    path = tmp_path / "sample.txt"
    path.write_text(
        "Alpha line\nbeta line\nALPHA again\ngamma\n  alpha padded  \n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def builtin_searcher():
    return TextSearcher(enable_fast_path=False)


class TestBuiltinSearch:
    @pytest.mark.asyncio
    async def test_case_insensitive_by_default(self, builtin_searcher, sample_file):
        results = await builtin_searcher.search_in_file(sample_file, "alpha")

        assert [r.line_number for r in results] == [1, 3, 5]
        assert results[2].content == "alpha padded"
        assert results[0].matched_text == "alpha"

    @pytest.mark.asyncio
    async def test_case_sensitive(self, builtin_searcher, sample_file):
        options = SearchOptions(case_insensitive=False)
        results = await builtin_searcher.search_in_file(sample_file, "ALPHA", options)
        assert [r.line_number for r in results] == [3]

    @pytest.mark.asyncio
    async def test_max_results_cap(self, builtin_searcher, sample_file):
        results = await builtin_searcher.search_in_file(
            sample_file, "line", SearchOptions(max_results=1)
        )
        assert [r.line_number for r in results] == [1]

    @pytest.mark.asyncio
    async def test_char_budget_stops_accumulating(self, builtin_searcher, sample_file):
        # "Alpha line" is 10 chars, "ALPHA again" would exceed 15
        results = await builtin_searcher.search_in_file(
            sample_file, "alpha", SearchOptions(max_chars=15)
        )
        assert [r.line_number for r in results] == [1]

    @pytest.mark.asyncio
    async def test_missing_file_has_no_results(self, builtin_searcher, tmp_path):
        assert await builtin_searcher.search_in_file(tmp_path / "nope.txt", "x") == []

    @pytest.mark.asyncio
    async def test_invalid_utf8_line_is_tolerated(self, builtin_searcher, tmp_path):
        path = tmp_path / "mixed.txt"
        path.write_bytes(b"\xff garbage\nalpha ok\n")

        results = await builtin_searcher.search_in_file(path, "alpha")

        assert [(r.line_number, r.content) for r in results] == [(2, "alpha ok")]

    @pytest.mark.asyncio
    async def test_blank_query_matches_nothing(self, builtin_searcher, sample_file):
        assert await builtin_searcher.search_in_file(sample_file, "") == []
        assert await builtin_searcher.search_in_file(sample_file, "   ") == []


class TestMultipleKeywords:
    @pytest.mark.asyncio
    async def test_or_semantics_dedup_and_line_order(self, builtin_searcher, sample_file):
        results = await builtin_searcher.search_multiple_keywords(
            sample_file, ["gamma", "alpha", "line"]
        )
        assert [r.line_number for r in results] == [1, 2, 3, 4, 5]

    @pytest.mark.asyncio
    async def test_caps_are_reapplied_after_merge(self, builtin_searcher, sample_file):
        results = await builtin_searcher.search_multiple_keywords(
            sample_file, ["gamma", "beta"], SearchOptions(max_results=1)
        )
        assert [r.line_number for r in results] == [2]


class TestFastPath:
    @pytest.mark.asyncio
    async def test_fast_path_results_are_used_and_capped(self, sample_file):
        canned = [
            SearchResult(line_number=1, content="x" * 10, matched_text="x"),
            SearchResult(line_number=2, content="y" * 10, matched_text="y"),
        ]
        fast = FakeFastPath(results=canned)
        searcher = TextSearcher(fast)

        results = await searcher.search_in_file(sample_file, "x", SearchOptions(max_chars=15))

        assert results == canned[:1]
        assert fast.calls == [("x", 10, True)]

    @pytest.mark.asyncio
    async def test_unavailable_fast_path_falls_back(self, sample_file):
        searcher = TextSearcher(FakeFastPath(results=None))
        results = await searcher.search_in_file(sample_file, "gamma")
        assert [r.line_number for r in results] == [4]

    @pytest.mark.asyncio
    async def test_failing_fast_path_falls_back(self, sample_file):
        searcher = TextSearcher(FakeFastPath(error=RuntimeError("boom")))
        results = await searcher.search_in_file(sample_file, "gamma")
        assert [r.line_number for r in results] == [4]


class TestRipgrepSearch:
    def test_parse_output_reads_match_messages(self):
        output = "\n".join(
            [
                json.dumps({"type": "begin", "data": {}}),
                json.dumps(
                    {
                        "type": "match",
                        "data": {
                            "lines": {"text": "  Loves hiking\n"},
                            "line_number": 3,
                            "submatches": [{"match": {"text": "hiking"}}],
                        },
                    }
                ),
                "not json",
                json.dumps({"type": "end", "data": {}}),
            ]
        )

        results = RipgrepSearch._parse_output(output, "HIKING")

        assert results == [
            SearchResult(line_number=3, content="Loves hiking", matched_text="hiking")
        ]

    @pytest.mark.asyncio
    async def test_missing_binary_returns_none(self, sample_file):
        search = RipgrepSearch(executable="definitely-not-a-real-rg-binary")
        assert await search.search(sample_file, "x", max_results=5, case_insensitive=True) is None

    @pytest.mark.asyncio
    @pytest.mark.skipif(shutil.which("rg") is None, reason="ripgrep not installed")
    async def test_matches_builtin_results(self, sample_file):
        fast = await TextSearcher().search_in_file(sample_file, "alpha")
        builtin = await TextSearcher(enable_fast_path=False).search_in_file(sample_file, "alpha")
        assert [(r.line_number, r.content) for r in fast] == [
            (r.line_number, r.content) for r in builtin
        ]


def test_limit_results_stops_at_first_cap():
    results = [SearchResult(i, "abcde", "a") for i in range(1, 5)]
    assert len(limit_results(results, max_results=3, max_chars=100)) == 3
    assert len(limit_results(results, max_results=10, max_chars=12)) == 2
