"""Tests for path boundary validation and component sanitizing."""

import pytest

from chatbridge.core.domain.errors import ErrorCode, WorkspaceAccessDeniedError
from chatbridge.core.utils.paths import (
    ensure_directory,
    path_exists,
    sanitize_component,
    validate_within_boundary,
)


class TestValidateWithinBoundary:
    def test_nested_path_is_allowed(self, tmp_path):
        target = tmp_path / "a" / "b.txt"
        assert validate_within_boundary(target, tmp_path) == target

    def test_boundary_itself_is_allowed(self, tmp_path):
        assert validate_within_boundary(tmp_path, tmp_path) == tmp_path

    def test_dotdot_inside_boundary_is_normalized(self, tmp_path):
        result = validate_within_boundary(tmp_path / "a" / ".." / "b.txt", tmp_path)
        assert result == tmp_path / "b.txt"

    def test_parent_traversal_is_denied(self, tmp_path):
        with pytest.raises(WorkspaceAccessDeniedError) as exc_info:
            validate_within_boundary(tmp_path / ".." / "etc" / "passwd", tmp_path)

        assert exc_info.value.code == ErrorCode.WORKSPACE_ACCESS_DENIED
        assert "target_path" in exc_info.value.details
        assert "boundary_path" in exc_info.value.details

    def test_sibling_directory_is_denied(self, tmp_path):
        boundary = tmp_path / "ws"
        with pytest.raises(WorkspaceAccessDeniedError):
            validate_within_boundary(tmp_path / "ws-other" / "file", boundary)

    def test_absolute_outside_path_is_denied(self, tmp_path):
        with pytest.raises(WorkspaceAccessDeniedError):
            validate_within_boundary("/etc/passwd", tmp_path)


class TestSanitizeComponent:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("user123", "user123"),
            ("a/b", "a_b"),
            ("a\\b", "a_b"),
            ("..", "_"),
            ("../../etc", "____etc"),
            (".hidden", "hidden"),
            ("  spaced  ", "spaced"),
        ],
    )
    def test_sanitize(self, raw, expected):
        assert sanitize_component(raw) == expected

    def test_result_never_contains_separators_or_dotdot(self):
        for raw in ["../x", "a/../b", "..\\..\\c", "...."]:
            result = sanitize_component(raw)
            assert "/" not in result
            assert "\\" not in result
            assert ".." not in result


class TestAsyncHelpers:
    @pytest.mark.asyncio
    async def test_path_exists(self, tmp_path):
        assert await path_exists(tmp_path) is True
        assert await path_exists(tmp_path / "missing") is False

    @pytest.mark.asyncio
    async def test_ensure_directory_is_idempotent(self, tmp_path):
        target = tmp_path / "x" / "y"
        await ensure_directory(target)
        await ensure_directory(target)
        assert target.is_dir()
