"""Test configuration and shared fixtures."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
import structlog

from chatbridge.core.domain.events import NormalizedEvent, Platform
from chatbridge.core.domain.platform import ReplyOptions, ReplyResult
from chatbridge.core.utils.time import IsoClock
from chatbridge.infrastructure.memory.jsonl_memory_store import JsonlMemoryStore
from chatbridge.infrastructure.search.text_search import TextSearcher
from chatbridge.infrastructure.workspace.workspace_manager import WorkspaceManager


class FakePlatformAdapter:
    """Records every reply sent through it."""

    def __init__(self, *, succeed: bool = True, raise_error: Exception | None = None) -> None:
        self.sent: list[tuple[str, str, ReplyOptions | None]] = []
        self._succeed = succeed
        self._raise_error = raise_error

    @property
    def platform(self) -> Platform:
        return Platform.DISCORD

    async def send_reply(
        self,
        channel_id: str,
        content: str,
        options: ReplyOptions | None = None,
    ) -> ReplyResult:
        if self._raise_error is not None:
            raise self._raise_error
        self.sent.append((channel_id, content, options))
        if not self._succeed:
            return ReplyResult(success=False, error="send failed")
        return ReplyResult(success=True, message_id=f"reply-{len(self.sent)}")

    async def fetch_recent_messages(self, channel_id: str, limit: int) -> list[Any]:
        return []

    async def search_related_messages(
        self, guild_id: str, channel_id: str, query: str, limit: int
    ) -> list[Any]:
        return []


class SteppingClock(IsoClock):
    """IsoClock driven by a fixed start time advancing one second per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self._current = start or datetime(2026, 1, 1, tzinfo=UTC)

        def _tick() -> datetime:
            value = self._current
            self._current += timedelta(seconds=1)
            return value

        super().__init__(time_provider=_tick)


@pytest.fixture
def make_event() -> Callable[..., NormalizedEvent]:
    """Factory for normalized events with sensible defaults."""

    def _make(
        message_id: str = "msg_1",
        *,
        platform: Platform = Platform.DISCORD,
        user_id: str = "u1",
        channel_id: str = "c1",
        is_dm: bool = False,
        content: str = "Hello bot!",
    ) -> NormalizedEvent:
        return NormalizedEvent(
            platform=platform,
            channel_id=channel_id,
            user_id=user_id,
            message_id=message_id,
            is_dm=is_dm,
            guild_id="" if is_dm else "g1",
            content=content,
        )

    return _make


@pytest.fixture
def workspace_manager(tmp_path) -> WorkspaceManager:
    return WorkspaceManager(repo_path=tmp_path, workspaces_dir="workspaces")


@pytest.fixture
def memory_store(workspace_manager) -> JsonlMemoryStore:
    """Store using the built-in line scan so results don't depend on ripgrep."""
    return JsonlMemoryStore(
        workspace_manager,
        searcher=TextSearcher(enable_fast_path=False),
        clock=SteppingClock(),
    )


@pytest.fixture
def fake_adapter() -> FakePlatformAdapter:
    return FakePlatformAdapter()


@pytest.fixture
def make_adapter() -> Callable[..., FakePlatformAdapter]:
    return FakePlatformAdapter


@pytest.fixture(autouse=True)
def _reset_structlog():
    """CLI commands configure structlog globally; undo it after each test."""
    yield
    structlog.reset_defaults()
