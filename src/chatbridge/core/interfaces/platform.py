"""Protocol for chat platform adapters.

Adapters (Discord, Misskey, ...) live outside the core. The core only needs
to send replies; history access is consumed by context builders.
"""

from __future__ import annotations

from typing import Protocol

from chatbridge.core.domain.events import Platform, PlatformMessage
from chatbridge.core.domain.platform import ReplyOptions, ReplyResult


class PlatformAdapterProtocol(Protocol):
    """Capabilities a platform adapter exposes to the bridge."""

    @property
    def platform(self) -> Platform:
        """Platform identifier."""
        ...

    async def send_reply(
        self,
        channel_id: str,
        content: str,
        options: ReplyOptions | None = None,
    ) -> ReplyResult:
        """Post a message to a channel.

        Adapters report delivery failures through ``ReplyResult.success``
        instead of raising.
        """
        ...

    async def fetch_recent_messages(
        self, channel_id: str, limit: int
    ) -> list[PlatformMessage]:
        """Return the most recent messages of a channel."""
        ...

    async def search_related_messages(
        self,
        guild_id: str,
        channel_id: str,
        query: str,
        limit: int,
    ) -> list[PlatformMessage]:
        """Return messages related to ``query``, if the platform supports search."""
        ...
