"""Platform-agnostic inbound event models.

Platform adapters convert their native payloads into these types; the core
never sees Discord or Misskey specific structures.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from chatbridge.core.utils.time import utc_now


class Platform(str, Enum):
    """Supported chat platforms."""

    DISCORD = "discord"
    MISSKEY = "misskey"


@dataclass(frozen=True)
class NormalizedEvent:
    """Normalized inbound message from any platform.

    Attributes:
        platform: Source platform.
        channel_id: Channel/room where the message was posted.
        user_id: Author of the message.
        message_id: Platform message id, used as the dedup key.
        is_dm: Whether the conversation is a direct message.
        guild_id: Guild/server id, empty when the platform has none.
        content: Message text.
        timestamp: Original message timestamp.
        raw: Platform payload kept for reference.
    """

    platform: Platform
    channel_id: str
    user_id: str
    message_id: str
    is_dm: bool = False
    guild_id: str = ""
    content: str = ""
    timestamp: datetime = field(default_factory=utc_now)
    raw: Any = None


@dataclass(frozen=True)
class PlatformMessage:
    """A message fetched from platform history for context."""

    message_id: str
    user_id: str
    username: str
    content: str
    timestamp: datetime
    is_bot: bool = False
