"""Outbound reply models shared with platform adapters."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ReplyOptions:
    """Options for sending a reply.

    Attributes:
        reply_to_message_id: Thread the reply to this message, if supported.
    """

    reply_to_message_id: str | None = None


@dataclass(frozen=True)
class ReplyResult:
    """Outcome reported by a platform adapter after sending."""

    success: bool
    message_id: str | None = None
    error: str | None = None
