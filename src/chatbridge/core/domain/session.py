"""Result of processing one inbound event."""

from __future__ import annotations

from dataclasses import dataclass

DUPLICATE_EVENT_ERROR = "Event already being processed"


@dataclass(frozen=True)
class SessionResponse:
    """Outcome of handling an inbound event.

    Attributes:
        success: Whether processing completed without error.
        reply_sent: Whether a user-visible reply was already sent upstream.
        error: Error description when ``success`` is False.
    """

    success: bool
    reply_sent: bool = False
    error: str | None = None

    @classmethod
    def failed(cls, error: str, *, reply_sent: bool = False) -> SessionResponse:
        return cls(success=False, reply_sent=reply_sent, error=error)
