"""Shared UTC time helpers.

Memory log ordering compares ISO-8601 strings lexicographically, so every
timestamp written to a log must come from :class:`IsoClock`: UTC, millisecond
precision, ``Z`` suffix, strictly increasing within the process.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

_ONE_MS = timedelta(milliseconds=1)


def utc_now() -> datetime:
    """Return the current UTC timestamp."""
    return datetime.now(UTC)


def format_iso_ms(value: datetime) -> str:
    """Format a datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    value = value.astimezone(UTC)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def parse_iso(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, accepting a trailing ``Z``."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


class IsoClock:
    """Monotonic source of millisecond ISO-8601 timestamps.

    If the wall clock stalls or steps backwards, the next timestamp is the
    previous one plus one millisecond.
    """

    def __init__(self, time_provider: Callable[[], datetime] | None = None) -> None:
        self._time_provider = time_provider or utc_now
        self._last: datetime | None = None

    def now(self) -> datetime:
        current = self._time_provider().astimezone(UTC)
        current = current.replace(microsecond=(current.microsecond // 1000) * 1000)
        if self._last is not None and current <= self._last:
            current = self._last + _ONE_MS
        self._last = current
        return current

    def now_iso(self) -> str:
        return format_iso_ms(self.now())
