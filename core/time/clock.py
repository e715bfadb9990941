"""
POS Core Time — Injectable Clock
==================================
Stores and services never call datetime.now() directly. Sale
timestamps and velocity windows come from a Clock passed in at
construction, so tests can pin time with FixedClock.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Protocol, Union


class Clock(Protocol):
    """Injectable time source."""

    def now_utc(self) -> datetime:
        """Return current UTC time."""
        ...  # pragma: no cover


class SystemClock:
    """Production clock: real system time."""

    def now_utc(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """
    Test clock. Returns a pinned timestamp until advanced.

    Usage:
        clock = FixedClock(datetime(2025, 1, 1, tzinfo=timezone.utc))
        clock.advance(timedelta(days=7))
    """

    def __init__(self, fixed_dt: datetime) -> None:
        if fixed_dt.tzinfo is None:
            raise ValueError("FixedClock requires timezone-aware datetime.")
        self._fixed_dt = fixed_dt

    def now_utc(self) -> datetime:
        return self._fixed_dt

    def advance(self, delta: Union[timedelta, float]) -> None:
        """Move time forward by a timedelta or a number of seconds."""
        if not isinstance(delta, timedelta):
            delta = timedelta(seconds=delta)
        self._fixed_dt = self._fixed_dt + delta
