"""
POS Core Time — Period Bucketing
==================================
Pure functions mapping a sale timestamp to the reporting bucket it
belongs to (weekday, week, month, year) and measuring elapsed weeks.
All functions take explicit datetime arguments; there is no hidden clock.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta

DAY_NAMES = (
    "Monday", "Tuesday", "Wednesday", "Thursday",
    "Friday", "Saturday", "Sunday",
)

SECONDS_PER_WEEK = 7 * 24 * 60 * 60


# ══════════════════════════════════════════════════════════════
# TIME WINDOW: closed interval [start, end]
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TimeWindow:
    """
    A closed time interval [start, end], used to scope reports.

    Invariant: start <= end (enforced at construction).
    """

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(
                f"TimeWindow start ({self.start}) must be <= end ({self.end})."
            )

    def contains(self, dt: datetime) -> bool:
        return self.start <= dt <= self.end

    def duration(self) -> timedelta:
        return self.end - self.start


# ══════════════════════════════════════════════════════════════
# BUCKET KEYS
# ══════════════════════════════════════════════════════════════

def day_of_week(dt: datetime) -> str:
    """Weekday name, e.g. "Monday"."""
    return DAY_NAMES[dt.weekday()]


def week_start(dt: datetime) -> date:
    """ISO week start (the Monday on or before dt)."""
    day = dt.date()
    return day - timedelta(days=day.weekday())


def week_label(dt: datetime) -> str:
    return week_start(dt).isoformat()


def month_label(dt: datetime) -> str:
    """Month and year, e.g. "2025-03"."""
    return f"{dt.year:04d}-{dt.month:02d}"


def year_label(dt: datetime) -> str:
    return f"{dt.year:04d}"


# ══════════════════════════════════════════════════════════════
# DURATIONS
# ══════════════════════════════════════════════════════════════

def weeks_between(start: datetime, end: datetime, minimum: float = 1.0) -> float:
    """
    Elapsed weeks from start to end, never less than `minimum`.

    The floor keeps a one-day sales history from inflating per-week rates.
    """
    elapsed = (end - start).total_seconds() / SECONDS_PER_WEEK
    return max(minimum, elapsed)
