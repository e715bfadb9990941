"""
POS Core Time — Public API
============================
Injectable clock and period-bucketing helpers.
"""

from core.time.clock import Clock, FixedClock, SystemClock
from core.time.temporal import (
    DAY_NAMES,
    TimeWindow,
    day_of_week,
    month_label,
    week_label,
    week_start,
    weeks_between,
    year_label,
)

__all__ = [
    "Clock",
    "FixedClock",
    "SystemClock",
    "DAY_NAMES",
    "TimeWindow",
    "day_of_week",
    "week_start",
    "week_label",
    "month_label",
    "year_label",
    "weeks_between",
]
