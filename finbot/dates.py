# finbot/dates.py
"""Calendar helpers shared by the chat parser and the aggregation engine.

Two kinds of time range are used:

* rolling cutoffs - an inclusive lower bound counted back from "now", used by
  ledger-wide filters (Today / Week / Month / Year tabs);
* aligned windows - closed ranges snapped to calendar boundaries, used for
  budgets and period-to-period comparison.
"""

from __future__ import annotations

import re
from calendar import monthrange
from datetime import datetime, timedelta
from typing import Optional

from finbot.core.models import Window

DAY = "Day"
WEEK = "Week"
MONTH = "Month"
YEAR = "Year"
ALL = "All"

GRANULARITIES = (DAY, WEEK, MONTH, YEAR, ALL)

_ALIASES = {
    "day": DAY,
    "today": DAY,
    "week": WEEK,
    "7 days": WEEK,
    "month": MONTH,
    "30 days": MONTH,
    "year": YEAR,
    "all": ALL,
}

_WEEKDAYS = [
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
]
_LAST_WEEKDAY = re.compile(r"\blast\s+(" + "|".join(_WEEKDAYS) + r")\b", re.IGNORECASE)

ROLLING_YEAR_DAYS = 365

UNBOUNDED = Window(datetime.min, datetime.max)


def normalize_granularity(value: Optional[str]) -> str:
    if value is None:
        return ALL
    key = value.strip().lower()
    if key not in _ALIASES:
        raise ValueError(
            f"Unsupported period '{value}'; expected one of {', '.join(GRANULARITIES)}."
        )
    return _ALIASES[key]


def start_of_day(instant: datetime) -> datetime:
    return instant.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(instant: datetime) -> datetime:
    return instant.replace(hour=23, minute=59, second=59, microsecond=999999)


def add_months(instant: datetime, months: int) -> datetime:
    """Shift by calendar months, clamping the day to the target month length."""
    month_index = instant.month - 1 + months
    year = instant.year + month_index // 12
    month = month_index % 12 + 1
    day = min(instant.day, monthrange(year, month)[1])
    return instant.replace(year=year, month=month, day=day)


def shift_relative(text: str, now: datetime) -> datetime:
    """Resolve a relative date phrase found in text against now.

    Recognises "day before yesterday", "yesterday" and "last <weekday>";
    anything else resolves to now.
    """
    lowered = text.lower()
    if "day before yesterday" in lowered:
        return now - timedelta(days=2)
    if "yesterday" in lowered:
        return now - timedelta(days=1)
    match = _LAST_WEEKDAY.search(lowered)
    if match:
        target = _WEEKDAYS.index(match.group(1).lower())
        diff = (now.weekday() - target) % 7 or 7
        return now - timedelta(days=diff)
    return now


def rolling_cutoff(granularity: str, now: datetime) -> Optional[datetime]:
    """Inclusive lower bound for the rolling filter; None means no filter."""
    granularity = normalize_granularity(granularity)
    if granularity == DAY:
        return start_of_day(now)
    if granularity == WEEK:
        return start_of_day(now - timedelta(days=7))
    if granularity == MONTH:
        return start_of_day(add_months(now, -1))
    if granularity == YEAR:
        return start_of_day(now - timedelta(days=ROLLING_YEAR_DAYS))
    return None


def aligned_window(granularity: str, reference: datetime) -> Window:
    granularity = normalize_granularity(granularity)
    if granularity == DAY:
        return Window(start_of_day(reference), end_of_day(reference))
    if granularity == WEEK:
        # Weeks run Sunday through Saturday.
        start = start_of_day(reference - timedelta(days=(reference.weekday() + 1) % 7))
        return Window(start, end_of_day(start + timedelta(days=6)))
    if granularity == MONTH:
        last_day = monthrange(reference.year, reference.month)[1]
        return Window(
            start_of_day(reference.replace(day=1)),
            end_of_day(reference.replace(day=last_day)),
        )
    if granularity == YEAR:
        return Window(
            start_of_day(reference.replace(month=1, day=1)),
            end_of_day(reference.replace(month=12, day=31)),
        )
    return UNBOUNDED


def resolve_window(granularity: str, reference: datetime) -> Window:
    """Window for a granularity: calendar-aligned for Day/Week/Month,
    a rolling 365-day lookback ending at reference for Year."""
    granularity = normalize_granularity(granularity)
    if granularity == YEAR:
        return Window(rolling_cutoff(YEAR, reference), reference)
    return aligned_window(granularity, reference)


def window_label(granularity: str, reference: datetime, today: datetime) -> str:
    granularity = normalize_granularity(granularity)
    window = aligned_window(granularity, reference)
    if granularity == DAY:
        current = start_of_day(today)
        if window.start == current:
            return "Today"
        if window.start == current - timedelta(days=1):
            return "Yesterday"
        return reference.strftime("%a %b %d %Y")
    if granularity == WEEK:
        return (
            f"{window.start.day} {window.start:%b} - "
            f"{window.end.day} {window.end:%b}"
        )
    if granularity == MONTH:
        return reference.strftime("%B %Y")
    if granularity == YEAR:
        return str(reference.year)
    return "All Time"
