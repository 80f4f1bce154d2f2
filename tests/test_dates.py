from datetime import datetime, timedelta

import pytest

from finbot.dates import (
    add_months,
    aligned_window,
    normalize_granularity,
    resolve_window,
    rolling_cutoff,
    shift_relative,
    window_label,
)

NOW = datetime(2024, 3, 10, 12, 0, 0)  # a Sunday


@pytest.mark.parametrize(
    "reference, last_day",
    [
        (datetime(2024, 2, 15, 9, 30), 29),
        (datetime(2023, 2, 1), 28),
        (datetime(2024, 4, 30, 23, 0), 30),
        (datetime(2024, 1, 31), 31),
        (datetime(2024, 12, 5), 31),
    ],
)
def test_month_window_covers_whole_month(reference, last_day):
    window = aligned_window("Month", reference)
    assert window.start == datetime(reference.year, reference.month, 1)
    assert window.end.date() == reference.replace(day=last_day).date()
    assert (window.end.hour, window.end.minute, window.end.second) == (23, 59, 59)


def test_week_window_runs_sunday_to_saturday():
    window = aligned_window("Week", datetime(2024, 3, 13, 15, 0))  # Wednesday
    assert window.start == datetime(2024, 3, 10)
    assert window.end.date() == datetime(2024, 3, 16).date()

    sunday = aligned_window("Week", NOW)
    assert sunday.start == datetime(2024, 3, 10)

    saturday = aligned_window("Week", datetime(2024, 3, 16, 23, 0))
    assert saturday.start == datetime(2024, 3, 10)


def test_day_window_is_closed_interval():
    window = aligned_window("Day", NOW)
    assert window.contains(datetime(2024, 3, 10))
    assert window.contains(datetime(2024, 3, 10, 23, 59, 59, 999999))
    assert not window.contains(datetime(2024, 3, 11))
    assert not window.contains(datetime(2024, 3, 9, 23, 59, 59))


def test_aligned_year_is_calendar_year():
    window = aligned_window("Year", NOW)
    assert window.start == datetime(2024, 1, 1)
    assert window.end.date() == datetime(2024, 12, 31).date()


def test_resolve_window_year_is_rolling():
    window = resolve_window("Year", NOW)
    assert window.start == datetime(2023, 3, 11)
    assert window.end == NOW
    assert resolve_window("Month", NOW) == aligned_window("Month", NOW)


def test_rolling_cutoffs():
    assert rolling_cutoff("Today", NOW) == datetime(2024, 3, 10)
    assert rolling_cutoff("Week", NOW) == datetime(2024, 3, 3)
    assert rolling_cutoff("Month", NOW) == datetime(2024, 2, 10)
    assert rolling_cutoff("Year", NOW) == datetime(2023, 3, 11)
    assert rolling_cutoff("All", NOW) is None


def test_rolling_month_clamps_short_month():
    assert rolling_cutoff("Month", datetime(2024, 3, 31, 8)) == datetime(2024, 2, 29)


def test_add_months_clamps_day():
    assert add_months(datetime(2024, 1, 31), 1) == datetime(2024, 2, 29)
    assert add_months(datetime(2024, 3, 31), -1) == datetime(2024, 2, 29)
    assert add_months(datetime(2024, 12, 15), 1) == datetime(2025, 1, 15)


def test_shift_relative_phrases():
    assert shift_relative("Yesterday dinner", NOW) == NOW - timedelta(days=1)
    assert shift_relative("day before yesterday cab", NOW) == NOW - timedelta(days=2)
    assert shift_relative("movie last friday", NOW) == datetime(2024, 3, 8, 12, 0)
    assert shift_relative("last sunday", NOW) == datetime(2024, 3, 3, 12, 0)
    assert shift_relative("next week maybe", NOW) == NOW


def test_window_labels():
    assert window_label("Day", NOW, NOW) == "Today"
    assert window_label("Day", NOW - timedelta(days=1), NOW) == "Yesterday"
    assert window_label("Day", datetime(2024, 3, 8), NOW) == "Fri Mar 08 2024"
    assert window_label("Week", NOW, NOW) == "10 Mar - 16 Mar"
    assert window_label("Month", NOW, NOW) == "March 2024"
    assert window_label("All", NOW, NOW) == "All Time"


def test_normalize_granularity_aliases_and_errors():
    assert normalize_granularity("today") == "Day"
    assert normalize_granularity("7 Days") == "Week"
    assert normalize_granularity(None) == "All"
    with pytest.raises(ValueError):
        normalize_granularity("fortnight")
