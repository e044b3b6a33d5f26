from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

from _fixtures.time import utc_dt

from chatmeter.shared_utils import (
    as_utc_aware,
    day_bounds,
    days_in_month,
    end_of_hour,
    month_bounds,
    shift_months,
    start_of_day,
    truncate_to_hour,
    year_bounds,
)


def test_truncate_to_hour_uses_utc_for_offset_datetimes() -> None:
    plus_three = timezone(timedelta(hours=3))
    local = datetime(2024, 4, 1, 1, 30, tzinfo=plus_three)

    assert truncate_to_hour(local) == utc_dt(2024, 3, 31, 22)


def test_truncate_to_hour_treats_naive_values_as_utc() -> None:
    assert truncate_to_hour(datetime(2024, 1, 5, 7, 59, 59, 999999)) == utc_dt(
        2024, 1, 5, 7
    )
    assert as_utc_aware(None) is None


def test_events_either_side_of_midnight_land_on_different_days() -> None:
    before = utc_dt(2024, 3, 31, 23, 59, 59)
    after = utc_dt(2024, 4, 1, 0, 0, 1)

    assert start_of_day(before).date() == date(2024, 3, 31)
    assert start_of_day(after).date() == date(2024, 4, 1)
    assert truncate_to_hour(before) != truncate_to_hour(after)


def test_bounds_are_closed_and_cover_whole_calendar_units() -> None:
    start, end = day_bounds(date(2024, 2, 29))
    assert start == utc_dt(2024, 2, 29)
    assert end == utc_dt(2024, 2, 29, 23, 59, 59, 999999)

    start, end = month_bounds(2024, 2)
    assert start == utc_dt(2024, 2, 1)
    assert end == utc_dt(2024, 2, 29, 23, 59, 59, 999999)

    start, end = year_bounds(2023)
    assert start == utc_dt(2023, 1, 1)
    assert end == utc_dt(2023, 12, 31, 23, 59, 59, 999999)

    assert end_of_hour(utc_dt(2024, 1, 1, 5)) == utc_dt(2024, 1, 1, 5, 59, 59, 999999)


def test_bounds_do_not_overflow_at_the_last_representable_year() -> None:
    assert day_bounds(date(9999, 12, 31))[1].year == 9999
    assert month_bounds(9999, 12)[1] == utc_dt(9999, 12, 31, 23, 59, 59, 999999)
    assert year_bounds(9999)[1].month == 12


def test_month_helpers_handle_leap_years_and_year_boundaries() -> None:
    assert days_in_month(2024, 2) == 29
    assert days_in_month(2023, 2) == 28
    assert days_in_month(2100, 2) == 28
    assert shift_months(2024, 3, -11) == (2023, 4)
    assert shift_months(2024, 12, 1) == (2025, 1)
    assert shift_months(2024, 1, -1) == (2023, 12)
