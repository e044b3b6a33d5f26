"""Shared utilities."""

from chatmeter.shared_utils.time_utils import (
    Clock,
    as_utc_aware,
    day_bounds,
    days_in_month,
    end_of_hour,
    month_bounds,
    shift_months,
    start_of_day,
    truncate_to_hour,
    utc_now,
    year_bounds,
)

__all__ = [
    "Clock",
    "as_utc_aware",
    "day_bounds",
    "days_in_month",
    "end_of_hour",
    "month_bounds",
    "shift_months",
    "start_of_day",
    "truncate_to_hour",
    "utc_now",
    "year_bounds",
]
