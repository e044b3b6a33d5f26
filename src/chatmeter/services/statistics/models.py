"""Typed service-layer models for usage rollups."""

from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum

from chatmeter.domain import UsageCounters


class Granularity(StrEnum):
    HOUR = "hour"
    DAY = "day"
    MONTH = "month"


class InvalidRangeError(ValueError):
    """Raised when a rollup is requested for a malformed date range."""


@dataclass(frozen=True)
class UsagePeriod:
    """Summed counters for one hour, day or month."""

    start: datetime
    counters: UsageCounters

    @property
    def hour(self) -> int:
        return self.start.hour

    @property
    def date(self) -> date:
        return self.start.date()

    @property
    def year(self) -> int:
        return self.start.year

    @property
    def month(self) -> int:
        return self.start.month


@dataclass(frozen=True)
class UsageView:
    """
    Dense sequence of periods covering ``[start, end]`` plus their total.

    ``periods`` has no gaps: a period without buckets is present with zero
    counters, so callers can index by position.
    """

    granularity: Granularity
    start: datetime
    end: datetime
    periods: list[UsagePeriod]
    totals: UsageCounters


__all__ = [
    "Granularity",
    "InvalidRangeError",
    "UsagePeriod",
    "UsageView",
]
