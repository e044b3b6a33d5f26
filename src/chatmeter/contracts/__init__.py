"""API contract payloads."""

from chatmeter.contracts.health import (
    DependencyHealth,
    HealthResponse,
    JobsHealthSummary,
    ReadinessMetrics,
)
from chatmeter.contracts.jobs import JobListResponse, JobRunResponse
from chatmeter.contracts.statistics import (
    DailyStatsResponse,
    DailyUsage,
    DayStatsResponse,
    HourlyStatsResponse,
    HourlyUsage,
    LifetimeStatisticsResponse,
    MonthlyStatsResponse,
    MonthlyUsage,
    MonthStatsResponse,
    UsageTotals,
    YearStatsResponse,
)

__all__ = [
    # Health
    "DependencyHealth",
    "HealthResponse",
    "JobsHealthSummary",
    "ReadinessMetrics",
    # Jobs
    "JobListResponse",
    "JobRunResponse",
    # Statistics
    "DailyStatsResponse",
    "DailyUsage",
    "DayStatsResponse",
    "HourlyStatsResponse",
    "HourlyUsage",
    "LifetimeStatisticsResponse",
    "MonthStatsResponse",
    "MonthlyStatsResponse",
    "MonthlyUsage",
    "UsageTotals",
    "YearStatsResponse",
]
