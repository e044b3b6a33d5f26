"""Usage statistics engine."""

from chatmeter.services.statistics.models import (
    Granularity,
    InvalidRangeError,
    UsagePeriod,
    UsageView,
)
from chatmeter.services.statistics.recorder import (
    StatisticsRecorder,
    compute_activity_hours,
)
from chatmeter.services.statistics.rollups import RollupAggregator, fill_periods

__all__ = [
    "Granularity",
    "InvalidRangeError",
    "RollupAggregator",
    "StatisticsRecorder",
    "UsagePeriod",
    "UsageView",
    "compute_activity_hours",
    "fill_periods",
]
