"""Services layer."""

from chatmeter.services.operations import JOB_NAMES, PeriodicJob, build_jobs
from chatmeter.services.redis import (
    close_redis,
    connect_redis,
    get_redis,
    get_redis_or_none,
)
from chatmeter.services.statistics import (
    InvalidRangeError,
    RollupAggregator,
    StatisticsRecorder,
)

__all__ = [
    # Redis
    "connect_redis",
    "get_redis",
    "get_redis_or_none",
    "close_redis",
    # Statistics
    "InvalidRangeError",
    "RollupAggregator",
    "StatisticsRecorder",
    # Jobs
    "JOB_NAMES",
    "PeriodicJob",
    "build_jobs",
]
