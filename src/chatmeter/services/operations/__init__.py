"""Operational service components."""

from chatmeter.services.operations.jobs import (
    JOB_NAMES,
    ActivityRecalculationJob,
    ExpireApiKeysJob,
    PeriodicJob,
    PublishScheduledNewsJob,
    build_jobs,
)

__all__ = [
    "JOB_NAMES",
    "PeriodicJob",
    "ExpireApiKeysJob",
    "PublishScheduledNewsJob",
    "ActivityRecalculationJob",
    "build_jobs",
]
