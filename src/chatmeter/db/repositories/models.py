"""Typed repository-layer records."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from chatmeter.domain import UsageCounters


@dataclass(frozen=True)
class UsageBucketRecord:
    """One hourly counter bucket."""

    api_key_id: str
    time_interval: datetime
    counters: UsageCounters


@dataclass(frozen=True)
class LifetimeStatisticsRecord:
    """Lifetime summary row for an API key."""

    api_key_id: str
    token_used: int
    total_chats_started: int
    total_messages_sent: int
    requests_count: int
    bot_messages_count: int
    operator_messages_count: int
    user_messages_count: int
    total_response_time: int
    response_count: int
    completed_chats: int
    total_chat_duration: int
    shortest_chat_duration: int | None
    longest_chat_duration: int | None
    most_active_hour: int | None
    least_active_hour: int | None
    updated_at: datetime

    @property
    def average_response_time(self) -> float:
        if self.response_count <= 0:
            return 0.0
        return self.total_response_time / self.response_count

    @property
    def average_chat_duration(self) -> float:
        if self.completed_chats <= 0:
            return 0.0
        return self.total_chat_duration / self.completed_chats


@dataclass(frozen=True)
class ActivityHours:
    """Most/least active UTC hours-of-day from the trailing window."""

    most_active_hour: int
    least_active_hour: int


__all__ = [
    "ActivityHours",
    "LifetimeStatisticsRecord",
    "UsageBucketRecord",
]
