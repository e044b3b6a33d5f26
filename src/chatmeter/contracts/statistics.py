"""Usage statistics API contract payloads.

Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from datetime import date as Date
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from chatmeter.db.repositories import LifetimeStatisticsRecord
from chatmeter.domain import UsageCounters


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UsageTotals(CamelModel):
    """Additive counters for one period, or for a whole view."""

    token_used: int = 0
    chats_started: int = 0
    messages_sent: int = 0
    messages_from_bot: int = 0
    messages_from_operator: int = 0
    messages_from_user: int = 0
    requests_count: int = 0

    @classmethod
    def from_counters(cls, counters: UsageCounters) -> UsageTotals:
        return cls(
            token_used=counters.token_used,
            chats_started=counters.chats_started,
            messages_sent=counters.messages_sent,
            messages_from_bot=counters.messages_from_bot,
            messages_from_operator=counters.messages_from_operator,
            messages_from_user=counters.messages_from_user,
            requests_count=counters.requests_count,
        )


class HourlyUsage(UsageTotals):
    time_interval: datetime
    hour: int


class DailyUsage(UsageTotals):
    date: Date


class MonthlyUsage(UsageTotals):
    year: int
    month: int


class HourlyStatsResponse(CamelModel):
    """Last 24 hours, one entry per hour."""

    start_time: datetime
    end_time: datetime
    hours: list[HourlyUsage]
    totals: UsageTotals


class DayStatsResponse(CamelModel):
    date: Date
    hours: list[HourlyUsage]
    totals: UsageTotals


class MonthStatsResponse(CamelModel):
    year: int
    month: int
    days: list[DailyUsage]
    totals: UsageTotals


class YearStatsResponse(CamelModel):
    year: int
    months: list[MonthlyUsage]
    totals: UsageTotals


class DailyStatsResponse(CamelModel):
    """Last 30 days, one entry per day."""

    start_time: datetime
    end_time: datetime
    days: list[DailyUsage]
    totals: UsageTotals


class MonthlyStatsResponse(CamelModel):
    """Last 12 months, one entry per month."""

    start_time: datetime
    end_time: datetime
    months: list[MonthlyUsage]
    totals: UsageTotals


class MessageBreakdown(CamelModel):
    bot: int = 0
    operator: int = 0
    user: int = 0


class PerformanceStats(CamelModel):
    total_response_time: int = 0
    response_count: int = 0
    average_response_time: float = 0.0


class ChatStats(CamelModel):
    completed: int = 0
    average_duration: float = 0.0
    shortest_duration: int | None = None
    longest_duration: int | None = None


class ActivityStats(CamelModel):
    most_active_hour: int | None = None
    least_active_hour: int | None = None


class LifetimeStatisticsResponse(CamelModel):
    """Lifetime summary of one API key."""

    token_used: int
    total_chats_started: int
    total_messages_sent: int
    requests_count: int
    messages: MessageBreakdown = Field(default_factory=MessageBreakdown)
    performance: PerformanceStats = Field(default_factory=PerformanceStats)
    chats: ChatStats = Field(default_factory=ChatStats)
    activity: ActivityStats = Field(default_factory=ActivityStats)
    updated_at: datetime

    @classmethod
    def from_record(cls, record: LifetimeStatisticsRecord) -> LifetimeStatisticsResponse:
        return cls(
            token_used=record.token_used,
            total_chats_started=record.total_chats_started,
            total_messages_sent=record.total_messages_sent,
            requests_count=record.requests_count,
            messages=MessageBreakdown(
                bot=record.bot_messages_count,
                operator=record.operator_messages_count,
                user=record.user_messages_count,
            ),
            performance=PerformanceStats(
                total_response_time=record.total_response_time,
                response_count=record.response_count,
                average_response_time=record.average_response_time,
            ),
            chats=ChatStats(
                completed=record.completed_chats,
                average_duration=record.average_chat_duration,
                shortest_duration=record.shortest_chat_duration,
                longest_duration=record.longest_chat_duration,
            ),
            activity=ActivityStats(
                most_active_hour=record.most_active_hour,
                least_active_hour=record.least_active_hour,
            ),
            updated_at=record.updated_at,
        )


__all__ = [
    "ActivityStats",
    "CamelModel",
    "ChatStats",
    "DailyStatsResponse",
    "DailyUsage",
    "DayStatsResponse",
    "HourlyStatsResponse",
    "HourlyUsage",
    "LifetimeStatisticsResponse",
    "MessageBreakdown",
    "MonthStatsResponse",
    "MonthlyStatsResponse",
    "MonthlyUsage",
    "PerformanceStats",
    "UsageTotals",
    "YearStatsResponse",
]
