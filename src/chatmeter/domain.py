"""Usage event deltas and counter arithmetic."""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class MessageOrigin(StrEnum):
    """Who sent a chat message."""

    BOT = "bot"
    OPERATOR = "operator"
    USER = "user"


# Role names used by chat handlers for the same originators.
_ORIGIN_ALIASES = {
    "assistant": MessageOrigin.BOT,
    "consultant": MessageOrigin.OPERATOR,
    "human": MessageOrigin.USER,
}


class UsageDelta(BaseModel):
    """
    Sparse set of increments produced by one chat event.

    Every field is optional; absent fields leave the matching counters
    untouched. ``requests_count`` is not a field because every event counts
    as exactly one request.

    ``response_time_ms`` and ``chat_duration`` count only when positive, so a
    handler that reports ``0`` for "unknown" does not skew averages or extrema.
    """

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
        frozen=True,
    )

    tokens: int | None = Field(default=None, ge=0)
    is_new_chat: bool = False
    message_from: MessageOrigin | None = None
    response_time_ms: int | None = Field(default=None, ge=0)
    is_chat_completed: bool = False
    chat_duration: int | None = Field(default=None, ge=0)

    @field_validator("message_from", mode="before")
    @classmethod
    def _normalize_origin(cls, value: object) -> object:
        if isinstance(value, str):
            normalized = value.strip().lower()
            return _ORIGIN_ALIASES.get(normalized, normalized)
        return value

    @property
    def effective_response_time(self) -> int | None:
        return self.response_time_ms if self.response_time_ms else None

    @property
    def effective_chat_duration(self) -> int | None:
        return self.chat_duration if self.chat_duration else None

    def bucket_increments(self) -> dict[str, int]:
        """Column increments for the hourly ``api_key_usage`` row."""
        increments: dict[str, int] = {"requests_count": 1}
        if self.tokens:
            increments["token_used"] = self.tokens
        if self.is_new_chat:
            increments["chats_started"] = 1
        if self.message_from is not None:
            increments["messages_sent"] = 1
            increments[f"messages_from_{self.message_from.value}"] = 1
        return increments

    def summary_increments(self) -> dict[str, int]:
        """Column increments for the lifetime ``api_key_statistics`` row."""
        increments: dict[str, int] = {"requests_count": 1}
        if self.tokens:
            increments["token_used"] = self.tokens
        if self.is_new_chat:
            increments["total_chats_started"] = 1
        if self.message_from is not None:
            increments["total_messages_sent"] = 1
            increments[f"{self.message_from.value}_messages_count"] = 1
        response_time = self.effective_response_time
        if response_time is not None:
            increments["total_response_time"] = response_time
            increments["response_count"] = 1
        if self.is_chat_completed:
            increments["completed_chats"] = 1
        duration = self.effective_chat_duration
        if duration is not None:
            increments["total_chat_duration"] = duration
        return increments


@dataclass(frozen=True)
class UsageCounters:
    """Additive counters shared by hourly buckets and every rollup period."""

    token_used: int = 0
    chats_started: int = 0
    messages_sent: int = 0
    messages_from_bot: int = 0
    messages_from_operator: int = 0
    messages_from_user: int = 0
    requests_count: int = 0

    def __add__(self, other: UsageCounters) -> UsageCounters:
        if not isinstance(other, UsageCounters):
            return NotImplemented
        return UsageCounters(
            **{
                name: getattr(self, name) + getattr(other, name)
                for name in COUNTER_FIELDS
            }
        )

    @classmethod
    def from_mapping(cls, values: Any) -> UsageCounters:
        """Build counters from a row or mapping, treating NULL as zero."""
        getter = values.get if isinstance(values, dict) else lambda name: getattr(
            values, name, None
        )
        return cls(**{name: int(getter(name) or 0) for name in COUNTER_FIELDS})

    @classmethod
    def total(cls, items: list[UsageCounters]) -> UsageCounters:
        result = cls()
        for item in items:
            result = result + item
        return result


COUNTER_FIELDS: tuple[str, ...] = tuple(f.name for f in fields(UsageCounters))

__all__ = [
    "COUNTER_FIELDS",
    "MessageOrigin",
    "UsageCounters",
    "UsageDelta",
]
