from __future__ import annotations

import pytest
from pydantic import ValidationError

from chatmeter.domain import COUNTER_FIELDS, MessageOrigin, UsageCounters, UsageDelta


def test_empty_delta_still_counts_one_request() -> None:
    delta = UsageDelta()

    assert delta.bucket_increments() == {"requests_count": 1}
    assert delta.summary_increments() == {"requests_count": 1}


def test_full_delta_maps_to_bucket_and_summary_columns() -> None:
    delta = UsageDelta(
        tokens=120,
        is_new_chat=True,
        message_from="bot",
        response_time_ms=850,
        is_chat_completed=True,
        chat_duration=300,
    )

    assert delta.bucket_increments() == {
        "requests_count": 1,
        "token_used": 120,
        "chats_started": 1,
        "messages_sent": 1,
        "messages_from_bot": 1,
    }
    assert delta.summary_increments() == {
        "requests_count": 1,
        "token_used": 120,
        "total_chats_started": 1,
        "total_messages_sent": 1,
        "bot_messages_count": 1,
        "total_response_time": 850,
        "response_count": 1,
        "completed_chats": 1,
        "total_chat_duration": 300,
    }


def test_zero_response_time_and_duration_are_treated_as_absent() -> None:
    delta = UsageDelta(response_time_ms=0, chat_duration=0, tokens=0)

    assert delta.effective_response_time is None
    assert delta.effective_chat_duration is None
    assert "response_count" not in delta.summary_increments()
    assert "total_chat_duration" not in delta.summary_increments()
    assert "token_used" not in delta.bucket_increments()


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("assistant", MessageOrigin.BOT),
        ("consultant", MessageOrigin.OPERATOR),
        ("human", MessageOrigin.USER),
        ("User", MessageOrigin.USER),
    ],
)
def test_message_origin_aliases(raw: str, expected: MessageOrigin) -> None:
    assert UsageDelta(message_from=raw).message_from is expected


def test_delta_accepts_camel_case_payloads_and_rejects_negatives() -> None:
    delta = UsageDelta.model_validate(
        {"tokens": 5, "isNewChat": True, "messageFrom": "user", "responseTimeMs": 10}
    )
    assert delta.is_new_chat is True
    assert delta.bucket_increments()["messages_from_user"] == 1

    with pytest.raises(ValidationError):
        UsageDelta(tokens=-1)
    with pytest.raises(ValidationError):
        UsageDelta(message_from="robot")


def test_usage_counters_add_and_treat_null_as_zero() -> None:
    first = UsageCounters.from_mapping({"token_used": 3, "requests_count": None})
    second = UsageCounters(token_used=2, requests_count=4, messages_from_operator=1)

    total = UsageCounters.total([first, second, UsageCounters()])

    assert total.token_used == 5
    assert total.requests_count == 4
    assert total.messages_from_operator == 1
    assert len(COUNTER_FIELDS) == 7
