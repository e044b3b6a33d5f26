"""SQLAlchemy models for chatmeter persistence."""

import uuid
from datetime import UTC, datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )


class ApiKey(Base):
    """
    A customer API key. Each key backs one chat bot and is the unit that
    usage statistics are scoped to.

    Only the columns the maintenance sweeps need live here; key issuance and
    ownership are managed elsewhere.
    """

    __tablename__ = "api_keys"

    name: Mapped[str] = mapped_column(String(255), nullable=False, default="default")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    expired_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    last_used_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        Index("ix_api_keys_is_active_expired_at", "is_active", "expired_at"),
    )

    def __repr__(self) -> str:
        return f"<ApiKey(id={self.id!r}, is_active={self.is_active!r})>"


class News(Base):
    """News post that may be scheduled for later publication."""

    __tablename__ = "news"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    # Status: draft, published
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="draft")
    publish_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (Index("ix_news_status_publish_at", "status", "publish_at"),)

    def __repr__(self) -> str:
        return f"<News(id={self.id!r}, status={self.status!r})>"


class ApiKeyUsage(Base):
    """
    Hour-bucketed usage counters for an API key.

    One row per (api_key_id, time_interval). ``time_interval`` is always the
    start of a UTC hour. Rows are only ever created or incremented through an
    atomic insert-or-add upsert, never rewritten.
    """

    __tablename__ = "api_key_usage"

    api_key_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("api_keys.id", ondelete="CASCADE"), nullable=False
    )
    time_interval: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    token_used: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    chats_started: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    messages_sent: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    messages_from_bot: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    messages_from_operator: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )
    messages_from_user: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )
    requests_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint(
            "api_key_id", "time_interval", name="uq_api_key_usage_key_interval"
        ),
        Index("ix_api_key_usage_time_interval", "time_interval"),
    )

    def __repr__(self) -> str:
        return (
            f"<ApiKeyUsage(api_key_id={self.api_key_id!r}, "
            f"time_interval={self.time_interval!r})>"
        )


class ApiKeyStatistics(Base):
    """
    Lifetime running totals and extrema for an API key.

    Updated incrementally in the same transaction as the hourly bucket, not
    derived from bucket sums. Extrema and active hours follow their own rules,
    so the totals here and the bucket sums are expected to drift slightly.
    """

    __tablename__ = "api_key_statistics"

    api_key_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("api_keys.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    token_used: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    total_chats_started: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )
    total_messages_sent: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )
    requests_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    bot_messages_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    operator_messages_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )
    user_messages_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )

    # Response latency, milliseconds
    total_response_time: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=0
    )
    response_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Completed chats, durations in seconds
    completed_chats: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_chat_duration: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=0
    )
    shortest_chat_duration: Mapped[int | None] = mapped_column(
        Integer, nullable=True
    )
    longest_chat_duration: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # UTC hour-of-day from the trailing 24h window
    most_active_hour: Mapped[int | None] = mapped_column(Integer, nullable=True)
    least_active_hour: Mapped[int | None] = mapped_column(Integer, nullable=True)

    def __repr__(self) -> str:
        return f"<ApiKeyStatistics(api_key_id={self.api_key_id!r})>"
