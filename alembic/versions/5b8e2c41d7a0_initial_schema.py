"""initial schema

Revision ID: 5b8e2c41d7a0
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "5b8e2c41d7a0"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "api_keys",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("expired_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_api_keys_is_active_expired_at",
        "api_keys",
        ["is_active", "expired_at"],
        unique=False,
    )

    op.create_table(
        "news",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("publish_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_news_status_publish_at", "news", ["status", "publish_at"], unique=False
    )

    op.create_table(
        "api_key_usage",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("api_key_id", sa.String(length=36), nullable=False),
        sa.Column("time_interval", sa.DateTime(timezone=True), nullable=False),
        sa.Column("token_used", sa.BigInteger(), nullable=False),
        sa.Column("chats_started", sa.Integer(), nullable=False),
        sa.Column("messages_sent", sa.Integer(), nullable=False),
        sa.Column("messages_from_bot", sa.Integer(), nullable=False),
        sa.Column("messages_from_operator", sa.Integer(), nullable=False),
        sa.Column("messages_from_user", sa.Integer(), nullable=False),
        sa.Column("requests_count", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["api_key_id"], ["api_keys.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "api_key_id", "time_interval", name="uq_api_key_usage_key_interval"
        ),
    )
    op.create_index(
        "ix_api_key_usage_time_interval",
        "api_key_usage",
        ["time_interval"],
        unique=False,
    )

    op.create_table(
        "api_key_statistics",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("api_key_id", sa.String(length=36), nullable=False),
        sa.Column("token_used", sa.BigInteger(), nullable=False),
        sa.Column("total_chats_started", sa.Integer(), nullable=False),
        sa.Column("total_messages_sent", sa.Integer(), nullable=False),
        sa.Column("requests_count", sa.Integer(), nullable=False),
        sa.Column("bot_messages_count", sa.Integer(), nullable=False),
        sa.Column("operator_messages_count", sa.Integer(), nullable=False),
        sa.Column("user_messages_count", sa.Integer(), nullable=False),
        sa.Column("total_response_time", sa.BigInteger(), nullable=False),
        sa.Column("response_count", sa.Integer(), nullable=False),
        sa.Column("completed_chats", sa.Integer(), nullable=False),
        sa.Column("total_chat_duration", sa.BigInteger(), nullable=False),
        sa.Column("shortest_chat_duration", sa.Integer(), nullable=True),
        sa.Column("longest_chat_duration", sa.Integer(), nullable=True),
        sa.Column("most_active_hour", sa.Integer(), nullable=True),
        sa.Column("least_active_hour", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["api_key_id"], ["api_keys.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "api_key_id", name="uq_api_key_statistics_api_key_id"
        ),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("api_key_statistics")
    op.drop_index("ix_api_key_usage_time_interval", table_name="api_key_usage")
    op.drop_table("api_key_usage")
    op.drop_index("ix_news_status_publish_at", table_name="news")
    op.drop_table("news")
    op.drop_index("ix_api_keys_is_active_expired_at", table_name="api_keys")
    op.drop_table("api_keys")
