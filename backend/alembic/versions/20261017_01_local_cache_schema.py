"""Device cache schema: content collections, profiles, results, config and bookkeeping.

Revision ID: 20261017_01_local_cache_schema
Revises:
Create Date: 2026-10-17 09:00:00.000000
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision = "20261017_01_local_cache_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "questions",
        sa.Column("id", sa.String(length=160), primary_key=True, nullable=False),
        sa.Column("level", sa.String(length=64), nullable=False),
        sa.Column("set_id", sa.String(length=32), nullable=False),
        sa.Column("item_index", sa.Integer(), nullable=False),
        sa.Column("sub_index", sa.String(length=8), nullable=False, server_default=""),
        sa.Column("prompt", sa.Text(), nullable=False, server_default=""),
        sa.Column("answer", sa.Text(), nullable=False, server_default=""),
        sa.Column("aux_definition", sa.Text(), nullable=True),
        sa.Column("aux_context", sa.Text(), nullable=True),
        sa.Column("stored_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_questions_level", "questions", ["level"])

    op.create_table(
        "master_words",
        sa.Column("id", sa.String(length=64), primary_key=True, nullable=False),
        sa.Column("stage", sa.String(length=32), nullable=False),
        sa.Column("native_text", sa.Text(), nullable=False),
        sa.Column("english_gloss", sa.Text(), nullable=False, server_default=""),
        sa.Column("secondary_gloss", sa.Text(), nullable=False, server_default=""),
        sa.Column("stored_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_master_words_stage", "master_words", ["stage"])

    op.create_table(
        "users",
        sa.Column("id", sa.String(length=64), primary_key=True, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("username", sa.String(length=128), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=False, server_default="User"),
        sa.Column("role", sa.String(length=16), nullable=False, server_default="student"),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("allowed_modules", sa.JSON(), nullable=False, server_default=sa.text("'[]'")),
        sa.Column("institute", sa.String(length=255), nullable=True),
        sa.Column("school", sa.String(length=255), nullable=True),
        sa.Column("assigned_teacher_id", sa.String(length=64), nullable=True),
        sa.Column("teacher_notes", sa.Text(), nullable=True),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("phone", sa.String(length=64), nullable=True),
        sa.Column("grade", sa.String(length=64), nullable=True),
        sa.Column("curriculum", sa.String(length=64), nullable=True),
        sa.Column("password", sa.String(length=255), nullable=True),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "test_results",
        sa.Column("id", sa.String(length=64), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("level", sa.String(length=64), nullable=False),
        sa.Column("set_id", sa.String(length=32), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=True),
        sa.Column("speed_gap", sa.String(length=32), nullable=True),
        sa.Column("correct_answers", sa.Integer(), nullable=False),
        sa.Column("total_questions", sa.Integer(), nullable=False),
        sa.Column("score_percentage", sa.Integer(), nullable=False),
        sa.Column("time_taken_seconds", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("raw_answers_snapshot", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("word_scores", sa.JSON(), nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_test_results_user", "test_results", ["user_id"])

    op.create_table(
        "system_config",
        sa.Column("id", sa.String(length=32), primary_key=True, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("payload", sa.JSON(), nullable=False),
    )

    op.create_table(
        "cache_state",
        sa.Column("key", sa.String(length=64), primary_key=True, nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "cache_audit_events",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("event_type", sa.String(length=64), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("actor", sa.String(length=128), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_cache_audit_events_created", "cache_audit_events", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_cache_audit_events_created", table_name="cache_audit_events")
    op.drop_table("cache_audit_events")
    op.drop_table("cache_state")
    op.drop_table("system_config")
    op.drop_index("ix_test_results_user", table_name="test_results")
    op.drop_table("test_results")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")
    op.drop_index("ix_master_words_stage", table_name="master_words")
    op.drop_table("master_words")
    op.drop_index("ix_questions_level", table_name="questions")
    op.drop_table("questions")
