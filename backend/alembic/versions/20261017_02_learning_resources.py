"""Locally kept free study resources.

Revision ID: 20261017_02_learning_resources
Revises: 20261017_01_local_cache_schema
Create Date: 2026-10-17 15:30:00.000000
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision = "20261017_02_learning_resources"
down_revision = "20261017_01_local_cache_schema"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "resources",
        sa.Column("id", sa.String(length=64), primary_key=True, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("file_type", sa.String(length=16), nullable=False, server_default="pdf"),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("category", sa.String(length=128), nullable=False, server_default="General"),
        sa.Column("size", sa.String(length=64), nullable=False, server_default="N/A"),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_resources_timestamp", "resources", ["timestamp"])


def downgrade() -> None:
    op.drop_index("ix_resources_timestamp", table_name="resources")
    op.drop_table("resources")
