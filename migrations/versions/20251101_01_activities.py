"""Activities table read by the motivation service."""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "20251101_01"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "activities",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("activity_date", sa.DateTime(), nullable=False),
        sa.Column("activity_type", sa.String(length=20), nullable=False),
        sa.Column("duration", sa.String(length=64), nullable=True),
        sa.Column("distance_meters", sa.Float(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    )
    op.create_index(
        "ix_activities_user_date",
        "activities",
        ["user_id", "activity_date"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_activities_user_date", table_name="activities")
    op.drop_table("activities")
