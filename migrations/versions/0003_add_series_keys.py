"""add series id and instance date key"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "0003_add_series_keys"
down_revision = "0002_add_recurrence"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column("tasks", sa.Column("series_id", sa.String(length=64), nullable=True))
    op.add_column("tasks", sa.Column("date_key", sa.String(length=10), nullable=True))
    op.create_index("ix_tasks_series_date_key", "tasks", ["series_id", "date_key"], unique=False)
    op.create_unique_constraint("uq_tasks_series_date_key", "tasks", ["series_id", "date_key"])


def downgrade() -> None:
    op.drop_constraint("uq_tasks_series_date_key", "tasks", type_="unique")
    op.drop_index("ix_tasks_series_date_key", table_name="tasks")
    op.drop_column("tasks", "date_key")
    op.drop_column("tasks", "series_id")
