"""create projects timesheets time_entries

Revision ID: 3b1f6c2a9d10
Revises:
Create Date: 2026-09-01 09:12:44.118203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3b1f6c2a9d10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "projects",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("hourly_rate", sa.Numeric(10, 2), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.current_timestamp()),
        sa.CheckConstraint("hourly_rate IS NULL OR hourly_rate >= 0", name="ck_projects_hourly_rate_nonnegative"),
    )
    op.create_index("ix_projects_name", "projects", ["name"], unique=False)

    op.create_table(
        "timesheets",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("project_id", sa.String(), nullable=False),
        sa.Column("period_start", sa.Date(), nullable=False),
        sa.Column("period_end", sa.Date(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="DRAFT"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.current_timestamp()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.current_timestamp()),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"]),
        sa.UniqueConstraint("project_id", "period_start", "period_end", name="uq_timesheet_project_period"),
        sa.CheckConstraint("period_end >= period_start", name="ck_timesheets_period_end_after_start"),
        sa.CheckConstraint("status in ('DRAFT','APPROVED','LOCKED')", name="ck_timesheets_status_valid"),
    )
    op.create_index("ix_timesheets_project_id", "timesheets", ["project_id"], unique=False)
    op.create_index("ix_timesheets_status", "timesheets", ["status"], unique=False)

    op.create_table(
        "time_entries",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("timesheet_id", sa.String(), nullable=False),
        sa.Column("entry_date", sa.Date(), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=True),
        sa.Column("hours", sa.Numeric(10, 2), nullable=False),
        sa.Column("rate_at_entry", sa.Numeric(10, 2), nullable=True),
        sa.Column("cost_at_entry", sa.Numeric(12, 2), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.current_timestamp()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.current_timestamp()),
        sa.ForeignKeyConstraint(["timesheet_id"], ["timesheets.id"], ondelete="CASCADE"),
        sa.CheckConstraint("hours > 0", name="ck_time_entries_hours_positive"),
    )
    op.create_index("ix_time_entries_timesheet_id", "time_entries", ["timesheet_id"], unique=False)
    op.create_index(
        "ix_time_entries_natural_key",
        "time_entries",
        ["timesheet_id", "entry_date", "description"],
        unique=False,
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_time_entries_natural_key", table_name="time_entries")
    op.drop_index("ix_time_entries_timesheet_id", table_name="time_entries")
    op.drop_table("time_entries")

    op.drop_index("ix_timesheets_status", table_name="timesheets")
    op.drop_index("ix_timesheets_project_id", table_name="timesheets")
    op.drop_table("timesheets")

    op.drop_index("ix_projects_name", table_name="projects")
    op.drop_table("projects")
