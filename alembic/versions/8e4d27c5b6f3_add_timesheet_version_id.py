"""add timesheet version_id for optimistic locking

Revision ID: 8e4d27c5b6f3
Revises: 3b1f6c2a9d10
Create Date: 2026-09-08

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "8e4d27c5b6f3"
down_revision: Union[str, Sequence[str], None] = "3b1f6c2a9d10"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Existing rows start at version 1; the ORM bumps it on every timesheet UPDATE.
    with op.batch_alter_table("timesheets") as batch_op:
        batch_op.add_column(
            sa.Column("version_id", sa.Integer(), nullable=False, server_default="1"),
        )


def downgrade() -> None:
    with op.batch_alter_table("timesheets") as batch_op:
        batch_op.drop_column("version_id")
