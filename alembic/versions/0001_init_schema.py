"""init schema

Revision ID: 0001_init_schema
Revises:
Create Date: 2026-10-19
"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa


revision: str = "0001_init_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "sheet_rows",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("sheet", sa.String(length=32), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("record_id", sa.String(length=64), nullable=True),
        sa.Column("cells", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("sheet", "record_id", name="uq_sheet_rows_sheet_record_id"),
    )
    op.create_index("ix_sheet_rows_sheet", "sheet_rows", ["sheet"], unique=False)
    op.create_index("ix_sheet_rows_record_id", "sheet_rows", ["record_id"], unique=False)
    op.create_index("ix_sheet_rows_sheet_position", "sheet_rows", ["sheet", "position"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_sheet_rows_sheet_position", table_name="sheet_rows")
    op.drop_index("ix_sheet_rows_record_id", table_name="sheet_rows")
    op.drop_index("ix_sheet_rows_sheet", table_name="sheet_rows")
    op.drop_table("sheet_rows")
