"""Create the ledger_row table.

Revision ID: 0001_create_ledger_row
Revises:
Create Date: 2024-12-31 00:00:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

from pointledger.adapters.sqlalchemy.mappings import PointsType

revision = "0001_create_ledger_row"
down_revision = None
branch_labels = None
depends_on = None

_TEXT_COLUMNS = (
    "address1",
    "address2",
    "address3",
    "address4",
    "pin_code",
    "phone",
    "mobile",
)
_POINTS_COLUMNS = ("total_points", "claimed_points", "unclaimed_points")


def upgrade() -> None:
    op.create_table(
        "ledger_row",
        sa.Column("customer_code", sa.BigInteger(), autoincrement=False, nullable=False),
        sa.Column("serial_number", sa.Integer(), nullable=True),
        *(
            sa.Column(name, sa.String(), nullable=False, server_default="")
            for name in _TEXT_COLUMNS
        ),
        *(
            sa.Column(name, PointsType(), nullable=False, server_default="0")
            for name in _POINTS_COLUMNS
        ),
        sa.Column("last_sales_date", sa.Date(), nullable=True),
        sa.PrimaryKeyConstraint("customer_code", name=op.f("pk_ledger_row")),
    )
    for name in ("total_points", "unclaimed_points", "last_sales_date"):
        op.create_index(op.f(f"ix_ledger_row_{name}"), "ledger_row", [name], unique=False)


def downgrade() -> None:
    for name in ("last_sales_date", "unclaimed_points", "total_points"):
        op.drop_index(op.f(f"ix_ledger_row_{name}"), table_name="ledger_row")
    op.drop_table("ledger_row")
