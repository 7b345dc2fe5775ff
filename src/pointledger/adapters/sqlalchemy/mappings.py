"""SQLAlchemy mapping metadata for the ledger domain model."""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from functools import cache
from typing import Final

from sqlalchemy import (
    BigInteger,
    Column,
    Date,
    Dialect,
    Index,
    Integer,
    String,
    Table,
    TypeDecorator,
    orm,
)

from pointledger.domain.model import POINTS_QUANTUM, LedgerRow
from pointledger.domain.query import LedgerColumn

log = logging.getLogger(__name__)

TENTHS_PER_POINT: Final[Decimal] = Decimal(1) / POINTS_QUANTUM


class PointsType(TypeDecorator[Decimal]):
    """Exact one-decimal points stored as integer tenths.

    Integer storage keeps ``col + :delta`` and ``col >= :amount`` exact on every
    backend, SQLite included.
    """

    impl = BigInteger
    cache_ok = True

    def process_bind_param(self, value: Decimal | int | None, dialect: Dialect) -> int | None:
        _ = dialect
        if value is None:
            return None
        tenths = (Decimal(value) * TENTHS_PER_POINT).to_integral_value(rounding=ROUND_HALF_UP)
        return int(tenths)

    def process_result_value(self, value: int | None, dialect: Dialect) -> Decimal | None:
        _ = dialect
        if value is None:
            return None
        return Decimal(int(value)).scaleb(-1)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def _text_column(name: str) -> Column[str]:
    return Column(name, String, nullable=False, default="", server_default="")


def _points_column(name: str) -> Column[Decimal]:
    return Column(name, PointsType(), nullable=False, default=Decimal(0), server_default="0")


ledger_row_table = Table(
    "ledger_row",
    mapper_registry.metadata,
    Column("customer_code", BigInteger, primary_key=True, autoincrement=False),
    Column("serial_number", Integer, nullable=True),
    _text_column("address1"),
    _text_column("address2"),
    _text_column("address3"),
    _text_column("address4"),
    _text_column("pin_code"),
    _text_column("phone"),
    _text_column("mobile"),
    _points_column("total_points"),
    _points_column("claimed_points"),
    _points_column("unclaimed_points"),
    Column("last_sales_date", Date, nullable=True),
    Index(None, "total_points"),
    Index(None, "unclaimed_points"),
    Index(None, "last_sales_date"),
)

COLUMN_BY_LEDGER_COLUMN: Final[dict[LedgerColumn, Column[object]]] = {
    column: ledger_row_table.c[column.value] for column in LedgerColumn
}


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")
    mapper_registry.map_imperatively(LedgerRow, ledger_row_table)
    return mapper_registry
