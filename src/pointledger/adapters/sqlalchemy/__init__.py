"""SQLAlchemy adapter package for pointledger."""

from __future__ import annotations

from .mappings import (
    COLUMN_BY_LEDGER_COLUMN,
    PointsType,
    ledger_row_table,
    mapper_registry,
    start_mappers,
)
from .repositories import SqlAlchemyLedgerRepository

__all__ = [
    "COLUMN_BY_LEDGER_COLUMN",
    "PointsType",
    "SqlAlchemyLedgerRepository",
    "ledger_row_table",
    "mapper_registry",
    "start_mappers",
]
