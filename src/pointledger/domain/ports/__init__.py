"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import LedgerRepository, LedgerStore
from .unit_of_work import (
    LedgerRepositories,
    LedgerUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "LedgerRepositories",
    "LedgerRepository",
    "LedgerStore",
    "LedgerUnitOfWork",
    "RepositoryCollection",
    "UnitOfWork",
]
