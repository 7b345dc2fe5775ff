"""Ledger defaults for import and query services."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_positive_int

DEFAULT_PAGE_SIZE = 10


@dataclass(frozen=True, slots=True)
class LedgerConfig:
    page_size: int = DEFAULT_PAGE_SIZE


def get_ledger_config() -> LedgerConfig:
    return LedgerConfig(page_size=optional_positive_int("LEDGER_PAGE_SIZE", DEFAULT_PAGE_SIZE))
