"""Spreadsheet export adapter."""

from __future__ import annotations

from .reader import iter_raw_rows, parse_raw_rows, read_raw_rows
from .schema import LedgerExportRecord

__all__ = ["LedgerExportRecord", "iter_raw_rows", "parse_raw_rows", "read_raw_rows"]
