"""Read spreadsheet (CSV) exports into raw ledger rows."""

from __future__ import annotations

import csv
import io
import logging
from typing import TYPE_CHECKING

from pointledger.domain.errors import MalformedInputError
from pointledger.domain.validation import REQUIRED_COLUMNS

from .schema import LedgerExportRecord

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path
    from typing import TextIO

    from pointledger.domain.validation import RawRow

log = logging.getLogger(__name__)

# Excel writes a BOM in front of the first header
CSV_ENCODING = "utf-8-sig"


def _normalise_header(name: str) -> str:
    return " ".join(name.split()).upper()


def iter_raw_rows(handle: TextIO) -> Iterator[RawRow]:
    """Yield one ``RawRow`` per data line of ``handle``; blank lines are skipped.

    Line numbers count the header as line 1.
    """

    reader = csv.DictReader(handle, skipinitialspace=True)
    try:
        if not reader.fieldnames:
            raise MalformedInputError("Input has no header row")
        missing = set(REQUIRED_COLUMNS) - {_normalise_header(name) for name in reader.fieldnames}
        if missing:
            log.warning("Input is missing required columns: %s", ", ".join(sorted(missing)))

        for record in reader:
            cells = {
                _normalise_header(key): value
                for key, value in record.items()
                if isinstance(key, str)
            }
            if not any(isinstance(value, str) and value.strip() for value in cells.values()):
                continue
            parsed = LedgerExportRecord.model_validate(cells)
            yield parsed.to_raw_row(line_number=reader.line_num)
    except csv.Error as exc:
        raise MalformedInputError(f"Could not parse CSV near line {reader.line_num}") from exc


def parse_raw_rows(text: str) -> list[RawRow]:
    """Parse CSV ``text`` (header row first) into raw rows."""

    return list(iter_raw_rows(io.StringIO(text, newline="")))


def read_raw_rows(path: Path) -> list[RawRow]:
    """Read the CSV file at ``path`` into raw rows."""

    try:
        with path.open(encoding=CSV_ENCODING, newline="") as handle:
            rows = list(iter_raw_rows(handle))
    except UnicodeDecodeError as exc:
        raise MalformedInputError(f"{path} is not UTF-8 text") from exc
    log.info("Read %s rows from %s", len(rows), path)
    return rows
