from __future__ import annotations

from pathlib import Path  # noqa: TC003

import pytest

from pointledger.adapters.spreadsheet import LedgerExportRecord, parse_raw_rows, read_raw_rows
from pointledger.domain.errors import MalformedInputError

EXPORT = """\
SL NO,Customer Code,NET  WEIGHT,ADDRESS1,PIN CODE,MOBILE,LAST SALES DATE,REMARKS
1,101,25.0,12 Market Road,600001,9876543210,31-12-2024,gold
2,abc,10,,,,,

3,102, 40 ,,,,,
"""


def test_parse_raw_rows_normalises_headers_and_skips_blank_lines() -> None:
    rows = parse_raw_rows(EXPORT)

    assert len(rows) == 3
    first = rows[0]
    assert first.get("CUSTOMER CODE") == "101"
    assert first.get("NET WEIGHT") == "25.0"
    assert first.get("ADDRESS1") == "12 Market Road"
    assert first.get("LAST SALES DATE") == "31-12-2024"
    assert first.get("REMARKS") == ""
    assert first.line_number == 2
    assert rows[2].get("NET WEIGHT") == "40"
    assert rows[2].line_number == 5


def test_blank_cells_are_dropped_from_fields() -> None:
    rows = parse_raw_rows(EXPORT)

    assert "ADDRESS1" not in rows[1].fields
    assert rows[1].get("CUSTOMER CODE") == "abc"


def test_input_without_header_is_malformed() -> None:
    with pytest.raises(MalformedInputError):
        parse_raw_rows("")


def test_missing_required_column_still_yields_rows(caplog: pytest.LogCaptureFixture) -> None:
    rows = parse_raw_rows("CUSTOMER CODE,MOBILE\n7,123\n")

    assert rows[0].get("NET WEIGHT") == ""
    assert "NET WEIGHT" in caplog.text


def test_read_raw_rows_handles_excel_bom(tmp_path: Path) -> None:
    path = tmp_path / "export.csv"
    path.write_bytes("\ufeffCUSTOMER CODE,NET WEIGHT\n9,12.5\n".encode())

    rows = read_raw_rows(path)

    assert rows[0].get("CUSTOMER CODE") == "9"


def test_read_raw_rows_rejects_non_utf8(tmp_path: Path) -> None:
    path = tmp_path / "export.csv"
    path.write_bytes(b"CUSTOMER CODE,NET WEIGHT\n\xff\xfe,1\n")

    with pytest.raises(MalformedInputError):
        read_raw_rows(path)


def test_export_record_accepts_numeric_cells() -> None:
    record = LedgerExportRecord.model_validate({"CUSTOMER CODE": 101, "NET WEIGHT": 2.5})

    assert record.customer_code == "101"
    assert record.net_weight == "2.5"
    assert record.to_raw_row().fields == {"CUSTOMER CODE": "101", "NET WEIGHT": "2.5"}
