"""Pydantic model describing one row of a points spreadsheet export."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pointledger.domain.validation import RawRow


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    if isinstance(value, int | float) and not isinstance(value, bool):
        return str(value)
    return value


class SpreadsheetBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


class LedgerExportRecord(SpreadsheetBaseModel):
    """Known columns of the export; anything else in the header is ignored.

    Values stay text here. Typing and rejection happen in domain validation so
    that a bad cell rejects one row instead of failing the parse.
    """

    customer_code: str | None = Field(default=None, alias="CUSTOMER CODE")
    net_weight: str | None = Field(default=None, alias="NET WEIGHT")
    serial_number: str | None = Field(default=None, alias="SL NO")
    address1: str | None = Field(default=None, alias="ADDRESS1")
    address2: str | None = Field(default=None, alias="ADDRESS2")
    address3: str | None = Field(default=None, alias="ADDRESS3")
    address4: str | None = Field(default=None, alias="ADDRESS4")
    pin_code: str | None = Field(default=None, alias="PIN CODE")
    phone: str | None = Field(default=None, alias="PHONE")
    mobile: str | None = Field(default=None, alias="MOBILE")
    last_sales_date: str | None = Field(default=None, alias="LAST SALES DATE")

    _normalize_cells = field_validator("*", mode="before")(_blank_to_none)

    def to_raw_row(self, *, line_number: int | None = None) -> RawRow:
        fields = self.model_dump(by_alias=True, exclude_none=True)
        return RawRow(fields=fields, line_number=line_number)
