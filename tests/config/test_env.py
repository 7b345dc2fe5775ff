from __future__ import annotations

import pytest

from pointledger.config import (
    DEFAULT_PAGE_SIZE,
    ConfigurationError,
    get_ledger_config,
    optional_positive_int,
)


def test_optional_positive_int_uses_default_when_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("EXAMPLE_SIZE", raising=False)

    assert optional_positive_int("EXAMPLE_SIZE", 7) == 7


@pytest.mark.parametrize("raw", ["zero", "0", "-3"])
def test_optional_positive_int_rejects_bad_values(
    monkeypatch: pytest.MonkeyPatch, raw: str
) -> None:
    monkeypatch.setenv("EXAMPLE_SIZE", raw)

    with pytest.raises(ConfigurationError):
        optional_positive_int("EXAMPLE_SIZE", 7)


def test_ledger_config_reads_page_size(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LEDGER_PAGE_SIZE", "25")

    assert get_ledger_config().page_size == 25


def test_ledger_config_defaults_page_size(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("LEDGER_PAGE_SIZE", raising=False)

    assert get_ledger_config().page_size == DEFAULT_PAGE_SIZE
