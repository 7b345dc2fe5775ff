from __future__ import annotations

from datetime import date
from decimal import Decimal

from pointledger.domain.model import LedgerRow
from pointledger.domain.reconciliation import (
    MergeAction,
    SnapshotEntry,
    reconcile,
    split_by_action,
)


def _accrual(code: int, points: str, **fields: object) -> LedgerRow:
    return LedgerRow.accrual(customer_code=code, points=Decimal(points), **fields)  # type: ignore[arg-type]


def test_new_customer_becomes_insert_with_zero_claimed() -> None:
    merged = reconcile([_accrual(101, "2.5")], {})

    assert len(merged) == 1
    item = merged[0]
    assert item.action is MergeAction.INSERT
    assert item.row.total_points == Decimal("2.5")
    assert item.row.unclaimed_points == Decimal("2.5")
    assert item.row.claimed_points == Decimal("0.0")


def test_existing_customer_adds_onto_snapshot() -> None:
    snapshot = {101: SnapshotEntry(total_points=Decimal("10.0"), unclaimed_points=Decimal("4.0"))}

    merged = reconcile([_accrual(101, "2.0")], snapshot)

    item = merged[0]
    assert item.action is MergeAction.INCREMENT
    assert item.row.total_points == Decimal("12.0")
    assert item.row.unclaimed_points == Decimal("6.0")
    assert item.row.claimed_points == Decimal("6.0")
    assert item.accrued_total == Decimal("2.0")
    assert item.accrued_unclaimed == Decimal("2.0")


def test_duplicate_keys_fold_into_running_total() -> None:
    snapshot = {7: SnapshotEntry(total_points=Decimal("1.0"), unclaimed_points=Decimal("1.0"))}
    rows = [_accrual(7, "0.5"), _accrual(8, "3.0"), _accrual(7, "0.7"), _accrual(8, "0.1")]

    merged = reconcile(rows, snapshot)

    by_code = {item.customer_code: item for item in merged}
    assert [item.customer_code for item in merged] == [7, 8]
    assert by_code[7].row.total_points == Decimal("2.2")
    assert by_code[7].accrued_total == Decimal("1.2")
    assert by_code[7].occurrences == 2
    assert by_code[8].action is MergeAction.INSERT
    assert by_code[8].row.total_points == Decimal("3.1")
    assert by_code[8].accrued_unclaimed == Decimal("3.1")


def test_balance_invariant_holds_for_every_merged_row() -> None:
    snapshot = {
        1: SnapshotEntry(total_points=Decimal("9.9"), unclaimed_points=Decimal("0.3")),
        2: SnapshotEntry(total_points=Decimal("0.0"), unclaimed_points=Decimal("0.0")),
    }
    rows = [_accrual(1, "0.1"), _accrual(2, "4.4"), _accrual(3, "1.0"), _accrual(1, "2.6")]

    merged = reconcile(rows, snapshot)

    assert all(item.row.balance_is_consistent for item in merged)


def test_repeating_a_batch_keeps_accruing() -> None:
    rows = [_accrual(101, "2.0")]
    first = reconcile(rows, {})[0]
    snapshot = {
        101: SnapshotEntry(
            total_points=first.row.total_points,
            unclaimed_points=first.row.unclaimed_points,
        )
    }

    second = reconcile(rows, snapshot)[0]

    assert second.row.total_points > first.row.total_points
    assert second.row.total_points == Decimal("4.0")


def test_later_non_empty_contact_and_latest_date_win() -> None:
    rows = [
        _accrual(5, "1.0", address1="Old Street", mobile="111", last_sales_date=date(2024, 5, 1)),
        _accrual(5, "1.0", address1="", mobile="222", last_sales_date=date(2024, 3, 1)),
        _accrual(5, "1.0", address1="New Street", serial_number=9),
    ]

    merged = reconcile(rows, {})[0]

    assert merged.row.address1 == "New Street"
    assert merged.row.mobile == "222"
    assert merged.row.serial_number == 9
    assert merged.row.last_sales_date == date(2024, 5, 1)


def test_reconcile_does_not_mutate_inputs() -> None:
    row = _accrual(3, "1.5")
    snapshot = {3: SnapshotEntry(total_points=Decimal("2.0"), unclaimed_points=Decimal("2.0"))}

    reconcile([row, row], snapshot)

    assert row.total_points == Decimal("1.5")
    assert snapshot[3].total_points == Decimal("2.0")


def test_split_by_action_partitions_in_order() -> None:
    snapshot = {2: SnapshotEntry(total_points=Decimal("1.0"), unclaimed_points=Decimal("1.0"))}
    merged = reconcile([_accrual(1, "1.0"), _accrual(2, "1.0"), _accrual(3, "1.0")], snapshot)

    inserts, increments = split_by_action(merged)

    assert [item.customer_code for item in inserts] == [1, 3]
    assert [item.customer_code for item in increments] == [2]
