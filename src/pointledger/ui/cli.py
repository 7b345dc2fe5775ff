from __future__ import annotations

# ruff: noqa: T201

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from pointledger.app import (
    accrue_weight,
    claim_points,
    correct_points,
    delete_customer,
    edit_customer,
    import_ledger_file,
    list_ledger,
    show_customer,
)
from pointledger.config import configure_logging
from pointledger.domain.model import ContactUpdate
from pointledger.domain.query import FilterSpec
from pointledger.domain.validation import parse_filter_date

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import date
    from types import FrameType

    from pointledger.domain.ledger_import import ImportBatch
    from pointledger.domain.ledger_operations import LedgerPage
    from pointledger.domain.model import LedgerRow

log = logging.getLogger(__name__)

TABLE_HEADERS = (
    "CUSTOMER CODE",
    "ADDRESS1",
    "ADDRESS2",
    "ADDRESS3",
    "ADDRESS4",
    "MOBILE",
    "TOTAL POINTS",
    "CLAIMED POINTS",
    "UNCLAIMED POINTS",
    "LAST SALES DATE",
)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Manage the customer points ledger")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    import_ = subparsers.add_parser("import", help="Import a CSV export of purchases")
    import_.add_argument("path", type=Path, help="CSV file with a header row")

    listing = subparsers.add_parser("list", help="List ledger rows matching filters")
    listing.add_argument("--customer-code", help="Exact code, or a fragment of one")
    listing.add_argument("--address", help="Substring of ADDRESS1 (case-insensitive)")
    listing.add_argument("--mobile", help="Substring of the mobile number")
    listing.add_argument("--total-min", help="Minimum total points (inclusive)")
    listing.add_argument("--total-max", help="Maximum total points (inclusive)")
    listing.add_argument("--unclaimed-min", help="Minimum unclaimed points (inclusive)")
    listing.add_argument("--unclaimed-max", help="Maximum unclaimed points (inclusive)")
    listing.add_argument("--from-date", help="Earliest last sales date (YYYY-MM-DD)")
    listing.add_argument("--to-date", help="Latest last sales date (YYYY-MM-DD)")
    listing.add_argument("--sort-by", help="Column to sort by (default: customer code)")
    listing.add_argument("--order", help="asc or desc (default: asc)")
    listing.add_argument("--page", type=int, default=1, help="Page number (default: 1)")
    listing.add_argument(
        "--page-size",
        type=int,
        default=None,
        help="Rows per page (defaults to LEDGER_PAGE_SIZE)",
    )

    show = subparsers.add_parser("show", help="Show one customer")
    show.add_argument("customer_code", type=int)

    claim = subparsers.add_parser("claim", help="Claim points for a customer")
    claim.add_argument("customer_code", type=int)
    claim.add_argument("amount", help="Points to move from unclaimed to claimed")

    accrue = subparsers.add_parser("accrue", help="Record a purchase by net weight")
    accrue.add_argument("customer_code", type=int)
    accrue.add_argument("net_weight", help="Purchase weight; ten units earn one point")
    accrue.add_argument("--date", help="Sales date (dd-mm-yyyy or YYYY-MM-DD)")

    correct = subparsers.add_parser("correct", help="Correct a customer's point balance")
    correct.add_argument("customer_code", type=int)
    correct.add_argument("--total", required=True, help="Corrected total points")
    correct.add_argument("--claimed", help="Corrected claimed points (default: unchanged)")

    edit = subparsers.add_parser("edit", help="Edit a customer's contact details")
    edit.add_argument("customer_code", type=int)
    edit.add_argument("--serial-number", type=int)
    for name in ("address1", "address2", "address3", "address4", "pin-code", "phone", "mobile"):
        edit.add_argument(f"--{name}")

    delete = subparsers.add_parser("delete", help="Delete a customer permanently")
    delete.add_argument("customer_code", type=int)

    return parser.parse_args(list(argv))


def _parse_date(value: str | None) -> date | None:
    if value is None:
        return None
    parsed = parse_filter_date(value)
    if parsed is None:
        raise ValueError(f"Invalid date: {value}")
    return parsed


def _filter_spec(args: argparse.Namespace) -> FilterSpec:
    return FilterSpec(
        customer_code=args.customer_code,
        address=args.address,
        mobile=args.mobile,
        total_points_min=args.total_min,
        total_points_max=args.total_max,
        unclaimed_points_min=args.unclaimed_min,
        unclaimed_points_max=args.unclaimed_max,
        last_sales_from=args.from_date,
        last_sales_to=args.to_date,
        sort_by=args.sort_by,
        sort_direction=args.order,
        page=args.page,
    )


def _contact_update(args: argparse.Namespace) -> ContactUpdate:
    return ContactUpdate(
        serial_number=args.serial_number,
        address1=args.address1,
        address2=args.address2,
        address3=args.address3,
        address4=args.address4,
        pin_code=args.pin_code,
        phone=args.phone,
        mobile=args.mobile,
    )


def _row_cells(row: LedgerRow) -> tuple[str, ...]:
    return (
        str(row.customer_code),
        row.address1,
        row.address2,
        row.address3,
        row.address4,
        row.mobile,
        f"{row.total_points:.1f}",
        f"{row.claimed_points:.1f}",
        f"{row.unclaimed_points:.1f}",
        row.last_sales_date.isoformat() if row.last_sales_date else "",
    )


def _print_rows(rows: Sequence[LedgerRow]) -> None:
    print("\t".join(TABLE_HEADERS))
    for row in rows:
        print("\t".join(_row_cells(row)))


def _print_page(page: LedgerPage) -> None:
    if page.rows:
        _print_rows(page.rows)
    else:
        print("No data available")
    state = page.state
    print(f"Total Records: {state.total_count}  Page {state.page} of {state.total_pages}")


def _report_import(batch: ImportBatch) -> None:
    for rejection in batch.rejected:
        log.warning("Skipped %s", rejection)
    print(
        f"Accepted: {batch.accepted_count}  Rejected: {batch.rejected_count}  "
        f"Customers changed: {batch.rows_changed}"
    )


def _run(args: argparse.Namespace) -> int:
    if args.command == "import":
        batch = import_ledger_file(args.path)
        _report_import(batch)
        return 0 if batch.persisted else 1
    if args.command == "list":
        _print_page(list_ledger(_filter_spec(args), page_size=args.page_size))
    elif args.command == "show":
        _print_rows([show_customer(args.customer_code)])
    elif args.command == "claim":
        _print_rows([claim_points(args.customer_code, args.amount)])
    elif args.command == "accrue":
        batch = accrue_weight(
            args.customer_code,
            args.net_weight,
            sales_date=_parse_date(args.date),
        )
        _print_rows([item.row for item in batch.merged])
    elif args.command == "correct":
        row = correct_points(
            args.customer_code,
            total_points=args.total,
            claimed_points=args.claimed,
        )
        _print_rows([row])
    elif args.command == "edit":
        _print_rows([edit_customer(args.customer_code, _contact_update(args))])
    elif args.command == "delete":
        delete_customer(args.customer_code)
        print(f"Deleted customer {args.customer_code}")
    else:
        raise ValueError(f"Unsupported command: {args.command}")
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        status = _run(parsed_args)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)
    except Exception:
        log.exception("Ledger operation failed")
        sys.exit(1)
    if status:
        sys.exit(status)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console-script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
