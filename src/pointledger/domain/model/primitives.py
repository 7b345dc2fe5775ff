"""Domain primitives: scalar aliases + points arithmetic.

Points are exact decimals kept at one decimal place. Every mutation of a
balance goes through ``round_points`` so sums never drift.

Balances are stored as signed 64-bit counts of tenths, which bounds every
points value to ``[MIN_POINTS, MAX_POINTS]``.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Final

from pointledger.domain.errors import InvalidAmount

type CustomerCode = int

POINTS_QUANTUM: Final[Decimal] = Decimal("0.1")
WEIGHT_PER_POINT: Final[Decimal] = Decimal(10)
ZERO_POINTS: Final[Decimal] = Decimal("0.0")
MAX_CUSTOMER_CODE: Final[int] = 2**63 - 1

MAX_POINTS: Final[Decimal] = Decimal(2**63 - 1).scaleb(-1)
MIN_POINTS: Final[Decimal] = Decimal(-(2**63)).scaleb(-1)
MAX_NET_WEIGHT: Final[Decimal] = MAX_POINTS * WEIGHT_PER_POINT


def round_points(value: Decimal) -> Decimal:
    """Round ``value`` half-up to one decimal place."""

    try:
        return value.quantize(POINTS_QUANTUM, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise InvalidAmount(f"Points value {value} is out of range") from exc


def points_for_weight(net_weight: Decimal) -> Decimal:
    """Points earned for a purchase of ``net_weight`` (one point per ten units)."""

    return round_points(net_weight / WEIGHT_PER_POINT)
