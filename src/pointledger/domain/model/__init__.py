"""Public domain model surface."""

from __future__ import annotations

from pointledger.domain.model.ledger import CONTACT_FIELDS, ContactUpdate, LedgerRow
from pointledger.domain.model.primitives import (
    MAX_CUSTOMER_CODE,
    MAX_NET_WEIGHT,
    MAX_POINTS,
    MIN_POINTS,
    POINTS_QUANTUM,
    WEIGHT_PER_POINT,
    ZERO_POINTS,
    CustomerCode,
    points_for_weight,
    round_points,
)

__all__ = [
    "CONTACT_FIELDS",
    "MAX_CUSTOMER_CODE",
    "MAX_NET_WEIGHT",
    "MAX_POINTS",
    "MIN_POINTS",
    "POINTS_QUANTUM",
    "WEIGHT_PER_POINT",
    "ZERO_POINTS",
    "ContactUpdate",
    "CustomerCode",
    "LedgerRow",
    "points_for_weight",
    "round_points",
]
