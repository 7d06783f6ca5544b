"""
orderdesk.decimals

Sign predicates for `Decimal` amounts (prices, rates, quantities).
"""

from __future__ import annotations

from decimal import Decimal

_ZERO = Decimal(0)


def is_positive(value: Decimal) -> bool:
    # Scale-insensitive: Decimal("0.000") is not positive.
    return value > _ZERO
