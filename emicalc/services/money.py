"""Money / rounding helpers.

Centralized so the loan and rate endpoints use identical rounding semantics.
The amortization engine and `convert` never round; only presentation does.
"""

from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP


def round2(value: float) -> float:
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def round4(value: float) -> float:
    """Rates are displayed with four decimals (``1 USD = 0.9200 EUR``)."""
    return float(
        Decimal(str(value)).quantize(Decimal("0.0001"), rounding=ROUND_HALF_UP)
    )
