"""
Schemas
File: numeric.py

Purpose: Decimal helpers shared by pool accounting, payouts and vote tallies.

All currency math runs on Decimal at full precision; values are only
quantized to cents for display.
"""

from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Sequence

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    """
    Coerce a number or numeric string to Decimal.

    Floats go through str() so 0.1 becomes Decimal("0.1") rather than
    its binary expansion.

    Raises:
        ValueError: If the value is not numeric or not finite.
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        raise ValueError(f"Not a numeric amount: {value!r}")
    elif isinstance(value, (int, str)):
        try:
            result = Decimal(value)
        except InvalidOperation as e:
            raise ValueError(f"Not a numeric amount: {value!r}") from e
    elif isinstance(value, float):
        result = Decimal(str(value))
    else:
        raise ValueError(f"Not a numeric amount: {value!r}")

    if not result.is_finite():
        raise ValueError(f"Amount must be finite, got {value!r}")
    return result


def quantize_currency(value: Decimal) -> Decimal:
    """Round to cents (half-up) for display."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def share_pct(part: Decimal, total: Decimal) -> Decimal:
    """Exact percentage of part in total; 0 when total is 0."""
    if total == 0:
        return ZERO
    return part * HUNDRED / total


def whole_percentages(values: Sequence[Decimal], default: Sequence[int]) -> list[int]:
    """
    Split values into whole-number percentages that sum to exactly 100.

    Each share is floored, then the leftover points go to the largest
    values, ties going to the earlier position. A zero total returns
    ``default``.

    Example:
        >>> whole_percentages([Decimal(306), Decimal(694)], default=[50, 50])
        [30, 70]
    """
    total = sum(values, ZERO)
    if total == 0:
        return list(default)

    floors = [
        int(share_pct(v, total).to_integral_value(rounding=ROUND_FLOOR))
        for v in values
    ]
    leftover = 100 - sum(floors)

    order = sorted(range(len(values)), key=lambda i: (values[i], -i), reverse=True)
    for i in order[:leftover]:
        floors[i] += 1
    return floors
