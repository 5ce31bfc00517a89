# backend/lab_core/common/money.py
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from rest_framework.exceptions import ValidationError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value, *, field: str = "amount") -> Decimal:
    """
    Normalize any numeric input to a 2-decimal Decimal.

    None is rejected instead of defaulting to zero: a missing money value is
    an input error, never an implicit 0.
    """
    if value is None:
        raise ValidationError({field: "Amount is required."})
    try:
        d = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError({field: "Invalid decimal value."})
    if not d.is_finite():
        raise ValidationError({field: "Invalid decimal value."})
    return d.quantize(CENT, rounding=ROUND_HALF_UP)


def money_sum(values) -> Decimal:
    return sum((to_money(v) for v in values), ZERO)
