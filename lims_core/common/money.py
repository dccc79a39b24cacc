# lims_core/common/money.py
from __future__ import annotations

from decimal import Decimal, InvalidOperation

from rest_framework.exceptions import ValidationError

ZERO = Decimal("0.00")
CENT = Decimal("0.01")
HUNDRED = Decimal("100")


def to_decimal(value, field_name: str) -> Decimal:
    """
    Accepts Decimal / str / int / float and converts to Decimal safely.
    Raises ValidationError for invalid values.
    """
    if value is None:
        raise ValidationError({field_name: "This field is required."})
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            # str() handles int/float/str uniformly
            result = Decimal(str(value))
        except (InvalidOperation, ValueError, TypeError):
            raise ValidationError({field_name: "Invalid decimal value."})
    if not result.is_finite():
        raise ValidationError({field_name: "Invalid decimal value."})
    return result


def money(value) -> Decimal:
    return (value if isinstance(value, Decimal) else Decimal(str(value or 0))).quantize(CENT)


def non_negative_due(total, paid) -> Decimal:
    """Amount still owed; an overpayment never shows up as negative due."""
    return max(ZERO, money(total) - money(paid))
