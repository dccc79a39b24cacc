# lims_core/lab/flagging.py
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

LOW = "LOW"
HIGH = "HIGH"
NORMAL = "Normal"


@dataclass(frozen=True)
class Flag:
    is_abnormal: bool
    remark: str


UNFLAGGED = Flag(is_abnormal=False, remark="")


def parse_numeric(raw: str) -> Decimal | None:
    try:
        value = Decimal(raw.strip())
    except (InvalidOperation, ValueError, AttributeError):
        return None
    return value if value.is_finite() else None


def evaluate_result(raw: str, min_range: Decimal | None, max_range: Decimal | None) -> Flag:
    """
    Numeric value with both bounds -> LOW / HIGH / Normal.
    Qualitative values ("positive", "reactive") and tests without a full
    range are never auto-flagged.
    """
    if min_range is None or max_range is None:
        return UNFLAGGED

    value = parse_numeric(raw)
    if value is None:
        return UNFLAGGED

    if value < min_range:
        return Flag(is_abnormal=True, remark=LOW)
    if value > max_range:
        return Flag(is_abnormal=True, remark=HIGH)
    return Flag(is_abnormal=False, remark=NORMAL)
