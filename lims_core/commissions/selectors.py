# lims_core/commissions/selectors.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from django.db.models import QuerySet, Sum

from lims_core.commissions.models import CommissionLedger
from lims_core.common.money import ZERO, money, non_negative_due


@dataclass(frozen=True)
class DoctorCommissionRow:
    doctor_id: int
    doctor_name: str
    total_bill: Decimal
    total_commission: Decimal
    total_paid: Decimal
    total_due: Decimal


@dataclass(frozen=True)
class CommissionTotals:
    total_commission: Decimal
    total_paid: Decimal
    total_due: Decimal


def commission_entries(
    *,
    date_from: date,
    date_to: date,
    doctor_id: int | None = None,
    status: str | None = None,
) -> QuerySet[CommissionLedger]:
    qs = (
        CommissionLedger.objects.filter(transaction_date__range=(date_from, date_to))
        .select_related("doctor", "order")
        .order_by("-transaction_date", "-id")
    )
    if doctor_id:
        qs = qs.filter(doctor_id=doctor_id)
    if status:
        qs = qs.filter(status=status)
    return qs


def _doctor_groups(*, date_from: date, date_to: date, doctor_id: int | None) -> list[DoctorCommissionRow]:
    grouped = (
        commission_entries(date_from=date_from, date_to=date_to, doctor_id=doctor_id)
        .order_by()
        .values("doctor_id", "doctor__name")
        .annotate(
            total_bill=Sum("order__total_amount"),
            total_commission=Sum("calculated_amount"),
            total_paid=Sum("paid_amount"),
        )
        .order_by("doctor__name", "doctor_id")
    )

    rows: list[DoctorCommissionRow] = []
    for g in grouped:
        commission = money(g["total_commission"] or ZERO)
        paid = money(g["total_paid"] or ZERO)
        rows.append(
            DoctorCommissionRow(
                doctor_id=g["doctor_id"],
                doctor_name=g["doctor__name"],
                total_bill=money(g["total_bill"] or ZERO),
                total_commission=commission,
                total_paid=paid,
                total_due=non_negative_due(commission, paid),
            )
        )
    return rows


def summarize_by_doctor(
    *,
    date_from: date,
    date_to: date,
    doctor_id: int | None = None,
) -> list[DoctorCommissionRow]:
    """
    Per-doctor bill/commission/paid/due over entries whose transaction date
    falls in [date_from, date_to]. Doctors whose commission sums to zero are
    left out of the rows.
    """
    return [
        row
        for row in _doctor_groups(date_from=date_from, date_to=date_to, doctor_id=doctor_id)
        if row.total_commission > ZERO
    ]


def commission_totals(
    *,
    date_from: date,
    date_to: date,
    doctor_id: int | None = None,
) -> CommissionTotals:
    """Grand totals across every doctor in range, including ones hidden from the rows."""
    rows = _doctor_groups(date_from=date_from, date_to=date_to, doctor_id=doctor_id)
    return CommissionTotals(
        total_commission=sum((r.total_commission for r in rows), ZERO),
        total_paid=sum((r.total_paid for r in rows), ZERO),
        total_due=sum((r.total_due for r in rows), ZERO),
    )
