# lims_core/finance/selectors.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable

from django.db.models import QuerySet, Sum
from django.utils import timezone

from lims_core.commissions.models import CommissionLedger, CommissionStatus
from lims_core.common.money import ZERO, money
from lims_core.finance.models import EntryType, Payment
from lims_core.orders.models import Order, OrderStatus
from lims_core.suppliers.models import SupplierLedger

PATIENT_REVENUE = "Patient Revenue"
DOCTOR_COMMISSION = "Doctor Commission"
SUPPLIER = "Supplier"

COMPLETED = "COMPLETED"
PENDING = "PENDING"


@dataclass(frozen=True)
class FinanceTransaction:
    source_id: str
    date: date
    type: str
    category: str
    description: str
    amount: Decimal
    status: str


@dataclass(frozen=True)
class RevenueReport:
    orders: list[Order]
    total_revenue: Decimal
    order_count: int


@dataclass(frozen=True)
class CategorySummary:
    category: str
    type: str
    count: int
    total: Decimal


def list_entries(
    *,
    date_from: date,
    date_to: date,
    type: str | None = None,
    category: str | None = None,
) -> QuerySet[Payment]:
    qs = Payment.objects.filter(transaction_date__range=(date_from, date_to)).order_by("-transaction_date", "-id")
    if type:
        qs = qs.filter(type=type)
    if category:
        qs = qs.filter(category__iexact=category)
    return qs


def _orders_in_range(date_from: date, date_to: date) -> QuerySet[Order]:
    return (
        Order.objects.filter(ordered_at__date__gte=date_from, ordered_at__date__lte=date_to)
        .exclude(status=OrderStatus.CANCELLED)
        .select_related("patient", "doctor")
    )


def revenue_report(*, date_from: date, date_to: date, outstanding_only: bool = False) -> RevenueReport:
    """
    Orders placed in range (cancelled ones excluded). total_revenue is the
    sum of order totals; outstanding_only keeps orders with balance > 0.
    """
    qs = _orders_in_range(date_from, date_to)
    if outstanding_only:
        qs = qs.filter(balance_due__gt=ZERO)

    total = qs.aggregate(s=Sum("total_amount"))["s"] or ZERO
    orders = list(qs.order_by("-ordered_at", "-id"))
    return RevenueReport(orders=orders, total_revenue=money(total), order_count=len(orders))


def finance_transactions(*, date_from: date, date_to: date) -> list[FinanceTransaction]:
    """
    One chronological list across every money source:
      ORD-n  patient revenue (net of discount); PENDING while a balance remains
      COM-n  doctor commission; PENDING until marked paid
      SUP-n  supplier bill; PENDING while a balance remains
      PAY-n  general ledger entry; always COMPLETED
    Newest first.
    """
    rows: list[FinanceTransaction] = []

    for o in _orders_in_range(date_from, date_to):
        rows.append(
            FinanceTransaction(
                source_id=f"ORD-{o.id}",
                date=timezone.localdate(o.ordered_at),
                type=EntryType.INCOME,
                category=PATIENT_REVENUE,
                description=f"Order #{o.id} - {o.patient.full_name}",
                amount=money(o.total_amount - o.discount_amount),
                status=COMPLETED if o.is_fully_paid else PENDING,
            )
        )

    commissions = CommissionLedger.objects.filter(
        transaction_date__range=(date_from, date_to)
    ).select_related("doctor")
    for c in commissions:
        paid = c.status == CommissionStatus.PAID
        rows.append(
            FinanceTransaction(
                source_id=f"COM-{c.id}",
                date=c.transaction_date,
                type=EntryType.EXPENSE,
                category=DOCTOR_COMMISSION,
                description=f"Commission for order #{c.order_id} - {c.doctor.name}",
                amount=money(c.paid_amount if paid else c.calculated_amount),
                status=COMPLETED if paid else PENDING,
            )
        )

    bills = SupplierLedger.objects.filter(transaction_date__range=(date_from, date_to)).select_related("supplier")
    for s in bills:
        label = f"Invoice {s.invoice_number}" if s.invoice_number else "Purchase"
        rows.append(
            FinanceTransaction(
                source_id=f"SUP-{s.id}",
                date=s.transaction_date,
                type=EntryType.EXPENSE,
                category=SUPPLIER,
                description=f"{label} - {s.supplier.name}",
                amount=money(s.bill_amount),
                status=COMPLETED if s.balance_due <= ZERO else PENDING,
            )
        )

    for p in list_entries(date_from=date_from, date_to=date_to):
        rows.append(
            FinanceTransaction(
                source_id=f"PAY-{p.id}",
                date=p.transaction_date,
                type=p.type,
                category=p.category,
                description=p.description,
                amount=money(p.amount),
                status=COMPLETED,
            )
        )

    rows.sort(key=lambda r: (r.date, r.source_id), reverse=True)
    return rows


def category_summary(transactions: Iterable[FinanceTransaction]) -> list[CategorySummary]:
    counts: dict[tuple[str, str], int] = {}
    totals: dict[tuple[str, str], Decimal] = {}
    for t in transactions:
        key = (t.category, str(t.type))
        counts[key] = counts.get(key, 0) + 1
        totals[key] = totals.get(key, ZERO) + t.amount

    return [
        CategorySummary(category=cat, type=typ, count=counts[(cat, typ)], total=money(totals[(cat, typ)]))
        for cat, typ in sorted(counts)
    ]
