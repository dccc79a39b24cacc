# lims_core/suppliers/selectors.py
from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from django.db.models import QuerySet

from lims_core.common.money import ZERO, money, non_negative_due
from lims_core.suppliers.models import Supplier, SupplierLedger


@dataclass(frozen=True)
class SupplierSummaryRow:
    supplier_id: int
    supplier_name: str
    total_bill: Decimal
    total_paid: Decimal
    total_due: Decimal
    latest_invoice_number: str
    latest_due_date: date | None


@dataclass(frozen=True)
class SupplierTotals:
    total_bill: Decimal
    total_paid: Decimal
    total_due: Decimal


def list_suppliers(*, active_only: bool = True) -> QuerySet[Supplier]:
    qs = Supplier.objects.all().order_by("name")
    if active_only:
        qs = qs.filter(is_active=True)
    return qs


def ledger_entries(
    *,
    date_from: date,
    date_to: date,
    supplier_id: int | None = None,
) -> QuerySet[SupplierLedger]:
    qs = (
        SupplierLedger.objects.filter(transaction_date__range=(date_from, date_to))
        .select_related("supplier")
        .order_by("-transaction_date", "-id")
    )
    if supplier_id:
        qs = qs.filter(supplier_id=supplier_id)
    return qs


def _latest_key(entry: SupplierLedger):
    return (entry.invoice_date or entry.transaction_date, entry.id)


def summarize_by_supplier(
    *,
    date_from: date,
    date_to: date,
    supplier_id: int | None = None,
) -> list[SupplierSummaryRow]:
    """
    Per-supplier bill/paid/due over entries in [date_from, date_to].

    The latest invoice number and due date come from the entry with the most
    recent invoice date (transaction date when it has none), id breaking ties.
    """
    groups: "OrderedDict[int, list[SupplierLedger]]" = OrderedDict()
    for entry in ledger_entries(date_from=date_from, date_to=date_to, supplier_id=supplier_id).order_by(
        "supplier__name", "supplier_id", "id"
    ):
        groups.setdefault(entry.supplier_id, []).append(entry)

    rows: list[SupplierSummaryRow] = []
    for sid, entries in groups.items():
        bill = money(sum((e.bill_amount for e in entries), ZERO))
        paid = money(sum((e.paid_amount for e in entries), ZERO))
        latest = max(entries, key=_latest_key)
        rows.append(
            SupplierSummaryRow(
                supplier_id=sid,
                supplier_name=entries[0].supplier.name,
                total_bill=bill,
                total_paid=paid,
                total_due=non_negative_due(bill, paid),
                latest_invoice_number=latest.invoice_number,
                latest_due_date=latest.due_date,
            )
        )
    return rows


def supplier_totals(rows: list[SupplierSummaryRow]) -> SupplierTotals:
    return SupplierTotals(
        total_bill=sum((r.total_bill for r in rows), ZERO),
        total_paid=sum((r.total_paid for r in rows), ZERO),
        total_due=sum((r.total_due for r in rows), ZERO),
    )
