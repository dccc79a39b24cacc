from datetime import date
from decimal import Decimal

import pytest
from rest_framework.exceptions import ValidationError

from lims_core.common.api.exceptions import NotFoundError
from lims_core.suppliers.models import Supplier
from lims_core.suppliers.selectors import summarize_by_supplier, supplier_totals
from lims_core.suppliers.services import SupplierLedgerService

pytestmark = pytest.mark.django_db

JAN_1 = date(2024, 1, 1)
JAN_31 = date(2024, 1, 31)


def _record(supplier, actor, bill, paid="0", **kwargs):
    kwargs.setdefault("transaction_date", date(2024, 1, 10))
    return SupplierLedgerService.record_transaction(
        supplier_id=supplier.id,
        bill_amount=bill,
        paid_amount=paid,
        actor=actor,
        **kwargs,
    )


def test_record_transaction_keeps_balance(supplier, actor):
    entry = _record(supplier, actor, "1200", "200", invoice_number="INV-9")

    assert entry.bill_amount == Decimal("1200.00")
    assert entry.paid_amount == Decimal("200.00")
    assert entry.balance_due == Decimal("1000.00")
    assert entry.invoice_number == "INV-9"


@pytest.mark.parametrize("bill,paid", [("0", "0"), ("-5", "0"), ("100", "-1")])
def test_record_transaction_rejects_bad_amounts(supplier, actor, bill, paid):
    with pytest.raises(ValidationError):
        _record(supplier, actor, bill, paid)


def test_record_transaction_unknown_supplier(actor):
    with pytest.raises(NotFoundError):
        SupplierLedgerService.record_transaction(supplier_id=9999, bill_amount="10", actor=actor)


def test_apply_payment_reduces_balance(supplier, actor):
    entry = _record(supplier, actor, "500")

    entry = SupplierLedgerService.apply_payment(entry_id=entry.id, amount="300", actor=actor)
    assert entry.balance_due == Decimal("200.00")

    entry = SupplierLedgerService.apply_payment(entry_id=entry.id, amount="250", actor=actor)
    assert entry.paid_amount == Decimal("550.00")
    assert entry.balance_due == Decimal("-50.00")

    with pytest.raises(ValidationError):
        SupplierLedgerService.apply_payment(entry_id=entry.id, amount="0", actor=actor)


def test_summary_latest_uses_invoice_date_then_transaction_date(supplier, actor):
    _record(
        supplier, actor, "100",
        invoice_number="INV-OLD",
        invoice_date=date(2024, 1, 5),
        transaction_date=date(2024, 1, 20),
        due_date=date(2024, 2, 5),
    )
    _record(
        supplier, actor, "200",
        invoice_number="INV-NEW",
        invoice_date=date(2024, 1, 15),
        transaction_date=date(2024, 1, 16),
        due_date=date(2024, 2, 15),
    )
    # no invoice date: falls back to the transaction date (Jan 12), older than INV-NEW
    _record(supplier, actor, "50", invoice_number="CASH-1", transaction_date=date(2024, 1, 12))

    [row] = summarize_by_supplier(date_from=JAN_1, date_to=JAN_31)
    assert row.supplier_name == "MedSupply Co."
    assert row.total_bill == Decimal("350.00")
    assert row.latest_invoice_number == "INV-NEW"
    assert row.latest_due_date == date(2024, 2, 15)


def test_summary_ties_break_on_entry_id(supplier, actor):
    _record(supplier, actor, "10", invoice_number="A", invoice_date=date(2024, 1, 9))
    _record(supplier, actor, "10", invoice_number="B", invoice_date=date(2024, 1, 9))

    [row] = summarize_by_supplier(date_from=JAN_1, date_to=JAN_31)
    assert row.latest_invoice_number == "B"


def test_summary_due_is_never_negative(supplier, actor):
    other = Supplier.objects.create(name="Reagents Ltd")
    _record(supplier, actor, "100", "180")
    _record(other, actor, "400", "100")

    rows = summarize_by_supplier(date_from=JAN_1, date_to=JAN_31)
    by_name = {r.supplier_name: r for r in rows}

    assert by_name["MedSupply Co."].total_paid == Decimal("180.00")
    assert by_name["MedSupply Co."].total_due == Decimal("0.00")
    assert by_name["Reagents Ltd"].total_due == Decimal("300.00")

    totals = supplier_totals(rows)
    assert totals.total_bill == Decimal("500.00")
    assert totals.total_due == Decimal("300.00")

    only_other = summarize_by_supplier(date_from=JAN_1, date_to=JAN_31, supplier_id=other.id)
    assert [r.supplier_name for r in only_other] == ["Reagents Ltd"]


def test_supplier_ledger_api(api_client, supplier):
    r = api_client.post(
        "/api/v1/suppliers/ledger/",
        {
            "supplier_id": supplier.id,
            "bill_amount": "900.00",
            "paid_amount": "100.00",
            "invoice_number": "INV-77",
            "transaction_date": "2024-01-10",
        },
        format="json",
    )
    assert r.status_code == 201, r.data
    assert r.data["balance_due"] == "800.00"
    entry_id = r.data["id"]

    r = api_client.post(f"/api/v1/suppliers/ledger/{entry_id}/payments/", {"amount": "800.00"}, format="json")
    assert r.status_code == 200, r.data
    assert r.data["balance_due"] == "0.00"

    r = api_client.get("/api/v1/suppliers/summary/", {"date_from": "2024-01-01", "date_to": "2024-01-31"})
    assert r.status_code == 200, r.data
    assert r.data["rows"][0]["latest_invoice_number"] == "INV-77"
    assert r.data["totals"]["total_paid"] == "900.00"

    r = api_client.get("/api/v1/suppliers/ledger/", {"date_from": "2024-01-01", "date_to": "2024-01-31"})
    assert r.data["count"] == 1
