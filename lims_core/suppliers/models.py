# lims_core/suppliers/models.py
from __future__ import annotations

from decimal import Decimal

from django.db import models
from django.utils import timezone

from lims_core.common.models import TimeStampedModel


class Supplier(TimeStampedModel):
    name = models.CharField(max_length=255)
    contact_person = models.CharField(max_length=255, blank=True)
    phone = models.CharField(max_length=32, blank=True)
    address = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "suppliers_supplier"
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class SupplierLedger(TimeStampedModel):
    """
    One supplier transaction (purchase invoice). Pure accounts payable:
    balance_due == bill_amount - paid_amount, no status machine.
    """
    supplier = models.ForeignKey(Supplier, on_delete=models.PROTECT, related_name="ledger_entries")

    transaction_date = models.DateField(default=timezone.localdate, db_index=True)
    invoice_number = models.CharField(max_length=64, blank=True)
    invoice_date = models.DateField(null=True, blank=True)
    due_date = models.DateField(null=True, blank=True)
    description = models.CharField(max_length=255, blank=True)

    bill_amount = models.DecimalField(max_digits=12, decimal_places=2)
    paid_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    balance_due = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        db_table = "suppliers_supplier_ledger"
        indexes = [models.Index(fields=["supplier", "transaction_date"])]

    def __str__(self) -> str:
        return f"{self.supplier_id} {self.invoice_number or self.pk} bal={self.balance_due}"

    def recalc_balance(self) -> None:
        self.balance_due = (
            (self.bill_amount or Decimal("0.00")) - (self.paid_amount or Decimal("0.00"))
        ).quantize(Decimal("0.01"))
