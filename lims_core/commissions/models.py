# lims_core/commissions/models.py
from __future__ import annotations

from decimal import Decimal

from django.db import models

from lims_core.common.models import TimeStampedModel
from lims_core.doctors.models import Doctor
from lims_core.orders.models import Order


class CommissionStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    PAID = "PAID", "Paid"


class CommissionLedger(TimeStampedModel):
    """
    Referring-doctor payable derived from one order.

    calculated_amount = order total * rate / 100, fixed when the row is
    written; later changes to the doctor's rate or the order never touch it.
    """
    doctor = models.ForeignKey(Doctor, on_delete=models.PROTECT, related_name="commission_entries")
    order = models.ForeignKey(Order, on_delete=models.PROTECT, related_name="commission_entries")

    transaction_date = models.DateField(db_index=True)
    commission_rate = models.DecimalField(max_digits=5, decimal_places=2)
    calculated_amount = models.DecimalField(max_digits=12, decimal_places=2)

    paid_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    payment_date = models.DateField(null=True, blank=True)
    status = models.CharField(
        max_length=16,
        choices=CommissionStatus.choices,
        default=CommissionStatus.PENDING,
        db_index=True,
    )

    class Meta:
        db_table = "commissions_commission_ledger"
        constraints = [
            models.UniqueConstraint(fields=["order", "doctor"], name="uq_commission_order_doctor"),
        ]
        indexes = [
            models.Index(fields=["doctor", "transaction_date"]),
        ]

    def __str__(self) -> str:
        return f"Commission #{self.pk} {self.doctor_id}/{self.order_id} {self.status}"
