# lims_core/orders/models.py
from __future__ import annotations

from decimal import Decimal

from django.db import models
from django.utils import timezone

from lims_core.catalog.models import TestDefinition
from lims_core.common.models import TimeStampedModel
from lims_core.doctors.models import Doctor
from lims_core.patients.models import Patient


class OrderStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    COMPLETED = "COMPLETED", "Completed"
    CANCELLED = "CANCELLED", "Cancelled"


TERMINAL_STATUSES = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED})


class PaymentMethod(models.TextChoices):
    CASH = "CASH", "Cash"
    CARD = "CARD", "Card"
    BANK_TRANSFER = "BANK_TRANSFER", "Bank Transfer"
    ONLINE = "ONLINE", "Online"
    OTHER = "OTHER", "Other"


class Order(TimeStampedModel):
    """
    One patient's billable lab request.

    Billing invariants (maintained by OrderBillingService only):
    - total_amount == sum(line_items.price), fixed at creation
    - balance_due == total_amount - discount_amount - paid_amount (signed;
      balance_due <= 0 means fully paid)
    - paid_amount == sum(payments.amount)
    """
    patient = models.ForeignKey(Patient, on_delete=models.PROTECT, related_name="orders")
    doctor = models.ForeignKey(
        Doctor,
        on_delete=models.PROTECT,
        related_name="orders",
        null=True,
        blank=True,
    )

    ordered_at = models.DateTimeField(default=timezone.now, db_index=True)
    status = models.CharField(max_length=16, choices=OrderStatus.choices, default=OrderStatus.PENDING, db_index=True)

    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    discount_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    paid_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    balance_due = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    report_delivered = models.BooleanField(default=False)
    delivery_date = models.DateTimeField(null=True, blank=True)

    completed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancel_reason = models.TextField(blank=True)

    created_by = models.CharField(max_length=150, blank=True)

    class Meta:
        db_table = "orders_order"
        indexes = [
            models.Index(fields=["status", "report_delivered"]),
            models.Index(fields=["patient", "ordered_at"]),
            models.Index(fields=["doctor", "ordered_at"]),
        ]

    def __str__(self) -> str:
        return f"Order #{self.pk} ({self.status})"

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def is_fully_paid(self) -> bool:
        return self.balance_due <= Decimal("0.00")

    def recalc_balance(self) -> None:
        self.balance_due = (
            (self.total_amount or Decimal("0.00"))
            - (self.discount_amount or Decimal("0.00"))
            - (self.paid_amount or Decimal("0.00"))
        ).quantize(Decimal("0.01"))


class LineItem(TimeStampedModel):
    """
    One test within an order (the lab result row).

    name/unit/range/price are a snapshot of the catalog at order time; only
    the result fields (value, abnormal flag, remarks, performer, time)
    change afterwards.
    """
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="line_items")
    # provenance only; never read for pricing or ranges
    test = models.ForeignKey(TestDefinition, on_delete=models.SET_NULL, null=True, blank=True, related_name="+")
    position = models.PositiveSmallIntegerField(default=0)

    test_name = models.CharField(max_length=255)
    unit = models.CharField(max_length=32, blank=True)
    min_range = models.DecimalField(max_digits=12, decimal_places=3, null=True, blank=True)
    max_range = models.DecimalField(max_digits=12, decimal_places=3, null=True, blank=True)
    price = models.DecimalField(max_digits=12, decimal_places=2)

    result_value = models.CharField(max_length=255, blank=True)
    is_abnormal = models.BooleanField(default=False)
    remarks = models.CharField(max_length=255, blank=True)
    performed_by = models.CharField(max_length=150, blank=True)
    performed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "orders_line_item"
        ordering = ["position", "id"]
        indexes = [models.Index(fields=["order", "position"])]

    def __str__(self) -> str:
        return f"{self.test_name} [{self.result_value or '-'}]"

    @property
    def has_result(self) -> bool:
        return bool((self.result_value or "").strip())


class OrderPayment(TimeStampedModel):
    order = models.ForeignKey(Order, on_delete=models.PROTECT, related_name="payments")
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    method = models.CharField(max_length=32, choices=PaymentMethod.choices, default=PaymentMethod.CASH)

    reference = models.CharField(max_length=64, blank=True)
    received_at = models.DateTimeField(default=timezone.now)
    recorded_by = models.CharField(max_length=150, blank=True)

    class Meta:
        db_table = "orders_order_payment"
        indexes = [models.Index(fields=["order", "received_at"])]
