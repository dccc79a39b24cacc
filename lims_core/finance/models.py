# lims_core/finance/models.py
from __future__ import annotations

from django.db import models
from django.utils import timezone

from lims_core.common.models import TimeStampedModel


class EntryType(models.TextChoices):
    INCOME = "INCOME", "Income"
    EXPENSE = "EXPENSE", "Expense"


class ExpenseCategory(models.TextChoices):
    RENT = "RENT", "Rent"
    UTILITIES = "UTILITIES", "Utilities"
    SALARY = "SALARY", "Salary"
    MAINTENANCE = "MAINTENANCE", "Maintenance"
    SUPPLIES = "SUPPLIES", "Supplies"
    MARKETING = "MARKETING", "Marketing"
    MISC = "MISC", "Misc"


class LedgerPaymentMethod(models.TextChoices):
    CASH = "CASH", "Cash"
    BANK_TRANSFER = "BANK_TRANSFER", "Bank Transfer"
    CHEQUE = "CHEQUE", "Cheque"
    CREDIT_CARD = "CREDIT_CARD", "Credit Card"


class Payment(TimeStampedModel):
    """
    Standalone general-ledger row (rent, salaries, misc income).
    Not tied to an order; create-only.
    """
    type = models.CharField(max_length=16, choices=EntryType.choices, db_index=True)
    # free text; ExpenseCategory lists the usual values
    category = models.CharField(max_length=64)
    description = models.CharField(max_length=255, blank=True)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    transaction_date = models.DateField(default=timezone.localdate, db_index=True)
    payment_method = models.CharField(
        max_length=32,
        choices=LedgerPaymentMethod.choices,
        default=LedgerPaymentMethod.CASH,
    )
    recorded_by = models.CharField(max_length=150, blank=True)

    class Meta:
        db_table = "finance_payment"
        indexes = [models.Index(fields=["type", "transaction_date"])]

    def __str__(self) -> str:
        return f"{self.type} {self.category} {self.amount}"
