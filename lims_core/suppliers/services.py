# lims_core/suppliers/services.py
from __future__ import annotations

import logging
from datetime import date

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from lims_core.audit.services import AuditService
from lims_core.common.api.exceptions import NotFoundError
from lims_core.common.money import CENT, ZERO, to_decimal
from lims_core.suppliers.models import Supplier, SupplierLedger

logger = logging.getLogger(__name__)


class SupplierLedgerService:
    @staticmethod
    @transaction.atomic
    def record_transaction(
        *,
        supplier_id: int,
        bill_amount,
        actor: str,
        paid_amount=ZERO,
        transaction_date: date | None = None,
        invoice_number: str = "",
        invoice_date: date | None = None,
        due_date: date | None = None,
        description: str = "",
    ) -> SupplierLedger:
        bill_amount = to_decimal(bill_amount, "bill_amount").quantize(CENT)
        paid_amount = to_decimal(paid_amount if paid_amount is not None else 0, "paid_amount").quantize(CENT)

        if bill_amount <= ZERO:
            raise ValidationError({"bill_amount": "Bill amount must be > 0."})
        if paid_amount < ZERO:
            raise ValidationError({"paid_amount": "Paid amount must be >= 0."})

        try:
            supplier = Supplier.objects.get(id=supplier_id)
        except Supplier.DoesNotExist:
            raise NotFoundError(f"Supplier {supplier_id} not found.")

        entry = SupplierLedger(
            supplier=supplier,
            transaction_date=transaction_date or timezone.localdate(),
            invoice_number=(invoice_number or "").strip(),
            invoice_date=invoice_date,
            due_date=due_date,
            description=description or "",
            bill_amount=bill_amount,
            paid_amount=paid_amount,
        )
        entry.recalc_balance()
        entry.save()

        AuditService.log(
            event_code="supplier.transaction_recorded",
            entity_type="SupplierLedger",
            entity_id=entry.id,
            actor=actor,
            metadata={
                "supplier_id": supplier.id,
                "invoice_number": entry.invoice_number,
                "bill_amount": bill_amount,
                "paid_amount": paid_amount,
            },
        )
        logger.info(
            "supplier transaction recorded",
            extra={"ctx": {"entry_id": entry.id, "supplier_id": supplier.id, "balance_due": entry.balance_due}},
        )
        return entry

    @staticmethod
    @transaction.atomic
    def apply_payment(*, entry_id: int, amount, actor: str) -> SupplierLedger:
        amount = to_decimal(amount, "amount").quantize(CENT)
        if amount <= ZERO:
            raise ValidationError({"amount": "Payment amount must be > 0."})

        try:
            entry = SupplierLedger.objects.select_for_update().get(id=entry_id)
        except SupplierLedger.DoesNotExist:
            raise NotFoundError(f"Supplier ledger entry {entry_id} not found.")

        entry.paid_amount = (entry.paid_amount or ZERO) + amount
        entry.recalc_balance()
        entry.save(update_fields=["paid_amount", "balance_due", "updated_at"])

        AuditService.log(
            event_code="supplier.payment_applied",
            entity_type="SupplierLedger",
            entity_id=entry.id,
            actor=actor,
            metadata={"amount": amount, "paid_amount": entry.paid_amount, "balance_due": entry.balance_due},
        )
        logger.info(
            "supplier payment applied",
            extra={"ctx": {"entry_id": entry.id, "amount": amount, "balance_due": entry.balance_due}},
        )
        return entry
