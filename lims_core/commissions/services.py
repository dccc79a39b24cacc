# lims_core/commissions/services.py
from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from lims_core.audit.services import AuditService
from lims_core.commissions.models import CommissionLedger, CommissionStatus
from lims_core.common.api.exceptions import ConflictError, NotFoundError
from lims_core.common.money import CENT, HUNDRED, ZERO, to_decimal
from lims_core.doctors.models import Doctor
from lims_core.orders.models import Order

logger = logging.getLogger(__name__)


def commission_for(total: Decimal, rate: Decimal) -> Decimal:
    return (total * rate / HUNDRED).quantize(CENT)


class CommissionLedgerService:
    @staticmethod
    def record_for_order(*, order: Order, doctor: Doctor | None) -> CommissionLedger | None:
        """
        Called inside the order-creation transaction.
        Writes exactly one PENDING row when the doctor has a positive rate.
        """
        if doctor is None:
            return None
        rate = doctor.commission_percentage or ZERO
        if rate <= ZERO:
            return None

        entry = CommissionLedger.objects.create(
            doctor=doctor,
            order=order,
            transaction_date=timezone.localdate(order.ordered_at),
            commission_rate=rate,
            calculated_amount=commission_for(order.total_amount, rate),
            paid_amount=ZERO,
            status=CommissionStatus.PENDING,
        )
        logger.info(
            "commission recorded",
            extra={"ctx": {"order_id": order.pk, "doctor_id": doctor.pk, "amount": entry.calculated_amount}},
        )
        return entry

    @staticmethod
    @transaction.atomic
    def mark_paid(
        *,
        entry_id: int,
        paid_amount,
        actor: str,
        payment_date: date | None = None,
    ) -> CommissionLedger:
        """
        PENDING -> PAID with the amount actually handed over.
        Status is binary: there is no partially-paid state.
        """
        paid_amount = to_decimal(paid_amount, "paid_amount").quantize(CENT)
        if paid_amount <= ZERO:
            raise ValidationError({"paid_amount": "Paid amount must be > 0."})

        try:
            entry = CommissionLedger.objects.select_for_update().get(id=entry_id)
        except CommissionLedger.DoesNotExist:
            raise NotFoundError(f"Commission entry {entry_id} not found.")

        if entry.status == CommissionStatus.PAID:
            raise ConflictError("Commission is already PAID.", current_status=entry.status)

        entry.paid_amount = paid_amount
        entry.payment_date = payment_date or timezone.localdate()
        entry.status = CommissionStatus.PAID
        entry.save(update_fields=["paid_amount", "payment_date", "status", "updated_at"])

        AuditService.log(
            event_code="commission.paid",
            entity_type="CommissionLedger",
            entity_id=entry.id,
            actor=actor,
            metadata={
                "doctor_id": entry.doctor_id,
                "order_id": entry.order_id,
                "calculated_amount": entry.calculated_amount,
                "paid_amount": paid_amount,
            },
        )
        logger.info("commission paid", extra={"ctx": {"entry_id": entry.id, "paid_amount": paid_amount}})
        return entry
