# lims_core/finance/services.py
from __future__ import annotations

import logging
from datetime import date

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from lims_core.audit.services import AuditService
from lims_core.common.money import CENT, ZERO, to_decimal
from lims_core.finance.models import EntryType, LedgerPaymentMethod, Payment

logger = logging.getLogger(__name__)


class FinanceService:
    @staticmethod
    @transaction.atomic
    def record_entry(
        *,
        type: str,
        category: str,
        amount,
        actor: str,
        description: str = "",
        transaction_date: date | None = None,
        payment_method: str = LedgerPaymentMethod.CASH,
    ) -> Payment:
        if type not in EntryType.values:
            raise ValidationError({"type": f"Must be one of {', '.join(EntryType.values)}."})

        category = (category or "").strip()
        if not category:
            raise ValidationError({"category": "This field is required."})

        amount = to_decimal(amount, "amount").quantize(CENT)
        if amount <= ZERO:
            raise ValidationError({"amount": "Amount must be > 0."})

        entry = Payment.objects.create(
            type=type,
            category=category,
            description=description or "",
            amount=amount,
            transaction_date=transaction_date or timezone.localdate(),
            payment_method=payment_method or LedgerPaymentMethod.CASH,
            recorded_by=actor,
        )

        AuditService.log(
            event_code="finance.entry_recorded",
            entity_type="Payment",
            entity_id=entry.id,
            actor=actor,
            metadata={"type": entry.type, "category": entry.category, "amount": entry.amount},
        )
        logger.info(
            "ledger entry recorded",
            extra={"ctx": {"entry_id": entry.id, "type": entry.type, "category": entry.category, "amount": amount}},
        )
        return entry
