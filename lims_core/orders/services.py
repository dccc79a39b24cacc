# lims_core/orders/services.py
from __future__ import annotations

import logging
from decimal import Decimal

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from lims_core.audit.services import AuditService
from lims_core.commissions.services import CommissionLedgerService
from lims_core.common.api.exceptions import ConflictError, NotFoundError
from lims_core.common.events import publish_fire_and_forget
from lims_core.common.money import CENT, ZERO, to_decimal
from lims_core.doctors.selectors import get_doctor
from lims_core.orders.models import (
    LineItem,
    Order,
    OrderPayment,
    OrderStatus,
    PaymentMethod,
)
from lims_core.orders.pricing import PricingSnapshot
from lims_core.patients.selectors import get_patient

logger = logging.getLogger(__name__)


def lock_order(order_id: int) -> Order:
    """Row-locks the order for the rest of the current transaction."""
    try:
        return Order.objects.select_for_update().get(id=order_id)
    except Order.DoesNotExist:
        raise NotFoundError(f"Order {order_id} not found.")


def _non_negative(value, field_name: str) -> Decimal:
    amount = to_decimal(value if value is not None else 0, field_name).quantize(CENT)
    if amount < ZERO:
        raise ValidationError({field_name: f"{field_name.replace('_', ' ').capitalize()} must be >= 0."})
    return amount


class OrderBillingService:
    @staticmethod
    @transaction.atomic
    def create_order(
        *,
        patient_id: int,
        test_ids,
        actor: str,
        doctor_id: int | None = None,
        discount=ZERO,
        cash_paid=ZERO,
        payment_method: str = PaymentMethod.CASH,
    ) -> Order:
        """
        Order + line items + opening payment + commission entry, all or nothing.

        Prices, names, units and ranges are copied from the catalog now; the
        order never looks at the catalog again.
        """
        discount = _non_negative(discount, "discount")
        cash_paid = _non_negative(cash_paid, "cash_paid")

        patient = get_patient(patient_id=patient_id)
        doctor = get_doctor(doctor_id=doctor_id) if doctor_id else None
        snapshot = PricingSnapshot.resolve(test_ids)

        total = snapshot.total
        if discount > total:
            raise ValidationError({"discount": "Discount cannot exceed the order total."})

        order = Order(
            patient=patient,
            doctor=doctor,
            status=OrderStatus.PENDING,
            total_amount=total,
            discount_amount=discount,
            paid_amount=cash_paid,
            created_by=actor,
        )
        order.recalc_balance()
        order.save()

        LineItem.objects.bulk_create(
            [
                LineItem(
                    order=order,
                    test_id=item.test_id,
                    position=pos,
                    test_name=item.name,
                    unit=item.unit,
                    min_range=item.min_range,
                    max_range=item.max_range,
                    price=item.price,
                )
                for pos, item in enumerate(snapshot, start=1)
            ]
        )

        if cash_paid > ZERO:
            OrderPayment.objects.create(
                order=order,
                amount=cash_paid,
                method=payment_method,
                received_at=order.ordered_at,
                recorded_by=actor,
            )

        commission = CommissionLedgerService.record_for_order(order=order, doctor=doctor)

        AuditService.log(
            event_code="order.created",
            entity_type="Order",
            entity_id=order.id,
            actor=actor,
            metadata={
                "patient_id": patient.id,
                "doctor_id": doctor.id if doctor else None,
                "test_ids": snapshot.test_ids,
                "total_amount": order.total_amount,
                "discount_amount": order.discount_amount,
                "paid_amount": order.paid_amount,
                "balance_due": order.balance_due,
                "commission_id": commission.id if commission else None,
            },
        )
        logger.info(
            "order created",
            extra={
                "ctx": {
                    "order_id": order.id,
                    "patient_id": patient.id,
                    "tests": len(snapshot),
                    "total_amount": order.total_amount,
                    "balance_due": order.balance_due,
                }
            },
        )

        # inventory deduction and other listeners run after commit; their
        # failures are logged inside publish_fire_and_forget
        payload = {"order_id": order.id, "test_ids": snapshot.test_ids, "actor": actor}
        transaction.on_commit(lambda: publish_fire_and_forget("order.created", payload))
        return order

    @staticmethod
    @transaction.atomic
    def apply_payment(
        *,
        order_id: int,
        amount,
        actor: str,
        method: str = PaymentMethod.CASH,
        reference: str = "",
    ) -> Order:
        """
        paid_amount += amount under a row lock, then the balance is recomputed
        from total - discount - paid. Allowed in any status except CANCELLED.
        """
        amount = to_decimal(amount, "amount").quantize(CENT)
        if amount <= ZERO:
            raise ValidationError({"amount": "Payment amount must be > 0."})

        order = lock_order(order_id)
        if order.status == OrderStatus.CANCELLED:
            raise ConflictError("Cannot record payment for a CANCELLED order.", current_status=order.status)

        OrderPayment.objects.create(
            order=order,
            amount=amount,
            method=method or PaymentMethod.CASH,
            reference=reference or "",
            recorded_by=actor,
        )

        order.paid_amount = (order.paid_amount or ZERO) + amount
        order.recalc_balance()
        order.save(update_fields=["paid_amount", "balance_due", "updated_at"])

        AuditService.log(
            event_code="order.payment_applied",
            entity_type="Order",
            entity_id=order.id,
            actor=actor,
            metadata={
                "amount": amount,
                "method": method,
                "paid_amount": order.paid_amount,
                "balance_due": order.balance_due,
            },
        )
        logger.info(
            "payment applied",
            extra={"ctx": {"order_id": order.id, "amount": amount, "balance_due": order.balance_due}},
        )
        return order

    @staticmethod
    @transaction.atomic
    def cancel_order(*, order_id: int, actor: str, reason: str = "") -> Order:
        order = lock_order(order_id)
        if order.status != OrderStatus.PENDING:
            raise ConflictError(f"Order is already {order.status}.", current_status=order.status)

        order.status = OrderStatus.CANCELLED
        order.cancelled_at = timezone.now()
        order.cancel_reason = reason or ""
        order.save(update_fields=["status", "cancelled_at", "cancel_reason", "updated_at"])

        AuditService.log(
            event_code="order.cancelled",
            entity_type="Order",
            entity_id=order.id,
            actor=actor,
            metadata={"reason": order.cancel_reason},
        )
        logger.info("order cancelled", extra={"ctx": {"order_id": order.id}})
        return order


class DeliveryGateService:
    @staticmethod
    @transaction.atomic
    def deliver(
        *,
        order_id: int,
        actor: str,
        collect_payment_first: bool = False,
        payment_amount=None,
        payment_method: str = PaymentMethod.CASH,
    ) -> Order:
        """
        Marks a COMPLETED order's report as delivered.

        collect_payment_first with an outstanding balance:
          - amount given: apply it, then deliver (even if some balance remains)
          - no amount: return the order untouched, still undelivered
        collect_payment_first=False delivers regardless of balance.
        Re-delivery is allowed and stamps a new delivery time.
        """
        order = lock_order(order_id)
        if order.status != OrderStatus.COMPLETED:
            raise ConflictError(
                f"Report can only be delivered for a COMPLETED order (status is {order.status}).",
                current_status=order.status,
            )

        if collect_payment_first and order.balance_due > ZERO:
            if payment_amount in (None, ""):
                logger.info(
                    "delivery held for payment",
                    extra={"ctx": {"order_id": order.id, "balance_due": order.balance_due}},
                )
                return order
            order = OrderBillingService.apply_payment(
                order_id=order.id,
                amount=payment_amount,
                actor=actor,
                method=payment_method,
            )

        if order.balance_due > ZERO:
            logger.warning(
                "report delivered with outstanding balance",
                extra={"ctx": {"order_id": order.id, "balance_due": order.balance_due}},
            )

        order.report_delivered = True
        order.delivery_date = timezone.now()
        order.save(update_fields=["report_delivered", "delivery_date", "updated_at"])

        AuditService.log(
            event_code="order.delivered",
            entity_type="Order",
            entity_id=order.id,
            actor=actor,
            metadata={"balance_due": order.balance_due, "delivery_date": order.delivery_date},
        )
        logger.info("report delivered", extra={"ctx": {"order_id": order.id}})
        return order
