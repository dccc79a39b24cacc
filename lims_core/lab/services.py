# lims_core/lab/services.py
from __future__ import annotations

import logging
from typing import Mapping

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from lims_core.audit.services import AuditService
from lims_core.common.api.exceptions import ConflictError, NotFoundError
from lims_core.lab.flagging import evaluate_result
from lims_core.orders.models import LineItem, Order, OrderStatus
from lims_core.orders.services import lock_order

logger = logging.getLogger(__name__)


def _ensure_accepts_results(order: Order) -> None:
    if order.status == OrderStatus.CANCELLED:
        raise ConflictError("Cannot record results on a CANCELLED order.", current_status=order.status)


def _apply_result(*, item: LineItem, value: str, actor: str) -> LineItem:
    flag = evaluate_result(value, item.min_range, item.max_range)
    item.result_value = value
    item.is_abnormal = flag.is_abnormal
    item.remarks = flag.remark
    item.performed_by = actor
    item.performed_at = timezone.now()
    item.save(
        update_fields=[
            "result_value",
            "is_abnormal",
            "remarks",
            "performed_by",
            "performed_at",
            "updated_at",
        ]
    )
    return item


class ResultWorkflowService:
    """
    Result entry and the PENDING -> COMPLETED transition.

    - results may be entered (or amended) while PENDING or COMPLETED
    - completion needs at least one entered result, not all of them
    - COMPLETED and CANCELLED are terminal
    """

    @staticmethod
    @transaction.atomic
    def record_result(*, order_id: int, line_item_id: int, raw_value, actor: str) -> LineItem:
        value = ("" if raw_value is None else str(raw_value)).strip()
        if not value:
            raise ValidationError({"value": "Result value is required."})

        order = lock_order(order_id)
        _ensure_accepts_results(order)

        try:
            item = LineItem.objects.get(id=line_item_id, order=order)
        except LineItem.DoesNotExist:
            raise NotFoundError(f"Line item {line_item_id} not found on order {order_id}.")

        _apply_result(item=item, value=value, actor=actor)

        AuditService.log(
            event_code="order.result_recorded",
            entity_type="Order",
            entity_id=order.id,
            actor=actor,
            metadata={
                "line_item_id": item.id,
                "value": item.result_value,
                "is_abnormal": item.is_abnormal,
                "remarks": item.remarks,
            },
        )
        return item

    @staticmethod
    @transaction.atomic
    def record_results(*, order_id: int, values: Mapping, actor: str) -> list[LineItem]:
        """
        Batch save from the result-entry grid: {line_item_id: value}.
        Blank values are skipped; saving nothing at all is an error.
        """
        order = lock_order(order_id)
        _ensure_accepts_results(order)

        try:
            cleaned = {
                int(k): ("" if v is None else str(v)).strip()
                for k, v in (values or {}).items()
            }
        except (TypeError, ValueError):
            raise ValidationError({"results": "Invalid line item id."})
        cleaned = {k: v for k, v in cleaned.items() if v}
        if not cleaned:
            raise ValidationError({"results": "No results entered."})

        items = {i.id: i for i in LineItem.objects.filter(order=order, id__in=list(cleaned))}
        missing = [k for k in cleaned if k not in items]
        if missing:
            raise NotFoundError(
                f"Line item(s) not found on order {order_id}: {', '.join(str(m) for m in missing)}"
            )

        saved = [_apply_result(item=items[k], value=v, actor=actor) for k, v in cleaned.items()]

        AuditService.log(
            event_code="order.result_recorded",
            entity_type="Order",
            entity_id=order.id,
            actor=actor,
            metadata={
                "line_item_ids": [i.id for i in saved],
                "abnormal": [i.id for i in saved if i.is_abnormal],
            },
        )
        logger.info("results recorded", extra={"ctx": {"order_id": order.id, "count": len(saved)}})
        return saved

    @staticmethod
    @transaction.atomic
    def complete_order(*, order_id: int, actor: str) -> Order:
        # the row lock makes a second concurrent call see COMPLETED
        order = lock_order(order_id)
        if order.status != OrderStatus.PENDING:
            raise ConflictError(f"Order is already {order.status}.", current_status=order.status)

        entered = LineItem.objects.filter(order=order).exclude(result_value="").count()
        if entered == 0:
            raise ValidationError({"results": "No results entered for this order."})

        order.status = OrderStatus.COMPLETED
        order.completed_at = timezone.now()
        order.save(update_fields=["status", "completed_at", "updated_at"])

        total_items = LineItem.objects.filter(order=order).count()
        AuditService.log(
            event_code="order.completed",
            entity_type="Order",
            entity_id=order.id,
            actor=actor,
            metadata={"results_entered": entered, "line_items": total_items},
        )
        logger.info(
            "order completed",
            extra={"ctx": {"order_id": order.id, "results_entered": entered, "line_items": total_items}},
        )
        return order
