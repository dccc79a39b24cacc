# lims_core/orders/selectors.py
from __future__ import annotations

from django.db.models import Prefetch, QuerySet

from lims_core.common.api.exceptions import NotFoundError
from lims_core.common.money import ZERO
from lims_core.orders.models import LineItem, Order, OrderPayment, OrderStatus


def orders_qs() -> QuerySet[Order]:
    return Order.objects.select_related("patient", "doctor")


def get_order(*, order_id: int) -> Order:
    """Order with line items and payments loaded, ready for rendering."""
    try:
        return orders_qs().prefetch_related(
            Prefetch("line_items", queryset=LineItem.objects.order_by("position", "id")),
            Prefetch("payments", queryset=OrderPayment.objects.order_by("received_at", "id")),
        ).get(id=order_id)
    except Order.DoesNotExist:
        raise NotFoundError(f"Order {order_id} not found.")


def list_orders() -> QuerySet[Order]:
    """Newest first; narrowing is done by orders.filters.OrderFilter."""
    return orders_qs().order_by("-ordered_at", "-id")


# -------------------------------------------------------------------
# Worklists
# -------------------------------------------------------------------

def pending_orders() -> QuerySet[Order]:
    return orders_qs().filter(status=OrderStatus.PENDING).order_by("ordered_at", "id")


def ready_for_pickup() -> QuerySet[Order]:
    """Completed but the report has not gone out yet."""
    return (
        orders_qs()
        .filter(status=OrderStatus.COMPLETED, report_delivered=False)
        .order_by("completed_at", "id")
    )


def outstanding_orders() -> QuerySet[Order]:
    return (
        orders_qs()
        .exclude(status=OrderStatus.CANCELLED)
        .filter(balance_due__gt=ZERO)
        .order_by("-balance_due", "id")
    )


WORKLISTS = {
    "pending": pending_orders,
    "ready": ready_for_pickup,
    "outstanding": outstanding_orders,
}
