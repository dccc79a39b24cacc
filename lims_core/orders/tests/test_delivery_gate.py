from decimal import Decimal

import pytest

from lims_core.audit.models import AuditEvent
from lims_core.common.api.exceptions import ConflictError
from lims_core.lab.services import ResultWorkflowService
from lims_core.orders.models import OrderPayment, OrderStatus
from lims_core.orders.services import DeliveryGateService, OrderBillingService

pytestmark = pytest.mark.django_db


@pytest.fixture
def completed_order(make_order, actor):
    """glucose + cbc (800.00), nothing paid, one result entered, completed."""
    order = make_order()
    item = order.line_items.first()
    ResultWorkflowService.record_result(order_id=order.id, line_item_id=item.id, raw_value="15", actor=actor)
    return ResultWorkflowService.complete_order(order_id=order.id, actor=actor)


def test_deliver_requires_completed_status(make_order, actor):
    order = make_order()

    with pytest.raises(ConflictError) as exc:
        DeliveryGateService.deliver(order_id=order.id, actor=actor)
    assert exc.value.current_status == OrderStatus.PENDING

    order.refresh_from_db()
    assert order.report_delivered is False


def test_deliver_refuses_cancelled_order(make_order, actor):
    order = make_order()
    OrderBillingService.cancel_order(order_id=order.id, actor=actor)

    with pytest.raises(ConflictError):
        DeliveryGateService.deliver(order_id=order.id, actor=actor)


def test_collect_first_without_payment_leaves_order_undelivered(completed_order, actor):
    order = DeliveryGateService.deliver(order_id=completed_order.id, actor=actor, collect_payment_first=True)

    assert order.report_delivered is False
    assert order.delivery_date is None
    assert order.balance_due == Decimal("800.00")
    assert not AuditEvent.objects.filter(event_code="order.delivered").exists()


def test_collect_first_applies_payment_then_delivers(completed_order, actor):
    order = DeliveryGateService.deliver(
        order_id=completed_order.id,
        actor=actor,
        collect_payment_first=True,
        payment_amount="800",
    )

    assert order.report_delivered is True
    assert order.delivery_date is not None
    assert order.balance_due == Decimal("0.00")
    assert OrderPayment.objects.filter(order=order).count() == 1


def test_collect_first_with_partial_payment_still_delivers(completed_order, actor):
    order = DeliveryGateService.deliver(
        order_id=completed_order.id,
        actor=actor,
        collect_payment_first=True,
        payment_amount="300",
    )

    assert order.report_delivered is True
    assert order.balance_due == Decimal("500.00")


def test_mark_delivered_only_ignores_balance(completed_order, actor):
    order = DeliveryGateService.deliver(order_id=completed_order.id, actor=actor, collect_payment_first=False)

    assert order.report_delivered is True
    assert order.balance_due == Decimal("800.00")
    assert not OrderPayment.objects.filter(order=order).exists()


def test_collect_first_with_nothing_owed_delivers_without_payment(completed_order, actor):
    OrderBillingService.apply_payment(order_id=completed_order.id, amount="800", actor=actor)

    order = DeliveryGateService.deliver(
        order_id=completed_order.id,
        actor=actor,
        collect_payment_first=True,
        payment_amount="100",
    )

    assert order.report_delivered is True
    assert order.paid_amount == Decimal("800.00")


def test_redelivery_is_allowed_and_restamps(completed_order, actor):
    first = DeliveryGateService.deliver(order_id=completed_order.id, actor=actor)
    second = DeliveryGateService.deliver(order_id=completed_order.id, actor=actor)

    assert second.report_delivered is True
    assert second.delivery_date >= first.delivery_date
    assert AuditEvent.objects.filter(event_code="order.delivered", entity_id=str(completed_order.id)).count() == 2


def test_order_to_cash_end_to_end(patient, lab_tests, actor):
    order = OrderBillingService.create_order(
        patient_id=patient.id,
        test_ids=[lab_tests["glucose"].id, lab_tests["cbc"].id],
        discount="0",
        cash_paid="400",
        actor=actor,
    )
    assert order.total_amount == Decimal("800.00")
    assert order.balance_due == Decimal("400.00")

    order = OrderBillingService.apply_payment(order_id=order.id, amount="400", actor=actor)
    assert order.balance_due == Decimal("0.00")

    glucose = order.line_items.get(test_id=lab_tests["glucose"].id)
    item = ResultWorkflowService.record_result(
        order_id=order.id,
        line_item_id=glucose.id,
        raw_value="12",
        actor=actor,
    )
    assert item.remarks == "Normal"
    assert item.is_abnormal is False

    order = ResultWorkflowService.complete_order(order_id=order.id, actor=actor)
    assert order.status == OrderStatus.COMPLETED

    order = DeliveryGateService.deliver(order_id=order.id, actor=actor, collect_payment_first=False)
    assert order.report_delivered is True
    assert order.delivery_date is not None
    assert order.balance_due == Decimal("0.00")
