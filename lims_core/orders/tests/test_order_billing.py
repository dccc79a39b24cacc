from decimal import Decimal

import pytest
from rest_framework.exceptions import ValidationError

from lims_core.audit.models import AuditEvent
from lims_core.catalog.services import TestDefinitionService
from lims_core.common.api.exceptions import ConflictError, NotFoundError
from lims_core.common.events import subscribe, unsubscribe
from lims_core.orders.models import LineItem, Order, OrderPayment, OrderStatus
from lims_core.orders.services import OrderBillingService

pytestmark = pytest.mark.django_db


def test_create_order_totals_equal_sum_of_line_items(make_order):
    order = make_order(tests=("glucose", "cbc", "hbsag"), discount="50", cash_paid="400")

    prices = list(order.line_items.values_list("price", flat=True))
    assert sum(prices) == order.total_amount == Decimal("1000.00")
    assert order.discount_amount == Decimal("50.00")
    assert order.paid_amount == Decimal("400.00")
    assert order.balance_due == Decimal("550.00")
    assert order.status == OrderStatus.PENDING
    assert order.report_delivered is False


def test_line_items_are_a_snapshot_of_the_catalog(make_order, lab_tests):
    order = make_order(tests=("cbc",))

    TestDefinitionService.upsert(
        short_code="cbc",
        test_name="Haemoglobin (new method)",
        price="999",
        min_range=1,
        max_range=2,
    )

    item = LineItem.objects.get(order=order)
    assert item.test_name == "Haemoglobin"
    assert item.price == Decimal("300.00")
    assert item.min_range == Decimal("70")
    assert item.max_range == Decimal("100")

    order.refresh_from_db()
    assert order.total_amount == Decimal("300.00")


def test_duplicate_test_ids_are_collapsed_in_request_order(patient, lab_tests, actor):
    order = OrderBillingService.create_order(
        patient_id=patient.id,
        test_ids=[lab_tests["cbc"].id, lab_tests["glucose"].id, lab_tests["cbc"].id],
        actor=actor,
    )
    names = list(order.line_items.values_list("test_name", flat=True))
    assert names == ["Haemoglobin", "Glucose (Fasting)"]
    assert order.total_amount == Decimal("800.00")


def test_create_order_requires_at_least_one_test(patient, actor):
    with pytest.raises(ValidationError):
        OrderBillingService.create_order(patient_id=patient.id, test_ids=[], actor=actor)
    assert Order.objects.count() == 0


def test_unknown_patient_or_test_fails_without_partial_rows(patient, lab_tests, actor):
    with pytest.raises(NotFoundError):
        OrderBillingService.create_order(patient_id=999999, test_ids=[lab_tests["cbc"].id], actor=actor)

    with pytest.raises(NotFoundError):
        OrderBillingService.create_order(
            patient_id=patient.id,
            test_ids=[lab_tests["cbc"].id, 999999],
            actor=actor,
        )

    assert Order.objects.count() == 0
    assert LineItem.objects.count() == 0


def test_unknown_doctor_is_not_found(patient, lab_tests, actor):
    with pytest.raises(NotFoundError):
        OrderBillingService.create_order(
            patient_id=patient.id,
            doctor_id=424242,
            test_ids=[lab_tests["cbc"].id],
            actor=actor,
        )


@pytest.mark.parametrize(
    "kwargs",
    [
        {"discount": "-1"},
        {"cash_paid": "-0.01"},
        {"discount": "300.01"},
        {"cash_paid": "abc"},
    ],
)
def test_create_order_rejects_bad_amounts(patient, lab_tests, actor, kwargs):
    with pytest.raises(ValidationError):
        OrderBillingService.create_order(
            patient_id=patient.id,
            test_ids=[lab_tests["cbc"].id],
            actor=actor,
            **kwargs,
        )


def test_cash_paid_at_creation_is_stored_as_payment_row(make_order, actor):
    order = make_order(cash_paid="400")

    pays = list(OrderPayment.objects.filter(order=order))
    assert len(pays) == 1
    assert pays[0].amount == Decimal("400.00")
    assert pays[0].recorded_by == actor


def test_no_payment_row_when_nothing_paid_up_front(make_order):
    order = make_order()
    assert not OrderPayment.objects.filter(order=order).exists()


def test_balance_tracks_every_payment(make_order, actor):
    order = make_order(discount="100", cash_paid="200")  # total 800
    assert order.balance_due == Decimal("500.00")

    for amount, expected in [("150", "350.00"), ("0.50", "349.50"), ("349.50", "0.00")]:
        order = OrderBillingService.apply_payment(order_id=order.id, amount=amount, actor=actor)
        assert order.balance_due == Decimal(expected)

    order.refresh_from_db()
    paid = sum(OrderPayment.objects.filter(order=order).values_list("amount", flat=True))
    assert order.paid_amount == paid == Decimal("700.00")
    assert order.balance_due == order.total_amount - order.discount_amount - order.paid_amount
    assert order.is_fully_paid


def test_overpayment_leaves_negative_balance_and_counts_as_paid(make_order, actor):
    order = make_order(tests=("hbsag",))
    order = OrderBillingService.apply_payment(order_id=order.id, amount="250", actor=actor)
    assert order.balance_due == Decimal("-50.00")
    assert order.is_fully_paid


@pytest.mark.parametrize("amount", ["0", "-5", None])
def test_apply_payment_rejects_non_positive_amount(make_order, actor, amount):
    order = make_order()
    with pytest.raises(ValidationError):
        OrderBillingService.apply_payment(order_id=order.id, amount=amount, actor=actor)

    order.refresh_from_db()
    assert order.paid_amount == Decimal("0.00")


def test_apply_payment_unknown_order(actor):
    with pytest.raises(NotFoundError):
        OrderBillingService.apply_payment(order_id=123456, amount="10", actor=actor)


def test_payment_is_accepted_after_completion(make_order, actor):
    from lims_core.lab.services import ResultWorkflowService

    order = make_order(tests=("glucose",))
    item = order.line_items.get()
    ResultWorkflowService.record_result(order_id=order.id, line_item_id=item.id, raw_value="12", actor=actor)
    ResultWorkflowService.complete_order(order_id=order.id, actor=actor)

    order = OrderBillingService.apply_payment(order_id=order.id, amount="500", actor=actor)
    assert order.status == OrderStatus.COMPLETED
    assert order.balance_due == Decimal("0.00")


def test_cancel_pending_order_then_second_cancel_conflicts(make_order, actor):
    order = make_order()

    order = OrderBillingService.cancel_order(order_id=order.id, actor=actor, reason="duplicate entry")
    assert order.status == OrderStatus.CANCELLED
    assert order.cancelled_at is not None
    assert order.cancel_reason == "duplicate entry"

    with pytest.raises(ConflictError) as exc:
        OrderBillingService.cancel_order(order_id=order.id, actor=actor)
    assert exc.value.current_status == OrderStatus.CANCELLED


def test_cancelled_order_refuses_payments(make_order, actor):
    order = make_order()
    OrderBillingService.cancel_order(order_id=order.id, actor=actor)

    with pytest.raises(ConflictError):
        OrderBillingService.apply_payment(order_id=order.id, amount="10", actor=actor)


def test_order_writes_are_audited(make_order, actor):
    order = make_order(cash_paid="100")
    OrderBillingService.apply_payment(order_id=order.id, amount="50", actor=actor)

    codes = list(
        AuditEvent.objects.filter(entity_type="Order", entity_id=str(order.id))
        .order_by("occurred_at", "id")
        .values_list("event_code", flat=True)
    )
    assert codes == ["order.created", "order.payment_applied"]

    created = AuditEvent.objects.get(event_code="order.created", entity_id=str(order.id))
    assert created.actor == actor
    assert created.metadata["total_amount"] == "800.00"


def test_order_created_event_is_published_after_commit(make_order, django_capture_on_commit_callbacks):
    received = []

    def handler(payload):
        received.append(payload)

    subscribe("order.created")(handler)
    try:
        with django_capture_on_commit_callbacks(execute=True):
            order = make_order(tests=("glucose", "hbsag"))
    finally:
        unsubscribe("order.created", handler)

    assert len(received) == 1
    assert received[0]["order_id"] == order.id
    assert len(received[0]["test_ids"]) == 2


def test_failing_inventory_subscriber_does_not_undo_order(make_order, django_capture_on_commit_callbacks):
    def broken_inventory(payload):
        raise RuntimeError("stock table locked")

    subscribe("order.created")(broken_inventory)
    try:
        with django_capture_on_commit_callbacks(execute=True):
            order = make_order()
    finally:
        unsubscribe("order.created", broken_inventory)

    assert Order.objects.filter(id=order.id).exists()
    assert LineItem.objects.filter(order_id=order.id).count() == 2
