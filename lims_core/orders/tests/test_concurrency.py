"""
Two clerks hitting the same order at the same moment.

SQLite ignores select_for_update, so these run against PostgreSQL only:
    DJANGO_SETTINGS_MODULE=config.settings.test_postgres pytest -m postgres
"""
import threading
from decimal import Decimal

import pytest
from django.db import connection, connections
from rest_framework.test import APIClient

from lims_core.audit.models import AuditEvent
from lims_core.common.api.exceptions import ConflictError
from lims_core.lab.services import ResultWorkflowService
from lims_core.orders.models import Order, OrderPayment, OrderStatus
from lims_core.orders.services import OrderBillingService

pytestmark = [pytest.mark.postgres, pytest.mark.django_db(transaction=True)]


@pytest.fixture(autouse=True)
def _row_locks_required():
    if connection.vendor != "postgresql":
        pytest.skip("row locking needs PostgreSQL (config.settings.test_postgres)")


def _run_together(*calls):
    """Start every call at the same instant, each on its own connection."""
    barrier = threading.Barrier(len(calls))
    outcomes = [None] * len(calls)

    def worker(i, fn):
        try:
            barrier.wait(timeout=10)
            outcomes[i] = fn()
        except Exception as exc:
            outcomes[i] = exc
        finally:
            connections.close_all()

    threads = [threading.Thread(target=worker, args=(i, fn)) for i, fn in enumerate(calls)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)
    return outcomes


def test_concurrent_payments_are_both_counted(make_order, actor):
    order = make_order()  # 800.00

    outcomes = _run_together(
        lambda: OrderBillingService.apply_payment(order_id=order.id, amount="300", actor=actor),
        lambda: OrderBillingService.apply_payment(order_id=order.id, amount="200", actor=actor),
    )

    assert all(isinstance(o, Order) for o in outcomes), outcomes
    order.refresh_from_db()
    assert order.paid_amount == Decimal("500.00")
    assert order.balance_due == Decimal("300.00")
    assert OrderPayment.objects.filter(order=order).count() == 2


def test_concurrent_completion_exactly_one_wins(make_order, actor):
    order = make_order(tests=("glucose",))
    item = order.line_items.get()
    ResultWorkflowService.record_result(order_id=order.id, line_item_id=item.id, raw_value="12", actor=actor)

    outcomes = _run_together(
        lambda: ResultWorkflowService.complete_order(order_id=order.id, actor=actor),
        lambda: ResultWorkflowService.complete_order(order_id=order.id, actor=actor),
    )

    winners = [o for o in outcomes if isinstance(o, Order)]
    conflicts = [o for o in outcomes if isinstance(o, ConflictError)]
    assert len(winners) == 1, outcomes
    assert len(conflicts) == 1, outcomes
    assert conflicts[0].current_status == OrderStatus.COMPLETED

    order.refresh_from_db()
    assert order.status == OrderStatus.COMPLETED
    assert AuditEvent.objects.filter(event_code="order.completed", entity_id=str(order.id)).count() == 1


def test_overlapping_double_submit_creates_one_order(user, patient, lab_tests, settings):
    settings.COMMON_IDEMPOTENCY_USE_DB = True
    payload = {"patient_id": patient.id, "test_ids": [lab_tests["glucose"].id], "cash_paid": "0.00"}

    def submit():
        client = APIClient()
        client.force_authenticate(user=user)
        return client.post("/api/v1/orders/", payload, format="json", HTTP_IDEMPOTENCY_KEY="two-windows")

    outcomes = _run_together(submit, submit)

    assert Order.objects.count() == 1
    codes = sorted(r.status_code for r in outcomes)
    # the loser either waited on the key and replayed, or saw it still in flight
    assert codes in ([201, 201], [201, 409]), outcomes
    created = [r.data["id"] for r in outcomes if r.status_code == 201]
    assert set(created) == {Order.objects.get().id}
