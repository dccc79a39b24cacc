import datetime
from decimal import Decimal

import pytest

from lims_core.audit.models import AuditEvent
from lims_core.audit.services import AuditService

pytestmark = pytest.mark.django_db


def test_nested_metadata_is_stored_as_json():
    AuditService.log(
        event_code="supplier.transaction_recorded",
        entity_type="SupplierLedgerEntry",
        entity_id=11,
        actor="accounts1",
        metadata={
            "bill_amount": Decimal("1200.50"),
            "invoice_date": datetime.date(2026, 3, 1),
            "lines": [{"item": "gloves", "amount": Decimal("200.00")}, Decimal("5.25")],
            "totals": {"paid": Decimal("0.00")},
        },
    )

    event = AuditEvent.objects.get(entity_type="SupplierLedgerEntry", entity_id="11")
    assert event.metadata == {
        "bill_amount": "1200.50",
        "invoice_date": "2026-03-01",
        "lines": [{"item": "gloves", "amount": "200.00"}, "5.25"],
        "totals": {"paid": "0.00"},
    }
