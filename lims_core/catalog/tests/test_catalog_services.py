from decimal import Decimal

import pytest
from rest_framework.exceptions import ValidationError

from lims_core.catalog.selectors import resolve_tests
from lims_core.catalog.services import TestDefinitionService
from lims_core.common.api.exceptions import NotFoundError

pytestmark = pytest.mark.django_db


def test_upsert_creates_then_updates_by_short_code():
    t = TestDefinitionService.upsert(short_code="cbc", test_name="CBC", price="500")
    assert t.price == Decimal("500.00")

    t2 = TestDefinitionService.upsert(short_code="cbc", test_name="Complete Blood Count", price=650)
    assert t2.id == t.id
    assert t2.test_name == "Complete Blood Count"
    assert t2.price == Decimal("650.00")


def test_upsert_rejects_negative_price_and_inverted_range():
    with pytest.raises(ValidationError):
        TestDefinitionService.upsert(short_code="x", test_name="X", price="-1")
    with pytest.raises(ValidationError):
        TestDefinitionService.upsert(short_code="y", test_name="Y", price="1", min_range=10, max_range=5)


def test_resolve_tests_keeps_requested_order_and_reports_missing(lab_tests):
    a, b = lab_tests["glucose"], lab_tests["cbc"]
    assert [t.id for t in resolve_tests([b.id, a.id])] == [b.id, a.id]

    with pytest.raises(NotFoundError) as exc:
        resolve_tests([a.id, 999999])
    assert "999999" in str(exc.value.detail)


def test_resolve_tests_ignores_inactive_tests(lab_tests):
    t = lab_tests["cbc"]
    t.is_active = False
    t.save()
    with pytest.raises(NotFoundError):
        resolve_tests([t.id])
