# conftest.py
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from lims_core.catalog.services import TestDefinitionService
from lims_core.common.idempotency import clear_memory_store
from lims_core.doctors.models import Doctor
from lims_core.patients.models import Patient
from lims_core.suppliers.models import Supplier


@pytest.fixture(autouse=True)
def _reset_idempotency_store():
    clear_memory_store()
    yield
    clear_memory_store()


@pytest.fixture
def user(db):
    return get_user_model().objects.create_user(
        username="reception1",
        password="testpass",
        is_active=True,
    )


@pytest.fixture
def api_client(user):
    c = APIClient()
    c.force_authenticate(user=user)
    return c


@pytest.fixture
def actor(user):
    return user.username


@pytest.fixture
def patient(db):
    return Patient.objects.create(full_name="Test Patient", mrn="MRN-TEST-001", phone="0300-0000000")


@pytest.fixture
def doctor(db):
    return Doctor.objects.create(name="Dr. Referrer", commission_percentage=Decimal("10.00"))


@pytest.fixture
def doctor_without_commission(db):
    return Doctor.objects.create(name="Dr. Walk-in", commission_percentage=Decimal("0.00"))


@pytest.fixture
def lab_tests(db):
    """
    A: 500 with a numeric range, B: 300 with a numeric range,
    plus a qualitative test with no range.
    """
    return {
        "glucose": TestDefinitionService.upsert(
            short_code="glucose",
            test_name="Glucose (Fasting)",
            unit="mg/dL",
            min_range=Decimal("10"),
            max_range=Decimal("20"),
            price=Decimal("500.00"),
        ),
        "cbc": TestDefinitionService.upsert(
            short_code="cbc",
            test_name="Haemoglobin",
            unit="g/dL",
            min_range=Decimal("70"),
            max_range=Decimal("100"),
            price=Decimal("300.00"),
        ),
        "hbsag": TestDefinitionService.upsert(
            short_code="hbsag",
            test_name="HBsAg",
            price=Decimal("200.00"),
        ),
    }


@pytest.fixture
def supplier(db):
    return Supplier.objects.create(name="MedSupply Co.")


@pytest.fixture
def make_order(patient, lab_tests, actor):
    """
    make_order(tests=("glucose", "cbc"), doctor=None, discount=0, cash_paid=0)
    """
    from lims_core.orders.services import OrderBillingService

    def _make(tests=("glucose", "cbc"), doctor=None, discount="0", cash_paid="0"):
        return OrderBillingService.create_order(
            patient_id=patient.id,
            doctor_id=doctor.id if doctor else None,
            test_ids=[lab_tests[t].id for t in tests],
            discount=discount,
            cash_paid=cash_paid,
            actor=actor,
        )

    return _make
