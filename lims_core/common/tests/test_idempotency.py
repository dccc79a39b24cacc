import pytest
from django.db import transaction

from lims_core.common.api.exceptions import ConflictError
from lims_core.common.idempotency import (
    PENDING_STATUS,
    load_response,
    release,
    reserve,
    save_response,
)
from lims_core.common.models import IdempotencyRecord
from lims_core.orders.models import Order

URL = "/api/v1/orders/"


def test_memory_reservation_blocks_second_request_until_saved():
    args = (1, "post", URL, "k-1")

    assert reserve(*args) is None
    with pytest.raises(ConflictError):
        reserve(*args)
    assert load_response(*args) is None

    save_response(*args, {"id": 7}, 201)
    assert reserve(*args) == {"id": 7}


def test_memory_release_frees_the_key():
    args = (1, "POST", URL, "k-2")

    reserve(*args)
    release(*args)

    assert reserve(*args) is None


def test_memory_store_is_bounded(settings):
    settings.COMMON_IDEMPOTENCY_MEMORY_MAX = 2

    for key in ("a", "b", "c"):
        save_response(1, "POST", URL, key, {"key": key})

    assert load_response(1, "POST", URL, "a") is None
    assert load_response(1, "POST", URL, "b") == {"key": "b"}
    assert load_response(1, "POST", URL, "c") == {"key": "c"}


@pytest.mark.django_db
def test_db_reservation_is_a_pending_row(settings):
    settings.COMMON_IDEMPOTENCY_USE_DB = True
    args = (1, "POST", URL, "k-3")

    with transaction.atomic():
        assert reserve(*args) is None
        rec = IdempotencyRecord.objects.get(idempotency_key="k-3")
        assert rec.status_code == PENDING_STATUS

        with pytest.raises(ConflictError):
            reserve(*args)
        assert load_response(*args) is None

        save_response(*args, {"id": 9}, 201)

    assert reserve(*args) == {"id": 9}
    rec.refresh_from_db()
    assert rec.status_code == 201
    assert IdempotencyRecord.objects.count() == 1


@pytest.mark.django_db
def test_db_reservation_rolls_back_with_the_write(settings):
    settings.COMMON_IDEMPOTENCY_USE_DB = True
    args = (1, "POST", URL, "k-4")

    with pytest.raises(RuntimeError):
        with transaction.atomic():
            reserve(*args)
            raise RuntimeError("write failed")

    assert not IdempotencyRecord.objects.exists()
    assert reserve(*args) is None


# -------------------------------------------------------------------
# Over HTTP
# -------------------------------------------------------------------

def _payload(patient, lab_tests, **extra):
    data = {"patient_id": patient.id, "test_ids": [lab_tests["hbsag"].id], "cash_paid": "0.00"}
    data.update(extra)
    return data


@pytest.mark.django_db
def test_db_mode_double_post_replays_first_order(api_client, patient, lab_tests, settings):
    settings.COMMON_IDEMPOTENCY_USE_DB = True
    headers = {"HTTP_IDEMPOTENCY_KEY": "order-db-1"}

    r1 = api_client.post(URL, _payload(patient, lab_tests), format="json", **headers)
    r2 = api_client.post(URL, _payload(patient, lab_tests), format="json", **headers)

    assert r1.status_code == 201, r1.data
    assert r2.status_code == 201, r2.data
    assert r2.data["id"] == r1.data["id"]
    assert Order.objects.count() == 1
    rec = IdempotencyRecord.objects.get(idempotency_key="order-db-1")
    assert rec.status_code == 201
    assert rec.response_data["id"] == r1.data["id"]


@pytest.mark.django_db
@pytest.mark.parametrize("use_db", [False, True])
def test_key_still_in_flight_is_conflict(api_client, user, patient, lab_tests, settings, use_db):
    settings.COMMON_IDEMPOTENCY_USE_DB = use_db
    if use_db:
        IdempotencyRecord.objects.create(
            user_id=user.id,
            method="POST",
            path=URL,
            idempotency_key="busy",
            status_code=PENDING_STATUS,
        )
    else:
        reserve(user.id, "POST", URL, "busy")

    r = api_client.post(URL, _payload(patient, lab_tests), format="json", HTTP_IDEMPOTENCY_KEY="busy")

    assert r.status_code == 409
    assert r.data["error"]["code"] == "conflict"
    assert Order.objects.count() == 0


@pytest.mark.django_db
@pytest.mark.parametrize("use_db", [False, True])
def test_failed_submit_does_not_burn_the_key(api_client, patient, lab_tests, settings, use_db):
    settings.COMMON_IDEMPOTENCY_USE_DB = use_db
    headers = {"HTTP_IDEMPOTENCY_KEY": "retry-me"}

    r = api_client.post(URL, _payload(patient, lab_tests, test_ids=[]), format="json", **headers)
    assert r.status_code == 400

    r = api_client.post(URL, _payload(patient, lab_tests), format="json", **headers)
    assert r.status_code == 201, r.data
    assert Order.objects.count() == 1
