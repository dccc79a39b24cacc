import pytest

pytestmark = pytest.mark.django_db


def test_create_and_list_doctors(api_client, doctor):
    r = api_client.post(
        "/api/v1/doctors/",
        {"name": "Dr. New", "commission_percentage": "7.50"},
        format="json",
    )
    assert r.status_code == 201, r.data
    assert r.data["commission_percentage"] == "7.50"

    r = api_client.get("/api/v1/doctors/")
    assert {row["name"] for row in r.data["results"]} == {"Dr. New", "Dr. Referrer"}


def test_commission_rate_must_be_a_percentage(api_client):
    r = api_client.post(
        "/api/v1/doctors/",
        {"name": "Dr. Greedy", "commission_percentage": "120"},
        format="json",
    )
    assert r.status_code == 400
    assert r.data["error"]["code"] == "validation_error"
