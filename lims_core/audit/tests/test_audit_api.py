import pytest

pytestmark = pytest.mark.django_db


def test_audit_events_filter_by_entity(api_client, make_order):
    order = make_order()
    make_order(tests=("hbsag",))

    r = api_client.get("/api/v1/audit/events/", {"entity_type": "Order", "entity_id": str(order.id)})
    assert r.status_code == 200, r.data
    assert [row["event_code"] for row in r.data["results"]] == ["order.created"]
    assert r.data["results"][0]["actor"] == "reception1"

    r = api_client.get("/api/v1/audit/events/", {"event_code": "order.created"})
    assert r.data["count"] == 2
