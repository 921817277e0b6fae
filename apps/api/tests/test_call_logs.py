"""Call log API tests."""

import pytest

from paratransit.services import call_log_service


@pytest.fixture
def call_type_id(org_db):
    types = {t.title: t.id for t in call_log_service.list_types(org_db)}
    return str(types["Ride request"])


def _call(call_type_id: str, **overrides) -> dict:
    payload = {
        "date": "2026-04-02",
        "call_type": call_type_id,
        "first_name": "  Walter   ",
        "last_name": "Caller",
        "phone_number": "(413) 555-0199",
        "message": "Needs a ride Tuesday",
    }
    payload.update(overrides)
    return payload


def test_seeding_call_types_is_idempotent(org_db):
    assert call_log_service.seed_call_log_types(org_db) == 0
    assert len(call_log_service.list_types(org_db)) == len(call_log_service.DEFAULT_CALL_LOG_TYPES)


@pytest.mark.asyncio
async def test_list_call_types(dispatcher_client):
    response = await dispatcher_client.get("/o/testorg/call-logs/types")

    assert response.status_code == 200
    titles = [t["title"] for t in response.json()]
    assert titles == sorted(call_log_service.DEFAULT_CALL_LOG_TYPES)


@pytest.mark.asyncio
async def test_create_normalizes_caller(dispatcher_client, dispatcher_user, call_type_id):
    response = await dispatcher_client.post("/o/testorg/call-logs", json=_call(call_type_id))

    assert response.status_code == 201
    data = response.json()
    assert data["first_name"] == "Walter"
    assert data["phone_number"] == "+14135550199"
    assert data["created_by_user_id"] == str(dispatcher_user.id)


@pytest.mark.asyncio
async def test_create_with_unknown_type_is_400(dispatcher_client):
    response = await dispatcher_client.post(
        "/o/testorg/call-logs", json=_call("00000000-0000-0000-0000-000000000000")
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Unknown call type"


@pytest.mark.asyncio
async def test_create_with_bad_phone_is_422(dispatcher_client, call_type_id):
    response = await dispatcher_client.post(
        "/o/testorg/call-logs", json=_call(call_type_id, phone_number="555")
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_newest_first_with_search(dispatcher_client, call_type_id):
    await dispatcher_client.post(
        "/o/testorg/call-logs", json=_call(call_type_id, date="2026-04-01", last_name="Older")
    )
    await dispatcher_client.post(
        "/o/testorg/call-logs", json=_call(call_type_id, date="2026-04-03", last_name="Newer")
    )

    response = await dispatcher_client.get("/o/testorg/call-logs")
    assert [c["last_name"] for c in response.json()["items"]] == ["Newer", "Older"]

    response = await dispatcher_client.get("/o/testorg/call-logs", params={"search": "old"})
    assert [c["last_name"] for c in response.json()["items"]] == ["Older"]

    response = await dispatcher_client.get(
        "/o/testorg/call-logs", params={"start_date": "2026-04-02"}
    )
    assert response.json()["total"] == 1


@pytest.mark.asyncio
async def test_update_and_clear_rules(dispatcher_client, call_type_id):
    created = (await dispatcher_client.post("/o/testorg/call-logs", json=_call(call_type_id))).json()
    url = f"/o/testorg/call-logs/{created['id']}"

    response = await dispatcher_client.patch(url, json={"notes": "Booked for Tuesday"})
    assert response.status_code == 200
    assert response.json()["notes"] == "Booked for Tuesday"

    response = await dispatcher_client.patch(url, json={"last_name": None})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_delete_hides_entry(dispatcher_client, call_type_id):
    created = (await dispatcher_client.post("/o/testorg/call-logs", json=_call(call_type_id))).json()
    url = f"/o/testorg/call-logs/{created['id']}"

    assert (await dispatcher_client.delete(url)).status_code == 204
    assert (await dispatcher_client.get(url)).status_code == 404
    assert (await dispatcher_client.get("/o/testorg/call-logs")).json()["total"] == 0


@pytest.mark.asyncio
async def test_driver_cannot_read_call_logs(driver_client):
    response = await driver_client.get("/o/testorg/call-logs")
    assert response.status_code == 403
    assert response.json()["detail"] == "Missing permission: calllogs.read"
