"""Unavailability API: own/all scoping and block validation."""

import datetime as dt

import pytest

from paratransit.db.models import Unavailability


@pytest.fixture
def add_block(org_db):
    def factory(user, **overrides) -> Unavailability:
        values = {
            "user_id": user.id,
            "start_date": dt.date(2026, 5, 4),
            "end_date": dt.date(2026, 5, 4),
            "is_all_day": True,
        }
        values.update(overrides)
        block = Unavailability(**values)
        org_db.add(block)
        org_db.commit()
        return block
    return factory


@pytest.mark.asyncio
async def test_driver_manages_own_blocks(driver_client, driver_user):
    url = f"/o/testorg/users/{driver_user.id}/unavailability"

    response = await driver_client.post(url, json={
        "start_date": "2026-05-04",
        "end_date": "2026-05-06",
        "start_time": "09:00",
        "end_time": "12:00",
        "reason": "Vacation mornings",
    })
    assert response.status_code == 201
    block = response.json()
    assert block["user_id"] == str(driver_user.id)
    assert block["recurring_day_of_week"] is None

    response = await driver_client.get(url)
    assert [b["id"] for b in response.json()] == [block["id"]]

    response = await driver_client.patch(f"{url}/{block['id']}", json={"is_all_day": True})
    assert response.status_code == 200
    assert response.json()["start_time"] is None
    assert response.json()["end_time"] is None

    response = await driver_client.delete(f"{url}/{block['id']}")
    assert response.status_code == 204
    assert (await driver_client.get(url)).json() == []


@pytest.mark.asyncio
async def test_driver_cannot_touch_other_users_blocks(driver_client, make_driver, add_block):
    other = make_driver()
    block = add_block(other)
    url = f"/o/testorg/users/{other.id}/unavailability"

    assert (await driver_client.get(url)).status_code == 403
    response = await driver_client.post(url, json={
        "start_date": "2026-05-04", "end_date": "2026-05-04", "is_all_day": True,
    })
    assert response.status_code == 403
    assert (await driver_client.delete(f"{url}/{block.id}")).status_code == 403


@pytest.mark.asyncio
async def test_block_under_wrong_user_is_404(driver_client, driver_user, make_driver, add_block):
    block = add_block(make_driver())

    response = await driver_client.delete(
        f"/o/testorg/users/{driver_user.id}/unavailability/{block.id}"
    )
    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"start_date": "2026-05-06", "end_date": "2026-05-04", "is_all_day": True},
        {"start_date": "2026-05-04", "end_date": "2026-05-04", "start_time": "09:00"},
        {
            "start_date": "2026-05-04", "end_date": "2026-05-04",
            "start_time": "12:00", "end_time": "09:00",
        },
        {"start_date": "2026-05-04", "end_date": "2026-05-04", "is_all_day": True, "is_recurring": True},
        {
            "start_date": "2026-05-04", "end_date": "2026-05-04", "is_all_day": True,
            "is_recurring": True, "recurring_day_of_week": "Funday",
        },
    ],
)
async def test_invalid_blocks_are_rejected(driver_client, driver_user, payload):
    response = await driver_client.post(
        f"/o/testorg/users/{driver_user.id}/unavailability", json=payload
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_update_that_breaks_block_rules_is_400(driver_client, driver_user, add_block):
    block = add_block(driver_user, is_all_day=False, start_time=dt.time(9), end_time=dt.time(12))

    response = await driver_client.patch(
        f"/o/testorg/users/{driver_user.id}/unavailability/{block.id}",
        json={"end_time": "08:00"},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "end_time must be after start_time"


@pytest.mark.asyncio
async def test_list_all_filters_by_range_and_keeps_recurring(
    dispatcher_client, make_driver, add_block
):
    first, second = make_driver(), make_driver()
    in_range = add_block(first, start_date=dt.date(2026, 5, 4), end_date=dt.date(2026, 5, 8))
    add_block(first, start_date=dt.date(2026, 6, 1), end_date=dt.date(2026, 6, 1))
    weekly = add_block(
        second,
        start_date=dt.date(2025, 1, 6),
        end_date=dt.date(2025, 1, 6),
        is_recurring=True,
        recurring_day_of_week="Monday",
    )

    response = await dispatcher_client.get(
        "/o/testorg/users/unavailability",
        params={"start_date": "2026-05-01", "end_date": "2026-05-31"},
    )

    assert response.status_code == 200
    assert {b["id"] for b in response.json()} == {str(in_range.id), str(weekly.id)}

    response = await dispatcher_client.get(
        "/o/testorg/users/unavailability", params={"user_id": str(second.id)}
    )
    assert [b["id"] for b in response.json()] == [str(weekly.id)]


@pytest.mark.asyncio
async def test_list_all_requires_all_read(driver_client):
    response = await driver_client.get("/o/testorg/users/unavailability")
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_driver_reaches_own_blocks_with_uppercase_id(driver_client, driver_user, add_block):
    block = add_block(driver_user)

    response = await driver_client.get(
        f"/o/testorg/users/{str(driver_user.id).upper()}/unavailability"
    )

    assert response.status_code == 200
    assert [b["id"] for b in response.json()] == [str(block.id)]
