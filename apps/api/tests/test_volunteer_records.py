"""Volunteer record API: own/all scoping."""

from datetime import date
from decimal import Decimal

import pytest

from paratransit.db.models import VolunteerRecord


@pytest.fixture
def add_record(org_db):
    def factory(user, **overrides) -> VolunteerRecord:
        values = {"user_id": user.id, "date": date(2026, 4, 1), "hours": Decimal("2.00")}
        values.update(overrides)
        record = VolunteerRecord(**values)
        org_db.add(record)
        org_db.commit()
        return record
    return factory


@pytest.mark.asyncio
async def test_driver_logs_own_hours(driver_client, driver_user):
    response = await driver_client.post("/o/testorg/volunteer-records", json={
        "date": "2026-04-01", "hours": "2.5", "miles": "18", "description": "Two rides",
    })

    assert response.status_code == 201
    data = response.json()
    assert data["user_id"] == str(driver_user.id)
    assert Decimal(data["hours"]) == Decimal("2.5")


@pytest.mark.asyncio
async def test_driver_cannot_log_for_someone_else(driver_client, make_driver):
    other = make_driver()

    response = await driver_client.post("/o/testorg/volunteer-records", json={
        "user_id": str(other.id), "date": "2026-04-01", "hours": "1",
    })
    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.parametrize("hours", ["0", "-1", "24.5"])
async def test_hours_must_be_within_a_day(driver_client, hours):
    response = await driver_client.post("/o/testorg/volunteer-records", json={
        "date": "2026-04-01", "hours": hours,
    })
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_scoped_reads(driver_client, driver_user, make_driver, add_record):
    mine = add_record(driver_user)
    other = make_driver()
    theirs = add_record(other)

    response = await driver_client.get(f"/o/testorg/users/{driver_user.id}/volunteer-records")
    assert [r["id"] for r in response.json()["items"]] == [str(mine.id)]

    assert (await driver_client.get(f"/o/testorg/users/{other.id}/volunteer-records")).status_code == 403
    assert (await driver_client.get(f"/o/testorg/volunteer-records/{theirs.id}")).status_code == 403
    assert (await driver_client.get("/o/testorg/volunteer-records")).status_code == 403


@pytest.mark.asyncio
async def test_admin_sees_and_corrects_everyone(admin_client, make_driver, add_record):
    first, second = make_driver(), make_driver()
    older = add_record(first, date=date(2026, 3, 1))
    newer = add_record(second, date=date(2026, 3, 15))

    response = await admin_client.get("/o/testorg/volunteer-records")
    assert [r["id"] for r in response.json()["items"]] == [str(newer.id), str(older.id)]

    response = await admin_client.patch(
        f"/o/testorg/volunteer-records/{older.id}", json={"hours": "3"}
    )
    assert response.status_code == 200
    assert Decimal(response.json()["hours"]) == Decimal("3")

    response = await admin_client.patch(
        f"/o/testorg/volunteer-records/{older.id}", json={"hours": None}
    )
    assert response.status_code == 400

    # Admins correct records but do not delete them
    response = await admin_client.delete(f"/o/testorg/volunteer-records/{older.id}")
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_driver_deletes_own_record(driver_client, driver_user, add_record):
    record = add_record(driver_user)

    response = await driver_client.delete(f"/o/testorg/volunteer-records/{record.id}")
    assert response.status_code == 204
    assert (await driver_client.get(f"/o/testorg/volunteer-records/{record.id}")).status_code == 404


@pytest.mark.asyncio
async def test_driver_lists_own_records_with_uppercase_id(driver_client, driver_user, add_record):
    record = add_record(driver_user)

    response = await driver_client.get(
        f"/o/testorg/users/{str(driver_user.id).upper()}/volunteer-records"
    )

    assert response.status_code == 200
    assert [r["id"] for r in response.json()["items"]] == [str(record.id)]
