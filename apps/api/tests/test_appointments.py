"""Appointments API: scheduling, assignment, status flow and own-ride scoping."""

import datetime as dt

import pytest

from paratransit.db.enums import AppointmentStatus
from paratransit.services import permission_service

@pytest.fixture
def ride_payload(make_client, make_location):
    def build(**overrides) -> dict:
        payload = {
            "client_id": str(make_client().id),
            "start_date": (dt.date.today() + dt.timedelta(days=2)).isoformat(),
            "start_time": "09:30",
            "estimated_duration_minutes": 45,
            "pickup_location": str(make_location().id),
            "destination_location": str(make_location(city="Holyoke").id),
            "trip_purpose": "Medical",
        }
        payload.update(overrides)
        return payload
    return build

# =============================================================================
# Create
# =============================================================================

@pytest.mark.asyncio
async def test_create_unassigned_ride(dispatcher_client, dispatcher_user, ride_payload):
    response = await dispatcher_client.post("/o/testorg/appointments", json=ride_payload())

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "Unassigned"
    assert data["driver_id"] is None
    assert data["dispatcher_id"] == str(dispatcher_user.id)
    assert data["created_by_user_id"] == str(dispatcher_user.id)
    assert data["donation_type"] == "None"
    assert data["client_name"].startswith("Rider ")


@pytest.mark.asyncio
async def test_create_with_driver_is_scheduled(dispatcher_client, driver_user, ride_payload):
    response = await dispatcher_client.post(
        "/o/testorg/appointments", json=ride_payload(driver_id=str(driver_user.id))
    )

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "Scheduled"
    assert data["driver_name"] == "Drew Driver"


@pytest.mark.asyncio
async def test_create_with_non_driver_is_400(dispatcher_client, admin_user, ride_payload):
    response = await dispatcher_client.post(
        "/o/testorg/appointments", json=ride_payload(driver_id=str(admin_user.id))
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_create_for_inactive_client_is_400(dispatcher_client, make_client, ride_payload):
    rider = make_client(is_active=False)

    response = await dispatcher_client.post(
        "/o/testorg/appointments", json=ride_payload(client_id=str(rider.id))
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Client not found or inactive"


@pytest.mark.asyncio
async def test_create_with_unknown_location_is_400(dispatcher_client, ride_payload):
    response = await dispatcher_client.post(
        "/o/testorg/appointments",
        json=ride_payload(pickup_location="00000000-0000-0000-0000-000000000000"),
    )
    assert response.status_code == 400

# =============================================================================
# Assignment & status flow
# =============================================================================

@pytest.mark.asyncio
async def test_assign_and_unassign_driver(dispatcher_client, driver_user, make_appointment):
    ride = make_appointment()

    response = await dispatcher_client.post(
        f"/o/testorg/appointments/{ride.id}/assign", json={"driver_id": str(driver_user.id)}
    )
    assert response.status_code == 200
    assert response.json()["status"] == "Scheduled"
    assert response.json()["driver_id"] == str(driver_user.id)

    response = await dispatcher_client.post(
        f"/o/testorg/appointments/{ride.id}/assign", json={"driver_id": None}
    )
    assert response.status_code == 200
    assert response.json()["status"] == "Unassigned"
    assert response.json()["driver_id"] is None


@pytest.mark.asyncio
async def test_assign_inactive_driver_is_400(dispatcher_client, make_driver, make_appointment):
    retired = make_driver(is_active=False)
    ride = make_appointment()

    response = await dispatcher_client.post(
        f"/o/testorg/appointments/{ride.id}/assign", json={"driver_id": str(retired.id)}
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_scheduling_without_driver_is_400(dispatcher_client, make_appointment):
    ride = make_appointment()

    response = await dispatcher_client.post(
        f"/o/testorg/appointments/{ride.id}/status", json={"status": "Scheduled"}
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Assign a driver before scheduling"


@pytest.mark.asyncio
async def test_unassigned_ride_cannot_complete(dispatcher_client, make_appointment):
    ride = make_appointment()

    response = await dispatcher_client.post(
        f"/o/testorg/appointments/{ride.id}/status", json={"status": "Completed"}
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Cannot change status from Unassigned to Completed"


@pytest.mark.asyncio
async def test_back_to_unassigned_clears_driver(dispatcher_client, driver_user, make_appointment):
    ride = make_appointment(driver_id=driver_user.id)

    response = await dispatcher_client.post(
        f"/o/testorg/appointments/{ride.id}/status",
        json={"status": "Unassigned", "reason": "Driver sick"},
    )

    assert response.status_code == 200
    assert response.json()["driver_id"] is None


@pytest.mark.asyncio
@pytest.mark.parametrize("terminal", ["Cancelled", "Withdrawn"])
async def test_terminal_rides_are_frozen(dispatcher_client, driver_user, make_appointment, terminal):
    ride = make_appointment(driver_id=driver_user.id)

    response = await dispatcher_client.post(
        f"/o/testorg/appointments/{ride.id}/status", json={"status": terminal}
    )
    assert response.status_code == 200
    assert response.json()["driver_id"] == str(driver_user.id)

    response = await dispatcher_client.post(
        f"/o/testorg/appointments/{ride.id}/status", json={"status": "Scheduled"}
    )
    assert response.status_code == 400

    response = await dispatcher_client.patch(
        f"/o/testorg/appointments/{ride.id}", json={"notes": "too late"}
    )
    assert response.status_code == 400

    response = await dispatcher_client.post(
        f"/o/testorg/appointments/{ride.id}/assign", json={"driver_id": None}
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_update_ride_details(dispatcher_client, make_appointment):
    ride = make_appointment()

    response = await dispatcher_client.patch(
        f"/o/testorg/appointments/{ride.id}",
        json={"start_time": "14:15", "donation_type": "Cash", "donation_amount": "5.00"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["start_time"] == "14:15:00"
    assert data["donation_type"] == "Cash"


@pytest.mark.asyncio
async def test_update_cannot_clear_start_date(dispatcher_client, make_appointment):
    ride = make_appointment()

    response = await dispatcher_client.patch(
        f"/o/testorg/appointments/{ride.id}", json={"start_date": None}
    )
    assert response.status_code == 400

# =============================================================================
# Listing & own-ride scoping
# =============================================================================

@pytest.mark.asyncio
async def test_list_filters_and_orders_by_start(dispatcher_client, driver_user, make_appointment):
    today = dt.date.today()
    later = make_appointment(start_date=today + dt.timedelta(days=3))
    sooner = make_appointment(start_date=today + dt.timedelta(days=1))
    assigned = make_appointment(driver_id=driver_user.id, start_date=today + dt.timedelta(days=2))

    response = await dispatcher_client.get("/o/testorg/appointments")
    assert [a["id"] for a in response.json()["items"]] == [
        str(sooner.id), str(assigned.id), str(later.id),
    ]

    response = await dispatcher_client.get(
        "/o/testorg/appointments", params={"status": "Unassigned"}
    )
    assert response.json()["total"] == 2

    response = await dispatcher_client.get(
        "/o/testorg/appointments",
        params={"start_date": (today + dt.timedelta(days=2)).isoformat()},
    )
    assert response.json()["total"] == 2


@pytest.mark.asyncio
async def test_driver_only_sees_own_rides(driver_client, driver_user, make_driver, make_appointment):
    mine = make_appointment(driver_id=driver_user.id)
    theirs = make_appointment(driver_id=make_driver().id)
    make_appointment()

    response = await driver_client.get("/o/testorg/appointments")
    assert [a["id"] for a in response.json()["items"]] == [str(mine.id)]

    assert (await driver_client.get(f"/o/testorg/appointments/{mine.id}")).status_code == 200
    assert (await driver_client.get(f"/o/testorg/appointments/{theirs.id}")).status_code == 404


@pytest.mark.asyncio
async def test_driver_cannot_change_status_by_default(driver_client, driver_user, make_appointment):
    mine = make_appointment(driver_id=driver_user.id)

    response = await driver_client.post(
        f"/o/testorg/appointments/{mine.id}/status", json={"status": "Completed"}
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_driver_with_own_update_completes_own_ride(
    org_db, driver_client, driver_user, make_driver, make_appointment
):
    permission_service.set_user_overrides(
        org_db, driver_user, {"ownappointments.update": True}, driver_user.id
    )
    mine = make_appointment(driver_id=driver_user.id)
    theirs = make_appointment(driver_id=make_driver().id)

    response = await driver_client.post(
        f"/o/testorg/appointments/{mine.id}/status", json={"status": "Completed"}
    )
    assert response.status_code == 200
    assert response.json()["status"] == AppointmentStatus.COMPLETED.value

    response = await driver_client.post(
        f"/o/testorg/appointments/{theirs.id}/status", json={"status": "Completed"}
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_driver_cannot_create_or_assign(driver_client, driver_user, make_appointment, ride_payload):
    ride = make_appointment()

    response = await driver_client.post("/o/testorg/appointments", json=ride_payload())
    assert response.status_code == 403

    response = await driver_client.post(
        f"/o/testorg/appointments/{ride.id}/assign", json={"driver_id": str(driver_user.id)}
    )
    assert response.status_code == 403
