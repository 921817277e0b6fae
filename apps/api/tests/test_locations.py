"""Locations API: shared addresses with case-insensitive uniqueness."""

import pytest


ADDRESS = {
    "alias_name": "Senior Center",
    "address_line_1": "12 Maple Ave",
    "city": "Springfield",
    "state": "MA",
    "zip": "01103",
}


@pytest.mark.asyncio
async def test_create_location_defaults_country(admin_client):
    response = await admin_client.post("/o/testorg/locations", json=ADDRESS)

    assert response.status_code == 201
    data = response.json()
    assert data["country"] == "USA"
    assert data["address_validated"] is False


@pytest.mark.asyncio
async def test_duplicate_address_is_409_case_insensitive(admin_client):
    first = await admin_client.post("/o/testorg/locations", json=ADDRESS)

    response = await admin_client.post(
        "/o/testorg/locations",
        json={**ADDRESS, "address_line_1": "12 MAPLE AVE", "city": "springfield"},
    )

    assert response.status_code == 409
    assert response.json()["detail"]["existing_id"] == first.json()["id"]


@pytest.mark.asyncio
async def test_second_line_distinguishes_addresses(admin_client):
    await admin_client.post("/o/testorg/locations", json=ADDRESS)

    response = await admin_client.post(
        "/o/testorg/locations", json={**ADDRESS, "address_line_2": "Apt 2"}
    )
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_update_into_existing_address_is_409(admin_client, make_location):
    existing = make_location(address_line_1="1 Oak St")
    other = make_location(address_line_1="2 Oak St")

    response = await admin_client.patch(
        f"/o/testorg/locations/{other.id}", json={"address_line_1": "1 oak st"}
    )

    assert response.status_code == 409
    assert response.json()["detail"]["existing_id"] == str(existing.id)


@pytest.mark.asyncio
async def test_update_cannot_clear_city(admin_client, make_location):
    location = make_location()

    response = await admin_client.patch(f"/o/testorg/locations/{location.id}", json={"city": None})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_get_missing_location_is_404(admin_client):
    response = await admin_client.get(
        "/o/testorg/locations/00000000-0000-0000-0000-000000000000"
    )
    assert response.status_code == 404
