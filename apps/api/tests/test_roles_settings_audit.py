"""Roles, organization settings and the audit log."""

import pytest

from paratransit.services import permission_service


# =============================================================================
# Roles
# =============================================================================

@pytest.mark.asyncio
async def test_default_roles_are_seeded(admin_client):
    response = await admin_client.get("/o/testorg/roles")

    assert response.status_code == 200
    roles = {r["role_key"]: r for r in response.json()}
    assert {"admin", "dispatcher", "driver"} <= set(roles)
    assert all(r["is_system"] for r in roles.values())
    assert "users.delete" not in roles["admin"]["permissions"]
    assert "users.delete" in roles["dispatcher"]["permissions"]


@pytest.mark.asyncio
async def test_custom_role_grants_access(admin_client, client_for, make_user):
    response = await admin_client.post("/o/testorg/roles", json={
        "role_key": "scheduler",
        "name": "Scheduler",
        "permissions": ["allappointments.read", "clients.read"],
    })
    assert response.status_code == 201
    assert sorted(response.json()["permissions"]) == ["allappointments.read", "clients.read"]
    assert response.json()["is_system"] is False

    scheduler = make_user("scheduler")
    async with client_for(scheduler) as c:
        assert (await c.get("/o/testorg/appointments")).status_code == 200
        assert (await c.get("/o/testorg/users")).status_code == 403


@pytest.mark.asyncio
async def test_duplicate_role_is_409(admin_client, org_db):
    driver_role = permission_service.get_role_by_key(org_db, "driver")

    response = await admin_client.post("/o/testorg/roles", json={
        "role_key": "driver", "name": "Another Driver",
    })

    assert response.status_code == 409
    assert response.json()["detail"]["existing_id"] == str(driver_role.id)


@pytest.mark.asyncio
async def test_role_with_unknown_permission_is_400(admin_client):
    response = await admin_client.post("/o/testorg/roles", json={
        "role_key": "broken", "name": "Broken", "permissions": ["rides.fly"],
    })
    assert response.status_code == 400
    assert response.json()["detail"] == "Unknown permissions: rides.fly"


@pytest.mark.asyncio
async def test_role_key_must_be_a_slug(admin_client):
    response = await admin_client.post("/o/testorg/roles", json={
        "role_key": "Night Shift", "name": "Night Shift",
    })
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_system_roles_are_read_only(admin_client, org_db):
    driver_role = permission_service.get_role_by_key(org_db, "driver")
    url = f"/o/testorg/roles/{driver_role.id}"

    assert (await admin_client.patch(url, json={"name": "Chauffeur"})).status_code == 403
    assert (await admin_client.delete(url)).status_code == 403


@pytest.mark.asyncio
async def test_update_and_delete_custom_role(admin_client, make_user):
    created = (await admin_client.post("/o/testorg/roles", json={
        "role_key": "reporter", "name": "Reporter", "permissions": ["reports.read"],
    })).json()
    holder = make_user("reporter")
    url = f"/o/testorg/roles/{created['id']}"

    response = await admin_client.patch(url, json={"permissions": ["reports.read", "reports.export"]})
    assert response.status_code == 200
    assert sorted(response.json()["permissions"]) == ["reports.export", "reports.read"]

    assert (await admin_client.delete(url)).status_code == 204
    assert (await admin_client.get(url)).status_code == 404

    response = await admin_client.get(f"/o/testorg/users/{holder.id}")
    assert response.json()["role_key"] is None


@pytest.mark.asyncio
async def test_permission_registry(admin_client):
    response = await admin_client.get("/o/testorg/permissions")

    assert response.status_code == 200
    keys = [p["perm_key"] for p in response.json()]
    assert "ownappointments.read" in keys
    assert "organizations.read" not in keys


# =============================================================================
# Settings
# =============================================================================

@pytest.mark.asyncio
async def test_settings_defaults(admin_client):
    response = await admin_client.get("/o/testorg/settings")

    assert response.status_code == 200
    assert response.json() == {
        "timezone": "America/New_York",
        "close_time": "17:00",
        "digest_enabled": True,
        "last_digest_date": None,
    }


@pytest.mark.asyncio
async def test_update_settings(admin_client):
    response = await admin_client.patch("/o/testorg/settings", json={
        "timezone": "America/Chicago", "close_time": "18:30",
    })

    assert response.status_code == 200
    assert response.json()["timezone"] == "America/Chicago"
    assert response.json()["close_time"] == "18:30"
    assert response.json()["digest_enabled"] is True


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [{"timezone": "Mars/Olympus"}, {"close_time": "25:00"}, {"close_time": "5pm"}],
)
async def test_invalid_settings_are_422(admin_client, payload):
    response = await admin_client.patch("/o/testorg/settings", json=payload)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_dispatcher_cannot_change_settings(dispatcher_client):
    response = await dispatcher_client.patch("/o/testorg/settings", json={"digest_enabled": False})
    assert response.status_code == 403


# =============================================================================
# Audit log
# =============================================================================

@pytest.mark.asyncio
async def test_mutations_are_audited(admin_client, admin_user):
    created = (await admin_client.post("/o/testorg/roles", json={
        "role_key": "auditor", "name": "Auditor", "permissions": ["auditlog.read"],
    })).json()

    response = await admin_client.get(
        "/o/testorg/audit-log", params={"object_id": created["id"]}
    )

    assert response.status_code == 200
    entries = response.json()["items"]
    assert len(entries) == 1
    assert entries[0]["action_type"] == "add"
    assert entries[0]["user_id"] == str(admin_user.id)
    assert entries[0]["action_details"] == {"permissions": ["auditlog.read"]}


@pytest.mark.asyncio
async def test_settings_change_records_diff(admin_client):
    await admin_client.patch("/o/testorg/settings", json={"close_time": "16:00"})

    response = await admin_client.get("/o/testorg/audit-log", params={"action_type": "change"})

    entry = response.json()["items"][0]
    assert entry["action_message"] == "Organization settings updated"
    assert entry["action_details"] == {"close_time": {"from": "17:00", "to": "16:00"}}


@pytest.mark.asyncio
async def test_audit_log_requires_permission(dispatcher_client):
    response = await dispatcher_client.get("/o/testorg/audit-log")
    assert response.status_code == 403
