"""Driver daily digest: scheduling, composition and the cron endpoint."""

import datetime as dt

import pytest

from paratransit.core.config import settings
from paratransit.db.models import Message
from paratransit.db.session import SessionLocal
from paratransit.services import digest_service, org_settings_service
from paratransit.services.email_sender import OutboxEmailSender

UTC = dt.timezone.utc
# 18:30 in New York (EDT) on Wednesday 2026-03-11
AFTER_CLOSE = dt.datetime(2026, 3, 11, 22, 30, tzinfo=UTC)
# 16:30 in New York
BEFORE_CLOSE = dt.datetime(2026, 3, 11, 20, 30, tzinfo=UTC)
RIDE_DATE = dt.date(2026, 3, 12)

def org_session_factory(subdomain: str):
    return SessionLocal()


@pytest.fixture
def org_settings(org_db):
    return org_settings_service.get_or_create_settings(org_db)

# =============================================================================
# Scheduling
# =============================================================================

def test_is_due_after_local_close_time(org_settings):
    assert digest_service.is_due(org_settings, AFTER_CLOSE)
    assert not digest_service.is_due(org_settings, BEFORE_CLOSE)


def test_is_due_once_per_local_day(org_settings):
    org_settings.last_digest_date = dt.date(2026, 3, 11)
    assert not digest_service.is_due(org_settings, AFTER_CLOSE)

    # 00:30 UTC on the 12th is still the 11th in New York
    assert not digest_service.is_due(org_settings, dt.datetime(2026, 3, 12, 0, 30, tzinfo=UTC))


def test_is_due_respects_timezone_and_enable_flag(org_settings):
    org_settings.timezone = "America/Los_Angeles"
    assert not digest_service.is_due(org_settings, AFTER_CLOSE)  # 15:30 in LA

    org_settings.timezone = "America/New_York"
    org_settings.digest_enabled = False
    assert not digest_service.is_due(org_settings, AFTER_CLOSE)

# =============================================================================
# Composition
# =============================================================================

def test_compose_digest(org_db, driver_user, make_client, make_location, make_appointment):
    rider = make_client(first_name="Margaret", last_name="Hale")
    pickup = make_location(address_line_1="12 Elm St", address_line_2="Apt 3")
    make_appointment(
        client_id=rider.id,
        pickup_location=pickup.id,
        start_date=RIDE_DATE,
        start_time=dt.time(14, 5),
    )
    rides = digest_service.upcoming_unassigned_rides(org_db, dt.date(2026, 3, 11), 7)

    subject, body = digest_service.compose_digest(driver_user, rides)

    assert subject == "Daily Ride Notifications - 1 New Opportunity"
    assert body.startswith("Hello Drew Driver,\n\nYou have 1 new ride notification:\n")
    assert "1. Ride on March 12, 2026 2:05 PM" in body
    assert "   Client: Margaret Hale" in body
    assert "   Pickup: 12 Elm St, Apt 3, Springfield, MA 01103" in body
    assert "   Pickup Maps: https://www.google.com/maps/search/?api=1&query=12+Elm+St%2C+Apt+3" in body
    assert body.endswith("Thank you")


def test_upcoming_rides_window(org_db, driver_user, make_appointment):
    start = dt.date(2026, 3, 11)
    inside = make_appointment(start_date=start + dt.timedelta(days=7))
    make_appointment(start_date=start + dt.timedelta(days=8))
    make_appointment(start_date=start - dt.timedelta(days=1))
    make_appointment(start_date=start, driver_id=driver_user.id)

    rides = digest_service.upcoming_unassigned_rides(org_db, start, 7)

    assert [r.id for r in rides] == [inside.id]


def test_qualifying_rides_use_accessibility_filter(
    org_db, make_driver, make_client, make_appointment
):
    oxygen_rider = make_client(has_oxygen=True)
    plain = make_appointment(start_date=RIDE_DATE)
    needs_oxygen = make_appointment(client_id=oxygen_rider.id, start_date=RIDE_DATE)
    rides = digest_service.upcoming_unassigned_rides(org_db, dt.date(2026, 3, 11), 7)

    basic = make_driver()
    equipped = make_driver(can_accommodate_oxygen=True)

    assert [r.id for r in digest_service.qualifying_rides(basic, rides)] == [plain.id]
    assert {r.id for r in digest_service.qualifying_rides(equipped, rides)} == {
        plain.id, needs_oxygen.id,
    }

# =============================================================================
# Runner
# =============================================================================

def test_run_org_digest_queues_and_sends(org_db, outbox, driver_user, make_driver, make_appointment):
    make_driver(is_active=False)
    make_appointment(start_date=RIDE_DATE)

    counts = digest_service.run_org_digest(org_db, outbox, AFTER_CLOSE)

    assert counts == {"queued": 1, "sent": 1, "failed": 0}
    assert [m["to"] for m in outbox.sent] == ["driver@test.com"]
    org_db.expire_all()
    settings_row = org_settings_service.get_or_create_settings(org_db)
    assert settings_row.last_digest_date == dt.date(2026, 3, 11)

    # Second run the same evening is a no-op
    assert digest_service.run_org_digest(org_db, outbox, AFTER_CLOSE) is None
    assert len(outbox.sent) == 1


def test_run_org_digest_without_rides_still_marks_the_day(org_db, outbox, driver_user):
    counts = digest_service.run_org_digest(org_db, outbox, AFTER_CLOSE)

    assert counts == {"queued": 0, "sent": 0, "failed": 0}
    assert outbox.sent == []
    assert org_db.query(Message).count() == 0


def test_run_driver_digests_counts_failures(db, test_org, driver_user, make_appointment):
    make_appointment(start_date=RIDE_DATE)
    sender = OutboxEmailSender(fail_for={"driver@test.com"})

    result = digest_service.run_driver_digests(db, org_session_factory, sender, AFTER_CLOSE)

    assert result.as_dict() == {
        "orgs_checked": 1,
        "orgs_processed": 1,
        "messages_queued": 1,
        "messages_sent": 0,
        "messages_failed": 1,
    }
    assert result.processed == ["testorg"]


def test_run_driver_digests_skips_orgs_not_due(db, test_org, outbox):
    result = digest_service.run_driver_digests(db, org_session_factory, outbox, BEFORE_CLOSE)

    assert result.orgs_checked == 1
    assert result.orgs_processed == 0

# =============================================================================
# Cron endpoint
# =============================================================================

@pytest.mark.asyncio
async def test_internal_endpoint_requires_secret(client, test_org):
    response = await client.post(
        "/internal/scheduled/driver-digest", headers={"X-Internal-Secret": "wrong"}
    )
    assert response.status_code == 403

    response = await client.post("/internal/scheduled/driver-digest")
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_internal_endpoint_unconfigured(client, monkeypatch):
    monkeypatch.setattr(settings, "INTERNAL_SECRET", "")

    response = await client.post(
        "/internal/scheduled/driver-digest", headers={"X-Internal-Secret": "anything"}
    )
    assert response.status_code == 501


@pytest.mark.asyncio
async def test_internal_endpoint_runs_due_orgs(client, org_db, org_settings, outbox, driver_user):
    org_settings.close_time = "00:00"
    org_db.commit()

    response = await client.post(
        "/internal/scheduled/driver-digest",
        headers={"X-Internal-Secret": "test-internal-secret"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["orgs_checked"] == 1
    assert data["orgs_processed"] == 1
