"""Outbound notifications: send loop, failure handling, retry and cancel."""

import pytest

from paratransit.db.enums import MessageStatus
from paratransit.services import notification_service


@pytest.fixture
def queue(org_db):
    def factory(*recipients, subject: str = "Ride reminder", body: str = "See you at 10:00"):
        message = notification_service.queue_message(
            org_db, subject, body, [u.id for u in recipients]
        )
        org_db.commit()
        return message
    return factory


def test_queue_requires_a_recipient(org_db):
    with pytest.raises(ValueError, match="at least one recipient"):
        notification_service.queue_message(org_db, "Subject", "Body", [])


def test_queue_deduplicates_recipients(org_db, queue, driver_user):
    message = queue(driver_user, driver_user)
    assert notification_service.recipient_ids(message) == [driver_user.id]


def test_send_pending_delivers_to_every_recipient(org_db, queue, outbox, driver_user, admin_user):
    message = queue(driver_user, admin_user)

    counts = notification_service.send_pending(org_db, outbox)

    assert counts == {"sent": 1, "failed": 0}
    assert sorted(m["to"] for m in outbox.sent) == ["admin@test.com", "driver@test.com"]
    org_db.refresh(message)
    assert message.status == MessageStatus.SENT.value
    assert message.sent_at is not None


def test_failed_delivery_marks_message_failed(org_db, queue, outbox, driver_user, admin_user):
    outbox.fail_for.add("driver@test.com")
    message = queue(driver_user, admin_user)

    counts = notification_service.send_pending(org_db, outbox)

    assert counts == {"sent": 0, "failed": 1}
    org_db.refresh(message)
    assert message.status == MessageStatus.FAILED.value
    assert "Delivery refused" in message.last_error
    # Remaining recipients are still attempted
    assert [m["to"] for m in outbox.sent] == ["admin@test.com"]


def test_send_pending_skips_non_pending(org_db, queue, outbox, driver_user):
    message = queue(driver_user)
    notification_service.cancel_message(org_db, message, driver_user.id)

    assert notification_service.send_pending(org_db, outbox) == {"sent": 0, "failed": 0}
    assert outbox.sent == []


@pytest.mark.asyncio
async def test_retry_failed_message(admin_client, org_db, queue, outbox, driver_user):
    outbox.fail_for.add("driver@test.com")
    message = queue(driver_user)
    notification_service.send_pending(org_db, outbox)
    outbox.fail_for.clear()

    response = await admin_client.post(f"/o/testorg/notifications/{message.id}/retry")

    assert response.status_code == 200
    assert response.json()["status"] == "sent"
    assert response.json()["last_error"] is None
    assert [m["to"] for m in outbox.sent] == ["driver@test.com"]


@pytest.mark.asyncio
async def test_retry_requires_failed_status(admin_client, queue, driver_user):
    message = queue(driver_user)

    response = await admin_client.post(f"/o/testorg/notifications/{message.id}/retry")
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_cancel_pending_only(admin_client, org_db, queue, outbox, driver_user):
    pending = queue(driver_user)
    url = f"/o/testorg/notifications/{pending.id}"

    response = await admin_client.put(url, json={"status": "sent"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Only cancellation is supported"

    response = await admin_client.put(url, json={"status": "cancelled"})
    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"

    response = await admin_client.put(url, json={"status": "cancelled"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_driver_sees_only_own_messages(driver_client, queue, driver_user, admin_user):
    mine = queue(driver_user, subject="For the driver")
    theirs = queue(admin_user, subject="For the admin")

    response = await driver_client.get("/o/testorg/notifications")
    assert [m["id"] for m in response.json()["items"]] == [str(mine.id)]

    assert (await driver_client.get(f"/o/testorg/notifications/{mine.id}")).status_code == 200
    assert (await driver_client.get(f"/o/testorg/notifications/{theirs.id}")).status_code == 404
    assert (await driver_client.post(f"/o/testorg/notifications/{mine.id}/retry")).status_code == 403


@pytest.mark.asyncio
async def test_list_filters_by_status(admin_client, org_db, queue, outbox, driver_user):
    queue(driver_user)
    sent = queue(driver_user)
    notification_service.send_message(org_db, sent, outbox)
    org_db.commit()

    response = await admin_client.get("/o/testorg/notifications", params={"status": "sent"})
    assert [m["id"] for m in response.json()["items"]] == [str(sent.id)]
