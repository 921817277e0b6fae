"""Driver daily digest - scheduled email of open rides each driver can take.

Runs from the internal cron endpoint and the CLI. Each organization is
processed once per local day, after its configured close time.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from typing import Callable
from urllib.parse import quote_plus
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session, joinedload

from paratransit.core.config import settings
from paratransit.db.enums import AppointmentStatus
from paratransit.db.models import Appointment, Location, OrgSettings, User
from paratransit.services import (
    matching_service,
    notification_service,
    org_settings_service,
    organization_service,
    user_service,
)
from paratransit.services.email_sender import EmailSender
from paratransit.services.matching import MatchingContext, meets_accessibility_requirements

logger = logging.getLogger(__name__)

MAPS_SEARCH_URL = "https://www.google.com/maps/search/?api=1&query="


@dataclass
class DigestResult:
    orgs_checked: int = 0
    orgs_processed: int = 0
    messages_queued: int = 0
    messages_sent: int = 0
    messages_failed: int = 0
    processed: list[str] = field(default_factory=list)

    def as_dict(self) -> dict[str, int]:
        return {
            "orgs_checked": self.orgs_checked,
            "orgs_processed": self.orgs_processed,
            "messages_queued": self.messages_queued,
            "messages_sent": self.messages_sent,
            "messages_failed": self.messages_failed,
        }


# =============================================================================
# Scheduling
# =============================================================================

def _parse_close_time(value: str) -> time:
    hours, minutes = value.split(":")
    return time(int(hours), int(minutes))


def local_today(row: OrgSettings, now: datetime) -> date:
    return now.astimezone(ZoneInfo(row.timezone)).date()


def is_due(row: OrgSettings, now: datetime) -> bool:
    """Enabled, past the org-local close time, and not yet run today."""
    if not row.digest_enabled:
        return False
    local_now = now.astimezone(ZoneInfo(row.timezone))
    if local_now.time() < _parse_close_time(row.close_time):
        return False
    return row.last_digest_date != local_now.date()


# =============================================================================
# Composition
# =============================================================================

def format_address(location: Location) -> str:
    parts = [location.address_line_1, location.address_line_2, location.city]
    line = ", ".join(p for p in parts if p)
    return f"{line}, {location.state} {location.zip}"


def maps_link(location: Location) -> str:
    return MAPS_SEARCH_URL + quote_plus(format_address(location))


def format_ride_time(appointment: Appointment) -> str:
    moment = datetime.combine(appointment.start_date, appointment.start_time)
    hour = moment.hour % 12 or 12
    suffix = "PM" if moment.hour >= 12 else "AM"
    return f"{moment:%B} {moment.day}, {moment.year} {hour}:{moment.minute:02d} {suffix}"


def compose_digest(driver: User, rides: list[Appointment]) -> tuple[str, str]:
    """Plain-text subject and body listing open rides for one driver."""
    count = len(rides)
    subject = f"Daily Ride Notifications - {count} New Opportunit{'y' if count == 1 else 'ies'}"
    lines = [
        f"Hello {driver.full_name},",
        "",
        f"You have {count} new ride notification{'' if count == 1 else 's'}:",
        "",
    ]
    for i, ride in enumerate(rides, start=1):
        lines.extend([
            f"{i}. Ride on {format_ride_time(ride)}",
            f"   Client: {ride.client.full_name}",
            f"   Pickup: {format_address(ride.pickup)}",
            f"   Pickup Maps: {maps_link(ride.pickup)}",
            f"   Dropoff: {format_address(ride.destination)}",
            f"   Dropoff Maps: {maps_link(ride.destination)}",
            "",
        ])
    lines.extend([
        "Please log in to the system to view full details and accept rides.",
        "",
        "Thank you",
    ])
    return subject, "\n".join(lines)


def upcoming_unassigned_rides(db: Session, start: date, days: int) -> list[Appointment]:
    return (
        db.query(Appointment)
        .options(
            joinedload(Appointment.client),
            joinedload(Appointment.pickup),
            joinedload(Appointment.destination),
        )
        .filter(
            Appointment.status == AppointmentStatus.UNASSIGNED.value,
            Appointment.start_date >= start,
            Appointment.start_date <= start + timedelta(days=days),
        )
        .order_by(Appointment.start_date, Appointment.start_time)
        .all()
    )


def qualifying_rides(driver: User, rides: list[Appointment]) -> list[Appointment]:
    """Rides whose client and rider needs the driver can accommodate."""
    profile = matching_service.driver_profile(driver)
    return [
        ride for ride in rides
        if meets_accessibility_requirements(profile, MatchingContext(
            appointment=matching_service.appointment_details(ride),
            client=matching_service.client_needs(ride.client),
        ))
    ]


# =============================================================================
# Runner
# =============================================================================

def run_org_digest(
    db: Session,
    sender: EmailSender,
    now: datetime,
    force: bool = False,
) -> dict[str, int] | None:
    """
    Queue and send one digest per active driver for one organization.

    Returns:
        Counts, or None when the org is not due
    """
    row = org_settings_service.get_or_create_settings(db)
    if not force and not is_due(row, now):
        db.commit()
        return None

    today = local_today(row, now)
    rides = upcoming_unassigned_rides(db, today, settings.DIGEST_LOOKAHEAD_DAYS)
    queued = 0
    if rides:
        for driver in user_service.list_active_drivers(db):
            if not driver.email:
                continue
            matches = qualifying_rides(driver, rides)
            if not matches:
                continue
            subject, body = compose_digest(driver, matches)
            notification_service.queue_message(db, subject, body, [driver.id])
            queued += 1

    row.last_digest_date = today
    db.commit()
    counts = notification_service.send_pending(db, sender)
    return {"queued": queued, **counts}


def run_driver_digests(
    sys_db: Session,
    session_factory: Callable[[str], Session],
    sender: EmailSender,
    now: datetime | None = None,
) -> DigestResult:
    """
    Check every active organization and run its digest when due.

    A failing organization is logged and skipped so the rest still run.
    """
    now = now or datetime.now(timezone.utc)
    result = DigestResult()
    for org in organization_service.list_active(sys_db):
        result.orgs_checked += 1
        org_db = session_factory(org.subdomain)
        try:
            counts = run_org_digest(org_db, sender, now)
        except Exception:
            org_db.rollback()
            logger.exception("Driver digest failed", extra={"context": {"org": org.subdomain}})
            continue
        finally:
            org_db.close()
        if counts is None:
            continue
        result.orgs_processed += 1
        result.processed.append(org.subdomain)
        result.messages_queued += counts["queued"]
        result.messages_sent += counts["sent"]
        result.messages_failed += counts["failed"]

    logger.info("Driver digest run finished", extra={"context": result.as_dict()})
    return result
