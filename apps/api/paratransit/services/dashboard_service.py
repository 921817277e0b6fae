"""Dashboard service - data for dashboard widgets."""

from datetime import date, timedelta

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from paratransit.db.enums import AppointmentStatus
from paratransit.db.models import Appointment, CallLog, Client, User, VolunteerRecord


UPCOMING_LIMIT = 5
ACTIVITY_LIMIT = 5


def month_bounds(today: date) -> tuple[date, date]:
    first = today.replace(day=1)
    next_month = (first + timedelta(days=32)).replace(day=1)
    return first, next_month - timedelta(days=1)


def get_ride_counts(db: Session, today: date) -> dict[str, int]:
    """Ride counts by status for the month containing today (every status present)."""
    first, last = month_bounds(today)
    rows = (
        db.query(Appointment.status, func.count(Appointment.id))
        .filter(Appointment.start_date >= first, Appointment.start_date <= last)
        .group_by(Appointment.status)
        .all()
    )
    counts = {status.value: 0 for status in AppointmentStatus}
    for status, count in rows:
        counts[status] = count
    return counts


def get_upcoming_rides(db: Session, today: date) -> list[dict]:
    rides = (
        db.query(Appointment)
        .options(joinedload(Appointment.client), joinedload(Appointment.driver))
        .filter(
            Appointment.start_date >= today,
            Appointment.status.in_([
                AppointmentStatus.UNASSIGNED.value,
                AppointmentStatus.SCHEDULED.value,
            ]),
        )
        .order_by(Appointment.start_date, Appointment.start_time)
        .limit(UPCOMING_LIMIT)
        .all()
    )
    return [
        {
            "id": ride.id,
            "client_name": ride.client.full_name,
            "driver_name": ride.driver.full_name if ride.driver else None,
            "status": ride.status,
            "start_date": ride.start_date,
            "start_time": ride.start_time,
        }
        for ride in rides
    ]


def get_recent_activity(db: Session) -> list[dict]:
    """Newest records across clients, users, call logs and volunteer records."""
    items: list[dict] = []

    for client in db.query(Client).order_by(Client.created_at.desc()).limit(ACTIVITY_LIMIT):
        items.append({
            "kind": "client",
            "id": client.id,
            "title": f"New client: {client.full_name}",
            "created_at": client.created_at,
        })

    users = (
        db.query(User)
        .filter(User.is_deleted.is_(False))
        .order_by(User.created_at.desc())
        .limit(ACTIVITY_LIMIT)
    )
    for user in users:
        items.append({
            "kind": "user",
            "id": user.id,
            "title": f"New {'driver' if user.is_driver else 'user'}: {user.full_name}",
            "created_at": user.created_at,
        })

    calls = (
        db.query(CallLog)
        .filter(CallLog.is_deleted.is_(False))
        .order_by(CallLog.created_at.desc())
        .limit(ACTIVITY_LIMIT)
    )
    for call in calls:
        items.append({
            "kind": "call_log",
            "id": call.id,
            "title": f"Call from {call.first_name} {call.last_name}",
            "created_at": call.created_at,
        })

    records = (
        db.query(VolunteerRecord)
        .order_by(VolunteerRecord.created_at.desc())
        .limit(ACTIVITY_LIMIT)
    )
    for record in records:
        items.append({
            "kind": "volunteer_record",
            "id": record.id,
            "title": f"{record.hours} volunteer hours logged",
            "created_at": record.created_at,
        })

    items.sort(key=lambda item: item["created_at"], reverse=True)
    return items[:ACTIVITY_LIMIT]


def get_dashboard(db: Session, today: date) -> dict:
    return {
        "month": today.strftime("%Y-%m"),
        "ride_counts": get_ride_counts(db, today),
        "upcoming_rides": get_upcoming_rides(db, today),
        "recent_activity": get_recent_activity(db),
    }
