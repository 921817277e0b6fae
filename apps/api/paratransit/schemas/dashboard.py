"""Dashboard schemas."""

from datetime import date, datetime, time
from uuid import UUID

from pydantic import BaseModel


class UpcomingRide(BaseModel):
    id: UUID
    client_name: str
    driver_name: str | None
    status: str
    start_date: date
    start_time: time


class ActivityItem(BaseModel):
    kind: str  # client | user | call_log | volunteer_record
    id: UUID
    title: str
    created_at: datetime


class DashboardResponse(BaseModel):
    month: str  # YYYY-MM
    ride_counts: dict[str, int]
    upcoming_rides: list[UpcomingRide]
    recent_activity: list[ActivityItem]
