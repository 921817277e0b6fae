"""Volunteer hour records."""

from datetime import date
from uuid import UUID

from sqlalchemy.orm import Session

from paratransit.db.enums import AuditAction
from paratransit.db.models import User, VolunteerRecord
from paratransit.schemas.activity import VolunteerRecordCreate, VolunteerRecordUpdate
from paratransit.services import audit_service
from paratransit.utils.pagination import PaginationParams, paginate_query


def list_records(
    db: Session,
    pagination: PaginationParams,
    user_id: UUID | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> tuple[list[VolunteerRecord], int]:
    """List records newest first, optionally for one user and a date range."""
    query = db.query(VolunteerRecord)
    if user_id:
        query = query.filter(VolunteerRecord.user_id == user_id)
    if start_date:
        query = query.filter(VolunteerRecord.date >= start_date)
    if end_date:
        query = query.filter(VolunteerRecord.date <= end_date)
    query = query.order_by(VolunteerRecord.date.desc(), VolunteerRecord.created_at.desc())
    return paginate_query(query, pagination)


def get_record(db: Session, record_id: UUID) -> VolunteerRecord | None:
    return db.query(VolunteerRecord).filter(VolunteerRecord.id == record_id).first()


def create_record(
    db: Session,
    user_id: UUID,
    data: VolunteerRecordCreate,
    actor_id: UUID,
) -> VolunteerRecord:
    """
    Raises:
        ValueError: Target user missing or deleted
    """
    user = db.get(User, user_id)
    if not user or user.is_deleted:
        raise ValueError("User not found")

    record = VolunteerRecord(user_id=user_id, **data.model_dump(exclude={"user_id"}))
    db.add(record)
    db.flush()
    audit_service.log_action(
        db,
        AuditAction.ADD,
        user_id=actor_id,
        object_id=record.id,
        message="Volunteer record created",
        details={"for_user_id": user_id, "hours": record.hours},
    )
    db.commit()
    db.refresh(record)
    return record


def update_record(
    db: Session,
    record: VolunteerRecord,
    data: VolunteerRecordUpdate,
    actor_id: UUID,
) -> VolunteerRecord:
    updates = data.model_dump(exclude_unset=True)
    for field in ("date", "hours"):
        if field in updates and updates[field] is None:
            raise ValueError(f"{field} cannot be cleared")

    before = {field: getattr(record, field) for field in updates}
    for field, value in updates.items():
        setattr(record, field, value)
    audit_service.log_action(
        db,
        AuditAction.CHANGE,
        user_id=actor_id,
        object_id=record.id,
        message="Volunteer record updated",
        details=audit_service.diff_changes(before, updates),
    )
    db.commit()
    db.refresh(record)
    return record


def delete_record(db: Session, record: VolunteerRecord, actor_id: UUID) -> None:
    audit_service.log_action(
        db,
        AuditAction.DELETE,
        user_id=actor_id,
        object_id=record.id,
        message="Volunteer record deleted",
    )
    db.delete(record)
    db.commit()
