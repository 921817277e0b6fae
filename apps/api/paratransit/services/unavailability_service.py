"""Driver unavailability service."""

from datetime import date
from uuid import UUID

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from paratransit.db.enums import AuditAction
from paratransit.db.models import Unavailability
from paratransit.schemas.unavailability import (
    UnavailabilityCreate,
    UnavailabilityUpdate,
    validate_block_fields,
)
from paratransit.services import audit_service


def _date_filter(query, start: date | None, end: date | None):
    """Blocks touching [start, end]; recurring blocks always match."""
    if start is None and end is None:
        return query
    conditions = []
    if start is not None:
        conditions.append(Unavailability.end_date >= start)
    if end is not None:
        conditions.append(Unavailability.start_date <= end)
    return query.filter(or_(Unavailability.is_recurring.is_(True), and_(*conditions)))


def list_for_user(
    db: Session,
    user_id: UUID,
    start: date | None = None,
    end: date | None = None,
) -> list[Unavailability]:
    query = db.query(Unavailability).filter(Unavailability.user_id == user_id)
    query = _date_filter(query, start, end)
    return query.order_by(Unavailability.start_date, Unavailability.start_time).all()


def list_all(
    db: Session,
    start: date | None = None,
    end: date | None = None,
    user_id: UUID | None = None,
) -> list[Unavailability]:
    query = db.query(Unavailability)
    if user_id:
        query = query.filter(Unavailability.user_id == user_id)
    query = _date_filter(query, start, end)
    return query.order_by(Unavailability.start_date, Unavailability.user_id).all()


def list_for_drivers_on(db: Session, driver_ids: list[UUID], on: date) -> list[Unavailability]:
    """Blocks that could cover a given date: recurring, or spanning it."""
    if not driver_ids:
        return []
    return (
        db.query(Unavailability)
        .filter(
            Unavailability.user_id.in_(driver_ids),
            or_(
                Unavailability.is_recurring.is_(True),
                and_(Unavailability.start_date <= on, Unavailability.end_date >= on),
            ),
        )
        .all()
    )


def get_block(db: Session, block_id: UUID) -> Unavailability | None:
    return db.query(Unavailability).filter(Unavailability.id == block_id).first()


def _normalize(block: Unavailability) -> None:
    # All-day blocks carry no times; non-recurring blocks carry no weekday
    if block.is_all_day:
        block.start_time = None
        block.end_time = None
    if not block.is_recurring:
        block.recurring_day_of_week = None


def create_block(
    db: Session,
    user_id: UUID,
    data: UnavailabilityCreate,
    actor_id: UUID,
) -> Unavailability:
    block = Unavailability(user_id=user_id, **data.model_dump())
    _normalize(block)
    db.add(block)
    db.flush()
    audit_service.log_action(
        db,
        AuditAction.ADD,
        user_id=actor_id,
        object_id=block.id,
        message="Unavailability created",
        details={"for_user_id": user_id},
    )
    db.commit()
    db.refresh(block)
    return block


def update_block(
    db: Session,
    block: Unavailability,
    data: UnavailabilityUpdate,
    actor_id: UUID,
) -> Unavailability:
    """
    Raises:
        ValueError: The merged block violates the block rules
    """
    updates = data.model_dump(exclude_unset=True)
    for field in ("start_date", "end_date", "is_all_day", "is_recurring"):
        if field in updates and updates[field] is None:
            raise ValueError(f"{field} cannot be cleared")
    merged = {
        field: updates.get(field, getattr(block, field))
        for field in (
            "start_date", "end_date", "start_time", "end_time",
            "is_all_day", "is_recurring", "recurring_day_of_week",
        )
    }
    validate_block_fields(**merged)

    for field, value in updates.items():
        setattr(block, field, value)
    _normalize(block)
    audit_service.log_action(
        db,
        AuditAction.CHANGE,
        user_id=actor_id,
        object_id=block.id,
        message="Unavailability updated",
    )
    db.commit()
    db.refresh(block)
    return block


def delete_block(db: Session, block: Unavailability, actor_id: UUID) -> None:
    audit_service.log_action(
        db,
        AuditAction.DELETE,
        user_id=actor_id,
        object_id=block.id,
        message="Unavailability deleted",
    )
    db.delete(block)
    db.commit()
