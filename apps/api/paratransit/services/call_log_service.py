"""Call log service."""

from datetime import date
from uuid import UUID

from sqlalchemy.orm import Session

from paratransit.db.enums import AuditAction
from paratransit.db.models import CallLog, CallLogType
from paratransit.schemas.activity import CallLogCreate, CallLogUpdate
from paratransit.services import audit_service
from paratransit.utils.pagination import (
    PaginationParams,
    SortParams,
    apply_search,
    apply_sort,
    paginate_query,
)


DEFAULT_CALL_LOG_TYPES = (
    "Ride request",
    "Ride change",
    "Cancellation",
    "Volunteer inquiry",
    "General inquiry",
    "Other",
)

SORTABLE_COLUMNS = {
    "date": CallLog.date,
    "last_name": CallLog.last_name,
    "created_at": CallLog.created_at,
}


# =============================================================================
# Call Types
# =============================================================================

def seed_call_log_types(db: Session) -> int:
    """Insert missing default call types (flushed, not committed)."""
    existing = {t.title for t in db.query(CallLogType).all()}
    created = 0
    for title in DEFAULT_CALL_LOG_TYPES:
        if title not in existing:
            db.add(CallLogType(title=title))
            created += 1
    db.flush()
    return created


def list_types(db: Session) -> list[CallLogType]:
    return db.query(CallLogType).order_by(CallLogType.title).all()


def _require_type(db: Session, type_id: UUID) -> None:
    if not db.get(CallLogType, type_id):
        raise ValueError("Unknown call type")


# =============================================================================
# Call Logs
# =============================================================================

def list_call_logs(
    db: Session,
    pagination: PaginationParams,
    sort: SortParams,
    call_type: UUID | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> tuple[list[CallLog], int]:
    query = db.query(CallLog).filter(CallLog.is_deleted.is_(False))
    if call_type:
        query = query.filter(CallLog.call_type == call_type)
    if start_date:
        query = query.filter(CallLog.date >= start_date)
    if end_date:
        query = query.filter(CallLog.date <= end_date)
    query = apply_search(
        query,
        sort.search,
        [CallLog.first_name, CallLog.last_name, CallLog.phone_number],
    )
    if sort.sort_by:
        query = apply_sort(query, sort, SORTABLE_COLUMNS, CallLog.date)
    else:
        query = query.order_by(CallLog.date.desc(), CallLog.created_at.desc())
    return paginate_query(query, pagination)


def get_call_log(db: Session, call_log_id: UUID) -> CallLog | None:
    return (
        db.query(CallLog)
        .filter(CallLog.id == call_log_id, CallLog.is_deleted.is_(False))
        .first()
    )


def create_call_log(db: Session, data: CallLogCreate, actor_id: UUID) -> CallLog:
    _require_type(db, data.call_type)
    entry = CallLog(created_by_user_id=actor_id, **data.model_dump())
    db.add(entry)
    db.flush()
    audit_service.log_action(
        db,
        AuditAction.ADD,
        user_id=actor_id,
        object_id=entry.id,
        message="Call log created",
    )
    db.commit()
    db.refresh(entry)
    return entry


def update_call_log(db: Session, entry: CallLog, data: CallLogUpdate, actor_id: UUID) -> CallLog:
    updates = data.model_dump(exclude_unset=True)
    for field in ("date", "call_type", "first_name", "last_name", "phone_number"):
        if field in updates and updates[field] is None:
            raise ValueError(f"{field} cannot be cleared")
    if "call_type" in updates:
        _require_type(db, updates["call_type"])

    before = {field: getattr(entry, field) for field in updates}
    for field, value in updates.items():
        setattr(entry, field, value)
    audit_service.log_action(
        db,
        AuditAction.CHANGE,
        user_id=actor_id,
        object_id=entry.id,
        message="Call log updated",
        details=audit_service.diff_changes(before, updates),
    )
    db.commit()
    db.refresh(entry)
    return entry


def delete_call_log(db: Session, entry: CallLog, actor_id: UUID) -> None:
    entry.is_deleted = True
    audit_service.log_action(
        db,
        AuditAction.DELETE,
        user_id=actor_id,
        object_id=entry.id,
        message="Call log deleted",
    )
    db.commit()
