"""Location (address) service."""

from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from paratransit.db.enums import AuditAction
from paratransit.db.models import Location
from paratransit.schemas.location import LocationCreate, LocationUpdate
from paratransit.services import audit_service
from paratransit.services.errors import DuplicateError
from paratransit.utils.pagination import (
    PaginationParams,
    SortParams,
    apply_search,
    apply_sort,
    paginate_query,
)


ADDRESS_FIELDS = ("address_line_1", "address_line_2", "city", "state", "zip", "country")

SORTABLE_COLUMNS = {
    "alias_name": Location.alias_name,
    "address_line_1": Location.address_line_1,
    "city": Location.city,
    "state": Location.state,
    "zip": Location.zip,
    "created_at": Location.created_at,
}


def find_duplicate(
    db: Session,
    address: dict,
    exclude_id: UUID | None = None,
) -> Location | None:
    """Case-insensitive match on the full address tuple (missing line 2 == empty)."""
    def lowered(value: str | None) -> str:
        return (value or "").strip().lower()

    query = db.query(Location).filter(
        func.lower(Location.address_line_1) == lowered(address.get("address_line_1")),
        func.coalesce(func.lower(Location.address_line_2), "") == lowered(address.get("address_line_2")),
        func.lower(Location.city) == lowered(address.get("city")),
        func.lower(Location.state) == lowered(address.get("state")),
        func.lower(Location.zip) == lowered(address.get("zip")),
        func.lower(Location.country) == lowered(address.get("country")),
    )
    if exclude_id is not None:
        query = query.filter(Location.id != exclude_id)
    return query.first()


def list_locations(
    db: Session,
    pagination: PaginationParams,
    sort: SortParams,
) -> tuple[list[Location], int]:
    query = db.query(Location)
    query = apply_search(
        query,
        sort.search,
        [Location.alias_name, Location.address_line_1, Location.city, Location.zip],
    )
    query = apply_sort(query, sort, SORTABLE_COLUMNS, Location.address_line_1)
    return paginate_query(query, pagination)


def get_location(db: Session, location_id: UUID) -> Location | None:
    return db.query(Location).filter(Location.id == location_id).first()


def create_location(db: Session, data: LocationCreate, actor_id: UUID) -> Location:
    """
    Raises:
        DuplicateError: Same address already saved (carries the existing id)
    """
    values = data.model_dump()
    existing = find_duplicate(db, values)
    if existing:
        raise DuplicateError("Location with this address already exists", existing.id)

    location = Location(**values)
    db.add(location)
    db.flush()
    audit_service.log_action(
        db,
        AuditAction.ADD,
        user_id=actor_id,
        object_id=location.id,
        message="Location created",
    )
    db.commit()
    db.refresh(location)
    return location


def update_location(
    db: Session,
    location: Location,
    data: LocationUpdate,
    actor_id: UUID,
) -> Location:
    updates = data.model_dump(exclude_unset=True)
    for field in ("address_line_1", "city", "state", "zip", "country", "address_validated"):
        if field in updates and updates[field] is None:
            raise ValueError(f"{field} cannot be cleared")
    if any(field in updates for field in ADDRESS_FIELDS):
        merged = {field: getattr(location, field) for field in ADDRESS_FIELDS}
        merged.update({k: v for k, v in updates.items() if k in ADDRESS_FIELDS})
        existing = find_duplicate(db, merged, exclude_id=location.id)
        if existing:
            raise DuplicateError("Location with this address already exists", existing.id)

    before = {field: getattr(location, field) for field in updates}
    for field, value in updates.items():
        setattr(location, field, value)
    audit_service.log_action(
        db,
        AuditAction.CHANGE,
        user_id=actor_id,
        object_id=location.id,
        message="Location updated",
        details=audit_service.diff_changes(before, updates),
    )
    db.commit()
    db.refresh(location)
    return location
