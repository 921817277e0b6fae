"""Client (rider) service."""

from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from paratransit.db.enums import AuditAction
from paratransit.db.models import Client, Location
from paratransit.schemas.client import ClientCreate, ClientUpdate
from paratransit.services import audit_service
from paratransit.services.errors import DuplicateError
from paratransit.utils.pagination import (
    PaginationParams,
    SortParams,
    apply_search,
    apply_sort,
    paginate_query,
)


SORTABLE_COLUMNS = {
    "first_name": Client.first_name,
    "last_name": Client.last_name,
    "created_at": Client.created_at,
    "birth_year": Client.birth_year,
}

NON_NULLABLE_FIELDS = (
    "first_name", "last_name", "phone", "phone_is_cell", "secondary_phone_is_cell",
    "contact_preference", "allow_messages", "gender", "lives_alone", "address_location",
    "mobility_equipment", "vehicle_types", "has_oxygen", "has_service_animal",
    "other_limitations", "is_active",
)


def list_clients(
    db: Session,
    pagination: PaginationParams,
    sort: SortParams,
    include_inactive: bool = False,
) -> tuple[list[Client], int]:
    query = db.query(Client)
    if not include_inactive:
        query = query.filter(Client.is_active.is_(True))
    query = apply_search(
        query,
        sort.search,
        [Client.first_name, Client.last_name, Client.email, Client.phone],
    )
    query = apply_sort(query, sort, SORTABLE_COLUMNS, Client.last_name)
    return paginate_query(query, pagination)


def get_client(db: Session, client_id: UUID) -> Client | None:
    return db.query(Client).filter(Client.id == client_id).first()


def _check_unique(db: Session, phone: str | None, email: str | None, exclude_id: UUID | None = None) -> None:
    if phone:
        query = db.query(Client).filter(Client.phone == phone)
        if exclude_id:
            query = query.filter(Client.id != exclude_id)
        existing = query.first()
        if existing:
            raise DuplicateError("A client with this phone number already exists", existing.id)
    if email:
        query = db.query(Client).filter(func.lower(Client.email) == email.lower())
        if exclude_id:
            query = query.filter(Client.id != exclude_id)
        existing = query.first()
        if existing:
            raise DuplicateError("A client with this email already exists", existing.id)


def _check_address(db: Session, location_id: UUID) -> None:
    if not db.get(Location, location_id):
        raise ValueError("Address location not found")


def create_client(db: Session, data: ClientCreate, actor_id: UUID) -> Client:
    """
    Raises:
        DuplicateError: Phone or email already registered
        ValueError: Address location missing
    """
    _check_unique(db, data.phone, data.email)
    _check_address(db, data.address_location)

    client = Client(**data.model_dump())
    db.add(client)
    db.flush()
    audit_service.log_action(
        db,
        AuditAction.ADD,
        user_id=actor_id,
        object_id=client.id,
        message="Client created",
    )
    db.commit()
    db.refresh(client)
    return client


def update_client(db: Session, client: Client, data: ClientUpdate, actor_id: UUID) -> Client:
    """
    Raises:
        DuplicateError: Phone or email collides with another client
        ValueError: Address missing or secondary phone equals phone
    """
    updates = data.model_dump(exclude_unset=True)
    for field in NON_NULLABLE_FIELDS:
        if field in updates and updates[field] is None:
            raise ValueError(f"{field} cannot be cleared")
    _check_unique(db, updates.get("phone"), updates.get("email"), exclude_id=client.id)
    if "address_location" in updates:
        _check_address(db, updates["address_location"])

    phone = updates.get("phone", client.phone)
    secondary = updates.get("secondary_phone", client.secondary_phone)
    if secondary and secondary == phone:
        raise ValueError("secondary_phone must differ from phone")

    before = {field: getattr(client, field) for field in updates}
    for field, value in updates.items():
        setattr(client, field, value)
    audit_service.log_action(
        db,
        AuditAction.CHANGE,
        user_id=actor_id,
        object_id=client.id,
        message="Client updated",
        details=audit_service.diff_changes(before, updates),
    )
    db.commit()
    db.refresh(client)
    return client


def deactivate_client(db: Session, client: Client, actor_id: UUID) -> Client:
    """Soft-delete (is_active = false); rides keep their client reference."""
    client.is_active = False
    audit_service.log_action(
        db,
        AuditAction.DELETE,
        user_id=actor_id,
        object_id=client.id,
        message="Client deactivated",
    )
    db.commit()
    db.refresh(client)
    return client
