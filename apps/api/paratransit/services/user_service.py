"""User service - staff and volunteer driver accounts."""

import logging
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from paratransit.core.security import hash_password
from paratransit.db.enums import AuditAction
from paratransit.db.models import Location, User
from paratransit.schemas.user import UserCreate, UserRead, UserUpdate
from paratransit.services import audit_service, permission_service
from paratransit.services.errors import DuplicateError
from paratransit.utils.pagination import (
    PaginationParams,
    SortParams,
    apply_search,
    apply_sort,
    paginate_query,
)

logger = logging.getLogger(__name__)

SORTABLE_COLUMNS = {
    "first_name": User.first_name,
    "last_name": User.last_name,
    "email": User.email,
    "created_at": User.created_at,
}

NON_NULLABLE_FIELDS = (
    "first_name", "last_name", "email", "contact_preference", "is_driver", "is_active",
    "max_rides_per_week", "can_accommodate_mobility_equipment", "can_accommodate_oxygen",
    "can_accommodate_service_animal", "can_accommodate_additional_rider",
)


def list_users(
    db: Session,
    pagination: PaginationParams,
    sort: SortParams,
    is_driver: bool | None = None,
    include_inactive: bool = False,
) -> tuple[list[User], int]:
    """List non-deleted users (active only unless include_inactive)."""
    query = db.query(User).filter(User.is_deleted.is_(False))
    if not include_inactive:
        query = query.filter(User.is_active.is_(True))
    if is_driver is not None:
        query = query.filter(User.is_driver.is_(is_driver))
    query = apply_search(query, sort.search, [User.first_name, User.last_name, User.email, User.phone])
    query = apply_sort(query, sort, SORTABLE_COLUMNS, User.last_name)
    return paginate_query(query, pagination)


def get_user(db: Session, user_id: UUID) -> User | None:
    """Get a non-deleted user."""
    return (
        db.query(User)
        .filter(User.id == user_id, User.is_deleted.is_(False))
        .first()
    )


def get_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(func.lower(User.email) == email.lower()).first()


def list_active_drivers(db: Session) -> list[User]:
    """Candidate drivers: active, not deleted, flagged as drivers."""
    return (
        db.query(User)
        .filter(
            User.is_driver.is_(True),
            User.is_active.is_(True),
            User.is_deleted.is_(False),
        )
        .order_by(User.last_name, User.first_name)
        .all()
    )


def to_read(user: User) -> UserRead:
    """Response schema with the role key resolved."""
    return UserRead(
        id=user.id,
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
        phone=user.phone,
        contact_preference=user.contact_preference,
        role_key=user.role.role_key if user.role else None,
        address_location=user.address_location,
        is_driver=user.is_driver,
        is_active=user.is_active,
        vehicle_type=user.vehicle_type,
        vehicle_color=user.vehicle_color,
        max_rides_per_week=user.max_rides_per_week,
        can_accommodate_mobility_equipment=list(user.can_accommodate_mobility_equipment or []),
        can_accommodate_oxygen=user.can_accommodate_oxygen,
        can_accommodate_service_animal=user.can_accommodate_service_animal,
        can_accommodate_additional_rider=user.can_accommodate_additional_rider,
        town_preferences=user.town_preferences,
        destination_limitations=user.destination_limitations,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


def _resolve_role_id(db: Session, role_key: str | None) -> UUID | None:
    if role_key is None:
        return None
    role = permission_service.get_role_by_key(db, role_key)
    if not role:
        raise ValueError(f"Unknown role '{role_key}'")
    return role.id


def _check_address(db: Session, location_id: UUID | None) -> None:
    if location_id is not None and not db.get(Location, location_id):
        raise ValueError("Address location not found")


def create_user(db: Session, data: UserCreate, actor_id: UUID) -> User:
    """
    Create a user (staff member or driver).

    Raises:
        DuplicateError: Email already in use
        ValueError: Unknown role or address
    """
    existing = get_by_email(db, data.email)
    if existing:
        raise DuplicateError("A user with this email already exists", existing.id)

    values = data.model_dump(exclude={"role_key", "password"})
    values["role_id"] = _resolve_role_id(db, data.role_key)
    _check_address(db, data.address_location)

    user = User(**values)
    if data.password:
        user.password_hash = hash_password(data.password)
    db.add(user)
    db.flush()

    audit_service.log_action(
        db,
        AuditAction.ADD,
        user_id=actor_id,
        object_id=user.id,
        message="User created",
        details={"role_key": data.role_key, "is_driver": data.is_driver},
    )
    db.commit()
    db.refresh(user)
    logger.info("Created user %s", user.id)
    return user


def update_user(db: Session, user: User, data: UserUpdate, actor_id: UUID) -> User:
    """
    Apply a partial update.

    Deactivating a user or changing their role revokes existing sessions.

    Raises:
        DuplicateError: Email already in use by another user
        ValueError: Unknown role or address
    """
    updates = data.model_dump(exclude_unset=True)
    for field in NON_NULLABLE_FIELDS:
        if field in updates and updates[field] is None:
            raise ValueError(f"{field} cannot be cleared")

    if "email" in updates:
        other = get_by_email(db, updates["email"])
        if other and other.id != user.id:
            raise DuplicateError("A user with this email already exists", other.id)

    revoke_sessions = False
    if "role_key" in updates:
        new_role_id = _resolve_role_id(db, updates.pop("role_key"))
        if new_role_id != user.role_id:
            updates["role_id"] = new_role_id
            revoke_sessions = True
    if "address_location" in updates:
        _check_address(db, updates["address_location"])
    if updates.get("is_active") is False and user.is_active:
        revoke_sessions = True

    before = {field: getattr(user, field) for field in updates}
    for field, value in updates.items():
        setattr(user, field, value)
    if revoke_sessions:
        user.token_version += 1

    audit_service.log_action(
        db,
        AuditAction.CHANGE,
        user_id=actor_id,
        object_id=user.id,
        message="User updated",
        details=audit_service.diff_changes(before, updates),
    )
    db.commit()
    db.refresh(user)
    return user


def delete_user(db: Session, user: User, actor_id: UUID) -> None:
    """
    Soft-delete: hide the user, deactivate, and revoke sessions.

    Raises:
        ValueError: Attempt to delete yourself
    """
    if user.id == actor_id:
        raise ValueError("You cannot delete your own account")
    user.is_deleted = True
    user.is_active = False
    user.token_version += 1
    audit_service.log_action(
        db,
        AuditAction.DELETE,
        user_id=actor_id,
        object_id=user.id,
        message="User deleted",
    )
    db.commit()
