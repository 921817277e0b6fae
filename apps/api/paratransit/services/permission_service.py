"""Roles and permissions: seeding, CRUD and effective-permission resolution."""

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from paratransit.core.permissions import (
    DEFAULT_ORG_ROLES,
    ORG_PERMISSIONS,
    PERMISSION_REGISTRY,
    is_valid_permission,
    resolve_effective_permissions,
)
from paratransit.db.enums import AuditAction
from paratransit.db.models import Permission, Role, RolePermission, User, UserPermission
from paratransit.services import audit_service
from paratransit.services.errors import DuplicateError

logger = logging.getLogger(__name__)


# =============================================================================
# Seeding
# =============================================================================

def seed_permissions(db: Session) -> int:
    """
    Insert missing registry permissions and refresh names/descriptions.

    Returns:
        Number of permissions created
    """
    existing = {p.perm_key: p for p in db.query(Permission).all()}
    created = 0
    for perm in ORG_PERMISSIONS:
        row = existing.get(perm.perm_key)
        if row is None:
            db.add(Permission(
                perm_key=perm.perm_key,
                resource=perm.resource,
                action=perm.action,
                name=perm.name,
                description=perm.description,
            ))
            created += 1
        else:
            row.name = perm.name
            row.description = perm.description
    db.flush()
    return created


def seed_default_roles(db: Session) -> int:
    """
    Create missing system roles and grant their default permissions.

    Existing grants are left untouched so admin edits survive reseeding.

    Returns:
        Number of roles created
    """
    permissions = {p.perm_key: p for p in db.query(Permission).all()}
    created = 0
    for role_def in DEFAULT_ORG_ROLES:
        role = db.query(Role).filter(Role.role_key == role_def.role_key).first()
        if role is None:
            role = Role(
                role_key=role_def.role_key,
                name=role_def.name,
                description=role_def.description,
                is_system=True,
            )
            db.add(role)
            db.flush()
            created += 1
        granted = {g.permission_id for g in role.grants}
        for key in role_def.permissions:
            perm = permissions.get(key)
            if perm is not None and perm.id not in granted:
                role.grants.append(RolePermission(permission_id=perm.id, grant_access=True))
    db.flush()
    return created


def seed_org(db: Session) -> None:
    """Seed permissions and default roles, then commit."""
    perms = seed_permissions(db)
    roles = seed_default_roles(db)
    db.commit()
    logger.info("Seeded %d permissions and %d roles", perms, roles)


# =============================================================================
# Resolution
# =============================================================================

def get_role_grants(db: Session, role_id: UUID | None) -> dict[str, bool]:
    if role_id is None:
        return {}
    rows = (
        db.query(Permission.perm_key, RolePermission.grant_access)
        .join(RolePermission, RolePermission.permission_id == Permission.id)
        .filter(RolePermission.role_id == role_id)
        .all()
    )
    return {key: granted for key, granted in rows}


def get_user_overrides(db: Session, user_id: UUID) -> dict[str, bool]:
    rows = (
        db.query(Permission.perm_key, UserPermission.grant_access)
        .join(UserPermission, UserPermission.permission_id == Permission.id)
        .filter(UserPermission.user_id == user_id)
        .all()
    )
    return {key: granted for key, granted in rows}


def get_effective_permissions(db: Session, user: User) -> set[str]:
    """Role grants with the user's overrides applied."""
    return resolve_effective_permissions(
        get_role_grants(db, user.role_id),
        get_user_overrides(db, user.id),
    )


def set_user_overrides(
    db: Session,
    user: User,
    overrides: dict[str, bool],
    actor_id: UUID,
) -> dict[str, bool]:
    """
    Replace a user's permission overrides.

    Raises:
        ValueError: On an unknown permission key
    """
    unknown = [key for key in overrides if not is_valid_permission(key)]
    if unknown:
        raise ValueError(f"Unknown permissions: {', '.join(sorted(unknown))}")

    permissions = _permissions_by_key(db, overrides.keys())
    db.query(UserPermission).filter(UserPermission.user_id == user.id).delete()
    for key, granted in overrides.items():
        db.add(UserPermission(
            user_id=user.id, permission_id=permissions[key].id, grant_access=granted
        ))
    audit_service.log_action(
        db,
        AuditAction.CHANGE,
        user_id=actor_id,
        object_id=user.id,
        message="User permission overrides updated",
        details={"overrides": overrides},
    )
    db.commit()
    return get_user_overrides(db, user.id)


# =============================================================================
# Roles
# =============================================================================

def list_roles(db: Session) -> list[Role]:
    return db.query(Role).order_by(Role.is_system.desc(), Role.name).all()


def get_role(db: Session, role_id: UUID) -> Role | None:
    return db.query(Role).filter(Role.id == role_id).first()


def get_role_by_key(db: Session, role_key: str) -> Role | None:
    return db.query(Role).filter(Role.role_key == role_key).first()


def role_permission_keys(role: Role) -> list[str]:
    return sorted(g.permission.perm_key for g in role.grants if g.grant_access)


def _permissions_by_key(db: Session, keys) -> dict[str, Permission]:
    keys = list(keys)
    if not keys:
        return {}
    rows = db.query(Permission).filter(Permission.perm_key.in_(keys)).all()
    found = {p.perm_key: p for p in rows}
    missing = [k for k in keys if k not in found]
    if missing:
        # Registry permission not yet seeded into this org database
        for key in missing:
            perm_def = PERMISSION_REGISTRY[key]
            row = Permission(
                perm_key=perm_def.perm_key,
                resource=perm_def.resource,
                action=perm_def.action,
                name=perm_def.name,
                description=perm_def.description,
            )
            db.add(row)
            found[key] = row
        db.flush()
    return found


def _validate_keys(keys: list[str]) -> None:
    unknown = [key for key in keys if not is_valid_permission(key)]
    if unknown:
        raise ValueError(f"Unknown permissions: {', '.join(sorted(unknown))}")


def create_role(
    db: Session,
    role_key: str,
    name: str,
    description: str,
    permissions: list[str],
    actor_id: UUID,
) -> Role:
    """
    Create a custom (non-system) role.

    Raises:
        DuplicateError: role_key already exists
        ValueError: Unknown permission key
    """
    existing = get_role_by_key(db, role_key)
    if existing:
        raise DuplicateError(f"Role '{role_key}' already exists", existing.id)
    _validate_keys(permissions)

    role = Role(role_key=role_key, name=name, description=description, is_system=False)
    db.add(role)
    db.flush()
    for perm in _permissions_by_key(db, set(permissions)).values():
        role.grants.append(RolePermission(permission_id=perm.id, grant_access=True))
    audit_service.log_action(
        db,
        AuditAction.ADD,
        user_id=actor_id,
        object_id=role.id,
        message=f"Role '{role_key}' created",
        details={"permissions": sorted(set(permissions))},
    )
    db.commit()
    db.refresh(role)
    return role


def update_role(
    db: Session,
    role: Role,
    actor_id: UUID,
    name: str | None = None,
    description: str | None = None,
    permissions: list[str] | None = None,
) -> Role:
    """
    Update a custom role; system roles are read-only.

    Raises:
        PermissionError: Role is a system role
        ValueError: Unknown permission key
    """
    if role.is_system:
        raise PermissionError("System roles cannot be modified")
    if name is not None:
        role.name = name
    if description is not None:
        role.description = description
    if permissions is not None:
        _validate_keys(permissions)
        role.grants.clear()
        db.flush()
        for perm in _permissions_by_key(db, set(permissions)).values():
            role.grants.append(RolePermission(permission_id=perm.id, grant_access=True))
    audit_service.log_action(
        db,
        AuditAction.CHANGE,
        user_id=actor_id,
        object_id=role.id,
        message=f"Role '{role.role_key}' updated",
        details={"permissions": sorted(set(permissions)) if permissions is not None else None},
    )
    db.commit()
    db.refresh(role)
    return role


def delete_role(db: Session, role: Role, actor_id: UUID) -> None:
    """
    Delete a custom role. Users holding it are left without a role.

    Raises:
        PermissionError: Role is a system role
    """
    if role.is_system:
        raise PermissionError("System roles cannot be deleted")
    db.query(User).filter(User.role_id == role.id).update({User.role_id: None})
    audit_service.log_action(
        db,
        AuditAction.DELETE,
        user_id=actor_id,
        object_id=role.id,
        message=f"Role '{role.role_key}' deleted",
    )
    db.delete(role)
    db.commit()
