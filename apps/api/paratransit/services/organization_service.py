"""Organization (tenant) service - system database."""

import logging
from typing import Callable
from uuid import UUID

from sqlalchemy.orm import Session

from paratransit.db.enums import AuditAction
from paratransit.db.models import Organization
from paratransit.schemas.org import OrgCreate, OrgUpdate
from paratransit.services import (
    audit_service,
    call_log_service,
    org_settings_service,
    permission_service,
)
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
    "name": Organization.name,
    "subdomain": Organization.subdomain,
    "created_at": Organization.created_at,
}


def list_organizations(
    db: Session,
    pagination: PaginationParams,
    sort: SortParams,
    include_inactive: bool = True,
) -> tuple[list[Organization], int]:
    query = db.query(Organization)
    if not include_inactive:
        query = query.filter(Organization.is_active.is_(True))
    query = apply_search(query, sort.search, [Organization.name, Organization.subdomain])
    query = apply_sort(query, sort, SORTABLE_COLUMNS, Organization.name)
    return paginate_query(query, pagination)


def get_organization(db: Session, org_id: UUID) -> Organization | None:
    return db.query(Organization).filter(Organization.id == org_id).first()


def get_by_subdomain(db: Session, subdomain: str) -> Organization | None:
    return db.query(Organization).filter(Organization.subdomain == subdomain).first()


def list_active(db: Session) -> list[Organization]:
    return (
        db.query(Organization)
        .filter(Organization.is_active.is_(True))
        .order_by(Organization.subdomain)
        .all()
    )


def initialize_org_database(
    subdomain: str,
    session_factory: Callable[[str], Session],
) -> None:
    """Seed permissions, default roles, call types and settings into a new org database."""
    org_db = session_factory(subdomain)
    try:
        permission_service.seed_org(org_db)
        call_log_service.seed_call_log_types(org_db)
        org_settings_service.get_or_create_settings(org_db)
        org_db.commit()
    finally:
        org_db.close()


def create_organization(
    db: Session,
    data: OrgCreate,
    actor_id: UUID | None,
    provision: Callable[[str], None],
    session_factory: Callable[[str], Session],
) -> Organization:
    """
    Register an organization and provision its database.

    The system row is committed only after provisioning succeeds.

    Raises:
        DuplicateError: Subdomain already registered
    """
    existing = get_by_subdomain(db, data.subdomain)
    if existing:
        raise DuplicateError(f"Subdomain '{data.subdomain}' is already taken", existing.id)

    org = Organization(
        name=data.name,
        subdomain=data.subdomain,
        poc_email=data.poc_email,
        poc_phone=data.poc_phone,
        logo_path=data.logo_path,
    )
    db.add(org)
    db.flush()

    try:
        provision(org.subdomain)
        initialize_org_database(org.subdomain, session_factory)
    except Exception:
        db.rollback()
        logger.exception("Provisioning failed for org %s", data.subdomain)
        raise

    audit_service.log_system_action(
        db,
        AuditAction.ADD,
        user_id=actor_id,
        object_id=org.id,
        message=f"Organization '{org.subdomain}' created",
        details={"name": org.name},
    )
    db.commit()
    db.refresh(org)
    logger.info("Created organization %s", org.subdomain)
    return org


def update_organization(
    db: Session,
    org: Organization,
    data: OrgUpdate,
    actor_id: UUID | None,
) -> Organization:
    updates = data.model_dump(exclude_unset=True)
    before = {field: getattr(org, field) for field in updates}
    for field, value in updates.items():
        setattr(org, field, value)
    audit_service.log_system_action(
        db,
        AuditAction.CHANGE,
        user_id=actor_id,
        object_id=org.id,
        message=f"Organization '{org.subdomain}' updated",
        details=audit_service.diff_changes(before, updates),
    )
    db.commit()
    db.refresh(org)
    return org
