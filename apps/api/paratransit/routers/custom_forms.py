"""Custom forms router - admin-defined questions and the answers saved for records."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from paratransit.core.deps import (
    get_org_db,
    get_org_session,
    require_csrf_header,
    require_permission,
)
from paratransit.db.enums import CustomFormTarget
from paratransit.schemas.auth import OrgSession
from paratransit.schemas.custom_form import (
    CustomFormCreate,
    CustomFormRead,
    CustomFormResponseRead,
    CustomFormResponseSave,
    CustomFormUpdate,
)
from paratransit.services import custom_form_service
from paratransit.services.errors import DuplicateError

router = APIRouter(prefix="/custom-forms", tags=["Custom Forms"])

# Record permission needed to read or answer a form, by target
ENTITY_PERMISSIONS = {
    CustomFormTarget.CLIENT: {"read": "clients.read", "update": "clients.update"},
    CustomFormTarget.USER: {"read": "users.read", "update": "users.update"},
}


def _get_form_or_404(db: Session, form_id: UUID):
    form = custom_form_service.get_form(db, form_id)
    if not form:
        raise HTTPException(status_code=404, detail="Form not found")
    return form


def _parse_target(entity_type: str) -> CustomFormTarget:
    try:
        return custom_form_service.parse_target(entity_type)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _require_entity_access(
    db: Session,
    session: OrgSession,
    target: CustomFormTarget,
    entity_id: UUID,
    action: str,
) -> None:
    """
    The caller must hold the record's own permission for {action}.

    Rides follow the all/own split: drivers with ownappointments.{action}
    reach only their own rides, and other rides look missing.
    """
    entity = custom_form_service.get_entity(db, target, entity_id)
    if target == CustomFormTarget.APPOINTMENT:
        if session.can(f"allappointments.{action}"):
            allowed = True
        elif session.can(f"ownappointments.{action}"):
            if entity is None or entity.driver_id != session.user_id:
                raise HTTPException(status_code=404, detail="Appointment not found")
            allowed = True
        else:
            allowed = False
        key = f"allappointments.{action}"
    else:
        key = ENTITY_PERMISSIONS[target][action]
        allowed = session.can(key)
    if not allowed:
        raise HTTPException(status_code=403, detail=f"Missing permission: {key}")
    if entity is None:
        raise HTTPException(status_code=404, detail=f"{target.value.capitalize()} not found")


# =============================================================================
# Responses
# =============================================================================

@router.get("/responses/{entity_type}/{entity_id}", response_model=list[CustomFormResponseRead])
def get_entity_responses(
    entity_type: str,
    entity_id: UUID,
    session: OrgSession = Depends(get_org_session),
    db: Session = Depends(get_org_db),
):
    """Saved answers for one client, user or ride."""
    target = _parse_target(entity_type)
    _require_entity_access(db, session, target, entity_id, "read")
    responses = custom_form_service.list_responses(db, target, entity_id)
    return [CustomFormResponseRead.model_validate(r) for r in responses]


@router.post(
    "/responses",
    response_model=CustomFormResponseRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def save_form_response(
    data: CustomFormResponseSave,
    response: Response,
    session: OrgSession = Depends(get_org_session),
    db: Session = Depends(get_org_db),
):
    """Save answers for a record. Returns 201 when new, 200 when replacing."""
    target = _parse_target(data.entity_type)
    _require_entity_access(db, session, target, data.entity_id, "update")
    form = _get_form_or_404(db, data.form_id)
    try:
        saved, created = custom_form_service.save_response(db, form, data, session.user_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not created:
        response.status_code = 200
    return CustomFormResponseRead.model_validate(saved)


# =============================================================================
# Forms
# =============================================================================

@router.get("", response_model=list[CustomFormRead])
def list_custom_forms(
    target_entity: str | None = None,
    include_inactive: bool = False,
    session: OrgSession = Depends(require_permission("settings.read")),
    db: Session = Depends(get_org_db),
):
    """Forms with their fields, by display order then name. Active only by default."""
    try:
        forms = custom_form_service.list_forms(db, target_entity, include_inactive)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return [CustomFormRead.model_validate(f) for f in forms]


@router.get("/{form_id}", response_model=CustomFormRead)
def get_custom_form(
    form_id: UUID,
    session: OrgSession = Depends(require_permission("settings.read")),
    db: Session = Depends(get_org_db),
):
    return CustomFormRead.model_validate(_get_form_or_404(db, form_id))


@router.post(
    "",
    response_model=CustomFormRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def create_custom_form(
    data: CustomFormCreate,
    session: OrgSession = Depends(require_permission("settings.update")),
    db: Session = Depends(get_org_db),
):
    try:
        form = custom_form_service.create_form(db, data, session.user_id)
    except DuplicateError as e:
        raise HTTPException(
            status_code=409,
            detail={"message": str(e), "existing_id": str(e.existing_id)},
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return CustomFormRead.model_validate(form)


@router.put(
    "/{form_id}",
    response_model=CustomFormRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_custom_form(
    form_id: UUID,
    data: CustomFormUpdate,
    session: OrgSession = Depends(require_permission("settings.update")),
    db: Session = Depends(get_org_db),
):
    """Update a form. A fields list replaces every existing field."""
    form = _get_form_or_404(db, form_id)
    try:
        form = custom_form_service.update_form(db, form, data, session.user_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return CustomFormRead.model_validate(form)
