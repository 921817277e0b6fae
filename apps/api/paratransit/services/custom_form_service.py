"""Custom form service - admin-defined questions for clients, users and rides.

Each target record type has at most one form. Answers for a given record are
stored as one response row per form and are validated against the form's
current fields on every save.
"""

import logging
import re
from datetime import date
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session, selectinload

from paratransit.db.enums import AuditAction, CustomFieldType, CustomFormTarget
from paratransit.db.models import (
    Appointment,
    Client,
    CustomForm,
    CustomFormField,
    CustomFormResponse,
)
from paratransit.schemas.custom_form import (
    CustomFormCreate,
    CustomFormFieldInput,
    CustomFormResponseSave,
    CustomFormUpdate,
    FieldCondition,
    FieldValidation,
)
from paratransit.services import audit_service, user_service
from paratransit.services.errors import DuplicateError


logger = logging.getLogger(__name__)


def parse_target(value: str) -> CustomFormTarget:
    """
    Raises:
        ValueError: Not one of client, user, appointment
    """
    try:
        return CustomFormTarget(value)
    except ValueError:
        raise ValueError("Invalid target entity") from None


# =============================================================================
# Forms
# =============================================================================

def list_forms(
    db: Session,
    target_entity: str | None = None,
    include_inactive: bool = False,
) -> list[CustomForm]:
    query = db.query(CustomForm).options(selectinload(CustomForm.fields))
    if not include_inactive:
        query = query.filter(CustomForm.is_active.is_(True))
    if target_entity:
        query = query.filter(CustomForm.target_entity == parse_target(target_entity).value)
    return query.order_by(CustomForm.display_order, CustomForm.name).all()


def get_form(db: Session, form_id: UUID) -> CustomForm | None:
    return (
        db.query(CustomForm)
        .options(selectinload(CustomForm.fields))
        .filter(CustomForm.id == form_id)
        .first()
    )


def _build_fields(fields: list[CustomFormFieldInput]) -> list[CustomFormField]:
    rows = []
    for index, field in enumerate(fields):
        values = field.model_dump(exclude={"display_order", "field_type"})
        rows.append(CustomFormField(
            **values,
            field_type=field.field_type.value,
            display_order=field.display_order if field.display_order is not None else index,
        ))
    return rows


def create_form(db: Session, data: CustomFormCreate, actor_id: UUID) -> CustomForm:
    """
    Create the form for a target record type.

    Raises:
        ValueError: Invalid target entity
        DuplicateError: The target already has a form
    """
    target = parse_target(data.target_entity)
    existing = db.query(CustomForm).filter(CustomForm.target_entity == target.value).first()
    if existing:
        raise DuplicateError(
            f"A custom form already exists for {target.value}. Edit the existing form instead.",
            existing.id,
        )

    form = CustomForm(
        name=data.name,
        description=data.description,
        target_entity=target.value,
        display_order=data.display_order,
        created_by_user_id=actor_id,
        fields=_build_fields(data.fields),
    )
    db.add(form)
    db.flush()
    audit_service.log_action(
        db,
        AuditAction.ADD,
        user_id=actor_id,
        object_id=form.id,
        message="Custom form created",
        details={"target_entity": target.value, "fields": len(data.fields)},
    )
    db.commit()
    logger.info("Created custom form %s for %s", form.id, target.value)
    return get_form(db, form.id)


def update_form(db: Session, form: CustomForm, data: CustomFormUpdate, actor_id: UUID) -> CustomForm:
    """
    Update form metadata; a fields list replaces every existing field.

    Raises:
        ValueError: name, is_active or display_order explicitly cleared
    """
    updates = data.model_dump(exclude_unset=True, exclude={"fields"})
    for field in ("name", "is_active", "display_order"):
        if field in updates and updates[field] is None:
            raise ValueError(f"{field} cannot be cleared")

    before = {field: getattr(form, field) for field in updates}
    for field, value in updates.items():
        setattr(form, field, value)
    details = audit_service.diff_changes(before, updates)

    if data.fields is not None:
        # Old rows go first so reused field keys do not collide
        form.fields.clear()
        db.flush()
        form.fields.extend(_build_fields(data.fields))
        details["fields"] = [f.field_key for f in data.fields]

    audit_service.log_action(
        db,
        AuditAction.CHANGE,
        user_id=actor_id,
        object_id=form.id,
        message="Custom form updated",
        details=details,
    )
    db.commit()
    return get_form(db, form.id)


# =============================================================================
# Responses
# =============================================================================

def get_entity(db: Session, target: CustomFormTarget, entity_id: UUID):
    """The client, user or ride a response is about, or None."""
    if target == CustomFormTarget.CLIENT:
        return db.get(Client, entity_id)
    if target == CustomFormTarget.USER:
        return user_service.get_user(db, entity_id)
    return db.get(Appointment, entity_id)


def list_responses(db: Session, target: CustomFormTarget, entity_id: UUID) -> list[CustomFormResponse]:
    return (
        db.query(CustomFormResponse)
        .filter(
            CustomFormResponse.entity_type == target.value,
            CustomFormResponse.entity_id == entity_id,
        )
        .order_by(CustomFormResponse.created_at)
        .all()
    )


def save_response(
    db: Session,
    form: CustomForm,
    data: CustomFormResponseSave,
    actor_id: UUID,
) -> tuple[CustomFormResponse, bool]:
    """
    Create or replace the answers a record has for a form.

    Returns (response, created).

    Raises:
        ValueError: Inactive form, form for another record type, or invalid answers
    """
    target = parse_target(data.entity_type)
    if not form.is_active:
        raise ValueError("Form is not active")
    if form.target_entity != target.value:
        raise ValueError(f"Form does not apply to {target.value} records")
    validate_answers(form.fields, data.response_data)

    response = (
        db.query(CustomFormResponse)
        .filter(
            CustomFormResponse.form_id == form.id,
            CustomFormResponse.entity_type == target.value,
            CustomFormResponse.entity_id == data.entity_id,
        )
        .first()
    )
    created = response is None
    if created:
        response = CustomFormResponse(
            form_id=form.id,
            entity_type=target.value,
            entity_id=data.entity_id,
        )
        db.add(response)
    response.response_data = data.response_data
    response.submitted_by = actor_id
    db.flush()

    audit_service.log_action(
        db,
        AuditAction.ADD if created else AuditAction.CHANGE,
        user_id=actor_id,
        object_id=data.entity_id,
        message=f"Custom form answers {'saved' if created else 'updated'}",
        details={"form_id": form.id, "entity_type": target.value, "fields": sorted(data.response_data)},
    )
    db.commit()
    db.refresh(response)
    return response, created


# =============================================================================
# Answer validation
# =============================================================================

def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == []


def validate_answers(fields: list[CustomFormField], answers: dict[str, Any]) -> None:
    """
    Check answers against a form's fields.

    Hidden fields (condition not met) are not validated.

    Raises:
        ValueError: Unknown key, missing required answer, or wrong value
    """
    by_key = {f.field_key: f for f in fields}
    unknown = sorted(set(answers) - set(by_key))
    if unknown:
        raise ValueError(f"Unknown fields: {', '.join(unknown)}")

    for key, field in by_key.items():
        if not _is_field_visible(field, answers, by_key):
            continue
        value = answers.get(key)
        if field.is_required and _is_empty(value):
            raise ValueError(f"Missing required field: {field.label}")
        if _is_empty(value):
            continue
        _validate_field_value(field, value)


def _option_values(field: CustomFormField) -> set[str]:
    return {o["value"] for o in field.options or []}


def _validate_field_value(field: CustomFormField, value: Any) -> None:
    field_type = CustomFieldType(field.field_type)
    rules = FieldValidation.model_validate(field.validation_rules or {})

    if field_type in {CustomFieldType.TEXT, CustomFieldType.TEXTAREA}:
        if not isinstance(value, str):
            raise ValueError(f"Field '{field.label}' must be a string")
        if rules.min_length is not None and len(value) < rules.min_length:
            raise ValueError(f"Field '{field.label}' must be at least {rules.min_length} characters")
        if rules.max_length is not None and len(value) > rules.max_length:
            raise ValueError(f"Field '{field.label}' must be at most {rules.max_length} characters")
        if rules.pattern and re.fullmatch(rules.pattern, value) is None:
            raise ValueError(f"Field '{field.label}' does not match required pattern")
        return

    if field_type == CustomFieldType.NUMBER:
        numeric_value: float | None = None
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            numeric_value = float(value)
        elif isinstance(value, str):
            try:
                numeric_value = float(value)
            except ValueError:
                pass
        if numeric_value is None:
            raise ValueError(f"Field '{field.label}' must be a number")
        if rules.min_value is not None and numeric_value < rules.min_value:
            raise ValueError(f"Field '{field.label}' must be at least {rules.min_value:g}")
        if rules.max_value is not None and numeric_value > rules.max_value:
            raise ValueError(f"Field '{field.label}' must be at most {rules.max_value:g}")
        return

    if field_type == CustomFieldType.DATE:
        if isinstance(value, str):
            try:
                date.fromisoformat(value)
                return
            except ValueError:
                pass
        raise ValueError(f"Field '{field.label}' must be a date (YYYY-MM-DD)")

    if field_type in {CustomFieldType.SELECT, CustomFieldType.RADIO}:
        if not isinstance(value, str):
            raise ValueError(f"Field '{field.label}' must be a string")
        if value not in _option_values(field):
            raise ValueError(f"Invalid option for '{field.label}'")
        return

    if field_type == CustomFieldType.CHECKBOX:
        if not isinstance(value, bool):
            raise ValueError(f"Field '{field.label}' must be a boolean")
        return

    # checkboxGroup
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"Field '{field.label}' must be a list of strings")
    allowed = _option_values(field)
    if any(item not in allowed for item in value):
        raise ValueError(f"Invalid option for '{field.label}'")


def _is_field_visible(
    field: CustomFormField, answers: dict[str, Any], fields: dict[str, CustomFormField]
) -> bool:
    if not field.conditional_logic:
        return True
    condition = FieldCondition.model_validate(field.conditional_logic)
    if condition.field_key not in fields:
        return True
    return evaluate_condition(condition, answers.get(condition.field_key))


def evaluate_condition(condition: FieldCondition, value: Any) -> bool:
    operator = condition.operator
    expected = condition.value

    if operator == "is_empty":
        return _is_empty(value)
    if operator == "is_not_empty":
        return not _is_empty(value)

    if operator == "equals":
        if isinstance(expected, str) and value is not None:
            return str(value) == expected
        return value == expected
    if operator == "not_equals":
        if isinstance(expected, str) and value is not None:
            return str(value) != expected
        return value != expected
    if operator == "contains":
        if isinstance(value, list):
            return expected in value if expected is not None else False
        if isinstance(value, str) and isinstance(expected, str):
            return expected in value
        return False
    # not_contains
    if isinstance(value, list):
        return expected not in value if expected is not None else True
    if isinstance(value, str) and isinstance(expected, str):
        return expected not in value
    return True
