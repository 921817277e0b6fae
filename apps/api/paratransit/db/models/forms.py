"""Org database models: custom forms, their fields and saved responses."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from paratransit.db.base import OrgBase, new_id, utcnow


class CustomForm(OrgBase):
    """Extra questions attached to clients, users or rides (one form per target)."""

    __tablename__ = "custom_forms"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    target_entity: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_by_user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow, nullable=False)

    fields: Mapped[list[CustomFormField]] = relationship(
        back_populates="form",
        cascade="all, delete-orphan",
        order_by="CustomFormField.display_order",
    )


class CustomFormField(OrgBase):
    __tablename__ = "custom_form_fields"
    __table_args__ = (
        UniqueConstraint("form_id", "field_key", name="uq_custom_form_fields_key"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_id)
    form_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("custom_forms.id", ondelete="CASCADE"), nullable=False
    )
    field_key: Mapped[str] = mapped_column(String(100), nullable=False)
    label: Mapped[str] = mapped_column(String(255), nullable=False)
    field_type: Mapped[str] = mapped_column(String(20), nullable=False)
    placeholder: Mapped[str | None] = mapped_column(String(255), nullable=True)
    help_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    default_value: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_required: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # [{"label": ..., "value": ...}]
    options: Mapped[list | None] = mapped_column(JSON, nullable=True)
    # {"min_length", "max_length", "min_value", "max_value", "pattern"}
    validation_rules: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    # {"field_key", "operator", "value"}: field is shown only when it holds
    conditional_logic: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    form: Mapped[CustomForm] = relationship(back_populates="fields")


class CustomFormResponse(OrgBase):
    """Answers to a custom form for one client, user or ride."""

    __tablename__ = "custom_form_responses"
    __table_args__ = (
        UniqueConstraint(
            "form_id", "entity_type", "entity_id", name="uq_custom_form_responses_entity"
        ),
        Index("idx_custom_form_responses_entity", "entity_type", "entity_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_id)
    form_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("custom_forms.id", ondelete="CASCADE"), nullable=False
    )
    entity_type: Mapped[str] = mapped_column(String(20), nullable=False)
    entity_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    response_data: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    submitted_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow, nullable=False)
