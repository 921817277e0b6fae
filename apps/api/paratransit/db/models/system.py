"""System database models: organizations and platform users."""

import uuid
from datetime import datetime

from sqlalchemy import JSON, Boolean, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from paratransit.db.base import SystemBase, new_id, utcnow


class Organization(SystemBase):
    """
    Tenant registered on the platform.

    The subdomain doubles as the name of the organization's database.
    """

    __tablename__ = "organizations"
    __table_args__ = (
        Index("idx_organizations_active", "is_active"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    subdomain: Mapped[str] = mapped_column(String(15), unique=True, nullable=False)
    logo_path: Mapped[str | None] = mapped_column(String(255), nullable=True)
    poc_email: Mapped[str] = mapped_column(String(255), nullable=False)
    poc_phone: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow, nullable=False)


class SystemUser(SystemBase):
    """Platform operator (super-admin) account."""

    __tablename__ = "system_users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_id)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    phone: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    token_version: Mapped[int] = mapped_column(default=1, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow, nullable=False)


class SystemAuditLog(SystemBase):
    """Audit trail for platform-level actions (organization changes)."""

    __tablename__ = "system_audit_logs"
    __table_args__ = (
        Index("idx_system_audit_created_at", "created_at"),
        Index("idx_system_audit_object", "object_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_id)
    user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("system_users.id", ondelete="SET NULL"), nullable=True
    )
    object_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    action_type: Mapped[str] = mapped_column(String(20), nullable=False)
    action_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    action_details: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
