"""Org database models: users, roles and permissions."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import JSON, Boolean, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from paratransit.db.base import OrgBase, new_id, utcnow
from paratransit.db.enums import ContactPreference


class Role(OrgBase):
    """Named bundle of permissions. System roles cannot be edited or deleted."""

    __tablename__ = "roles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_id)
    role_key: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    is_system: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow, nullable=False)

    grants: Mapped[list[RolePermission]] = relationship(
        back_populates="role", cascade="all, delete-orphan"
    )


class Permission(OrgBase):
    """Registered permission (resource.action)."""

    __tablename__ = "permissions"
    __table_args__ = (
        Index("idx_permissions_resource_action", "resource", "action"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_id)
    perm_key: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    resource: Mapped[str] = mapped_column(Text, nullable=False)
    action: Mapped[str] = mapped_column(String(20), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")


class RolePermission(OrgBase):
    __tablename__ = "role_permissions"

    role_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True
    )
    permission_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("permissions.id", ondelete="CASCADE"), primary_key=True
    )
    grant_access: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    role: Mapped[Role] = relationship(back_populates="grants")
    permission: Mapped[Permission] = relationship()


class UserPermission(OrgBase):
    """Per-user override: grant_access=True adds, False revokes."""

    __tablename__ = "user_permissions"

    permission_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("permissions.id", ondelete="CASCADE"), primary_key=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    grant_access: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    permission: Mapped[Permission] = relationship()


class User(OrgBase):
    """
    Organization staff member: admin, dispatcher or volunteer driver.

    Driver profile columns are only meaningful when is_driver is set.
    max_rides_per_week of 0 means unlimited.
    """

    __tablename__ = "users"
    __table_args__ = (
        Index("users_address_idx", "address_location"),
        Index("users_is_driver_idx", "is_driver"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_id)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    phone: Mapped[str | None] = mapped_column(Text, nullable=True)
    contact_preference: Mapped[str] = mapped_column(
        String(10), default=ContactPreference.EMAIL.value, nullable=False
    )
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("roles.id", ondelete="SET NULL"), nullable=True
    )
    address_location: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("locations.id", ondelete="RESTRICT"), nullable=True
    )
    token_version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    is_driver: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Driver profile
    vehicle_type: Mapped[str | None] = mapped_column(String(20), nullable=True)
    vehicle_color: Mapped[str | None] = mapped_column(String(50), nullable=True)
    max_rides_per_week: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    can_accommodate_mobility_equipment: Mapped[list] = mapped_column(
        JSON, default=list, nullable=False
    )
    can_accommodate_oxygen: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    can_accommodate_service_animal: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    can_accommodate_additional_rider: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    town_preferences: Mapped[str | None] = mapped_column(Text, nullable=True)
    destination_limitations: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow, nullable=False)

    role: Mapped[Role | None] = relationship()
    overrides: Mapped[list[UserPermission]] = relationship(cascade="all, delete-orphan")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
