"""Baseline migration - organization database

Revision ID: 0001_org_baseline
Revises:
Create Date: 2026-10-01

Users, roles and permissions, clients, locations, rides, unavailability,
call logs, volunteer records, outbound messages, settings and the audit trail.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_org_baseline'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    # ==========================================================================
    # Locations
    # ==========================================================================
    op.create_table(
        'locations',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('alias_name', sa.String(255), nullable=True),
        sa.Column('address_line_1', sa.String(255), nullable=False),
        sa.Column('address_line_2', sa.String(255), nullable=True),
        sa.Column('city', sa.String(100), nullable=False),
        sa.Column('state', sa.String(50), nullable=False),
        sa.Column('zip', sa.String(20), nullable=False),
        sa.Column('country', sa.String(100), nullable=False),
        sa.Column('address_validated', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index('locations_city_state_idx', 'locations', ['city', 'state'])
    op.create_index('locations_zip_idx', 'locations', ['zip'])
    if op.get_bind().dialect.name == 'postgresql':
        op.execute('''
            CREATE UNIQUE INDEX locations_address_unique_idx ON locations (
                lower(address_line_1), lower(coalesce(address_line_2, '')),
                lower(city), lower(state), lower(zip), lower(country)
            )
        ''')

    # ==========================================================================
    # Roles & permissions
    # ==========================================================================
    op.create_table(
        'roles',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('role_key', sa.Text(), nullable=False, unique=True),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('is_system', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_table(
        'permissions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('perm_key', sa.Text(), nullable=False, unique=True),
        sa.Column('resource', sa.Text(), nullable=False),
        sa.Column('action', sa.String(20), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
    )
    op.create_index('idx_permissions_resource_action', 'permissions', ['resource', 'action'])
    op.create_table(
        'role_permissions',
        sa.Column(
            'role_id', sa.Uuid(),
            sa.ForeignKey('roles.id', ondelete='CASCADE'), primary_key=True,
        ),
        sa.Column(
            'permission_id', sa.Uuid(),
            sa.ForeignKey('permissions.id', ondelete='CASCADE'), primary_key=True,
        ),
        sa.Column('grant_access', sa.Boolean(), nullable=False, server_default=sa.true()),
    )

    # ==========================================================================
    # Users
    # ==========================================================================
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('phone', sa.Text(), nullable=True),
        sa.Column('contact_preference', sa.String(10), nullable=False, server_default='email'),
        sa.Column('password_hash', sa.String(255), nullable=True),
        sa.Column(
            'role_id', sa.Uuid(),
            sa.ForeignKey('roles.id', ondelete='SET NULL'), nullable=True,
        ),
        sa.Column(
            'address_location', sa.Uuid(),
            sa.ForeignKey('locations.id', ondelete='RESTRICT'), nullable=True,
        ),
        sa.Column('token_version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('is_driver', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('vehicle_type', sa.String(20), nullable=True),
        sa.Column('vehicle_color', sa.String(50), nullable=True),
        sa.Column('max_rides_per_week', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('can_accommodate_mobility_equipment', sa.JSON(), nullable=False),
        sa.Column('can_accommodate_oxygen', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            'can_accommodate_service_animal', sa.Boolean(),
            nullable=False, server_default=sa.false(),
        ),
        sa.Column(
            'can_accommodate_additional_rider', sa.Boolean(),
            nullable=False, server_default=sa.false(),
        ),
        sa.Column('town_preferences', sa.Text(), nullable=True),
        sa.Column('destination_limitations', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('users_address_idx', 'users', ['address_location'])
    op.create_index('users_is_driver_idx', 'users', ['is_driver'])
    op.create_table(
        'user_permissions',
        sa.Column(
            'permission_id', sa.Uuid(),
            sa.ForeignKey('permissions.id', ondelete='CASCADE'), primary_key=True,
        ),
        sa.Column(
            'user_id', sa.Uuid(),
            sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True,
        ),
        sa.Column('grant_access', sa.Boolean(), nullable=False, server_default=sa.true()),
    )

    # ==========================================================================
    # Clients
    # ==========================================================================
    op.create_table(
        'clients',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone', sa.Text(), nullable=False, unique=True),
        sa.Column('phone_is_cell', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('secondary_phone', sa.Text(), nullable=True),
        sa.Column('secondary_phone_is_cell', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('contact_preference', sa.String(10), nullable=False, server_default='phone'),
        sa.Column('allow_messages', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('gender', sa.String(10), nullable=False),
        sa.Column('birth_year', sa.Integer(), nullable=True),
        sa.Column('birth_month', sa.Integer(), nullable=True),
        sa.Column('lives_alone', sa.Boolean(), nullable=False),
        sa.Column(
            'address_location', sa.Uuid(),
            sa.ForeignKey('locations.id', ondelete='RESTRICT'), nullable=False,
        ),
        sa.Column('mobility_equipment', sa.JSON(), nullable=False),
        sa.Column('vehicle_types', sa.JSON(), nullable=False),
        sa.Column('has_oxygen', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('has_service_animal', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('other_limitations', sa.JSON(), nullable=False),
        sa.Column('pickup_instructions', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index('clients_address_idx', 'clients', ['address_location'])
    op.create_index('clients_last_name_idx', 'clients', ['last_name'])
    op.create_index('clients_created_at_idx', 'clients', ['created_at'])

    # ==========================================================================
    # Appointments (rides)
    # ==========================================================================
    op.create_table(
        'appointments',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('client_id', sa.Uuid(), sa.ForeignKey('clients.id'), nullable=False),
        sa.Column('driver_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('dispatcher_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_by_user_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='Unassigned'),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('estimated_duration_minutes', sa.Integer(), nullable=True),
        sa.Column('pickup_location', sa.Uuid(), sa.ForeignKey('locations.id'), nullable=False),
        sa.Column('destination_location', sa.Uuid(), sa.ForeignKey('locations.id'), nullable=False),
        sa.Column('has_additional_rider', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('trip_count', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('trip_purpose', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('donation_type', sa.String(20), nullable=False, server_default='None'),
        sa.Column('donation_amount', sa.Numeric(10, 2), nullable=True),
        sa.Column('miles_driven', sa.Integer(), nullable=True),
        *_timestamps(),
    )
    op.create_index('idx_appointments_start_date', 'appointments', ['start_date'])
    op.create_index('idx_appointments_driver_date', 'appointments', ['driver_id', 'start_date'])
    op.create_index('idx_appointments_status', 'appointments', ['status'])

    op.create_table(
        'unavailability',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column(
            'user_id', sa.Uuid(),
            sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False,
        ),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=True),
        sa.Column('end_time', sa.Time(), nullable=True),
        sa.Column('is_all_day', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_recurring', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('recurring_day_of_week', sa.String(10), nullable=True),
        sa.Column('reason', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('idx_unavailability_user', 'unavailability', ['user_id'])
    op.create_index('idx_unavailability_dates', 'unavailability', ['start_date', 'end_date'])

    # ==========================================================================
    # Call logs & volunteer records
    # ==========================================================================
    op.create_table(
        'call_log_types',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('title', sa.String(50), nullable=False, unique=True),
    )
    op.create_table(
        'call_logs',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('created_by_user_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('call_type', sa.Uuid(), sa.ForeignKey('call_log_types.id'), nullable=False),
        sa.Column('first_name', sa.String(255), nullable=False),
        sa.Column('last_name', sa.String(255), nullable=False),
        sa.Column('phone_number', sa.Text(), nullable=False),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index('idx_call_logs_date', 'call_logs', ['date'])
    op.create_table(
        'volunteer_records',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column(
            'user_id', sa.Uuid(),
            sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False,
        ),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('hours', sa.Numeric(6, 2), nullable=False),
        sa.Column('miles', sa.Numeric(8, 2), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('idx_volunteer_records_user_date', 'volunteer_records', ['user_id', 'date'])

    # ==========================================================================
    # Outbound messages
    # ==========================================================================
    op.create_table(
        'messages',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('sender_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('message_type', sa.String(20), nullable=False, server_default='Email'),
        sa.Column('subject', sa.String(255), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('last_error', sa.Text(), nullable=True),
        sa.Column('sent_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('idx_messages_status', 'messages', ['status'])
    op.create_table(
        'message_recipients',
        sa.Column(
            'message_id', sa.Uuid(),
            sa.ForeignKey('messages.id', ondelete='CASCADE'), primary_key=True,
        ),
        sa.Column(
            'user_id', sa.Uuid(),
            sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True,
        ),
    )

    # ==========================================================================
    # Settings & audit
    # ==========================================================================
    op.create_table(
        'org_settings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('timezone', sa.String(50), nullable=False),
        sa.Column('close_time', sa.String(5), nullable=False),
        sa.Column('digest_enabled', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('last_digest_date', sa.Date(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column(
            'user_id', sa.Uuid(),
            sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True,
        ),
        sa.Column('object_id', sa.Uuid(), nullable=True),
        sa.Column('action_type', sa.String(20), nullable=False),
        sa.Column('action_message', sa.Text(), nullable=True),
        sa.Column('action_details', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('idx_audit_action_type', 'audit_logs', ['action_type'])
    op.create_index('idx_audit_created_at', 'audit_logs', ['created_at'])
    op.create_index('idx_audit_object', 'audit_logs', ['object_id'])
    op.create_index('idx_audit_user', 'audit_logs', ['user_id'])


def downgrade() -> None:
    for table in (
        'audit_logs',
        'org_settings',
        'message_recipients',
        'messages',
        'volunteer_records',
        'call_logs',
        'call_log_types',
        'unavailability',
        'appointments',
        'clients',
        'user_permissions',
        'users',
        'role_permissions',
        'permissions',
        'roles',
        'locations',
    ):
        op.drop_table(table)
