"""Baseline migration - system database

Revision ID: 0001_system_baseline
Revises:
Create Date: 2026-10-01

Organizations, platform users and the platform audit trail.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_system_baseline'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ==========================================================================
    # Organizations
    # ==========================================================================
    op.create_table(
        'organizations',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('subdomain', sa.String(15), nullable=False, unique=True),
        sa.Column('logo_path', sa.String(255), nullable=True),
        sa.Column('poc_email', sa.String(255), nullable=False),
        sa.Column('poc_phone', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('idx_organizations_active', 'organizations', ['is_active'])

    # ==========================================================================
    # Platform users
    # ==========================================================================
    op.create_table(
        'system_users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('phone', sa.Text(), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(255), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('token_version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )

    # ==========================================================================
    # Platform audit trail
    # ==========================================================================
    op.create_table(
        'system_audit_logs',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column(
            'user_id', sa.Uuid(),
            sa.ForeignKey('system_users.id', ondelete='SET NULL'), nullable=True,
        ),
        sa.Column('object_id', sa.Uuid(), nullable=True),
        sa.Column('action_type', sa.String(20), nullable=False),
        sa.Column('action_message', sa.Text(), nullable=True),
        sa.Column('action_details', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('idx_system_audit_created_at', 'system_audit_logs', ['created_at'])
    op.create_index('idx_system_audit_object', 'system_audit_logs', ['object_id'])


def downgrade() -> None:
    op.drop_table('system_audit_logs')
    op.drop_table('system_users')
    op.drop_table('organizations')
