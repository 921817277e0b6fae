"""Custom forms - organization database

Revision ID: 0002_custom_forms
Revises: 0001_org_baseline
Create Date: 2026-10-18

Admin-defined forms for clients, users and rides, their fields, and the
answers saved per record.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0002_custom_forms'
down_revision: Union[str, Sequence[str], None] = '0001_org_baseline'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'custom_forms',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('target_entity', sa.String(20), nullable=False, unique=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('display_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column(
            'created_by_user_id', sa.Uuid(),
            sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True,
        ),
        *_timestamps(),
    )

    op.create_table(
        'custom_form_fields',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column(
            'form_id', sa.Uuid(),
            sa.ForeignKey('custom_forms.id', ondelete='CASCADE'), nullable=False,
        ),
        sa.Column('field_key', sa.String(100), nullable=False),
        sa.Column('label', sa.String(255), nullable=False),
        sa.Column('field_type', sa.String(20), nullable=False),
        sa.Column('placeholder', sa.String(255), nullable=True),
        sa.Column('help_text', sa.Text(), nullable=True),
        sa.Column('default_value', sa.Text(), nullable=True),
        sa.Column('is_required', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('options', sa.JSON(), nullable=True),
        sa.Column('validation_rules', sa.JSON(), nullable=True),
        sa.Column('conditional_logic', sa.JSON(), nullable=True),
        sa.Column('display_order', sa.Integer(), nullable=False, server_default='0'),
        sa.UniqueConstraint('form_id', 'field_key', name='uq_custom_form_fields_key'),
    )

    op.create_table(
        'custom_form_responses',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column(
            'form_id', sa.Uuid(),
            sa.ForeignKey('custom_forms.id', ondelete='CASCADE'), nullable=False,
        ),
        sa.Column('entity_type', sa.String(20), nullable=False),
        sa.Column('entity_id', sa.Uuid(), nullable=False),
        sa.Column('response_data', sa.JSON(), nullable=False),
        sa.Column(
            'submitted_by', sa.Uuid(),
            sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True,
        ),
        *_timestamps(),
        sa.UniqueConstraint(
            'form_id', 'entity_type', 'entity_id', name='uq_custom_form_responses_entity'
        ),
    )
    op.create_index(
        'idx_custom_form_responses_entity', 'custom_form_responses', ['entity_type', 'entity_id']
    )


def downgrade() -> None:
    op.drop_index('idx_custom_form_responses_entity', table_name='custom_form_responses')
    op.drop_table('custom_form_responses')
    op.drop_table('custom_form_fields')
    op.drop_table('custom_forms')
