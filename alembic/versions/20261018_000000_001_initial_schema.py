# Thrive - Multi-Tenant Assessment Report Platform
# Copyright (c) 2026 George Scott Foley
# ORCID: 0009-0006-4957-0540
# Email: Georgescottfoley@proton.me
# Licensed under the MIT License - see LICENSE file for details

"""Initial schema - organizations, users, assessment_cases

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ROLES = ('developer', 'admin', 'org_admin', 'customer', 'demo')


def upgrade() -> None:
    # Create organizations table
    op.create_table(
        'organizations',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('customer_id', sa.String(64), nullable=True),
        sa.Column('assigned_modules', sa.JSON(), nullable=True),
        sa.Column('max_users', sa.Integer(), server_default='10', nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('last_updated', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_organizations_active', 'organizations', ['is_active'])

    # Create users table
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('username', sa.String(255), nullable=False),
        sa.Column('password', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('role', sa.String(20), server_default='customer', nullable=False),
        sa.Column('assigned_modules', sa.JSON(), nullable=True),
        sa.Column('organization_id', sa.String(64), nullable=True),
        sa.Column('customer_id', sa.String(64), nullable=True),
        sa.Column('report_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('max_reports', sa.Integer(), server_default='-1', nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('reset_token', sa.String(255), nullable=True),
        sa.Column('reset_token_expiry', sa.DateTime(timezone=True), nullable=True),
        sa.Column('registration_token', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_warned_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('anonymized_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username'),
        sa.UniqueConstraint('email'),
        sa.CheckConstraint(
            "role IN (" + ", ".join(f"'{r}'" for r in ROLES) + ")",
            name='ck_users_role'
        ),
        sa.CheckConstraint('report_count >= 0', name='ck_users_report_count')
    )
    op.create_index('idx_users_role_active', 'users', ['role', 'is_active'])
    op.create_index('idx_users_organization', 'users', ['organization_id'])

    # Create assessment_cases table
    op.create_table(
        'assessment_cases',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('case_id', sa.String(64), nullable=False),
        sa.Column('module_type', sa.String(30), nullable=False),
        sa.Column('status', sa.String(30), server_default='pending', nullable=False),
        sa.Column('display_name', sa.String(255), nullable=True),
        sa.Column('report_data', sa.JSON(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('organization_id', sa.String(64), nullable=True),
        sa.Column('customer_id', sa.String(64), nullable=True),
        sa.Column('created_by_user_id', sa.Integer(), nullable=True),
        sa.Column('created_date', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('last_updated', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['created_by_user_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('case_id')
    )
    op.create_index('ix_assessment_cases_created_by_user_id', 'assessment_cases', ['created_by_user_id'])
    op.create_index('idx_assessment_cases_organization', 'assessment_cases', ['organization_id'])


def downgrade() -> None:
    # Drop tables in reverse order
    op.drop_table('assessment_cases')
    op.drop_table('users')
    op.drop_table('organizations')
