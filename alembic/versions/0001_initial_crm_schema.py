"""initial_crm_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _enum(name: str, *values: str) -> sa.Enum:
    return sa.Enum(*values, name=name, native_enum=False)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def _tenant_fk() -> sa.ForeignKeyConstraint:
    return sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], ondelete='CASCADE')


def upgrade() -> None:
    """
    Create the multi-tenant CRM schema.

    Creates:
    - tenants table (unique subdomain)
    - users table (email unique per tenant)
    - companies, contacts, deals, activities and notes tables, each with
      an indexed tenant_id column
    """
    # 1. Tenants
    op.create_table(
        'tenants',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('subdomain', sa.String(length=63), nullable=False),
        sa.Column('plan', sa.String(length=50), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_tenants_subdomain', 'tenants', ['subdomain'], unique=True)

    # 2. Users
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('tenant_id', sa.String(length=36), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('role', _enum('userrole', 'ADMIN', 'MANAGER', 'USER'), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
        _tenant_fk(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tenant_id', 'email', name='uq_users_tenant_email'),
    )
    op.create_index('ix_users_tenant_id', 'users', ['tenant_id'])
    op.create_index('ix_users_email', 'users', ['email'])

    # 3. Companies
    op.create_table(
        'companies',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('tenant_id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('industry', sa.String(length=100), nullable=True),
        sa.Column('website', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('address', sa.String(length=500), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column(
            'size',
            _enum('companysize', 'STARTUP', 'SMALL', 'MEDIUM', 'LARGE', 'ENTERPRISE'),
            nullable=True,
        ),
        sa.Column(
            'status', _enum('companystatus', 'ACTIVE', 'INACTIVE', 'PROSPECT'), nullable=False
        ),
        *_timestamps(),
        _tenant_fk(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_companies_tenant_id', 'companies', ['tenant_id'])
    op.create_index('ix_companies_tenant_status', 'companies', ['tenant_id', 'status'])

    # 4. Contacts
    op.create_table(
        'contacts',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('tenant_id', sa.String(length=36), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('position', sa.String(length=100), nullable=True),
        sa.Column(
            'status', _enum('contactstatus', 'ACTIVE', 'INACTIVE', 'PROSPECT'), nullable=False
        ),
        sa.Column('company_id', sa.String(length=36), nullable=True),
        *_timestamps(),
        _tenant_fk(),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_contacts_tenant_id', 'contacts', ['tenant_id'])
    op.create_index('ix_contacts_company_id', 'contacts', ['company_id'])
    op.create_index('ix_contacts_tenant_status', 'contacts', ['tenant_id', 'status'])

    # 5. Deals
    op.create_table(
        'deals',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('tenant_id', sa.String(length=36), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('value', sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column(
            'stage',
            _enum(
                'dealstage',
                'PROSPECTING',
                'QUALIFICATION',
                'PROPOSAL',
                'NEGOTIATION',
                'CLOSED_WON',
                'CLOSED_LOST',
            ),
            nullable=False,
        ),
        sa.Column('status', _enum('dealstatus', 'OPEN', 'WON', 'LOST'), nullable=False),
        sa.Column('probability', sa.Integer(), nullable=False),
        sa.Column('close_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('owner_id', sa.String(length=36), nullable=False),
        sa.Column('company_id', sa.String(length=36), nullable=True),
        sa.Column('contact_id', sa.String(length=36), nullable=True),
        *_timestamps(),
        _tenant_fk(),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['contact_id'], ['contacts.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_deals_tenant_id', 'deals', ['tenant_id'])
    op.create_index('ix_deals_owner_id', 'deals', ['owner_id'])
    op.create_index('ix_deals_company_id', 'deals', ['company_id'])
    op.create_index('ix_deals_contact_id', 'deals', ['contact_id'])
    op.create_index('ix_deals_tenant_status_stage', 'deals', ['tenant_id', 'status', 'stage'])

    # 6. Activities
    op.create_table(
        'activities',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('tenant_id', sa.String(length=36), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column(
            'type',
            _enum('activitytype', 'CALL', 'EMAIL', 'MEETING', 'TASK', 'NOTE'),
            nullable=False,
        ),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column(
            'status',
            _enum('activitystatus', 'PLANNED', 'IN_PROGRESS', 'COMPLETED', 'CANCELLED'),
            nullable=False,
        ),
        sa.Column('due_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('assigned_to_id', sa.String(length=36), nullable=False),
        sa.Column('company_id', sa.String(length=36), nullable=True),
        sa.Column('contact_id', sa.String(length=36), nullable=True),
        sa.Column('deal_id', sa.String(length=36), nullable=True),
        *_timestamps(),
        _tenant_fk(),
        sa.ForeignKeyConstraint(['assigned_to_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['contact_id'], ['contacts.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['deal_id'], ['deals.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_activities_tenant_id', 'activities', ['tenant_id'])
    op.create_index('ix_activities_due_date', 'activities', ['due_date'])
    op.create_index('ix_activities_assigned_to_id', 'activities', ['assigned_to_id'])
    op.create_index('ix_activities_company_id', 'activities', ['company_id'])
    op.create_index('ix_activities_contact_id', 'activities', ['contact_id'])
    op.create_index('ix_activities_deal_id', 'activities', ['deal_id'])
    op.create_index(
        'ix_activities_tenant_status_due', 'activities', ['tenant_id', 'status', 'due_date']
    )

    # 7. Notes
    op.create_table(
        'notes',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('tenant_id', sa.String(length=36), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('author_id', sa.String(length=36), nullable=False),
        sa.Column('company_id', sa.String(length=36), nullable=True),
        sa.Column('contact_id', sa.String(length=36), nullable=True),
        sa.Column('deal_id', sa.String(length=36), nullable=True),
        *_timestamps(),
        _tenant_fk(),
        sa.ForeignKeyConstraint(['author_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['contact_id'], ['contacts.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['deal_id'], ['deals.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_notes_tenant_id', 'notes', ['tenant_id'])
    op.create_index('ix_notes_author_id', 'notes', ['author_id'])
    op.create_index('ix_notes_company_id', 'notes', ['company_id'])
    op.create_index('ix_notes_contact_id', 'notes', ['contact_id'])
    op.create_index('ix_notes_deal_id', 'notes', ['deal_id'])


def downgrade() -> None:
    """Drop the CRM schema (children before parents)."""
    op.drop_table('notes')
    op.drop_table('activities')
    op.drop_table('deals')
    op.drop_table('contacts')
    op.drop_table('companies')
    op.drop_table('users')
    op.drop_table('tenants')
