"""Create leasing tables

Revision ID: a1c4e7f20b39
Revises:
Create Date: 2026-10-16 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a1c4e7f20b39'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    # Companies (tenant root)
    op.create_table(
        'companies',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('tax_id', sa.String(20), nullable=True),
        sa.Column('phone', sa.String(20), nullable=True),
        sa.Column('country', sa.String(50), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        *_timestamps(),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_companies_deleted_at', 'companies', ['deleted_at'])

    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('company_id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('full_name', sa.String(255), nullable=True),
        sa.Column('role', sa.Enum('ADMIN', 'STAFF', 'VIEWER', name='userrole'), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
        sa.UniqueConstraint('email'),
    )
    op.create_index('ix_users_company_id', 'users', ['company_id'])

    op.create_table(
        'buildings',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('company_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('code', sa.String(50), nullable=False),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('total_floors', sa.Integer(), nullable=True),
        sa.Column('rentable_area', sa.Float(), nullable=False),
        sa.Column('status', sa.String(20), nullable=True),
        *_timestamps(),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
        sa.UniqueConstraint('company_id', 'code', name='uq_buildings_company_code'),
    )
    op.create_index('ix_buildings_company_id', 'buildings', ['company_id'])
    op.create_index('ix_buildings_deleted_at', 'buildings', ['deleted_at'])

    op.create_table(
        'customers',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('company_id', sa.Uuid(), nullable=False),
        sa.Column('type', sa.Enum('INDIVIDUAL', 'CORPORATE', name='customertype'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('tax_id', sa.String(20), nullable=True),
        sa.Column('phone', sa.String(20), nullable=True),
        sa.Column('email', sa.String(100), nullable=True),
        sa.Column('contact_person', sa.String(100), nullable=True),
        *_timestamps(),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
    )
    op.create_index('ix_customers_company_id', 'customers', ['company_id'])
    op.create_index('ix_customers_deleted_at', 'customers', ['deleted_at'])

    # Contract aggregate
    op.create_table(
        'rent_contracts',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('company_id', sa.Uuid(), nullable=False),
        sa.Column('customer_id', sa.Uuid(), nullable=False),
        sa.Column('contract_no', sa.String(50), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('deposit_amount', sa.Float(), nullable=False),
        sa.Column(
            'status',
            sa.Enum('draft', 'active', 'expired', 'terminated', 'cancelled', name='contract_status'),
            nullable=False,
        ),
        sa.Column('previous_contract_id', sa.Uuid(), nullable=True),
        sa.Column('renewal_count', sa.Integer(), nullable=False),
        sa.Column('created_by', sa.Uuid(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.id']),
        sa.ForeignKeyConstraint(['previous_contract_id'], ['rent_contracts.id']),
        sa.ForeignKeyConstraint(['created_by'], ['users.id']),
    )
    op.create_index('ix_rent_contracts_company_id', 'rent_contracts', ['company_id'])
    op.create_index('ix_rent_contracts_customer_id', 'rent_contracts', ['customer_id'])
    op.create_index('ix_rent_contracts_end_date', 'rent_contracts', ['end_date'])
    op.create_index('ix_rent_contracts_status', 'rent_contracts', ['status'])
    op.create_index('ix_rent_contracts_deleted_at', 'rent_contracts', ['deleted_at'])
    op.create_index('idx_rent_contracts_company_status', 'rent_contracts', ['company_id', 'status'])

    op.create_table(
        'contract_units',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('contract_id', sa.Uuid(), nullable=False),
        sa.Column('building_id', sa.Uuid(), nullable=True),
        sa.Column('floor', sa.String(20), nullable=True),
        sa.Column('area_sqm', sa.Float(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['contract_id'], ['rent_contracts.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['building_id'], ['buildings.id']),
    )
    op.create_index('ix_contract_units_contract_id', 'contract_units', ['contract_id'])
    op.create_index('ix_contract_units_building_id', 'contract_units', ['building_id'])

    op.create_table(
        'rent_periods',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('contract_unit_id', sa.Uuid(), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('rent_amount', sa.Float(), nullable=False),
        sa.Column('service_fee', sa.Float(), nullable=False),
        sa.Column('period_order', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['contract_unit_id'], ['contract_units.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_rent_periods_contract_unit_id', 'rent_periods', ['contract_unit_id'])

    op.create_table(
        'contract_documents',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('contract_id', sa.Uuid(), nullable=False),
        sa.Column('file_name', sa.String(255), nullable=False),
        sa.Column('file_path', sa.String(500), nullable=False),
        sa.Column('file_size', sa.Integer(), nullable=False),
        sa.Column('file_type', sa.String(100), nullable=True),
        sa.Column('uploaded_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['contract_id'], ['rent_contracts.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_contract_documents_contract_id', 'contract_documents', ['contract_id'])

    # Alerts
    op.create_table(
        'alerts',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('company_id', sa.Uuid(), nullable=False),
        sa.Column('contract_id', sa.Uuid(), nullable=True),
        sa.Column(
            'type',
            sa.Enum('expiry_90', 'expiry_60', 'expiry_30', 'expired', 'custom', name='alert_type'),
            nullable=False,
        ),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
        sa.ForeignKeyConstraint(['contract_id'], ['rent_contracts.id']),
    )
    op.create_index('ix_alerts_company_id', 'alerts', ['company_id'])
    op.create_index('ix_alerts_contract_id', 'alerts', ['contract_id'])
    op.create_index('ix_alerts_created_at', 'alerts', ['created_at'])
    op.create_index('idx_alerts_company_read', 'alerts', ['company_id', 'is_read'])


def downgrade() -> None:
    op.drop_table('alerts')
    op.drop_table('contract_documents')
    op.drop_table('rent_periods')
    op.drop_table('contract_units')
    op.drop_table('rent_contracts')
    op.drop_table('customers')
    op.drop_table('buildings')
    op.drop_table('users')
    op.drop_table('companies')

    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        for enum_name in ('alert_type', 'contract_status', 'customertype', 'userrole'):
            sa.Enum(name=enum_name).drop(bind, checkfirst=True)
