"""initial_schema

Revision ID: 5e1f0a9c3b21
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = '5e1f0a9c3b21'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

LOCATION_TYPES = ('Room', 'Rack', 'Shelf')
CATEGORY_TYPES = ('Task Trainer', 'Manikin', 'Consumable', 'Electronic', 'Device', 'Custom')
BARCODE_TYPES = ('existing', 'generate')
ITEM_STATUSES = (
    'Available', 'Partially Available', 'Unavailable', 'Under Maintenance',
    'In Session', 'Rented Out', 'Out of Stock',
)
TRANSACTION_TYPES = (
    'Stock Addition', 'Stock Removal', 'Relocate',
    'Check Out for Session', 'Return from Session',
    'Rent Out', 'Return from Rental',
    'Send to Maintenance', 'Return from Maintenance',
    'Check-in', 'Check-out', 'Restock', 'Maintenance',
)


def _timestamps(*names: str, nullable: bool = False) -> list[sa.Column]:
    return [sa.Column(name, sa.DateTime(timezone=True), nullable=nullable) for name in names]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('hashed_password', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=32), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps('created_at', 'updated_at'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    op.create_table(
        'locations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('type', sa.Enum(*LOCATION_TYPES, name='locationtype'), nullable=False),
        sa.Column('parent_id', sa.Integer(), nullable=True),
        sa.Column('description', sa.String(length=1000), nullable=True),
        *_timestamps('created_at'),
        sa.ForeignKeyConstraint(['parent_id'], ['locations.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_locations_id'), 'locations', ['id'], unique=False)
    op.create_index(op.f('ix_locations_type'), 'locations', ['type'], unique=False)
    op.create_index(op.f('ix_locations_parent_id'), 'locations', ['parent_id'], unique=False)

    op.create_table(
        'suppliers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('contact_person', sa.String(length=255), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=64), nullable=True),
        sa.Column('address', sa.String(length=1000), nullable=True),
        *_timestamps('created_at'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_suppliers_id'), 'suppliers', ['id'], unique=False)

    op.create_table(
        'items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('category', sa.String(length=128), nullable=False),
        sa.Column('category_type', sa.Enum(*CATEGORY_TYPES, name='categorytype'), nullable=False),
        sa.Column('description', sa.String(length=2000), nullable=True),
        sa.Column('serial_number', sa.String(length=128), nullable=True),
        sa.Column('barcode', sa.String(length=64), nullable=False),
        sa.Column('barcode_type', sa.Enum(*BARCODE_TYPES, name='barcodetype'), nullable=False),
        sa.Column('room_id', sa.Integer(), nullable=False),
        sa.Column('rack_id', sa.Integer(), nullable=True),
        sa.Column('shelf_id', sa.Integer(), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('available_quantity', sa.Integer(), nullable=False),
        sa.Column('in_maintenance', sa.Integer(), nullable=False),
        sa.Column('in_session', sa.Integer(), nullable=False),
        sa.Column('rented', sa.Integer(), nullable=False),
        sa.Column('unit', sa.String(length=32), nullable=False),
        sa.Column('unit_cost', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('reorder_level', sa.Integer(), nullable=False),
        sa.Column('supplier_id', sa.Integer(), nullable=True),
        sa.Column('manufacturer', sa.String(length=255), nullable=True),
        sa.Column('status', sa.Enum(*ITEM_STATUSES, name='itemstatus'), nullable=False),
        sa.Column('last_maintenance_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('next_maintenance_date', sa.Date(), nullable=True),
        sa.Column('purchase_date', sa.Date(), nullable=True),
        sa.Column('notes', sa.String(length=2000), nullable=True),
        sa.Column('created_by', sa.Integer(), nullable=True),
        *_timestamps('created_at', 'updated_at'),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['room_id'], ['locations.id']),
        sa.ForeignKeyConstraint(['rack_id'], ['locations.id']),
        sa.ForeignKeyConstraint(['shelf_id'], ['locations.id']),
        sa.ForeignKeyConstraint(['supplier_id'], ['suppliers.id']),
        sa.ForeignKeyConstraint(['created_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('serial_number'),
    )
    op.create_index(op.f('ix_items_id'), 'items', ['id'], unique=False)
    op.create_index(op.f('ix_items_barcode'), 'items', ['barcode'], unique=True)
    op.create_index(op.f('ix_items_category'), 'items', ['category'], unique=False)
    op.create_index(op.f('ix_items_status'), 'items', ['status'], unique=False)
    op.create_index(op.f('ix_items_room_id'), 'items', ['room_id'], unique=False)
    op.create_index(op.f('ix_items_rack_id'), 'items', ['rack_id'], unique=False)
    op.create_index(op.f('ix_items_shelf_id'), 'items', ['shelf_id'], unique=False)
    op.create_index(op.f('ix_items_supplier_id'), 'items', ['supplier_id'], unique=False)

    op.create_table(
        'session_records',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('item_id', sa.Integer(), nullable=False),
        sa.Column('session_name', sa.String(length=255), nullable=True),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('notes', sa.String(length=2000), nullable=True),
        *_timestamps('start_date'),
        *_timestamps('end_date', nullable=True),
        sa.ForeignKeyConstraint(['item_id'], ['items.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'rental_records',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('item_id', sa.Integer(), nullable=False),
        sa.Column('rented_to', sa.String(length=255), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('notes', sa.String(length=2000), nullable=True),
        *_timestamps('start_date'),
        sa.Column('expected_return_date', sa.Date(), nullable=True),
        *_timestamps('returned_date', nullable=True),
        sa.ForeignKeyConstraint(['item_id'], ['items.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'maintenance_records',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('item_id', sa.Integer(), nullable=False),
        sa.Column('provider', sa.String(length=255), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('notes', sa.String(length=2000), nullable=True),
        *_timestamps('start_date'),
        sa.Column('expected_end_date', sa.Date(), nullable=True),
        *_timestamps('completed_date', nullable=True),
        sa.ForeignKeyConstraint(['item_id'], ['items.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    for table in ('session_records', 'rental_records', 'maintenance_records'):
        op.create_index(op.f(f'ix_{table}_id'), table, ['id'], unique=False)
        op.create_index(op.f(f'ix_{table}_item_id'), table, ['item_id'], unique=False)

    op.create_table(
        'transactions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('item_id', sa.Integer(), nullable=False),
        sa.Column('type', sa.Enum(*TRANSACTION_TYPES, name='transactiontype'), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('from_location_id', sa.Integer(), nullable=True),
        sa.Column('to_location_id', sa.Integer(), nullable=True),
        sa.Column('session_name', sa.String(length=255), nullable=True),
        sa.Column('session_location', sa.String(length=255), nullable=True),
        sa.Column('rented_to', sa.String(length=255), nullable=True),
        sa.Column('expected_return_date', sa.Date(), nullable=True),
        sa.Column('maintenance_provider', sa.String(length=255), nullable=True),
        sa.Column('expected_end_date', sa.Date(), nullable=True),
        sa.Column('record_id', sa.Integer(), nullable=True),
        sa.Column('performed_by', sa.Integer(), nullable=False),
        sa.Column('notes', sa.String(length=2000), nullable=True),
        *_timestamps('timestamp'),
        sa.ForeignKeyConstraint(['item_id'], ['items.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['from_location_id'], ['locations.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['to_location_id'], ['locations.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['performed_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_transactions_id'), 'transactions', ['id'], unique=False)
    op.create_index(op.f('ix_transactions_item_id'), 'transactions', ['item_id'], unique=False)
    op.create_index(op.f('ix_transactions_type'), 'transactions', ['type'], unique=False)
    op.create_index(op.f('ix_transactions_performed_by'), 'transactions', ['performed_by'], unique=False)
    op.create_index(op.f('ix_transactions_timestamp'), 'transactions', ['timestamp'], unique=False)


def downgrade() -> None:
    for table in ('transactions', 'maintenance_records', 'rental_records', 'session_records',
                  'items', 'suppliers', 'locations', 'users'):
        op.drop_table(table)
    # Drop the enum types (needed for PostgreSQL, no-op for SQLite)
    for name in ('transactiontype', 'itemstatus', 'barcodetype', 'categorytype', 'locationtype'):
        sa.Enum(name=name).drop(op.get_bind(), checkfirst=True)
