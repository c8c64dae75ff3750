"""vendordb initial schema

Revision ID: 0001_vendordb_initial
Revises:
Create Date: 2026-10-18 00:00:00.000000

Creates the complete schema:
- users: accounts with a fixed role (admin/vendor/customer)
- items: shared catalog
- locations: vendor storefronts owned by a user
- location_items: per-location availability and stock
- orders: keyed by (id, location_id)
- order_items: keyed by (item_id, order_id, location_id)
- change_log: append-only history of location and menu changes

Referential matrix:
- locations.user_id            RESTRICT delete, CASCADE update
- location_items.location_id   CASCADE delete,  CASCADE update
- location_items.item_id       RESTRICT delete, CASCADE update
- orders.location_id           RESTRICT delete, CASCADE update
- order_items.item_id          RESTRICT delete, CASCADE update
- order_items.(order_id, location_id) CASCADE delete, CASCADE update
- change_log.location_id       RESTRICT delete, CASCADE update
- change_log.item_id           RESTRICT delete, CASCADE update
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_vendordb_initial'
down_revision = None
branch_labels = None
depends_on = None


def _enum(name, *values):
    return sa.Enum(*values, name=name, native_enum=False, create_constraint=True,
                   length=max(len(v) for v in values))


def _availability(name):
    return _enum(name, 'Y', 'N')


def upgrade():
    # ============================================================================
    # users
    # ============================================================================
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('first_name', sa.String(length=45), nullable=False),
        sa.Column('last_name', sa.String(length=45), nullable=False),
        sa.Column('email', sa.String(length=45), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', _enum('ck_users_role', 'admin', 'vendor', 'customer'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )

    # ============================================================================
    # items
    # ============================================================================
    op.create_table(
        'items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=45), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )

    # ============================================================================
    # locations
    # ============================================================================
    op.create_table(
        'locations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('vendor_name', sa.String(length=45), nullable=True),
        sa.Column('availability', _availability('ck_locations_availability'), nullable=False),
        sa.Column('address', sa.String(length=45), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('lat', sa.Numeric(precision=10, scale=8), nullable=True),
        sa.Column('long', sa.Numeric(precision=11, scale=8), nullable=True),
        sa.Column('hours', sa.String(length=45), nullable=True),
        sa.Column('phone', sa.String(length=45), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_locations_user',
                                ondelete='RESTRICT', onupdate='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_locations_user_id', 'locations', ['user_id'])

    # ============================================================================
    # location_items: menu rows die with their location
    # ============================================================================
    op.create_table(
        'location_items',
        sa.Column('location_id', sa.Integer(), nullable=False),
        sa.Column('item_id', sa.Integer(), nullable=False),
        sa.Column('availability', _availability('ck_location_items_availability'), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.CheckConstraint('quantity >= 0', name='ck_location_items_quantity'),
        sa.ForeignKeyConstraint(['location_id'], ['locations.id'], name='fk_location_items_location',
                                ondelete='CASCADE', onupdate='CASCADE'),
        sa.ForeignKeyConstraint(['item_id'], ['items.id'], name='fk_location_items_item',
                                ondelete='RESTRICT', onupdate='CASCADE'),
        sa.PrimaryKeyConstraint('location_id', 'item_id'),
    )
    op.create_index('ix_location_items_item_id', 'location_items', ['item_id'])

    # ============================================================================
    # orders: composite key, id assigned by the service layer
    # ============================================================================
    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), autoincrement=False, nullable=False),
        sa.Column('location_id', sa.Integer(), nullable=False),
        sa.Column('status', _enum('ck_orders_status', 'Received', 'Fulfilled'), nullable=False),
        sa.Column('time', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['location_id'], ['locations.id'], name='fk_orders_location',
                                ondelete='RESTRICT', onupdate='CASCADE'),
        sa.PrimaryKeyConstraint('id', 'location_id'),
    )
    op.create_index('ix_orders_location_id', 'orders', ['location_id'])

    # ============================================================================
    # order_items: lines die with their order
    # ============================================================================
    op.create_table(
        'order_items',
        sa.Column('item_id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), autoincrement=False, nullable=False),
        sa.Column('location_id', sa.Integer(), autoincrement=False, nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.CheckConstraint('quantity > 0', name='ck_order_items_quantity'),
        sa.ForeignKeyConstraint(['item_id'], ['items.id'], name='fk_order_items_item',
                                ondelete='RESTRICT', onupdate='CASCADE'),
        sa.ForeignKeyConstraint(['order_id', 'location_id'], ['orders.id', 'orders.location_id'],
                                name='fk_order_items_order', ondelete='CASCADE', onupdate='CASCADE'),
        sa.PrimaryKeyConstraint('item_id', 'order_id', 'location_id'),
    )
    op.create_index('ix_order_items_order', 'order_items', ['order_id', 'location_id'])

    # ============================================================================
    # change_log: append-only, written by the audit interceptors
    # ============================================================================
    op.create_table(
        'change_log',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('change_type', _enum('ck_change_log_type', 'LOCATION_ADD', 'LOCATION_AVAILABILITY',
                                       'LOCATION_ADDRESS', 'MENU_AVAILABILITY'), nullable=False),
        sa.Column('original_availability', _availability('ck_change_log_original_availability'), nullable=True),
        sa.Column('new_availability', _availability('ck_change_log_new_availability'), nullable=True),
        sa.Column('time', sa.DateTime(), nullable=False),
        sa.Column('original_address', sa.String(length=45), nullable=True),
        sa.Column('new_address', sa.String(length=45), nullable=True),
        sa.Column('location_id', sa.Integer(), nullable=False),
        sa.Column('item_id', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['location_id'], ['locations.id'], name='fk_change_log_location',
                                ondelete='RESTRICT', onupdate='CASCADE'),
        sa.ForeignKeyConstraint(['item_id'], ['items.id'], name='fk_change_log_item',
                                ondelete='RESTRICT', onupdate='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_change_log_time', 'change_log', ['time'])
    op.create_index('ix_change_log_location_id', 'change_log', ['location_id'])
    op.create_index('ix_change_log_item_id', 'change_log', ['item_id'])


def downgrade():
    """Drop all tables (destructive operation)."""
    op.drop_table('change_log')
    op.drop_table('order_items')
    op.drop_table('orders')
    op.drop_table('location_items')
    op.drop_table('locations')
    op.drop_table('items')
    op.drop_table('users')
