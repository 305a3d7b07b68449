"""Initial migration

Revision ID: 001
Revises:
Create Date: 2024-01-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create restaurants table
    op.create_table(
        'restaurants',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('timezone', sa.String(50), default='America/Mexico_City'),
        sa.Column('is_active', sa.Boolean(), default=True),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
    )

    # Create users table
    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('restaurant_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('restaurants.id')),
        sa.Column('email', sa.String(255), unique=True, nullable=False),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('full_name', sa.String(255)),
        sa.Column('phone', sa.String(20)),
        sa.Column(
            'role',
            sa.Enum('CUSTOMER', 'STAFF', 'RESTAURANT_ADMIN', 'SUPER_ADMIN', name='userrole'),
            default='CUSTOMER',
        ),
        sa.Column('is_active', sa.Boolean(), default=True),
        sa.Column('is_verified', sa.Boolean(), default=False),
        sa.Column('refresh_token', sa.String(500)),
        sa.Column('last_login', sa.DateTime()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
    )

    # Create restaurant_settings table
    op.create_table(
        'restaurant_settings',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('restaurant_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('restaurants.id'), unique=True, nullable=False),
        sa.Column('address', sa.Text()),
        sa.Column('city', sa.String(100)),
        sa.Column('phone', sa.String(20)),
        sa.Column('open_time', sa.Time()),
        sa.Column('close_time', sa.Time()),
        sa.Column('peak_start_hour', sa.Integer(), default=19),
        sa.Column('peak_end_hour', sa.Integer(), default=21),
        sa.Column('deposit_amount_cents', sa.Integer(), default=20000),
        sa.Column('seating_duration_minutes', sa.Integer(), default=120),
        sa.Column('default_wait_minutes', sa.Integer(), default=15),
        sa.Column('max_party_size', sa.Integer(), default=12),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
    )

    # Create staff_contacts table
    op.create_table(
        'staff_contacts',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('restaurant_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('restaurants.id'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(20), nullable=False),
        sa.Column('email', sa.String(255)),
        sa.Column('role', sa.String(50)),
        sa.Column('notify_on_reservation', sa.Boolean(), default=True),
        sa.Column('is_active', sa.Boolean(), default=True),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
    )

    # Create tables table
    op.create_table(
        'tables',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('restaurant_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('restaurants.id'), nullable=False),
        sa.Column('number', sa.Integer(), nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='available'),
        sa.Column('zone', sa.String(50), default='main'),
        sa.Column('shape', sa.String(20), default='round'),
        sa.Column('position_x', sa.Integer(), default=0),
        sa.Column('position_y', sa.Integer(), default=0),
        sa.Column('width', sa.Integer(), default=80),
        sa.Column('height', sa.Integer(), default=80),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
        sa.UniqueConstraint('restaurant_id', 'number', name='uq_tables_restaurant_number'),
        sa.CheckConstraint('capacity >= 1', name='ck_tables_capacity_positive'),
    )

    # Create reservations table
    op.create_table(
        'reservations',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('restaurant_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('restaurants.id'), nullable=False),
        sa.Column('customer_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('table_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('tables.id'), nullable=False),
        sa.Column('reservation_date', sa.Date(), nullable=False),
        sa.Column('reservation_time', sa.Time(), nullable=False),
        sa.Column('guest_count', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('occasion', sa.String(100)),
        sa.Column('special_request', sa.Text()),
        sa.Column('code', sa.String(32), unique=True, nullable=False),
        sa.Column('deposit_amount_cents', sa.Integer(), default=0),
        sa.Column('deposit_paid', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('deposit_paid_at', sa.DateTime()),
        sa.Column('payment_reference', sa.String(255)),
        sa.Column('arrived_at', sa.DateTime()),
        sa.Column('completed_at', sa.DateTime()),
        sa.Column('cancelled_at', sa.DateTime()),
        sa.Column('cancelled_by', postgresql.UUID(as_uuid=True)),
        sa.Column('cancellation_reason', sa.Text()),
        sa.Column('reminder_sent_at', sa.DateTime()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
    )

    # Create waitlist_entries table
    op.create_table(
        'waitlist_entries',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('restaurant_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('restaurants.id'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(20), nullable=False),
        sa.Column('party_size', sa.Integer(), nullable=False),
        sa.Column('notes', sa.Text()),
        sa.Column('status', sa.String(20), nullable=False, server_default='waiting'),
        sa.Column('priority', sa.String(10), nullable=False, server_default='normal'),
        sa.Column('estimated_wait_minutes', sa.Integer()),
        sa.Column('table_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('tables.id')),
        sa.Column('notified_at', sa.DateTime()),
        sa.Column('seated_at', sa.DateTime()),
        sa.Column('removed_at', sa.DateTime()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
    )

    # Create audit_logs table
    op.create_table(
        'audit_logs',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('restaurant_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('restaurants.id')),
        sa.Column('actor_id', postgresql.UUID(as_uuid=True)),
        sa.Column('actor_type', sa.String(50)),
        sa.Column('action', sa.String(100), nullable=False),
        sa.Column('resource_type', sa.String(50)),
        sa.Column('resource_id', postgresql.UUID(as_uuid=True)),
        sa.Column('data_json', postgresql.JSON()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
    )

    # Create indexes
    op.create_index('ix_users_restaurant_id', 'users', ['restaurant_id'])
    op.create_index('ix_tables_restaurant_id', 'tables', ['restaurant_id'])
    op.create_index('ix_reservations_customer_id', 'reservations', ['customer_id'])
    op.create_index('ix_reservations_restaurant_date', 'reservations', ['restaurant_id', 'reservation_date'])
    op.create_index('ix_waitlist_entries_restaurant_id', 'waitlist_entries', ['restaurant_id'])

    # At most one active reservation per table slot
    op.create_index(
        'uq_reservations_active_slot',
        'reservations',
        ['table_id', 'reservation_date', 'reservation_time'],
        unique=True,
        postgresql_where=sa.text("status NOT IN ('cancelled', 'no_show')"),
    )


def downgrade() -> None:
    op.drop_index('uq_reservations_active_slot', table_name='reservations')
    op.drop_table('audit_logs')
    op.drop_table('waitlist_entries')
    op.drop_table('reservations')
    op.drop_table('tables')
    op.drop_table('staff_contacts')
    op.drop_table('restaurant_settings')
    op.drop_table('users')
    op.drop_table('restaurants')
    sa.Enum(name='userrole').drop(op.get_bind(), checkfirst=True)
