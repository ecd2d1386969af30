"""users, restaurants and bookings

Revision ID: 3f2a9c1d7b10
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3f2a9c1d7b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role = sa.Enum('USER', 'ADMIN', name='user_role')
booking_status = sa.Enum('CONFIRMED', 'CANCELED', name='booking_status')
reservation_duration = sa.Enum(
    'MIN_15',
    'MIN_30',
    'MIN_45',
    'HOUR_1',
    name='reservation_duration',
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.Column(
            'updated_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'user',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(length=320), nullable=False),
        sa.Column('hashed_password', sa.String(length=1024), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('is_superuser', sa.Boolean(), nullable=False),
        sa.Column('is_verified', sa.Boolean(), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column(
            'role',
            user_role,
            server_default='USER',
            nullable=False,
        ),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_user_email'), 'user', ['email'], unique=True)

    op.create_table(
        'restaurant',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('owner_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('contact', sa.String(length=16), nullable=False),
        sa.Column('email', sa.String(length=320), nullable=False),
        sa.Column('total_seats', sa.Integer(), nullable=False),
        sa.Column('working_hours', sa.JSON(), nullable=False),
        sa.Column(
            'is_active',
            sa.Boolean(),
            server_default=sa.text('true'),
            nullable=False,
        ),
        *_timestamps(),
        sa.CheckConstraint(
            'total_seats > 0',
            name='ck_restaurant_total_seats',
        ),
        sa.ForeignKeyConstraint(
            ['owner_id'],
            ['user.id'],
            ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        op.f('ix_restaurant_owner_id'),
        'restaurant',
        ['owner_id'],
    )
    op.create_index(op.f('ix_restaurant_name'), 'restaurant', ['name'])

    op.create_table(
        'booking',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('restaurant_id', sa.Uuid(), nullable=False),
        sa.Column(
            'reservation_time',
            sa.DateTime(timezone=True),
            nullable=False,
        ),
        sa.Column('ends_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('duration', reservation_duration, nullable=False),
        sa.Column('guests', sa.Integer(), nullable=False),
        sa.Column('user_name', sa.String(length=128), nullable=False),
        sa.Column('user_email', sa.String(length=320), nullable=False),
        sa.Column(
            'status',
            booking_status,
            server_default='CONFIRMED',
            nullable=False,
        ),
        sa.Column(
            'is_active',
            sa.Boolean(),
            server_default=sa.text('true'),
            nullable=False,
        ),
        *_timestamps(),
        sa.CheckConstraint('guests > 0', name='ck_booking_guests_positive'),
        sa.CheckConstraint(
            'reservation_time < ends_at',
            name='ck_booking_interval',
        ),
        sa.ForeignKeyConstraint(
            ['restaurant_id'],
            ['restaurant.id'],
            ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        op.f('ix_booking_user_email'),
        'booking',
        ['user_email'],
    )
    op.create_index(
        'ix_booking_restaurant_window',
        'booking',
        ['restaurant_id', 'reservation_time', 'ends_at'],
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_booking_restaurant_window', table_name='booking')
    op.drop_index(op.f('ix_booking_user_email'), table_name='booking')
    op.drop_table('booking')
    op.drop_index(op.f('ix_restaurant_name'), table_name='restaurant')
    op.drop_index(op.f('ix_restaurant_owner_id'), table_name='restaurant')
    op.drop_table('restaurant')
    op.drop_index(op.f('ix_user_email'), table_name='user')
    op.drop_table('user')
    booking_status.drop(op.get_bind(), checkfirst=True)
    reservation_duration.drop(op.get_bind(), checkfirst=True)
    user_role.drop(op.get_bind(), checkfirst=True)
