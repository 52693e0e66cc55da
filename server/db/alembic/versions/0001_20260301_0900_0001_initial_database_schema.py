"""Initial database schema

Revision ID: 0001
Revises:
Create Date: 2026-03-01 09:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade database schema."""
    # Create vehicles table
    op.create_table('vehicles',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('type', sa.String(length=50), nullable=False),
        sa.Column('brand', sa.String(length=50), nullable=False),
        sa.Column('model', sa.String(length=50), nullable=False),
        sa.Column('passenger_capacity', sa.Integer(), nullable=True),
        sa.Column('luggage_capacity', sa.Integer(), nullable=True),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('features', sa.Text(), nullable=False),
        sa.Column('image_url', sa.String(length=500), nullable=False),
        sa.Column('minimum_price', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('minimum_price_usd', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('minimum_price_try', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('price_per_km', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('price_per_km_usd', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('price_per_km_try', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('is_active', sa.Integer(), nullable=True),
        sa.Column('sort_order', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_vehicles_is_active'), 'vehicles', ['is_active'], unique=False)

    # Create vehicle_images table
    op.create_table('vehicle_images',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('vehicle_id', sa.Integer(), nullable=False),
        sa.Column('image_url', sa.String(length=500), nullable=False),
        sa.Column('sort_order', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['vehicle_id'], ['vehicles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_vehicle_images_vehicle_id'), 'vehicle_images', ['vehicle_id'], unique=False)

    # Create regions table
    op.create_table('regions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('name_en', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('description_en', sa.Text(), nullable=True),
        sa.Column('image_url', sa.String(length=500), nullable=False),
        sa.Column('price', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('start_point', sa.String(length=200), nullable=False),
        sa.Column('start_point_en', sa.String(length=200), nullable=False),
        sa.Column('distance_km', sa.Float(), nullable=False),
        sa.Column('estimated_duration_minutes', sa.Integer(), nullable=False),
        sa.Column('sort_order', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('price >= 0 AND price <= 10000', name='ck_region_price_range'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_regions_name'), 'regions', ['name'], unique=False)
    op.create_index(op.f('ix_regions_is_active'), 'regions', ['is_active'], unique=False)

    # Create reservations table
    op.create_table('reservations',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('customer_name', sa.String(length=100), nullable=False),
        sa.Column('customer_phone', sa.String(length=30), nullable=False),
        sa.Column('customer_email', sa.String(length=150), nullable=True),
        sa.Column('pickup_location_type', sa.String(length=20), nullable=True),
        sa.Column('pickup_location', sa.String(length=300), nullable=False),
        sa.Column('pickup_location_detail', sa.String(length=300), nullable=True),
        sa.Column('dropoff_location_type', sa.String(length=20), nullable=True),
        sa.Column('dropoff_location', sa.String(length=300), nullable=False),
        sa.Column('dropoff_location_detail', sa.String(length=300), nullable=True),
        sa.Column('transfer_date', sa.Date(), nullable=True),
        sa.Column('transfer_time', sa.String(length=10), nullable=True),
        sa.Column('flight_number', sa.String(length=20), nullable=True),
        sa.Column('airline_company', sa.String(length=100), nullable=True),
        sa.Column('hotel_name', sa.String(length=150), nullable=True),
        sa.Column('is_return_transfer', sa.Boolean(), nullable=False),
        sa.Column('return_transfer_date', sa.Date(), nullable=True),
        sa.Column('return_transfer_time', sa.String(length=10), nullable=True),
        sa.Column('return_flight_number', sa.String(length=20), nullable=True),
        sa.Column('passenger_count', sa.Integer(), nullable=True),
        sa.Column('number_of_adults', sa.Integer(), nullable=True),
        sa.Column('number_of_children', sa.Integer(), nullable=True),
        sa.Column('child_seat_count', sa.Integer(), nullable=True),
        sa.Column('luggage_count', sa.Integer(), nullable=True),
        sa.Column('child_names', sa.String(length=500), nullable=True),
        sa.Column('additional_passenger_names', sa.String(length=1000), nullable=True),
        sa.Column('language', sa.String(length=5), nullable=True),
        sa.Column('vehicle_id', sa.Integer(), nullable=True),
        sa.Column('region_id', sa.Integer(), nullable=True),
        sa.Column('distance_km', sa.Float(), nullable=True),
        sa.Column('estimated_price', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('currency', sa.String(length=3), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=True),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.Column('confirmed_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('estimated_price IS NULL OR estimated_price >= 0', name='ck_reservation_price_non_negative'),
        sa.ForeignKeyConstraint(['vehicle_id'], ['vehicles.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['region_id'], ['regions.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_reservations_transfer_date'), 'reservations', ['transfer_date'], unique=False)
    op.create_index(op.f('ix_reservations_vehicle_id'), 'reservations', ['vehicle_id'], unique=False)
    op.create_index(op.f('ix_reservations_region_id'), 'reservations', ['region_id'], unique=False)
    op.create_index(op.f('ix_reservations_status'), 'reservations', ['status'], unique=False)
    op.create_index(op.f('ix_reservations_created_at'), 'reservations', ['created_at'], unique=False)

    # Create currency_rates table
    op.create_table('currency_rates',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('currency_code', sa.String(length=3), nullable=False),
        sa.Column('rate', sa.Numeric(precision=18, scale=6), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('rate > 0', name='ck_currency_rate_positive'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_currency_rates_currency_code'), 'currency_rates', ['currency_code'], unique=True)

    # Create site_settings table
    op.create_table('site_settings',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('key', sa.String(length=100), nullable=False),
        sa.Column('value', sa.Text(), nullable=False),
        sa.Column('description', sa.String(length=200), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_site_settings_key'), 'site_settings', ['key'], unique=True)

    # Create hero_slides table
    op.create_table('hero_slides',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('image_url', sa.String(length=500), nullable=False),
        sa.Column('sort_order', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_table('hero_slides')
    op.drop_index(op.f('ix_site_settings_key'), table_name='site_settings')
    op.drop_table('site_settings')
    op.drop_index(op.f('ix_currency_rates_currency_code'), table_name='currency_rates')
    op.drop_table('currency_rates')
    op.drop_index(op.f('ix_reservations_created_at'), table_name='reservations')
    op.drop_index(op.f('ix_reservations_status'), table_name='reservations')
    op.drop_index(op.f('ix_reservations_region_id'), table_name='reservations')
    op.drop_index(op.f('ix_reservations_vehicle_id'), table_name='reservations')
    op.drop_index(op.f('ix_reservations_transfer_date'), table_name='reservations')
    op.drop_table('reservations')
    op.drop_index(op.f('ix_regions_is_active'), table_name='regions')
    op.drop_index(op.f('ix_regions_name'), table_name='regions')
    op.drop_table('regions')
    op.drop_index(op.f('ix_vehicle_images_vehicle_id'), table_name='vehicle_images')
    op.drop_table('vehicle_images')
    op.drop_index(op.f('ix_vehicles_is_active'), table_name='vehicles')
    op.drop_table('vehicles')
