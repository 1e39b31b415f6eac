# backend/alembic/versions/001_initial_migration.py
"""Initial migration

Revision ID: 001
Revises:
Create Date: 2026-01-01 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def timestamps():
    return [
        sa.Column('created_at', sa.DateTime, nullable=False),
        sa.Column('updated_at', sa.DateTime, nullable=False),
    ]


def upgrade() -> None:
    # Create users table
    op.create_table(
        'users',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('username', sa.String(100), unique=True, nullable=False, index=True),
        sa.Column('email', sa.String(255), unique=True, nullable=False, index=True),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('business_name', sa.String(255)),
        sa.Column('business_city', sa.String(100)),
        sa.Column('business_phone', sa.String(50)),
        sa.Column('role', sa.String(20), server_default=sa.text("'business'"), nullable=False),
        sa.Column('subscription_plan', sa.String(100), server_default=sa.text("'free'"), nullable=False),
        sa.Column('subscription_expiry', sa.DateTime),
        sa.Column('offer_limit', sa.Integer, server_default=sa.text("3"), nullable=False),
        sa.Column('is_active', sa.Boolean, server_default=sa.true(), nullable=False),
        sa.Column('last_login', sa.DateTime),
        *timestamps(),
    )

    # Create screen_locations table
    op.create_table(
        'screen_locations',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('name_ar', sa.String(255), nullable=False),
        sa.Column('address', sa.Text, nullable=False),
        sa.Column('address_ar', sa.Text, nullable=False),
        sa.Column('city', sa.String(100), nullable=False, index=True),
        sa.Column('city_ar', sa.String(100), nullable=False),
        sa.Column('neighborhood', sa.String(100)),
        sa.Column('neighborhood_ar', sa.String(100)),
        sa.Column('latitude', sa.Numeric(10, 8), nullable=False),
        sa.Column('longitude', sa.Numeric(11, 8), nullable=False),
        sa.Column('google_maps_link', sa.Text),
        sa.Column('working_hours', sa.String(100)),
        sa.Column('working_hours_ar', sa.String(100)),
        sa.Column('number_of_screens', sa.Integer, server_default=sa.text("1"), nullable=False),
        sa.Column('screen_type', sa.String(50), server_default=sa.text("'LED'"), nullable=False),
        sa.Column('screen_type_ar', sa.String(50), nullable=False),
        sa.Column('daily_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('special_notes', sa.Text),
        sa.Column('special_notes_ar', sa.Text),
        sa.Column('location_photo', sa.Text),
        sa.Column('is_active', sa.Boolean, server_default=sa.true(), nullable=False, index=True),
        *timestamps(),
    )

    # Create screen_pricing_options table
    op.create_table(
        'screen_pricing_options',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('location_id', sa.Integer, sa.ForeignKey('screen_locations.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('duration_type', sa.String(10), nullable=False),
        sa.Column('duration_type_ar', sa.String(20), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('minimum_duration', sa.Integer, server_default=sa.text("1"), nullable=False),
        sa.Column('maximum_duration', sa.Integer),
        sa.Column('notes', sa.Text),
        sa.Column('notes_ar', sa.Text),
        sa.Column('is_active', sa.Boolean, server_default=sa.true(), nullable=False),
        *timestamps(),
        sa.CheckConstraint(
            "duration_type IN ('hour', 'day', 'week')",
            name='screen_pricing_options_duration_type_check',
        ),
    )

    # Create location_reviews table
    op.create_table(
        'location_reviews',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('location_id', sa.Integer, sa.ForeignKey('screen_locations.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('merchant_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('overall_rating', sa.Integer, nullable=False),
        sa.Column('comment', sa.Text),
        *timestamps(),
        sa.CheckConstraint("overall_rating BETWEEN 1 AND 5", name='location_reviews_rating_check'),
    )

    # Create screen_bookings table
    op.create_table(
        'screen_bookings',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('merchant_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('location_id', sa.Integer, sa.ForeignKey('screen_locations.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('pricing_option_id', sa.Integer, sa.ForeignKey('screen_pricing_options.id', ondelete='SET NULL')),
        sa.Column('start_date_time', sa.DateTime, nullable=False),
        sa.Column('end_date_time', sa.DateTime, nullable=False),
        sa.Column('duration', sa.Integer, nullable=False),
        sa.Column('number_of_screens', sa.Integer, server_default=sa.text("1"), nullable=False),
        sa.Column('total_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('status', sa.String(20), server_default=sa.text("'pending'"), nullable=False, index=True),
        sa.Column('status_ar', sa.String(20), nullable=False),
        sa.Column('media_url', sa.Text),
        sa.Column('media_type', sa.String(10)),
        sa.Column('request_notes', sa.Text),
        sa.Column('admin_notes', sa.Text),
        sa.Column('rejection_reason', sa.Text),
        sa.Column('invoice_generated', sa.Boolean, server_default=sa.false(), nullable=False),
        sa.Column('invoice_number', sa.String(64)),
        sa.Column('approved_at', sa.DateTime),
        sa.Column('rejected_at', sa.DateTime),
        sa.Column('cancelled_at', sa.DateTime),
        *timestamps(),
        sa.CheckConstraint(
            "status IN ('pending', 'approved', 'rejected', 'cancelled')",
            name='screen_bookings_status_check',
        ),
        sa.CheckConstraint("end_date_time >= start_date_time", name='screen_bookings_range_check'),
    )
    op.create_index('ix_screen_bookings_location_status', 'screen_bookings', ['location_id', 'status'])

    # Create booking_logs table
    op.create_table(
        'booking_logs',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('booking_id', sa.Integer, sa.ForeignKey('screen_bookings.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('actor_id', sa.Integer, sa.ForeignKey('users.id'), index=True),
        sa.Column('action', sa.String(50), nullable=False, index=True),
        sa.Column('action_ar', sa.String(100), nullable=False),
        sa.Column('previous_value', sa.Text),
        sa.Column('new_value', sa.Text),
        sa.Column('notes', sa.Text),
        sa.Column('timestamp', sa.DateTime, nullable=False),
    )

    # Create campaign_media table
    op.create_table(
        'campaign_media',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('booking_id', sa.Integer, sa.ForeignKey('screen_bookings.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('merchant_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('file_name', sa.String(255), nullable=False),
        sa.Column('original_file_name', sa.String(255), nullable=False),
        sa.Column('file_type', sa.String(10), nullable=False),
        sa.Column('file_size', sa.Integer, nullable=False),
        sa.Column('file_path', sa.Text, nullable=False),
        sa.Column('mime_type', sa.String(50), nullable=False),
        sa.Column('upload_status', sa.String(20), server_default=sa.text("'pending'"), nullable=False),
        sa.Column('upload_status_ar', sa.String(50), nullable=False),
        sa.Column('admin_notes', sa.Text),
        sa.Column('uploaded_at', sa.DateTime, nullable=False),
        sa.Column('reviewed_at', sa.DateTime),
        sa.Column('reviewed_by', sa.Integer, sa.ForeignKey('users.id')),
        *timestamps(),
    )

    # Create subscription_plans table
    op.create_table(
        'subscription_plans',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('name', sa.String(100), unique=True, nullable=False),
        sa.Column('name_ar', sa.String(100), nullable=False),
        sa.Column('description', sa.Text),
        sa.Column('description_ar', sa.Text),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('currency', sa.String(3), server_default=sa.text("'SAR'"), nullable=False),
        sa.Column('billing_period', sa.String(20), server_default=sa.text("'monthly'"), nullable=False),
        sa.Column('offer_limit', sa.Integer, server_default=sa.text("3"), nullable=False),
        sa.Column('screen_limit', sa.Integer, server_default=sa.text("0"), nullable=False),
        sa.Column('features', postgresql.JSON, server_default=sa.text("'[]'::json")),
        sa.Column('is_active', sa.Boolean, server_default=sa.true(), nullable=False),
        sa.Column('sort_order', sa.Integer, server_default=sa.text("0"), nullable=False),
        *timestamps(),
    )

    # Create invoices table
    op.create_table(
        'invoices',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('invoice_number', sa.String(64), unique=True, nullable=False, index=True),
        sa.Column('booking_id', sa.Integer, sa.ForeignKey('screen_bookings.id', ondelete='CASCADE'), index=True),
        sa.Column('plan_id', sa.Integer, sa.ForeignKey('subscription_plans.id')),
        sa.Column('merchant_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('invoice_type', sa.String(20), server_default=sa.text("'booking'"), nullable=False),
        sa.Column('issue_date', sa.DateTime, nullable=False),
        sa.Column('due_date', sa.DateTime, nullable=False),
        sa.Column('subtotal', sa.Numeric(10, 2), nullable=False),
        sa.Column('tax_amount', sa.Numeric(10, 2), server_default=sa.text("0"), nullable=False),
        sa.Column('total_amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('currency', sa.String(3), server_default=sa.text("'SAR'"), nullable=False),
        sa.Column('status', sa.String(20), server_default=sa.text("'unpaid'"), nullable=False, index=True),
        sa.Column('status_ar', sa.String(20), nullable=False),
        sa.Column('paid_at', sa.DateTime),
        sa.Column('payment_method', sa.String(50)),
        sa.Column('moyasar_payment_id', sa.String(255), unique=True),
        sa.Column('moyasar_transaction_id', sa.String(255)),
        sa.Column('moyasar_status', sa.String(50)),
        sa.Column('moyasar_metadata', postgresql.JSON),
        sa.Column('failure_reason', sa.Text),
        sa.Column('notes', sa.Text),
        *timestamps(),
        sa.CheckConstraint(
            "status IN ('unpaid', 'paid', 'overdue', 'cancelled')",
            name='invoices_status_check',
        ),
        sa.CheckConstraint("invoice_type IN ('booking', 'subscription')", name='invoices_type_check'),
    )

    # Create merchant_subscriptions table
    op.create_table(
        'merchant_subscriptions',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('merchant_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('plan_id', sa.Integer, sa.ForeignKey('subscription_plans.id', ondelete='CASCADE'), nullable=False),
        sa.Column('invoice_id', sa.Integer, sa.ForeignKey('invoices.id')),
        sa.Column('start_date', sa.Date, nullable=False),
        sa.Column('end_date', sa.Date, nullable=False),
        sa.Column('status', sa.String(20), server_default=sa.text("'active'"), nullable=False),
        sa.Column('auto_renew', sa.Boolean, server_default=sa.true(), nullable=False),
        sa.Column('payment_method', sa.String(50)),
        sa.Column('cancelled_at', sa.DateTime),
        sa.Column('cancel_reason', sa.Text),
        *timestamps(),
    )
    # At most one active subscription per merchant
    op.create_index(
        'uq_merchant_subscriptions_active',
        'merchant_subscriptions',
        ['merchant_id'],
        unique=True,
        postgresql_where=sa.text("status = 'active'"),
    )

    # Create merchant_notifications table
    op.create_table(
        'merchant_notifications',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('merchant_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('booking_id', sa.Integer, sa.ForeignKey('screen_bookings.id', ondelete='SET NULL')),
        sa.Column('type', sa.String(50), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('title_ar', sa.String(255), nullable=False),
        sa.Column('message', sa.Text, nullable=False),
        sa.Column('message_ar', sa.Text, nullable=False),
        sa.Column('priority', sa.String(10), server_default=sa.text("'normal'"), nullable=False),
        sa.Column('is_read', sa.Boolean, server_default=sa.false(), nullable=False),
        sa.Column('read_at', sa.DateTime),
        sa.Column('email_sent', sa.Boolean, server_default=sa.false(), nullable=False),
        sa.Column('email_sent_at', sa.DateTime),
        *timestamps(),
    )

    # Create offers table
    op.create_table(
        'offers',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('merchant_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('title_ar', sa.String(255), nullable=False),
        sa.Column('description', sa.Text),
        sa.Column('description_ar', sa.Text),
        sa.Column('discount_percentage', sa.Integer),
        sa.Column('city', sa.String(100)),
        sa.Column('start_date', sa.DateTime),
        sa.Column('end_date', sa.DateTime),
        sa.Column('is_active', sa.Boolean, server_default=sa.true(), nullable=False, index=True),
        *timestamps(),
        sa.CheckConstraint(
            "discount_percentage IS NULL OR (discount_percentage BETWEEN 1 AND 100)",
            name='offers_discount_check',
        ),
    )

    # Free plan every merchant starts on
    op.execute(
        "INSERT INTO subscription_plans "
        "(name, name_ar, price, currency, billing_period, offer_limit, screen_limit, features, is_active, sort_order, created_at, updated_at) "
        "VALUES ('free', 'مجاني', 0, 'SAR', 'monthly', 3, 0, '[]', true, 0, now(), now())"
    )


def downgrade() -> None:
    op.drop_table('offers')
    op.drop_table('merchant_notifications')
    op.drop_index('uq_merchant_subscriptions_active', table_name='merchant_subscriptions')
    op.drop_table('merchant_subscriptions')
    op.drop_table('invoices')
    op.drop_table('subscription_plans')
    op.drop_table('campaign_media')
    op.drop_table('booking_logs')
    op.drop_index('ix_screen_bookings_location_status', table_name='screen_bookings')
    op.drop_table('screen_bookings')
    op.drop_table('location_reviews')
    op.drop_table('screen_pricing_options')
    op.drop_table('screen_locations')
    op.drop_table('users')
