"""initial schema: users, listings and engagement records

Revision ID: 3f1c9a2d7b10
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = '3f1c9a2d7b10'
down_revision = None
branch_labels = None
depends_on = None


user_role = postgresql.ENUM('CLIENT', 'LANDLORD', 'AGENT', 'ADMIN', 'SUPER_ADMIN', name='user_role', create_type=False)
verification_status = postgresql.ENUM('UNVERIFIED', 'PENDING', 'VERIFIED', 'REJECTED', name='verification_status', create_type=False)
property_status = postgresql.ENUM('AVAILABLE', 'RENTED', 'UNDER_MAINTENANCE', 'UNAVAILABLE', name='property_status', create_type=False)
property_type = postgresql.ENUM(
    'HOUSE', 'APARTMENT', 'SHOP', 'OFFICE', 'LAND', 'WAREHOUSE', 'COMMERCIAL', 'INDUSTRIAL',
    name='property_type', create_type=False,
)
listing_type = postgresql.ENUM('FOR_RENT', 'FOR_SALE', name='listing_type', create_type=False)
complaint_status = postgresql.ENUM('PENDING', 'IN_PROGRESS', 'RESOLVED', 'DISMISSED', name='complaint_status', create_type=False)

ENUMS = (user_role, verification_status, property_status, property_type, listing_type, complaint_status)


def upgrade() -> None:
    bind = op.get_bind()
    for enum_type in ENUMS:
        enum_type.create(bind, checkfirst=True)

    op.create_table(
        'users',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('hashed_password', sa.String(), nullable=False),
        sa.Column('first_name', sa.String(), nullable=False),
        sa.Column('last_name', sa.String(), nullable=False),
        sa.Column('phone', sa.String(), nullable=True, unique=True),
        sa.Column('avatar_url', sa.String(), nullable=True),
        sa.Column('role', user_role, nullable=False),
        sa.Column('is_email_verified', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('verification_status', verification_status, nullable=False, server_default='UNVERIFIED'),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'])
    op.create_index('ix_users_verification_status', 'users', ['verification_status'])
    op.create_index('ix_users_created_at', 'users', ['created_at'])
    op.create_index('idx_users_role_created', 'users', ['role', 'created_at'])

    op.create_table(
        'agent_profiles',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('user_id', sa.String(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('experience', sa.Integer(), nullable=True),
        sa.Column('specialties', sa.JSON(), nullable=False),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('license_number', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        'user_verifications',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('user_id', sa.String(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('status', verification_status, nullable=False),
        sa.Column('document_url', sa.String(), nullable=True),
        sa.Column('status_reason', sa.Text(), nullable=True),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reviewed_by', sa.String(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
    )
    op.create_index('ix_user_verifications_status', 'user_verifications', ['status'])

    op.create_table(
        'sessions',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('user_id', sa.String(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('token', sa.String(), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_sessions_user_id', 'sessions', ['user_id'])
    op.create_index('ix_sessions_token', 'sessions', ['token'], unique=True)

    op.create_table(
        'properties',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('type', property_type, nullable=False),
        sa.Column('listing_type', listing_type, nullable=False),
        sa.Column('status', property_status, nullable=False, server_default='AVAILABLE'),
        sa.Column('price', sa.Numeric(14, 2), nullable=False),
        sa.Column('currency', sa.String(), nullable=False, server_default='NGN'),
        sa.Column('address', sa.String(), nullable=False),
        sa.Column('city', sa.String(), nullable=False),
        sa.Column('state', sa.String(), nullable=False),
        sa.Column('zip_code', sa.String(), nullable=True),
        sa.Column('latitude', sa.Float(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True),
        sa.Column('bedrooms', sa.Integer(), nullable=True),
        sa.Column('bathrooms', sa.Integer(), nullable=True),
        sa.Column('area', sa.Float(), nullable=True),
        sa.Column('year_built', sa.Integer(), nullable=True),
        sa.Column('image_urls', sa.JSON(), nullable=False),
        sa.Column('video_urls', sa.JSON(), nullable=False),
        sa.Column('amenities', sa.JSON(), nullable=False),
        sa.Column('is_featured', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('available_from', sa.DateTime(timezone=True), nullable=True),
        sa.Column('posted_by_id', sa.String(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('managed_by_agent_id', sa.String(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_properties_type', 'properties', ['type'])
    op.create_index('ix_properties_listing_type', 'properties', ['listing_type'])
    op.create_index('ix_properties_status', 'properties', ['status'])
    op.create_index('ix_properties_city', 'properties', ['city'])
    op.create_index('ix_properties_is_featured', 'properties', ['is_featured'])
    op.create_index('ix_properties_posted_by_id', 'properties', ['posted_by_id'])
    op.create_index('ix_properties_managed_by_agent_id', 'properties', ['managed_by_agent_id'])
    op.create_index('ix_properties_created_at', 'properties', ['created_at'])
    op.create_index('idx_property_status_created', 'properties', ['status', 'created_at'])
    op.create_index('idx_property_search', 'properties', ['status', 'type', 'listing_type', 'city'])
    op.create_index('idx_property_poster_status', 'properties', ['posted_by_id', 'status'])

    op.create_table(
        'favorites',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('user_id', sa.String(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('property_id', sa.String(), sa.ForeignKey('properties.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('property_id', 'user_id', name='uq_favorite_property_user'),
    )
    op.create_index('ix_favorites_user_id', 'favorites', ['user_id'])
    op.create_index('ix_favorites_property_id', 'favorites', ['property_id'])

    op.create_table(
        'ratings',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('client_id', sa.String(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('property_id', sa.String(), sa.ForeignKey('properties.id', ondelete='CASCADE'), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('comment', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('property_id', 'client_id', name='uq_rating_property_client'),
        sa.CheckConstraint('rating >= 1 AND rating <= 5', name='ck_rating_range'),
    )
    op.create_index('ix_ratings_client_id', 'ratings', ['client_id'])
    op.create_index('ix_ratings_property_id', 'ratings', ['property_id'])

    op.create_table(
        'complaints',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('client_id', sa.String(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('property_id', sa.String(), sa.ForeignKey('properties.id', ondelete='CASCADE'), nullable=False),
        sa.Column('subject', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('status', complaint_status, nullable=False, server_default='PENDING'),
        sa.Column('resolution_notes', sa.Text(), nullable=True),
        sa.Column('resolved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('resolved_by', sa.String(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_complaints_client_id', 'complaints', ['client_id'])
    op.create_index('ix_complaints_property_id', 'complaints', ['property_id'])
    op.create_index('ix_complaints_status', 'complaints', ['status'])
    op.create_index('ix_complaints_created_at', 'complaints', ['created_at'])

    op.create_table(
        'property_views',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('property_id', sa.String(), sa.ForeignKey('properties.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.String(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('ip_address', sa.String(), nullable=True),
        sa.Column('user_agent', sa.String(), nullable=True),
        sa.Column('viewed_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('idx_views_property_user', 'property_views', ['property_id', 'user_id', 'viewed_at'])
    op.create_index('idx_views_property_ip', 'property_views', ['property_id', 'ip_address', 'viewed_at'])


def downgrade() -> None:
    op.drop_table('property_views')
    op.drop_table('complaints')
    op.drop_table('ratings')
    op.drop_table('favorites')
    op.drop_table('properties')
    op.drop_table('sessions')
    op.drop_table('user_verifications')
    op.drop_table('agent_profiles')
    op.drop_table('users')

    bind = op.get_bind()
    for enum_type in reversed(ENUMS):
        enum_type.drop(bind, checkfirst=True)
