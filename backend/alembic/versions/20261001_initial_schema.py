"""initial schema: users, properties, clients, viewings, matches, conversations

Revision ID: 20261001_001
Revises:
Create Date: 2026-10-01 10:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = '20261001_001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('auth_id', sa.String(100), nullable=False),
        sa.Column('full_name', sa.String(200), nullable=True),
        sa.Column('email', sa.String(200), nullable=True),
        sa.Column('phone', sa.String(30), nullable=True),
        sa.Column('role', sa.String(20), nullable=False, server_default='agent'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_auth_id', 'users', ['auth_id'], unique=True)

    op.create_table(
        'properties',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('vivareal_id', sa.String(100), nullable=True),
        sa.Column('source_url', sa.String(1000), nullable=False, server_default=''),

        # Basic Info
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('property_type', sa.String(50), nullable=True),
        sa.Column('listing_type', sa.String(10), nullable=True),
        sa.Column('status', sa.String(20), nullable=True, server_default='active'),

        # Values
        sa.Column('price_monthly', sa.Numeric(15, 2), nullable=True),
        sa.Column('price_total', sa.Numeric(15, 2), nullable=True),
        sa.Column('condominium_fee', sa.Numeric(10, 2), nullable=True),
        sa.Column('iptu_annual', sa.Numeric(10, 2), nullable=True),
        sa.Column('iptu_monthly', sa.Numeric(10, 2), nullable=True),

        # Details
        sa.Column('area_total', sa.Numeric(10, 2), nullable=True),
        sa.Column('area_useful', sa.Numeric(10, 2), nullable=True),
        sa.Column('bedrooms', sa.Integer(), nullable=True),
        sa.Column('bathrooms', sa.Integer(), nullable=True),
        sa.Column('suites', sa.Integer(), nullable=True),
        sa.Column('parking_spaces', sa.Integer(), nullable=True),
        sa.Column('floor', sa.Integer(), nullable=True),
        sa.Column('furnished', sa.String(20), nullable=True),

        # Location
        sa.Column('address_full', sa.String(500), nullable=True),
        sa.Column('address_street', sa.String(300), nullable=True),
        sa.Column('address_number', sa.String(20), nullable=True),
        sa.Column('address_neighborhood', sa.String(150), nullable=True),
        sa.Column('address_city', sa.String(150), nullable=True),
        sa.Column('address_state', sa.String(2), nullable=True),
        sa.Column('address_zipcode', sa.String(10), nullable=True),
        sa.Column('latitude', sa.Numeric(10, 8), nullable=True),
        sa.Column('longitude', sa.Numeric(11, 8), nullable=True),

        # Media
        sa.Column('image_url', sa.String(1000), nullable=True),
        sa.Column('image_alt', sa.String(500), nullable=True),
        sa.Column('images', postgresql.JSONB(astext_type=sa.Text()), nullable=True, server_default='[]'),

        # Features (JSONB array)
        sa.Column('features', postgresql.JSONB(astext_type=sa.Text()), nullable=True, server_default='[]'),
        # ["piscina", "churrasqueira", "academia", "varanda_gourmet"]

        # IA
        sa.Column('ai_summary', sa.Text(), nullable=True),
        sa.Column('ai_highlights', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('ai_embedding', postgresql.ARRAY(sa.Float()), nullable=True),

        sa.Column('scraped_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),

        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('vivareal_id', name='uq_properties_vivareal_id'),
    )
    op.create_index('ix_properties_property_type', 'properties', ['property_type'])
    op.create_index('ix_properties_listing_type', 'properties', ['listing_type'])
    op.create_index('ix_properties_status', 'properties', ['status'])
    op.create_index('ix_properties_price_monthly', 'properties', ['price_monthly'])
    op.create_index('ix_properties_price_total', 'properties', ['price_total'])
    op.create_index('ix_properties_bedrooms', 'properties', ['bedrooms'])
    op.create_index('ix_properties_address_neighborhood', 'properties', ['address_neighborhood'])
    op.create_index('ix_properties_address_city', 'properties', ['address_city'])
    op.create_index('ix_properties_deleted_at', 'properties', ['deleted_at'])
    op.create_index('ix_properties_status_deleted', 'properties', ['status', 'deleted_at'])
    op.create_index('ix_properties_type_bedrooms_price', 'properties', ['property_type', 'bedrooms', 'price_total'])

    op.create_table(
        'clients',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('full_name', sa.String(200), nullable=False),
        sa.Column('email', sa.String(200), nullable=True),
        sa.Column('phone', sa.String(30), nullable=False),
        sa.Column('agent_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('organization_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('status', sa.String(20), nullable=True, server_default='active'),
        sa.Column('source', sa.String(30), nullable=True, server_default='manual'),

        # Orçamento e preferências
        sa.Column('budget_min', sa.Numeric(15, 2), nullable=True),
        sa.Column('budget_max', sa.Numeric(15, 2), nullable=True),
        sa.Column('preferred_neighborhoods', postgresql.ARRAY(sa.String()), nullable=True),
        sa.Column('preferred_property_types', postgresql.ARRAY(sa.String()), nullable=True),
        sa.Column('min_bedrooms', sa.Integer(), nullable=True),
        sa.Column('min_bathrooms', sa.Integer(), nullable=True),
        sa.Column('required_features', postgresql.ARRAY(sa.String()), nullable=True),
        sa.Column('preferences_embedding', postgresql.ARRAY(sa.Float()), nullable=True),

        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('converted_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),

        sa.ForeignKeyConstraint(['agent_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_clients_agent_id', 'clients', ['agent_id'])
    op.create_index('ix_clients_status', 'clients', ['status'])
    op.create_index('ix_clients_deleted_at', 'clients', ['deleted_at'])

    op.create_table(
        'viewings',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('property_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('agent_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('client_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('scheduled_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=True, server_default='60'),
        sa.Column('status', sa.String(20), nullable=True, server_default='scheduled'),
        sa.Column('meeting_type', sa.String(20), nullable=True, server_default='in-person'),
        sa.Column('meeting_link', sa.String(500), nullable=True),
        sa.Column('client_feedback', sa.Text(), nullable=True),
        sa.Column('client_rating', sa.Integer(), nullable=True),
        sa.Column('agent_notes', sa.Text(), nullable=True),
        sa.Column('follow_up_required', sa.Boolean(), nullable=True, server_default='false'),
        sa.Column('follow_up_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['agent_id'], ['users.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_viewings_property_id', 'viewings', ['property_id'])
    op.create_index('ix_viewings_agent_id', 'viewings', ['agent_id'])
    op.create_index('ix_viewings_scheduled_at', 'viewings', ['scheduled_at'])
    op.create_index('ix_viewings_status', 'viewings', ['status'])

    op.create_table(
        'property_matches',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('client_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('property_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        # high, medium, low, rejected
        sa.Column('match_score', sa.Float(), nullable=True),
        sa.Column('match_reasons', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('sent_by', postgresql.UUID(as_uuid=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['sent_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('client_id', 'property_id', name='uq_property_matches_client_property'),
    )
    op.create_index('ix_property_matches_client_id', 'property_matches', ['client_id'])
    op.create_index('ix_property_matches_property_id', 'property_matches', ['property_id'])

    op.create_table(
        'ai_conversations',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('client_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('conversation_type', sa.String(20), nullable=True, server_default='general'),
        sa.Column('messages', postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default='[]'),
        sa.Column('related_property_ids', postgresql.ARRAY(sa.String()), nullable=True),
        sa.Column('metadata', postgresql.JSONB(astext_type=sa.Text()), nullable=True, server_default='{}'),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_ai_conversations_user_id', 'ai_conversations', ['user_id'])
    op.create_index('ix_ai_conversations_client_id', 'ai_conversations', ['client_id'])


def downgrade() -> None:
    op.drop_table('ai_conversations')
    op.drop_table('property_matches')
    op.drop_table('viewings')
    op.drop_table('clients')
    op.drop_table('properties')
    op.drop_table('users')
