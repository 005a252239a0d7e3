"""create ai studio schema

Revision ID: a41f7c2e9b30
Revises:
Create Date: 2026-10-18 10:00:00.000000

Initial schema for AI Studio Cloud.

Tables:
1. tenants / users - businesses and their accounts (licensing, encrypted vendor key)
2. contacts, deals, interactions, tasks, products, orders, invoices - the
   business records the chat context is assembled from
3. ai_usage, ai_interaction_logs, ai_cached_responses - usage metering,
   best-effort logs and the exact-match response cache
4. oauth_integrations - Google AI Studio OAuth tokens, one row per tenant+provider
5. ai_calls, call_recordings, call_transcripts, call_faqs - telephony
6. logos, logo_variations, websites, website_pages - media and site builder
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID, JSON


# revision identifiers, used by Alembic.
revision: str = 'a41f7c2e9b30'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _tenant_fk() -> sa.Column:
    return sa.Column('tenant_id', UUID(), sa.ForeignKey('tenants.id', ondelete='CASCADE'), nullable=False)


def _tenant_index(table: str) -> None:
    op.create_index(op.f(f'ix_{table}_tenant_id'), table, ['tenant_id'], unique=False)


def upgrade() -> None:
    """Create every AI Studio table."""
    # -------------------------------------------------------------------------
    # TENANTS / USERS
    # -------------------------------------------------------------------------
    op.create_table(
        'tenants',
        sa.Column('id', UUID(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('gstin', sa.String(length=20), nullable=True),
        sa.Column('address', sa.String(length=500), nullable=True),
        sa.Column('city', sa.String(length=100), nullable=True),
        sa.Column('state', sa.String(length=100), nullable=True),
        sa.Column('postal_code', sa.String(length=20), nullable=True),
        sa.Column('country', sa.String(length=100), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('website', sa.String(length=255), nullable=True),

        # Module ids the tenant pays for, e.g. ["ai-studio", "crm"]
        sa.Column('licensed_modules', JSON(), nullable=True),

        # "<nonce_b64>:<ciphertext_b64>" (AES-GCM); legacy rows may be plain
        sa.Column('google_ai_studio_api_key', sa.Text(), nullable=True),

        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'users',
        sa.Column('id', UUID(), nullable=False),
        _tenant_fk(),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('hashed_password', sa.String(length=255), nullable=False),
        sa.Column('display_name', sa.String(length=100), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    _tenant_index('users')
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    # -------------------------------------------------------------------------
    # BUSINESS RECORDS
    # -------------------------------------------------------------------------
    op.create_table(
        'contacts',
        sa.Column('id', UUID(), nullable=False),
        _tenant_fk(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('company', sa.String(length=255), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('address', sa.String(length=500), nullable=True),
        sa.Column('city', sa.String(length=100), nullable=True),
        sa.Column('state', sa.String(length=100), nullable=True),
        sa.Column('type', sa.String(length=50), nullable=True),
        sa.Column('status', sa.String(length=50), nullable=True),
        sa.Column('churn_risk', sa.Boolean(), nullable=True),
        sa.Column('likely_to_buy', sa.Boolean(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('tags', JSON(), nullable=True),
        sa.Column('last_contacted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    _tenant_index('contacts')

    op.create_table(
        'deals',
        sa.Column('id', UUID(), nullable=False),
        _tenant_fk(),
        sa.Column('contact_id', UUID(), sa.ForeignKey('contacts.id', ondelete='SET NULL'), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('value', sa.Float(), nullable=True),
        sa.Column('stage', sa.String(length=50), nullable=True),
        sa.Column('probability', sa.Integer(), nullable=True),
        sa.Column('expected_close_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    _tenant_index('deals')

    op.create_table(
        'interactions',
        sa.Column('id', UUID(), nullable=False),
        _tenant_fk(),
        sa.Column('contact_id', UUID(), sa.ForeignKey('contacts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', sa.String(length=50), nullable=True),
        sa.Column('subject', sa.String(length=255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    _tenant_index('interactions')

    op.create_table(
        'tasks',
        sa.Column('id', UUID(), nullable=False),
        _tenant_fk(),
        sa.Column('contact_id', UUID(), sa.ForeignKey('contacts.id', ondelete='SET NULL'), nullable=True),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=50), nullable=True),
        sa.Column('priority', sa.String(length=20), nullable=True),
        sa.Column('due_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    _tenant_index('tasks')

    op.create_table(
        'products',
        sa.Column('id', UUID(), nullable=False),
        _tenant_fk(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('sale_price', sa.Float(), nullable=True),
        sa.Column('categories', JSON(), nullable=True),
        sa.Column('total_sold', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    _tenant_index('products')

    op.create_table(
        'orders',
        sa.Column('id', UUID(), nullable=False),
        _tenant_fk(),
        sa.Column('order_number', sa.String(length=50), nullable=True),
        sa.Column('total', sa.Float(), nullable=True),
        sa.Column('status', sa.String(length=50), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    _tenant_index('orders')

    op.create_table(
        'invoices',
        sa.Column('id', UUID(), nullable=False),
        _tenant_fk(),
        sa.Column('customer_id', UUID(), sa.ForeignKey('contacts.id', ondelete='SET NULL'), nullable=True),
        sa.Column('invoice_number', sa.String(length=50), nullable=False),
        sa.Column('total', sa.Float(), nullable=True),
        sa.Column('status', sa.String(length=50), nullable=True),
        sa.Column('due_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    _tenant_index('invoices')

    # -------------------------------------------------------------------------
    # AI USAGE, LOGS, CACHE
    # -------------------------------------------------------------------------
    op.create_table(
        'ai_usage',
        sa.Column('id', UUID(), nullable=False),
        _tenant_fk(),
        sa.Column('user_id', UUID(), nullable=True),
        sa.Column('service', sa.String(length=50), nullable=False),
        sa.Column('feature', sa.String(length=50), nullable=False),
        sa.Column('tokens', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    _tenant_index('ai_usage')
    # Monthly usage reports filter on created_at
    op.create_index(op.f('ix_ai_usage_created_at'), 'ai_usage', ['created_at'], unique=False)

    op.create_table(
        'ai_interaction_logs',
        sa.Column('id', UUID(), nullable=False),
        sa.Column('tenant_id', UUID(), nullable=False),
        sa.Column('user_id', UUID(), nullable=True),
        sa.Column('kind', sa.String(length=50), nullable=False),
        sa.Column('query', sa.Text(), nullable=True),
        sa.Column('response', sa.Text(), nullable=True),
        sa.Column('module', sa.String(length=50), nullable=True),
        sa.Column('payload', JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    _tenant_index('ai_interaction_logs')

    op.create_table(
        'ai_cached_responses',
        sa.Column('id', UUID(), nullable=False),
        sa.Column('tenant_id', UUID(), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('response', sa.Text(), nullable=False),
        sa.Column('service', sa.String(length=50), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        # Exact message match, scoped per tenant
        sa.UniqueConstraint('tenant_id', 'message', name='uq_cached_response_tenant_message'),
    )
    _tenant_index('ai_cached_responses')

    # -------------------------------------------------------------------------
    # OAUTH INTEGRATIONS
    # -------------------------------------------------------------------------
    op.create_table(
        'oauth_integrations',
        sa.Column('id', UUID(), nullable=False),
        _tenant_fk(),
        sa.Column('provider', sa.String(length=50), nullable=False),
        sa.Column('access_token', sa.Text(), nullable=False),
        sa.Column('refresh_token', sa.Text(), nullable=True),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('scope', sa.Text(), nullable=True),
        sa.Column('provider_account_id', sa.String(length=255), nullable=True),
        sa.Column('provider_email', sa.String(length=255), nullable=True),
        sa.Column('provider_name', sa.String(length=255), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('last_used_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        # One connection per provider per tenant
        sa.UniqueConstraint('tenant_id', 'provider', name='uq_oauth_integration_tenant_provider'),
    )
    _tenant_index('oauth_integrations')
    op.create_index(op.f('ix_oauth_integrations_provider'), 'oauth_integrations', ['provider'], unique=False)

    # -------------------------------------------------------------------------
    # TELEPHONY
    # -------------------------------------------------------------------------
    op.create_table(
        'ai_calls',
        sa.Column('id', UUID(), nullable=False),
        _tenant_fk(),
        sa.Column('phone_number', sa.String(length=50), nullable=False),
        sa.Column('direction', sa.String(length=20), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=True),
        sa.Column('twilio_call_sid', sa.String(length=64), nullable=True),
        sa.Column('twilio_account_sid', sa.String(length=64), nullable=True),
        sa.Column('handled_by_ai', sa.Boolean(), nullable=True),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('answered_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('ended_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        # Webhook replays upsert on the vendor call id
        sa.UniqueConstraint('twilio_call_sid'),
    )
    _tenant_index('ai_calls')
    op.create_index(op.f('ix_ai_calls_status'), 'ai_calls', ['status'], unique=False)

    op.create_table(
        'call_recordings',
        sa.Column('id', UUID(), nullable=False),
        sa.Column('call_id', UUID(), sa.ForeignKey('ai_calls.id', ondelete='CASCADE'), nullable=False),
        sa.Column('recording_url', sa.Text(), nullable=False),
        sa.Column('duration', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_call_recordings_call_id'), 'call_recordings', ['call_id'], unique=False)

    op.create_table(
        'call_transcripts',
        sa.Column('id', UUID(), nullable=False),
        sa.Column('call_id', UUID(), sa.ForeignKey('ai_calls.id', ondelete='CASCADE'), nullable=False),
        sa.Column('transcript', sa.Text(), nullable=False),
        sa.Column('summary', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_call_transcripts_call_id'), 'call_transcripts', ['call_id'], unique=False)

    op.create_table(
        'call_faqs',
        sa.Column('id', UUID(), nullable=False),
        _tenant_fk(),
        sa.Column('question', sa.Text(), nullable=False),
        sa.Column('answer', sa.Text(), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('times_used', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    _tenant_index('call_faqs')

    # -------------------------------------------------------------------------
    # LOGOS / WEBSITES
    # -------------------------------------------------------------------------
    op.create_table(
        'logos',
        sa.Column('id', UUID(), nullable=False),
        _tenant_fk(),
        sa.Column('business_name', sa.String(length=255), nullable=False),
        sa.Column('industry', sa.String(length=100), nullable=True),
        sa.Column('style', sa.String(length=50), nullable=True),
        sa.Column('colors', JSON(), nullable=True),
        sa.Column('prompt', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=True),
        sa.Column('error', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    _tenant_index('logos')

    op.create_table(
        'logo_variations',
        sa.Column('id', UUID(), nullable=False),
        sa.Column('logo_id', UUID(), sa.ForeignKey('logos.id', ondelete='CASCADE'), nullable=False),
        sa.Column('image_url', sa.Text(), nullable=False),
        sa.Column('thumbnail_url', sa.Text(), nullable=True),
        sa.Column('icon_style', sa.String(length=50), nullable=True),
        sa.Column('is_selected', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_logo_variations_logo_id'), 'logo_variations', ['logo_id'], unique=False)

    op.create_table(
        'websites',
        sa.Column('id', UUID(), nullable=False),
        _tenant_fk(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('domain', sa.String(length=255), nullable=True),
        sa.Column('subdomain', sa.String(length=100), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=True),
        sa.Column('tracking_code', sa.String(length=64), nullable=False),
        sa.Column('meta_title', sa.String(length=255), nullable=True),
        sa.Column('meta_description', sa.String(length=500), nullable=True),
        sa.Column('visit_count', sa.Integer(), nullable=True),
        sa.Column('session_count', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('domain'),
        sa.UniqueConstraint('subdomain'),
        sa.UniqueConstraint('tracking_code'),
    )
    _tenant_index('websites')

    op.create_table(
        'website_pages',
        sa.Column('id', UUID(), nullable=False),
        sa.Column('website_id', UUID(), sa.ForeignKey('websites.id', ondelete='CASCADE'), nullable=False),
        sa.Column('path', sa.String(length=255), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('content', JSON(), nullable=True),
        sa.Column('is_published', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('website_id', 'path', name='uq_website_page_path'),
    )
    op.create_index(op.f('ix_website_pages_website_id'), 'website_pages', ['website_id'], unique=False)


def downgrade() -> None:
    """Drop every AI Studio table, children first."""
    for table in (
        'website_pages',
        'websites',
        'logo_variations',
        'logos',
        'call_faqs',
        'call_transcripts',
        'call_recordings',
        'ai_calls',
        'oauth_integrations',
        'ai_cached_responses',
        'ai_interaction_logs',
        'ai_usage',
        'invoices',
        'orders',
        'products',
        'tasks',
        'interactions',
        'deals',
        'contacts',
        'users',
        'tenants',
    ):
        op.drop_table(table)
