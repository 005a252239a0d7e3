"""
OAuth Integration model - OAuth tokens a tenant granted to AI Studio.

Today the only provider is "google-ai-studio" (Generative Language API),
but the table is provider-agnostic: one row per (tenant, provider).

Example Usage:
    integration = OAuthIntegration(
        tenant_id=tenant.id,
        provider="google-ai-studio",
        access_token="ya29.xxx",
        refresh_token="1//xxx",
        expires_at=datetime.now(timezone.utc) + timedelta(hours=1),
        scope="https://www.googleapis.com/auth/generative-language",
    )
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from aistudio.db.base import Base


class OAuthIntegration(Base):
    """
    SQLAlchemy ORM model for the 'oauth_integrations' table.

    - One provider per tenant (unique constraint on tenant_id + provider)
    - Stores both access and refresh tokens for persistent access
    - Tracks token expiration for proactive refresh
    """

    __tablename__ = "oauth_integrations"
    __table_args__ = (
        UniqueConstraint("tenant_id", "provider", name="uq_oauth_integration_tenant_provider"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # provider: e.g. "google-ai-studio"
    provider: Mapped[str] = mapped_column(String(50), nullable=False, index=True)

    # ---------------------------------------------------------------------------
    # TOKEN DATA
    # ---------------------------------------------------------------------------
    access_token: Mapped[str] = mapped_column(Text, nullable=False)
    refresh_token: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # scope: space-separated scopes exactly as granted by the provider
    scope: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # ---------------------------------------------------------------------------
    # ACCOUNT INFO (shown on the integrations settings page)
    # ---------------------------------------------------------------------------
    provider_account_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    provider_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    provider_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    last_used_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def is_expired(self) -> bool:
        """
        Check if the access token has expired.

        Returns:
            True if the token is expired or expires within 5 minutes,
            or if expires_at is not set
        """
        if self.expires_at is None:
            return True
        expires_at = self.expires_at
        # SQLite hands back naive datetimes; stored values are always UTC
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return datetime.now(timezone.utc) >= (expires_at - timedelta(minutes=5))

    def has_scope(self, scope: str) -> bool:
        """Check if a specific scope was granted."""
        if not self.scope:
            return False
        return scope in self.scope.split()

    def __repr__(self) -> str:
        return f"<OAuthIntegration(tenant_id={self.tenant_id}, provider='{self.provider}')>"
