"""
Tenant model - one isolated customer business.

Every other business record carries a tenant_id, and every query in the
chat pipeline filters by it. A tenant is created at signup together with
its first user (see aistudio.routers.auth).
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import JSON, DateTime, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from aistudio.db.base import Base


class Tenant(Base):
    """
    SQLAlchemy ORM model for the 'tenants' table.

    Holds the business profile rendered into the chat context block
    ("YOUR BUSINESS ...") and the per-tenant Google AI Studio key used
    for image generation.
    """

    __tablename__ = "tenants"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )

    # ---------------------------------------------------------------------------
    # BUSINESS PROFILE
    # ---------------------------------------------------------------------------
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    gstin: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    postal_code: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    country: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    website: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # ---------------------------------------------------------------------------
    # LICENSING
    # ---------------------------------------------------------------------------
    # licensed_modules: module ids this tenant pays for, e.g. ["ai-studio", "crm"]
    # Checked by aistudio.deps.require_module_access on every AI Studio route.
    licensed_modules: Mapped[List[str]] = mapped_column(JSON, default=list)

    # ---------------------------------------------------------------------------
    # VENDOR CREDENTIALS
    # ---------------------------------------------------------------------------
    # google_ai_studio_api_key: "<nonce_b64>:<ciphertext_b64>" (AES-GCM).
    # Legacy rows may hold the plain key; see aistudio.core.encryption.
    google_ai_studio_api_key: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def has_module(self, module_id: str) -> bool:
        return module_id in (self.licensed_modules or [])

    def __repr__(self) -> str:
        return f"<Tenant(id={self.id}, name='{self.name}')>"
