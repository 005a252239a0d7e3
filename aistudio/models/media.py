"""
Logo models - a logo request and the image variations generated for it.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from aistudio.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Logo(Base):
    __tablename__ = "logos"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True
    )

    business_name: Mapped[str] = mapped_column(String(255), nullable=False)
    industry: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    style: Mapped[str] = mapped_column(String(50), default="modern")
    colors: Mapped[List[str]] = mapped_column(JSON, default=list)
    prompt: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # status: GENERATING | COMPLETED | FAILED
    status: Mapped[str] = mapped_column(String(20), default="GENERATING")
    error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    variations: Mapped[List["LogoVariation"]] = relationship(
        back_populates="logo",
        cascade="all, delete-orphan",
        order_by="LogoVariation.created_at",
    )

    @property
    def variation_count(self) -> int:
        return len(self.variations)


class LogoVariation(Base):
    __tablename__ = "logo_variations"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    logo_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("logos.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # image_url may be a data: URL when the provider returns inline bytes
    image_url: Mapped[str] = mapped_column(Text, nullable=False)
    thumbnail_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    icon_style: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    is_selected: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    logo: Mapped[Logo] = relationship(back_populates="variations")
