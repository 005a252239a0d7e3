"""
Telephony models - AI-handled phone calls, their recordings/transcripts,
and the FAQ answers the voice assistant draws on.

Call rows are created either by the dashboard (outbound) or by the
telephony vendor's webhook, which identifies a call by its vendor call id
(twilio_call_sid). That column is unique, so the webhook upsert is
idempotent per call.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from aistudio.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AICall(Base):
    __tablename__ = "ai_calls"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True
    )

    phone_number: Mapped[str] = mapped_column(String(50), nullable=False)

    # direction: INBOUND | OUTBOUND
    direction: Mapped[str] = mapped_column(String(20), default="INBOUND")

    # status: RINGING | ANSWERED | COMPLETED | BUSY | NO_ANSWER | FAILED
    status: Mapped[str] = mapped_column(String(20), default="RINGING", index=True)

    twilio_call_sid: Mapped[Optional[str]] = mapped_column(String(64), unique=True, nullable=True)
    twilio_account_sid: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    handled_by_ai: Mapped[bool] = mapped_column(Boolean, default=True)

    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    answered_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    ended_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    recordings: Mapped[List["CallRecording"]] = relationship(
        back_populates="call", cascade="all, delete-orphan"
    )
    transcripts: Mapped[List["CallTranscript"]] = relationship(
        back_populates="call", cascade="all, delete-orphan"
    )


class CallRecording(Base):
    __tablename__ = "call_recordings"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    call_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("ai_calls.id", ondelete="CASCADE"), nullable=False, index=True
    )

    recording_url: Mapped[str] = mapped_column(Text, nullable=False)
    duration: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # seconds

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    call: Mapped[AICall] = relationship(back_populates="recordings")


class CallTranscript(Base):
    __tablename__ = "call_transcripts"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    call_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("ai_calls.id", ondelete="CASCADE"), nullable=False, index=True
    )

    transcript: Mapped[str] = mapped_column(Text, nullable=False)
    summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    call: Mapped[AICall] = relationship(back_populates="transcripts")


class CallFAQ(Base):
    __tablename__ = "call_faqs"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True
    )

    question: Mapped[str] = mapped_column(Text, nullable=False)
    answer: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    times_used: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
