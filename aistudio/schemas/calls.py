"""
Call schemas - AI-handled calls, recordings, transcripts and FAQs.
"""

import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from aistudio.schemas.base import APIModel


class CallCreate(APIModel):
    phone_number: str = Field(..., alias="phoneNumber", min_length=1)
    direction: Literal["INBOUND", "OUTBOUND"] = "INBOUND"


class RecordingOut(APIModel):
    id: uuid.UUID
    recording_url: str = Field(..., alias="recordingUrl")
    duration: Optional[int] = None
    created_at: datetime = Field(..., alias="createdAt")


class TranscriptOut(APIModel):
    id: uuid.UUID
    transcript: str
    summary: Optional[str] = None
    created_at: datetime = Field(..., alias="createdAt")


class CallOut(APIModel):
    id: uuid.UUID
    tenant_id: uuid.UUID = Field(..., alias="tenantId")
    phone_number: str = Field(..., alias="phoneNumber")
    direction: str
    status: str
    twilio_call_sid: Optional[str] = Field(None, alias="twilioCallSid")
    handled_by_ai: bool = Field(..., alias="handledByAI")
    started_at: datetime = Field(..., alias="startedAt")
    answered_at: Optional[datetime] = Field(None, alias="answeredAt")
    ended_at: Optional[datetime] = Field(None, alias="endedAt")


class CallListItem(CallOut):
    recording_count: int = Field(0, alias="recordingCount")
    transcript_count: int = Field(0, alias="transcriptCount")


class CallDetail(CallOut):
    """A call with all its recordings (newest first) and its latest transcript."""
    recordings: List[RecordingOut] = []
    transcripts: List[TranscriptOut] = []


class Pagination(APIModel):
    page: int
    limit: int
    total: int
    total_pages: int = Field(..., alias="totalPages")


class CallList(APIModel):
    calls: List[CallListItem]
    pagination: Pagination


class FAQCreate(APIModel):
    question: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)
    category: Optional[str] = None


class FAQOut(APIModel):
    id: uuid.UUID
    question: str
    answer: str
    category: Optional[str] = None
    is_active: bool = Field(..., alias="isActive")
    times_used: int = Field(..., alias="timesUsed")
    created_at: datetime = Field(..., alias="createdAt")


class FAQList(APIModel):
    faqs: List[FAQOut]
