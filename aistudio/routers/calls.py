"""
Calls Router - AI-answered phone calls, the vendor webhook and call FAQs.

Endpoints:
==========
- GET  /api/calls          -> paginated call list with recording/transcript counts
- POST /api/calls          -> log a call manually (201)
- GET  /api/calls/faqs     -> FAQ answers the voice assistant draws on
- POST /api/calls/faqs     -> add an FAQ (201)
- POST /api/calls/webhook  -> telephony vendor status callback (form-encoded, no bearer token)
- GET  /api/calls/{id}     -> one call with recordings and its latest transcript

/faqs and /webhook are declared before /{id} so they are never captured
as call ids.
"""

import logging
import math
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Form, Query, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from aistudio.core.errors import AppError, NotFoundError
from aistudio.db.session import get_db
from aistudio.deps import TenantContext, require_ai_studio
from aistudio.models.calls import AICall, CallFAQ, CallRecording, CallTranscript
from aistudio.schemas.calls import (
    CallCreate,
    CallDetail,
    CallList,
    CallListItem,
    CallOut,
    FAQCreate,
    FAQList,
    FAQOut,
    Pagination,
    RecordingOut,
    TranscriptOut,
)
from aistudio.services.telephony import CallEvent, greeting_twiml, upsert_call

logger = logging.getLogger("aistudio.routers.calls")

router = APIRouter(prefix="/api/calls", tags=["calls"])


# ---------------------------------------------------------------------------
# CALL LIST / CREATE
# ---------------------------------------------------------------------------


@router.get("", response_model=CallList)
def list_calls(
    call_status: Optional[str] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    ctx: TenantContext = Depends(require_ai_studio),
    db: Session = Depends(get_db),
):
    """Newest first."""
    query = db.query(AICall).filter(AICall.tenant_id == ctx.tenant_id)
    if call_status:
        query = query.filter(AICall.status == call_status.upper())

    total = query.count()
    calls = (
        query.order_by(AICall.started_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    items = [
        CallListItem.model_validate(call).model_copy(update={
            "recording_count": len(call.recordings),
            "transcript_count": len(call.transcripts),
        })
        for call in calls
    ]
    return CallList(
        calls=items,
        pagination=Pagination(
            page=page,
            limit=limit,
            total=total,
            total_pages=math.ceil(total / limit),
        ),
    )


@router.post("", response_model=CallOut, status_code=status.HTTP_201_CREATED)
def create_call(
    payload: CallCreate,
    ctx: TenantContext = Depends(require_ai_studio),
    db: Session = Depends(get_db),
):
    call = AICall(
        tenant_id=ctx.tenant_id,
        phone_number=payload.phone_number,
        direction=payload.direction,
        status="RINGING",
    )
    db.add(call)
    db.commit()
    db.refresh(call)
    return call


# ---------------------------------------------------------------------------
# FAQS
# ---------------------------------------------------------------------------


@router.get("/faqs", response_model=FAQList)
def list_faqs(
    category: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    ctx: TenantContext = Depends(require_ai_studio),
    db: Session = Depends(get_db),
):
    """Most used first; ties broken by newest."""
    query = db.query(CallFAQ).filter(CallFAQ.tenant_id == ctx.tenant_id)
    if category:
        query = query.filter(CallFAQ.category == category)
    if is_active is not None:
        query = query.filter(CallFAQ.is_active == is_active)

    faqs = query.order_by(CallFAQ.times_used.desc(), CallFAQ.created_at.desc()).all()
    return FAQList(faqs=[FAQOut.model_validate(faq) for faq in faqs])


@router.post("/faqs", response_model=FAQOut, status_code=status.HTTP_201_CREATED)
def create_faq(
    payload: FAQCreate,
    ctx: TenantContext = Depends(require_ai_studio),
    db: Session = Depends(get_db),
):
    faq = CallFAQ(
        tenant_id=ctx.tenant_id,
        question=payload.question,
        answer=payload.answer,
        category=payload.category,
    )
    db.add(faq)
    db.commit()
    db.refresh(faq)
    return faq


# ---------------------------------------------------------------------------
# VENDOR WEBHOOK
# ---------------------------------------------------------------------------


@router.post("/webhook")
def call_webhook(
    call_sid: str = Form(..., alias="CallSid"),
    call_status: str = Form(..., alias="CallStatus"),
    from_number: Optional[str] = Form(None, alias="From"),
    to_number: Optional[str] = Form(None, alias="To"),
    direction: Optional[str] = Form(None, alias="Direction"),
    account_sid: Optional[str] = Form(None, alias="AccountSid"),
    db: Session = Depends(get_db),
):
    """
    Status callback from the telephony vendor.

    Ringing and in-progress calls are answered with voice markup that greets
    the caller and gathers speech; every other status gets {"success": true}.
    """
    event = CallEvent(
        call_sid=call_sid,
        call_status=call_status,
        from_number=from_number,
        to_number=to_number,
        direction=direction,
        account_sid=account_sid,
    )
    try:
        upsert_call(db, event)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Webhook processing failed for {call_sid}: {e}", exc_info=True)
        db.rollback()
        raise AppError(error="Failed to process webhook")

    if event.wants_greeting:
        return Response(content=greeting_twiml(), media_type="text/xml")
    return {"success": True}


# ---------------------------------------------------------------------------
# CALL DETAIL
# ---------------------------------------------------------------------------


@router.get("/{call_id}", response_model=CallDetail)
def get_call(
    call_id: uuid.UUID,
    ctx: TenantContext = Depends(require_ai_studio),
    db: Session = Depends(get_db),
):
    call = (
        db.query(AICall)
        .filter(AICall.id == call_id, AICall.tenant_id == ctx.tenant_id)
        .first()
    )
    if call is None:
        raise NotFoundError(error="Call not found")

    recordings = (
        db.query(CallRecording)
        .filter(CallRecording.call_id == call.id)
        .order_by(CallRecording.created_at.desc())
        .all()
    )
    latest_transcript = (
        db.query(CallTranscript)
        .filter(CallTranscript.call_id == call.id)
        .order_by(CallTranscript.created_at.desc())
        .first()
    )

    return CallDetail.model_validate(call).model_copy(update={
        "recordings": [RecordingOut.model_validate(r) for r in recordings],
        "transcripts": [TranscriptOut.model_validate(latest_transcript)] if latest_transcript else [],
    })
