"""
Telephony Service - vendor webhook handling for AI-answered calls.

The vendor posts a form-encoded callback for every call status change.
Calls are upserted by the vendor call id, so replays of the same callback
are harmless. Newly ringing or in-progress calls get voice markup that
sends the caller into a speech-gathering loop.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID
from xml.sax.saxutils import escape, quoteattr

from sqlalchemy.orm import Session

from aistudio.core.config import settings
from aistudio.core.errors import ConfigurationError
from aistudio.models.calls import AICall

logger = logging.getLogger("aistudio.services.telephony")

# Vendor status -> internal status. Anything else is treated as RINGING.
CALL_STATUS_MAP = {
    "ringing": "RINGING",
    "in-progress": "ANSWERED",
    "completed": "COMPLETED",
    "busy": "BUSY",
    "no-answer": "NO_ANSWER",
    "failed": "FAILED",
    "canceled": "FAILED",
}
DEFAULT_CALL_STATUS = "RINGING"

# Vendor statuses that get voice markup instead of a JSON acknowledgement
GREETING_STATUSES = ("ringing", "in-progress")

GREETING = "Hello, this is an AI assistant. How can I help you today?"
GATHER_PROMPT = "Please speak your question or request."


def map_call_status(vendor_status: Optional[str]) -> str:
    return CALL_STATUS_MAP.get((vendor_status or "").lower(), DEFAULT_CALL_STATUS)


def greeting_twiml(action: Optional[str] = None) -> str:
    """Voice markup greeting the caller and gathering speech."""
    action = action or settings.TELEPHONY_SPEECH_ACTION
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        "<Response>\n"
        f'  <Say voice="alice">{escape(GREETING)}</Say>\n'
        f'  <Gather input="speech" action={quoteattr(action)} method="POST" speechTimeout="auto">\n'
        f"    <Say>{escape(GATHER_PROMPT)}</Say>\n"
        "  </Gather>\n"
        "</Response>"
    )


@dataclass
class CallEvent:
    """One webhook callback, as posted by the vendor."""
    call_sid: str
    call_status: str
    from_number: Optional[str] = None
    to_number: Optional[str] = None
    direction: Optional[str] = None
    account_sid: Optional[str] = None

    @property
    def wants_greeting(self) -> bool:
        return self.call_status.lower() in GREETING_STATUSES


def default_tenant_id() -> UUID:
    if not settings.TELEPHONY_DEFAULT_TENANT_ID:
        raise ConfigurationError(
            "No tenant is configured to own incoming calls.",
            error="Telephony not configured",
            hint="Set TELEPHONY_DEFAULT_TENANT_ID in your .env file.",
        )
    return UUID(settings.TELEPHONY_DEFAULT_TENANT_ID)


def upsert_call(db: Session, event: CallEvent, tenant_id: Optional[UUID] = None) -> AICall:
    """
    Create the call on first sight, then track its status.

    New calls belong to `tenant_id` (the configured default tenant when
    omitted). answered_at is set on in-progress, ended_at on completed.
    """
    call = db.query(AICall).filter(AICall.twilio_call_sid == event.call_sid).first()
    status = map_call_status(event.call_status)

    if call is None:
        inbound = event.direction == "inbound"
        call = AICall(
            tenant_id=tenant_id or default_tenant_id(),
            phone_number=(event.from_number if inbound else event.to_number) or "unknown",
            direction="INBOUND" if inbound else "OUTBOUND",
            status=status,
            twilio_call_sid=event.call_sid,
            twilio_account_sid=event.account_sid,
        )
        db.add(call)
        logger.info(f"New call {event.call_sid} ({call.direction}, {status})")
    else:
        call.status = status

    now = datetime.now(timezone.utc)
    if status == "ANSWERED":
        call.answered_at = now
    elif status == "COMPLETED":
        call.ended_at = now

    db.commit()
    db.refresh(call)
    return call
