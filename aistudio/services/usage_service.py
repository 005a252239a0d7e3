"""
Usage Service - records and aggregates AI usage per tenant.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from aistudio.models.usage import AIUsage

logger = logging.getLogger("aistudio.services.usage")


def record_usage(
    db: Session,
    tenant_id: UUID,
    service: str,
    feature: str,
    tokens: int = 0,
    user_id: Optional[UUID] = None,
) -> None:
    """Append one AIUsage row. Failures are logged, never raised."""
    try:
        db.add(AIUsage(
            tenant_id=tenant_id,
            user_id=user_id,
            service=service,
            feature=feature,
            tokens=tokens or 0,
        ))
        db.commit()
    except SQLAlchemyError as e:
        logger.warning(f"Failed to record {feature} usage for tenant {tenant_id}: {e}")
        db.rollback()


def month_start(now: Optional[datetime] = None) -> datetime:
    now = now or datetime.now(timezone.utc)
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def monthly_usage(db: Session, tenant_id: UUID, now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Usage since the first day of the current UTC month, grouped by service.

    Returns:
        {"month": "YYYY-MM", "usage": {service: {count, tokens}}, "total": {count, tokens}}
    """
    start = month_start(now)
    rows = (
        db.query(AIUsage.service, func.count(AIUsage.id), func.coalesce(func.sum(AIUsage.tokens), 0))
        .filter(AIUsage.tenant_id == tenant_id, AIUsage.created_at >= start)
        .group_by(AIUsage.service)
        .all()
    )

    usage = {service: {"count": count, "tokens": int(tokens)} for service, count, tokens in rows}
    total = {
        "count": sum(item["count"] for item in usage.values()),
        "tokens": sum(item["tokens"] for item in usage.values()),
    }
    return {"month": start.strftime("%Y-%m"), "usage": usage, "total": total}
