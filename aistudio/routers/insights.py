"""
Insights Router - GET /api/ai/insights.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from aistudio.core.errors import AppError
from aistudio.db.session import get_db
from aistudio.deps import TenantContext, require_ai_studio
from aistudio.services.insights_service import InsightsService, get_insights_service

logger = logging.getLogger("aistudio.routers.insights")

router = APIRouter(prefix="/api/ai", tags=["ai"])


@router.get("/insights")
async def get_insights(
    ctx: TenantContext = Depends(require_ai_studio),
    db: Session = Depends(get_db),
    service: InsightsService = Depends(get_insights_service),
):
    """
    Business metrics plus a model-written review of them.

    Returns:
        {"insights": {...}, "metrics": {...}, "generatedAt": "..."}
    """
    try:
        report = await service.generate(db, ctx.tenant_id, ctx.user_id)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Insights generation error: {e}", exc_info=True)
        raise AppError(error="Failed to generate insights")

    return report.to_dict()
