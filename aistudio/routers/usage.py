"""
Usage Router - GET /api/ai/usage, this month's AI usage for the tenant.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from aistudio.ai.providers.gateway import AIGatewayClient
from aistudio.core.config import settings
from aistudio.core.errors import AppError, ProviderError
from aistudio.db.session import get_db
from aistudio.deps import TenantContext, get_gateway_client, require_ai_studio
from aistudio.services.usage_service import monthly_usage

logger = logging.getLogger("aistudio.routers.usage")

router = APIRouter(prefix="/api/ai", tags=["ai"])


@router.get("/usage")
async def get_usage(
    ctx: TenantContext = Depends(require_ai_studio),
    db: Session = Depends(get_db),
    gateway: AIGatewayClient = Depends(get_gateway_client),
):
    """
    Returns:
        {"month": "YYYY-MM", "usage": {service: {count, tokens}},
         "total": {count, tokens}, "gateway": {...} | null}
    """
    try:
        report = monthly_usage(db, ctx.tenant_id)
    except SQLAlchemyError as e:
        logger.error(f"Usage query failed for tenant {ctx.tenant_id}: {e}", exc_info=True)
        raise AppError(error="Failed to get usage")

    report["gateway"] = None
    if settings.gateway_enabled:
        try:
            report["gateway"] = await gateway.usage()
        except ProviderError as e:
            logger.warning(f"Gateway usage unavailable: {e}")

    return report
