"""
Logos Router - AI logo generation.

Endpoints:
==========
- GET  /api/logos                                          -> {"logos": [...]}
- POST /api/logos                                          -> generate three variations (201)
- GET  /api/logos/{id}
- PUT  /api/logos/{id}/variations/{variationId}/select     -> select exactly one variation
"""

import logging
import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from aistudio.core.errors import AppError
from aistudio.db.session import get_db
from aistudio.deps import TenantContext, require_ai_studio
from aistudio.models.media import Logo
from aistudio.schemas.logos import LogoCreate, LogoList, LogoOut
from aistudio.services.image_service import ImageService, get_image_service
from aistudio.services.logo_service import LogoService

logger = logging.getLogger("aistudio.routers.logos")

router = APIRouter(prefix="/api/logos", tags=["logos"])


def get_logo_service(
    db: Session = Depends(get_db),
    images: ImageService = Depends(get_image_service),
) -> LogoService:
    return LogoService(db, images)


@router.get("", response_model=LogoList)
def list_logos(
    ctx: TenantContext = Depends(require_ai_studio),
    db: Session = Depends(get_db),
):
    logos = (
        db.query(Logo)
        .filter(Logo.tenant_id == ctx.tenant_id)
        .order_by(Logo.created_at.desc())
        .all()
    )
    return LogoList(logos=[LogoOut.model_validate(logo) for logo in logos])


@router.post("", response_model=LogoOut, status_code=status.HTTP_201_CREATED)
async def create_logo(
    payload: LogoCreate,
    ctx: TenantContext = Depends(require_ai_studio),
    service: LogoService = Depends(get_logo_service),
):
    """
    Generate one variation per icon style.

    A provider failure leaves the logo FAILED and is returned as-is
    (status, message, hint and setup steps) with the logo id attached.
    """
    try:
        return await service.create(
            ctx.tenant,
            payload.business_name,
            style=payload.style,
            industry=payload.industry,
            colors=payload.colors,
            user_id=ctx.user_id,
        )
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Logo generation error: {e}", exc_info=True)
        raise AppError(str(e), error="Failed to generate logo")


@router.get("/{logo_id}", response_model=LogoOut)
def get_logo(
    logo_id: uuid.UUID,
    ctx: TenantContext = Depends(require_ai_studio),
    service: LogoService = Depends(get_logo_service),
):
    return service.get(ctx.tenant_id, logo_id)


@router.put("/{logo_id}/variations/{variation_id}/select", response_model=LogoOut)
def select_variation(
    logo_id: uuid.UUID,
    variation_id: uuid.UUID,
    ctx: TenantContext = Depends(require_ai_studio),
    service: LogoService = Depends(get_logo_service),
):
    return service.select_variation(ctx.tenant_id, logo_id, variation_id)
