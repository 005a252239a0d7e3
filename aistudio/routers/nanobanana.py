"""
Nano Banana Router - image editing and fusion on the process Gemini key.

Endpoints:
==========
- POST /api/ai/nanobanana/edit-image  -> edit one base64 image with a text instruction
- POST /api/ai/nanobanana/fuse-images -> blend two or more images into one
- GET  /api/ai/nanobanana/health      -> generate a tiny test image (no auth)

All three use GEMINI_API_KEY from the environment, not a tenant key. Without
it, edit and fuse answer 503 "Nano Banana service not configured".
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from aistudio.ai.providers.images import (
    GEMINI_IMAGE_COST_INR,
    ImageResult,
    decode_source_image,
)
from aistudio.core.errors import AppError, ValidationError
from aistudio.deps import TenantContext, require_ai_studio
from aistudio.schemas.ai import ImageEditRequest, ImageFuseRequest
from aistudio.services.image_service import ImageService, get_image_service

logger = logging.getLogger("aistudio.routers.nanobanana")

router = APIRouter(prefix="/api/ai/nanobanana", tags=["ai-media"])

QUOTA_HINT = "Check your GEMINI_API_KEY is valid and has quota available"


def _image_body(result: ImageResult, prompt: str) -> Dict[str, Any]:
    return {
        "success": True,
        "imageUrl": result.image_url,
        "base64": result.base64,
        "prompt": prompt,
        "processingTimeMs": round(result.latency_ms),
        "costInINR": GEMINI_IMAGE_COST_INR,
        "service": result.service.value,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def _decode(value: str, mime_type: str, field: str):
    try:
        return decode_source_image(value, mime_type)
    except ValueError as e:
        raise ValidationError(details=[{"field": field, "issue": str(e)}])


@router.post("/edit-image")
async def edit_image(
    payload: ImageEditRequest,
    ctx: TenantContext = Depends(require_ai_studio),
    images: ImageService = Depends(get_image_service),
):
    source = _decode(payload.image_base64, payload.image_mime_type, "imageBase64")
    try:
        result = await images.edit(ctx.tenant, source, payload.edit_prompt, user_id=ctx.user_id)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Image edit error: {e}", exc_info=True)
        raise AppError(str(e), error="Image edit failed", hint=QUOTA_HINT, extra={"success": False})
    return _image_body(result, payload.edit_prompt)


@router.post("/fuse-images")
async def fuse_images(
    payload: ImageFuseRequest,
    ctx: TenantContext = Depends(require_ai_studio),
    images: ImageService = Depends(get_image_service),
):
    sources = [
        _decode(image.base64, image.mime_type, f"images[{index}].base64")
        for index, image in enumerate(payload.images)
    ]
    try:
        result = await images.fuse(ctx.tenant, sources, payload.fusion_prompt, user_id=ctx.user_id)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Image fusion error: {e}", exc_info=True)
        raise AppError(str(e), error="Image fusion failed", hint=QUOTA_HINT, extra={"success": False})
    return _image_body(result, payload.fusion_prompt)


@router.get("/health")
async def nanobanana_health(images: ImageService = Depends(get_image_service)):
    """503 unless a test image was generated."""
    health = await images.nanobanana_health()
    status_code = 200 if health["status"] == "healthy" else 503
    return JSONResponse(content=health, status_code=status_code)
