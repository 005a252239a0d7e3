"""
Media Router - image generation plus speech and vision passthrough.

Endpoints:
==========
- POST /api/ai/generate-image   -> text-to-image (Google AI Studio / Hugging Face / Nano Banana)
- POST /api/ai/speech-to-text   -> AI gateway
- POST /api/ai/text-to-speech   -> AI gateway
- POST /api/ai/image-to-text    -> AI gateway
- POST /api/ai/image-to-image   -> not available on cloud APIs (501/503)

Gateway routes forward the caller's bearer token. When the gateway is not
enabled they answer 503 "<X> service not configured"; when it fails they
answer 503 "<X> service unavailable" with the failure in `details`.
"""

import logging
from typing import Any, Awaitable, Callable, Dict

from fastapi import APIRouter, Depends

from aistudio.ai.providers.gateway import AIGatewayClient
from aistudio.core.config import settings
from aistudio.core.errors import AppError, ConfigurationError, ProviderError
from aistudio.deps import TenantContext, get_gateway_client, require_ai_studio
from aistudio.schemas.ai import (
    ImageGenerateRequest,
    ImageToImageRequest,
    ImageToTextRequest,
    SpeechToTextRequest,
    TextToSpeechRequest,
)
from aistudio.services.image_service import ImageService, get_image_service

logger = logging.getLogger("aistudio.routers.media")

router = APIRouter(prefix="/api/ai", tags=["ai-media"])

GATEWAY_SETUP_MESSAGE = "Please configure AI_GATEWAY_URL or USE_AI_GATEWAY=true in your .env file"


# ---------------------------------------------------------------------------
# IMAGE GENERATION
# ---------------------------------------------------------------------------


@router.post("/generate-image")
async def generate_image(
    payload: ImageGenerateRequest,
    ctx: TenantContext = Depends(require_ai_studio),
    images: ImageService = Depends(get_image_service),
):
    """
    Returns:
        {"imageUrl", "revisedPrompt", "service", "model", "processingTimeMs"}
    """
    try:
        result = await images.generate(
            ctx.tenant,
            payload.prompt,
            style=payload.style,
            size=payload.size,
            provider=payload.provider,
            user_id=ctx.user_id,
        )
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Image generation error: {e}", exc_info=True)
        raise AppError(
            str(e),
            error="Failed to generate image",
            hint="Check the server logs. Image generation requires a Google AI Studio key or HUGGINGFACE_API_KEY.",
        )

    return result.to_dict()


# ---------------------------------------------------------------------------
# GATEWAY PASSTHROUGH
# ---------------------------------------------------------------------------


async def _via_gateway(label: str, call: Callable[[], Awaitable[Dict[str, Any]]]) -> Dict[str, Any]:
    if not settings.gateway_enabled:
        raise ConfigurationError(
            GATEWAY_SETUP_MESSAGE,
            error=f"{label} service not configured",
            hint="Deploy the AI gateway and set AI_GATEWAY_URL.",
        )
    try:
        return await call()
    except ProviderError as e:
        logger.error(f"{label} via AI gateway failed: {e}")
        raise AppError(error=f"{label} service unavailable", details=e.message, status_code=503)


@router.post("/speech-to-text")
async def speech_to_text(
    payload: SpeechToTextRequest,
    ctx: TenantContext = Depends(require_ai_studio),
    gateway: AIGatewayClient = Depends(get_gateway_client),
):
    result = await _via_gateway("STT", lambda: gateway.speech_to_text(
        str(payload.audio_url), language=payload.language, task=payload.task,
    ))
    return {
        "text": result.get("text"),
        "language": result.get("language"),
        "segments": result.get("segments"),
        "service": result.get("service") or "self-hosted",
    }


@router.post("/text-to-speech")
async def text_to_speech(
    payload: TextToSpeechRequest,
    ctx: TenantContext = Depends(require_ai_studio),
    gateway: AIGatewayClient = Depends(get_gateway_client),
):
    result = await _via_gateway("TTS", lambda: gateway.text_to_speech(
        payload.text, language=payload.language, voice=payload.voice, speed=payload.speed,
    ))
    return {
        "audioUrl": result.get("audio_url"),
        "duration": result.get("duration"),
        "service": result.get("service") or "self-hosted",
    }


@router.post("/image-to-text")
async def image_to_text(
    payload: ImageToTextRequest,
    ctx: TenantContext = Depends(require_ai_studio),
    gateway: AIGatewayClient = Depends(get_gateway_client),
):
    result = await _via_gateway("Image-to-text", lambda: gateway.image_to_text(
        str(payload.image_url), task=payload.task,
    ))
    return {
        "caption": result.get("caption"),
        "ocrText": result.get("ocr_text"),
        "service": result.get("service") or "self-hosted",
    }


@router.post("/image-to-image")
async def image_to_image(
    payload: ImageToImageRequest,
    ctx: TenantContext = Depends(require_ai_studio),
):
    """Image-to-image has no cloud backend; explain what to use instead."""
    if settings.HUGGINGFACE_API_KEY:
        raise AppError(
            "Image-to-image transformation is not available via cloud APIs yet.",
            error="Image-to-image via cloud API not yet implemented",
            hint="Use /api/ai/generate-image endpoint for text-to-image generation instead",
            status_code=501,
            extra={"alternatives": [
                "Use text-to-image generation with a detailed prompt describing the transformation",
                "Use image editing tools for basic transformations",
            ]},
        )
    raise ConfigurationError(
        "Image-to-image transformation requires a cloud image API.",
        error="Image-to-image service not configured",
        hint="Configure HUGGINGFACE_API_KEY in .env or use Google AI Studio via Settings > AI Integrations",
    )
