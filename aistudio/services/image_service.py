"""
Image Service - picks an image provider for a tenant and generates, edits or fuses.

Provider selection:
    google-ai-studio  tenant's own Google key (403 + setup steps if missing)
    nanobanana        process GEMINI_API_KEY
    huggingface       process HUGGINGFACE_API_KEY
    auto              tenant Google key, then Hugging Face
    self-hosted       no longer available (503)

Editing, fusion and the Nano Banana health check always use the process
GEMINI_API_KEY.

Failures are raised: ConfigurationError when nothing usable is configured,
ProviderError when the vendor call fails. nanobanana_health() reports
failures in its result instead.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence
from uuid import UUID

from fastapi import Depends
from sqlalchemy.orm import Session

from aistudio.ai.providers.base import ProviderType
from aistudio.ai.providers.images import (
    GEMINI_IMAGE_COST_INR,
    GeminiImageProvider,
    HuggingFaceImageProvider,
    ImageProvider,
    ImageResult,
    SourceImage,
)
from aistudio.core.config import settings
from aistudio.core.encryption import reveal_secret
from aistudio.core.errors import ConfigurationError, ProviderError
from aistudio.db.session import get_db
from aistudio.models.tenant import Tenant
from aistudio.services.usage_service import record_usage

logger = logging.getLogger("aistudio.services.image")

IMAGE_PROVIDERS = ("auto", "google-ai-studio", "huggingface", "nanobanana", "self-hosted")

HEALTH_CHECK_PROMPT = "a simple blue square"

# ---------------------------------------------------------------------------
# SETUP INSTRUCTIONS
# ---------------------------------------------------------------------------
API_KEY_URL = "https://aistudio.google.com/app/apikey"
HF_TOKENS_URL = "https://huggingface.co/settings/tokens"

SETUP_NANOBANANA: Dict[str, object] = {
    "url": API_KEY_URL,
    "steps": [
        f"1. Go to {API_KEY_URL}",
        '2. Click "Create API Key"',
        "3. Copy the API key",
        '4. Add to .env: GEMINI_API_KEY="AIza_xxx"',
        "5. Restart the server",
    ],
}
SETUP_GOOGLE_AI_STUDIO: Dict[str, object] = {
    "url": API_KEY_URL,
    "steps": [
        f"1. Go to {API_KEY_URL}",
        '2. Click "Create API Key"',
        "3. Copy the API key",
        "4. Go to Dashboard > Settings > AI Integrations",
        "5. Add your API key in the Google AI Studio section",
    ],
}
SETUP_HUGGINGFACE: Dict[str, object] = {
    "url": HF_TOKENS_URL,
    "steps": [
        f"1. Get API key from {HF_TOKENS_URL}",
        '2. Add to .env: HUGGINGFACE_API_KEY="hf_your_token"',
        f"3. Optional: Set HUGGINGFACE_IMAGE_MODEL (default: {settings.HUGGINGFACE_IMAGE_MODEL})",
        "4. Restart the server",
    ],
}

GeminiFactory = Callable[[str, ProviderType], ImageProvider]


def _gemini(api_key: str, provider_type: ProviderType) -> ImageProvider:
    return GeminiImageProvider(api_key=api_key, provider_type=provider_type)


class ImageService:
    """
    Args:
        db: Session used for usage rows
        gemini_factory: Builds a Gemini provider from (api_key, provider_type)
        huggingface: Hugging Face provider (configured from settings by default)
        gemini_api_key: Process key for "nanobanana" (GEMINI_API_KEY by default)
    """

    def __init__(
        self,
        db: Session,
        gemini_factory: GeminiFactory = _gemini,
        huggingface: Optional[ImageProvider] = None,
        gemini_api_key: Optional[str] = None,
    ):
        self.db = db
        self._gemini_factory = gemini_factory
        self._huggingface = huggingface or HuggingFaceImageProvider()
        self._gemini_api_key = gemini_api_key if gemini_api_key is not None else settings.GEMINI_API_KEY

    def _tenant_google(self, tenant: Tenant) -> Optional[ImageProvider]:
        key = reveal_secret(tenant.google_ai_studio_api_key)
        if not key:
            return None
        return self._gemini_factory(key, ProviderType.GOOGLE_AI_STUDIO)

    async def generate(
        self,
        tenant: Tenant,
        prompt: str,
        style: Optional[str] = None,
        size: Optional[str] = None,
        provider: str = "auto",
        user_id: Optional[UUID] = None,
        feature: str = "text-to-image",
    ) -> ImageResult:
        result = await self._generate(tenant, prompt, style, size, provider)
        record_usage(self.db, tenant.id, service=result.service.value, feature=feature, user_id=user_id)
        return result

    async def _generate(
        self,
        tenant: Tenant,
        prompt: str,
        style: Optional[str],
        size: Optional[str],
        provider: str,
    ) -> ImageResult:
        if provider == "self-hosted":
            raise ConfigurationError(
                "Self-hosted image generation is no longer available. "
                "Docker services for image generation have been removed.",
                error="Image generation service not configured",
                hint="Please use cloud APIs instead:\n- Google AI Studio (free, per-tenant API key)\n"
                     "- Hugging Face Cloud API (free tier)",
                setup_instructions=self._all_setup_instructions(),
            )

        if provider == "nanobanana":
            return await self._nanobanana().generate_image(prompt, style=style, size=size)

        if provider == "huggingface":
            if not self._huggingface.is_configured:
                raise ConfigurationError(
                    "HUGGINGFACE_API_KEY is not set in your .env file.",
                    error="Hugging Face Inference API key not configured",
                    hint="\n".join(SETUP_HUGGINGFACE["steps"]),
                )
            return await self._huggingface.generate_image(prompt, style=style, size=size)

        if provider == "google-ai-studio":
            google = self._tenant_google(tenant)
            if google is None:
                raise ConfigurationError(
                    "Google AI Studio API key is not configured for your account. "
                    "Each tenant must use their own API key.",
                    error="Google AI Studio not configured",
                    hint=f"Get your free API key from {API_KEY_URL} and add it in Settings > AI Integrations",
                    setup_instructions={"googleAiStudio": SETUP_GOOGLE_AI_STUDIO},
                    status_code=403,
                )
            return await google.generate_image(prompt, style=style, size=size)

        # auto: tenant Google key first, then Hugging Face
        google = self._tenant_google(tenant)
        if google is not None:
            try:
                return await google.generate_image(prompt, style=style, size=size)
            except ProviderError as e:
                logger.warning(f"Google AI Studio failed in auto mode, trying Hugging Face: {e}")
                if not self._huggingface.is_configured:
                    raise

        if self._huggingface.is_configured:
            return await self._huggingface.generate_image(prompt, style=style, size=size)

        raise ConfigurationError(
            "Image generation service not configured. Please configure one of these free cloud services:\n\n"
            f"1. Google AI Studio: Get free key from {API_KEY_URL} (Recommended)\n"
            f"2. Hugging Face: Get free key from {HF_TOKENS_URL}",
            error="Image generation service not configured",
            hint="Image generation requires one of:\n"
                 "- Google AI Studio API key (free, per-tenant - add via Dashboard > Settings > AI Integrations)\n"
                 "- Hugging Face API key (free, cloud-based - add to .env file)",
            setup_instructions=self._all_setup_instructions(),
        )

    # -----------------------------------------------------------------------
    # NANO BANANA (process GEMINI_API_KEY): edit, fuse, health
    # -----------------------------------------------------------------------

    def _nanobanana(self) -> ImageProvider:
        if not self._gemini_api_key:
            raise ConfigurationError(
                "GEMINI_API_KEY is not set in your .env file.",
                error="Nano Banana service not configured",
                hint=f'Get API key from {API_KEY_URL} and add to .env: GEMINI_API_KEY="AIza_xxx"',
            )
        return self._gemini_factory(self._gemini_api_key, ProviderType.NANOBANANA)

    async def edit(
        self,
        tenant: Tenant,
        image: SourceImage,
        edit_prompt: str,
        user_id: Optional[UUID] = None,
    ) -> ImageResult:
        logger.info(f"Editing image ({len(image.data)} bytes): {edit_prompt[:100]}")
        result = await self._nanobanana().edit_image(image, edit_prompt)
        record_usage(self.db, tenant.id, service=result.service.value, feature="image-edit", user_id=user_id)
        return result

    async def fuse(
        self,
        tenant: Tenant,
        images: Sequence[SourceImage],
        fusion_prompt: str,
        user_id: Optional[UUID] = None,
    ) -> ImageResult:
        logger.info(f"Fusing {len(images)} images: {fusion_prompt[:100]}")
        result = await self._nanobanana().fuse_images(images, fusion_prompt)
        record_usage(self.db, tenant.id, service=result.service.value, feature="image-fusion", user_id=user_id)
        return result

    async def nanobanana_health(self) -> Dict[str, Any]:
        """
        Generate one tiny test image with the process key.

        Returns:
            {"status": "healthy" | "unhealthy" | "unavailable", ...}; never raises
        """
        timestamp = datetime.now(timezone.utc).isoformat()
        if not self._gemini_api_key:
            return {
                "status": "unavailable",
                "error": "GEMINI_API_KEY not configured",
                "hint": f"Get API key from {API_KEY_URL} and add to .env",
                "timestamp": timestamp,
            }

        try:
            result = await self._nanobanana().generate_image(HEALTH_CHECK_PROMPT)
        except ProviderError as e:
            logger.error(f"Nano Banana health check failed: {e}")
            return {
                "status": "unhealthy",
                "error": e.message,
                "hint": f"Check your GEMINI_API_KEY is valid at {API_KEY_URL}",
                "timestamp": timestamp,
            }

        return {
            "status": "healthy",
            "apiKey": f"{self._gemini_api_key[:10]}...",
            "imageGenerated": True,
            "processingTimeMs": round(result.latency_ms),
            "costPerImageINR": f"{GEMINI_IMAGE_COST_INR:.2f}",
            "timestamp": timestamp,
        }

    @staticmethod
    def _all_setup_instructions() -> Dict[str, Dict[str, object]]:
        return {
            "nanoBanana": SETUP_NANOBANANA,
            "googleAiStudio": SETUP_GOOGLE_AI_STUDIO,
            "huggingFace": SETUP_HUGGINGFACE,
        }


def get_image_service(db: Session = Depends(get_db)) -> ImageService:
    return ImageService(db)


def available_providers(tenant: Tenant) -> List[str]:
    """Image providers usable for this tenant right now (for diagnostics)."""
    providers: List[str] = []
    if tenant.google_ai_studio_api_key:
        providers.append(ProviderType.GOOGLE_AI_STUDIO.value)
    if settings.GEMINI_API_KEY:
        providers.append(ProviderType.NANOBANANA.value)
    if settings.HUGGINGFACE_API_KEY:
        providers.append(ProviderType.HUGGINGFACE.value)
    return providers
