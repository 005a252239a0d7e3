"""
Image providers - text-to-image adapters.

Unlike chat providers these raise ProviderError on failure: image
generation is a single-provider operation whose errors go straight back
to the caller with the vendor status, message and a remediation hint.

Providers:
    GeminiImageProvider       gemini-2.5-flash-image via google-genai
                              (tenant key -> "google-ai-studio",
                               process key -> "nanobanana");
                              also edits one image and fuses several
    HuggingFaceImageProvider  HF inference router, text-to-image task
"""

import base64
import binascii
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from aistudio.core.config import settings
from aistudio.core.errors import ProviderError
from aistudio.ai.providers.base import ProviderType

logger = logging.getLogger("aistudio.ai.images")

HF_INFERENCE_URL = "https://router.huggingface.co/hf-inference/models"

# ---------------------------------------------------------------------------
# PROMPT ENRICHMENT
# ---------------------------------------------------------------------------
STYLE_DESCRIPTIONS: Dict[str, str] = {
    "realistic": "photorealistic, professional photography style",
    "artistic": "artistic, creative, visually striking",
    "cartoon": "cartoon style, animated, colorful",
    "minimalist": "minimalist, clean, simple design",
    "vintage": "vintage style, retro aesthetic",
    "modern": "modern, contemporary design",
}


def enhance_image_prompt(prompt: str, style: Optional[str] = None) -> str:
    """
    Enrich a user prompt with style keywords.

    Unknown styles are passed through verbatim.
    """
    if style:
        description = STYLE_DESCRIPTIONS.get(style.lower(), style)
        return f"{prompt}, {description} style, high quality, detailed"
    return f"{prompt}, high quality, detailed, professional"


def parse_size(size: Optional[str]) -> Optional[Tuple[int, int]]:
    """"1024x768" -> (1024, 768); anything else -> None."""
    if not size:
        return None
    width, sep, height = size.lower().partition("x")
    if not sep or not width.isdigit() or not height.isdigit():
        return None
    return int(width), int(height)


# ---------------------------------------------------------------------------
# SOURCE IMAGES (edit / fuse)
# ---------------------------------------------------------------------------
SOURCE_MIME_TYPES = ("image/jpeg", "image/png", "image/webp", "image/heic")

# Flat per-image price of the Gemini image model, in rupees
GEMINI_IMAGE_COST_INR = 3.23


@dataclass
class SourceImage:
    data: bytes
    mime_type: str = "image/png"


def decode_source_image(value: str, mime_type: str = "image/png") -> SourceImage:
    """
    Decode base64 image data, with or without a "data:...;base64," prefix.

    Raises:
        ValueError: if the data is not valid base64 or the type is not an accepted image type
    """
    if mime_type not in SOURCE_MIME_TYPES:
        raise ValueError(f"Unsupported image type: {mime_type}")
    if "," in value:
        value = value.split(",", 1)[1]
    try:
        data = base64.b64decode(value, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Image data is not valid base64: {e}")
    if not data:
        raise ValueError("Image data is empty")
    return SourceImage(data=data, mime_type=mime_type)


@dataclass
class ImageResult:
    image_url: str
    revised_prompt: str
    service: ProviderType
    model: str
    latency_ms: float = 0.0

    @property
    def base64(self) -> Optional[str]:
        """Raw base64 payload of a data URL, None for hosted URLs."""
        if self.image_url.startswith("data:") and "," in self.image_url:
            return self.image_url.split(",", 1)[1]
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "imageUrl": self.image_url,
            "revisedPrompt": self.revised_prompt,
            "service": self.service.value,
            "model": self.model,
            "processingTimeMs": round(self.latency_ms),
        }


class ImageProvider(ABC):
    provider_type: ProviderType
    model: str = ""

    @property
    def is_configured(self) -> bool:
        return True

    @abstractmethod
    async def generate_image(
        self,
        prompt: str,
        style: Optional[str] = None,
        size: Optional[str] = None,
    ) -> ImageResult:
        """Generate one image. Raises ProviderError on failure."""

    async def edit_image(self, image: SourceImage, edit_prompt: str) -> ImageResult:
        """Edit one image following a text instruction."""
        raise self._unsupported("Image editing")

    async def fuse_images(self, images: Sequence[SourceImage], fusion_prompt: str) -> ImageResult:
        """Blend several images into one following a text instruction."""
        raise self._unsupported("Image fusion")

    def _unsupported(self, operation: str) -> ProviderError:
        return ProviderError(
            self.provider_type.value,
            f"{operation} is not supported by {self.provider_type.value}",
            error=f"{operation} not supported",
            status_code=501,
        )

    def _measure_latency(self, start_time: float) -> float:
        return (time.time() - start_time) * 1000


# ---------------------------------------------------------------------------
# GOOGLE (GEMINI IMAGE)
# ---------------------------------------------------------------------------

def google_error(status: Optional[int], message: str, details: Any = None) -> ProviderError:
    """Translate a Generative Language API failure into a ProviderError with a hint."""
    message = message or ""
    lowered = message.lower()
    hint = "Please try again. If the problem persists, check your API key in Settings > AI Integrations."
    user_message = message or f"API returned {status}"

    if status == 400:
        if "api key" in lowered:
            user_message = "Invalid API key. Please check your API key in Settings > AI Integrations."
            hint = "Your API key may be incorrect or expired. Try removing and re-adding it."
        elif "quota" in lowered or "limit" in lowered:
            user_message = "API quota exceeded. You may have reached your free tier limit."
            hint = "Check your Google AI Studio dashboard for usage limits."
        else:
            hint = "The request format may be incorrect. Please try again or contact support."
    elif status == 403:
        user_message = "API key access denied. Your API key may not have the required permissions."
        hint = "Ensure your API key has access to the Generative Language API in Google Cloud Console."
    elif status == 429:
        raw = f"{message} {details}" if details else message
        if "limit: 0" in raw:
            user_message = "Free tier quota not available. Your API key may not have free tier enabled."
            hint = (
                "1. Check if your API key is linked to a Google Cloud project\n"
                "2. Verify free tier is enabled in Google Cloud Console\n"
                "3. Try creating a new API key at https://aistudio.google.com/app/apikey\n"
                '4. Use the "auto" provider to fall back to Hugging Face'
            )
        elif "quota exceeded" in lowered or "resource_exhausted" in raw.lower():
            user_message = "Free tier quota exhausted. Your Google AI Studio free tier quota has been reached."
            hint = (
                "1. Wait for the quota reset\n"
                "2. Check your usage at https://ai.dev/usage?tab=rate-limit\n"
                '3. Use the "auto" provider to fall back to Hugging Face'
            )
        else:
            user_message = "Rate limit exceeded. Too many requests to Google AI Studio."
            hint = 'Please wait a moment and try again. The "auto" provider falls back to Hugging Face when rate-limited.'

    return ProviderError(
        "google-ai-studio",
        user_message,
        error="Google AI Studio API error",
        vendor_status=status,
        hint=hint,
        details=details,
        status_code=status if status in (400, 403, 429) else 502,
    )


class GeminiImageProvider(ImageProvider):
    """
    Gemini image generation through the google-genai SDK.

    Usage:
        provider = GeminiImageProvider(api_key=tenant_key)
        result = await provider.generate_image("A logo for a tea shop", style="minimalist")
        result.image_url  # "data:image/png;base64,..."
    """

    def __init__(
        self,
        api_key: str,
        provider_type: ProviderType = ProviderType.GOOGLE_AI_STUDIO,
        model: Optional[str] = None,
        client: Optional[genai.Client] = None,
    ):
        self.provider_type = provider_type
        self.model = model or settings.GEMINI_IMAGE_MODEL
        self.api_key = api_key
        if client is not None:
            self._client = client
        elif api_key:
            self._client = genai.Client(api_key=api_key)
        else:
            self._client = None

    @property
    def is_configured(self) -> bool:
        return self._client is not None

    async def generate_image(
        self,
        prompt: str,
        style: Optional[str] = None,
        size: Optional[str] = None,
    ) -> ImageResult:
        revised_prompt = enhance_image_prompt(prompt, style)
        return await self._request(f"Generate an image: {revised_prompt}", revised_prompt)

    async def edit_image(self, image: SourceImage, edit_prompt: str) -> ImageResult:
        contents: List[Any] = [_image_part(image), edit_prompt]
        return await self._request(contents, edit_prompt)

    async def fuse_images(self, images: Sequence[SourceImage], fusion_prompt: str) -> ImageResult:
        if len(images) < 2:
            raise ProviderError(
                self.provider_type.value,
                "At least two images are required for fusion",
                error="Image fusion failed",
                status_code=400,
            )
        contents: List[Any] = [_image_part(image) for image in images]
        contents.append(fusion_prompt)
        return await self._request(contents, fusion_prompt)

    async def _request(self, contents: Any, revised_prompt: str) -> ImageResult:
        """One generate_content call; the first inline image of the reply wins."""
        if not self._client:
            raise ProviderError(self.provider_type.value, "Gemini API key not configured")

        start_time = time.time()
        try:
            response = await self._client.aio.models.generate_content(
                model=self.model,
                contents=contents,
                config=types.GenerateContentConfig(response_modalities=["TEXT", "IMAGE"]),
            )
        except genai_errors.APIError as e:
            logger.error(f"Gemini image generation failed ({e.code}): {e.message}")
            raise google_error(e.code, e.message or str(e), e.details)
        except httpx.HTTPError as e:
            raise ProviderError(
                self.provider_type.value,
                f"Network error: {e}",
                hint="Network error. Please check your internet connection and try again.",
            )

        image_url, text = _extract_inline_image(response)
        if not image_url:
            if text:
                raise ProviderError(
                    self.provider_type.value,
                    "Google AI Studio returned text instead of an image.",
                    error="Image generation not supported",
                    details={"textResponse": text},
                    hint="Try a different provider or check that the Gemini image model is available in your region.",
                    status_code=500,
                )
            raise ProviderError(
                self.provider_type.value,
                "Google AI Studio returned an unexpected response format.",
                error="Unexpected response format",
                status_code=500,
            )

        latency_ms = self._measure_latency(start_time)
        logger.info(f"Gemini image generated in {latency_ms:.0f}ms")
        return ImageResult(
            image_url=image_url,
            revised_prompt=revised_prompt,
            service=self.provider_type,
            model=self.model,
            latency_ms=latency_ms,
        )


def _image_part(image: SourceImage) -> types.Part:
    return types.Part.from_bytes(data=image.data, mime_type=image.mime_type)


def _extract_inline_image(response: Any) -> Tuple[Optional[str], Optional[str]]:
    """Return (data URL of the first inline image, first text part)."""
    text = None
    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            inline = getattr(part, "inline_data", None)
            if inline is not None and inline.data:
                mime_type = inline.mime_type or "image/png"
                data = inline.data
                if isinstance(data, bytes):
                    data = base64.b64encode(data).decode("ascii")
                return f"data:{mime_type};base64,{data}", text
            if getattr(part, "text", None) and text is None:
                text = part.text
    return None, text


# ---------------------------------------------------------------------------
# HUGGING FACE
# ---------------------------------------------------------------------------

class HuggingFaceImageProvider(ImageProvider):
    """Text-to-image through the Hugging Face inference router."""

    provider_type = ProviderType.HUGGINGFACE

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.HUGGINGFACE_API_KEY
        self.model = model or settings.HUGGINGFACE_IMAGE_MODEL
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def generate_image(
        self,
        prompt: str,
        style: Optional[str] = None,
        size: Optional[str] = None,
    ) -> ImageResult:
        if not self.api_key:
            raise ProviderError("huggingface", "HUGGINGFACE_API_KEY is not set")

        start_time = time.time()
        revised_prompt = enhance_image_prompt(prompt, style)
        payload: Dict[str, Any] = {"inputs": revised_prompt}
        dimensions = parse_size(size)
        if dimensions:
            payload["parameters"] = {"width": dimensions[0], "height": dimensions[1]}

        async with httpx.AsyncClient(timeout=120.0, transport=self._transport) as client:
            try:
                response = await client.post(
                    f"{HF_INFERENCE_URL}/{self.model}",
                    json=payload,
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Accept": "image/png",
                    },
                )
            except httpx.RequestError as e:
                raise ProviderError(
                    "huggingface",
                    f"Network error: {e}",
                    hint="Network error. Please check your internet connection and try again.",
                )

        content_type = response.headers.get("content-type", "")
        if response.status_code != 200 or not content_type.startswith("image/"):
            raise _huggingface_error(response, self.model)

        image_b64 = base64.b64encode(response.content).decode("ascii")
        latency_ms = self._measure_latency(start_time)
        logger.info(f"Hugging Face image generated in {latency_ms:.0f}ms with {self.model}")
        return ImageResult(
            image_url=f"data:{content_type.split(';')[0]};base64,{image_b64}",
            revised_prompt=revised_prompt,
            service=self.provider_type,
            model=self.model,
            latency_ms=latency_ms,
        )


def _huggingface_error(response: httpx.Response, model: str) -> ProviderError:
    try:
        data = response.json()
    except ValueError:
        data = {"error": response.text[:200]}
    message = str(data.get("error") or f"API returned {response.status_code}")

    if response.status_code == 503 and data.get("estimated_time"):
        message = f"Model is loading, estimated time: {int(data['estimated_time']) + 1} seconds"
        hint = "The model is currently loading. Please wait a moment and try again."
    elif response.status_code in (401, 403):
        hint = "Verify your HUGGINGFACE_API_KEY is correct and active at https://huggingface.co/settings/tokens"
    elif response.status_code == 404:
        hint = f'The model "{model}" may not be available. Try another one via HUGGINGFACE_IMAGE_MODEL.'
    else:
        hint = (
            "Please check:\n1. Your HUGGINGFACE_API_KEY is valid\n"
            "2. The API key has access to image generation models\n"
            f'3. The model "{model}" is available'
        )

    return ProviderError(
        "huggingface",
        message,
        error="Hugging Face Inference API error",
        vendor_status=response.status_code,
        hint=hint,
        status_code=500,
    )
