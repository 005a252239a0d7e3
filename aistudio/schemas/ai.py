"""
AI Studio request schemas - chat, images, posts, speech and vision.

Gateway passthrough bodies keep the gateway's snake_case field names
(audio_url, image_url, num_inference_steps) because they are forwarded
as-is.
"""

from typing import List, Literal, Optional

from pydantic import Field, HttpUrl

from aistudio.schemas.base import APIModel

ChatModule = Literal["crm", "accounting", "inventory", "marketing", "hr", "general"]
ImageProviderName = Literal["auto", "google-ai-studio", "huggingface", "nanobanana", "self-hosted"]
SourceMimeType = Literal["image/jpeg", "image/png", "image/webp", "image/heic"]


# ---------------------------------------------------------------------------
# CHAT
# ---------------------------------------------------------------------------

class ChatContext(APIModel):
    # module: Focus hint for the system prompt
    module: Optional[ChatModule] = None

    # tenantId: Accepted for client compatibility; the session's tenant is always used
    tenant_id: Optional[str] = Field(None, alias="tenantId")


class ChatRequest(APIModel):
    """
    Schema for POST /api/ai/chat.

    Example request body:
    {
        "message": "What needs my attention today?",
        "context": {"module": "crm"}
    }
    """
    message: str = Field(..., min_length=1)
    context: Optional[ChatContext] = None

    @property
    def module(self) -> Optional[str]:
        return self.context.module if self.context else None


# ---------------------------------------------------------------------------
# GENERATION
# ---------------------------------------------------------------------------

class ImageGenerateRequest(APIModel):
    prompt: str = Field(..., min_length=1)
    style: Optional[str] = None
    size: Optional[str] = Field(None, description="WIDTHxHEIGHT, e.g. 1024x1024")
    provider: ImageProviderName = "auto"


class GoogleImageRequest(APIModel):
    """Body of POST /api/ai/google-ai-studio/generate-image (tenant key only)."""
    prompt: str = Field(..., min_length=1)
    style: Optional[str] = None
    size: Optional[str] = None


class ImageEditRequest(APIModel):
    """
    Schema for POST /api/ai/nanobanana/edit-image.

    imageBase64 may carry a data URL prefix ("data:image/png;base64,...").
    """
    image_base64: str = Field(..., alias="imageBase64", min_length=1)
    image_mime_type: SourceMimeType = Field("image/png", alias="imageMimeType")
    edit_prompt: str = Field(..., alias="editPrompt", min_length=1)


class FusionImage(APIModel):
    base64: str = Field(..., min_length=1)
    mime_type: SourceMimeType = Field(..., alias="mimeType")


class ImageFuseRequest(APIModel):
    images: List[FusionImage] = Field(..., min_length=2)
    fusion_prompt: str = Field(..., alias="fusionPrompt", min_length=1)


class PostGenerateRequest(APIModel):
    topic: str = Field(..., min_length=1)
    platform: Optional[str] = None
    tone: Optional[str] = None
    length: Optional[str] = None


# ---------------------------------------------------------------------------
# GATEWAY PASSTHROUGH
# ---------------------------------------------------------------------------

class SpeechToTextRequest(APIModel):
    audio_url: HttpUrl
    language: Optional[str] = None
    task: Optional[Literal["transcribe", "translate"]] = None


class TextToSpeechRequest(APIModel):
    text: str = Field(..., min_length=1, max_length=5000)
    language: Optional[str] = None
    voice: Optional[str] = None
    speed: Optional[float] = Field(None, ge=0.5, le=2.0)


class ImageToTextRequest(APIModel):
    image_url: HttpUrl
    task: Optional[Literal["caption", "ocr", "both"]] = None


class ImageToImageRequest(APIModel):
    image_url: HttpUrl
    prompt: str = Field(..., min_length=1)
    strength: Optional[float] = Field(None, ge=0, le=1)
    num_inference_steps: Optional[int] = Field(None, ge=1, le=100)


# ---------------------------------------------------------------------------
# INTEGRATIONS
# ---------------------------------------------------------------------------

class GoogleApiKeyRequest(APIModel):
    api_key: str = Field(..., alias="apiKey", min_length=1)
