"""
Tests for image generation, the gateway passthrough routes and provider diagnostics.

These tests verify:
- Image provider selection (tenant key, process key, auto fallback)
- Configuration errors carry setup instructions
- Nano Banana edit, fusion and health on the process key
- Google AI Studio generation only ever uses the tenant key
- Speech/vision routes answer 503 without a gateway and proxy with one
- /api/ai/test and /api/ai/ollama/health report findings, never fail
"""

from typing import List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from aistudio.ai.providers.base import AIResponse, ChatProvider, ProviderType
from aistudio.ai.providers.gateway import AIGatewayClient
from aistudio.ai.providers.images import ImageProvider, ImageResult, SourceImage
from aistudio.ai.providers.ollama import OllamaProvider
from aistudio.core.config import settings
from aistudio.core.encryption import encrypt_secret
from aistudio.core.errors import ConfigurationError, ProviderError
from aistudio.deps import get_gateway_client
from aistudio.main import app
from aistudio.models.tenant import Tenant
from aistudio.models.usage import AIUsage
from aistudio.routers.diagnostics import get_ollama_provider, get_test_providers
from aistudio.services.image_service import ImageService, get_image_service


class StubImageProvider(ImageProvider):
    def __init__(self, provider_type: ProviderType, configured: bool = True, fail: bool = False,
                 crash: bool = False):
        self.provider_type = provider_type
        self.model = f"{provider_type.value}-model"
        self.configured = configured
        self.fail = fail
        self.prompts: List[str] = []
        self.crash = crash
        self.sources: List[SourceImage] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def generate_image(self, prompt, style=None, size=None) -> ImageResult:
        return self._result(prompt, f"{prompt}, enhanced")

    async def edit_image(self, image, edit_prompt) -> ImageResult:
        self.sources.append(image)
        return self._result(edit_prompt, edit_prompt)

    async def fuse_images(self, images, fusion_prompt) -> ImageResult:
        self.sources.extend(images)
        return self._result(fusion_prompt, fusion_prompt)

    def _result(self, prompt: str, revised_prompt: str) -> ImageResult:
        self.prompts.append(prompt)
        if self.crash:
            raise RuntimeError("SDK returned an unknown shape")
        if self.fail:
            raise ProviderError(self.provider_type.value, "Rate limit exceeded", vendor_status=429)
        return ImageResult(
            image_url="data:image/png;base64,AAAA",
            revised_prompt=revised_prompt,
            service=self.provider_type,
            model=self.model,
            latency_ms=412.6,
        )


class GeminiFactory:
    """Records which key and provider type each Gemini provider was built with."""

    def __init__(self, fail: bool = False, crash: bool = False):
        self.fail = fail
        self.crash = crash
        self.built = []
        self.providers: List[StubImageProvider] = []

    def __call__(self, api_key: str, provider_type: ProviderType) -> ImageProvider:
        self.built.append((api_key, provider_type))
        provider = StubImageProvider(provider_type, fail=self.fail, crash=self.crash)
        self.providers.append(provider)
        return provider


def image_service(db: Session, gemini: Optional[GeminiFactory] = None, hf_configured: bool = True,
                  gemini_api_key: str = "") -> ImageService:
    return ImageService(
        db,
        gemini_factory=gemini or GeminiFactory(),
        huggingface=StubImageProvider(ProviderType.HUGGINGFACE, configured=hf_configured),
        gemini_api_key=gemini_api_key,
    )


@pytest.fixture
def tenant_with_key(db: Session, test_tenant: Tenant, encryption_key: str) -> Tenant:
    test_tenant.google_ai_studio_api_key = encrypt_secret("AIzaTenantKey")
    db.commit()
    return test_tenant


# ---------------------------------------------------------------------------
# IMAGE SERVICE
# ---------------------------------------------------------------------------


class TestImageProviderSelection:
    """Tests for ImageService.generate()."""

    @pytest.mark.asyncio
    async def test_auto_prefers_tenant_google_key(self, db: Session, tenant_with_key: Tenant):
        gemini = GeminiFactory()
        result = await image_service(db, gemini).generate(tenant_with_key, "A tea stall")

        assert result.service == ProviderType.GOOGLE_AI_STUDIO
        assert gemini.built == [("AIzaTenantKey", ProviderType.GOOGLE_AI_STUDIO)]
        usage = db.query(AIUsage).one()
        assert usage.service == "google-ai-studio"
        assert usage.feature == "text-to-image"

    @pytest.mark.asyncio
    async def test_auto_uses_huggingface_without_tenant_key(self, db: Session, test_tenant: Tenant):
        result = await image_service(db).generate(test_tenant, "A tea stall")
        assert result.service == ProviderType.HUGGINGFACE

    @pytest.mark.asyncio
    async def test_auto_falls_back_when_google_fails(self, db: Session, tenant_with_key: Tenant):
        result = await image_service(db, GeminiFactory(fail=True)).generate(tenant_with_key, "A tea stall")
        assert result.service == ProviderType.HUGGINGFACE

    @pytest.mark.asyncio
    async def test_auto_reraises_when_nothing_to_fall_back_to(self, db: Session, tenant_with_key: Tenant):
        service = image_service(db, GeminiFactory(fail=True), hf_configured=False)

        with pytest.raises(ProviderError):
            await service.generate(tenant_with_key, "A tea stall")
        assert db.query(AIUsage).count() == 0

    @pytest.mark.asyncio
    async def test_auto_with_nothing_configured(self, db: Session, test_tenant: Tenant):
        with pytest.raises(ConfigurationError) as exc_info:
            await image_service(db, hf_configured=False).generate(test_tenant, "A tea stall")

        body = exc_info.value.to_dict()
        assert exc_info.value.status_code == 503
        assert body["error"] == "Image generation service not configured"
        assert set(body["setupInstructions"]) == {"nanoBanana", "googleAiStudio", "huggingFace"}

    @pytest.mark.asyncio
    async def test_google_without_tenant_key_is_403(self, db: Session, test_tenant: Tenant):
        with pytest.raises(ConfigurationError) as exc_info:
            await image_service(db).generate(test_tenant, "A tea stall", provider="google-ai-studio")

        assert exc_info.value.status_code == 403
        assert "googleAiStudio" in exc_info.value.to_dict()["setupInstructions"]

    @pytest.mark.asyncio
    async def test_nanobanana_uses_process_key(self, db: Session, test_tenant: Tenant):
        gemini = GeminiFactory()
        service = image_service(db, gemini, gemini_api_key="AIzaProcessKey")

        result = await service.generate(test_tenant, "A tea stall", provider="nanobanana")

        assert result.service == ProviderType.NANOBANANA
        assert gemini.built == [("AIzaProcessKey", ProviderType.NANOBANANA)]

    @pytest.mark.asyncio
    async def test_nanobanana_without_key(self, db: Session, test_tenant: Tenant):
        with pytest.raises(ConfigurationError) as exc_info:
            await image_service(db).generate(test_tenant, "A tea stall", provider="nanobanana")
        assert exc_info.value.error == "Nano Banana service not configured"

    @pytest.mark.asyncio
    async def test_self_hosted_is_gone(self, db: Session, test_tenant: Tenant):
        with pytest.raises(ConfigurationError) as exc_info:
            await image_service(db).generate(test_tenant, "A tea stall", provider="self-hosted")
        assert exc_info.value.status_code == 503


class TestGenerateImageEndpoint:
    """Tests for POST /api/ai/generate-image."""

    @pytest.fixture(autouse=True)
    def stub_images(self, client: TestClient, db: Session):
        app.dependency_overrides[get_image_service] = lambda: image_service(db)

    def test_generates(self, client: TestClient, auth_headers: dict):
        response = client.post(
            "/api/ai/generate-image",
            json={"prompt": "A tea stall at dawn", "style": "vintage", "size": "1024x768"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["imageUrl"].startswith("data:image/png;base64,")
        assert data["service"] == "huggingface"
        assert data["revisedPrompt"] == "A tea stall at dawn, enhanced"

    def test_self_hosted_is_503_with_instructions(self, client: TestClient, auth_headers: dict):
        response = client.post(
            "/api/ai/generate-image",
            json={"prompt": "A tea stall", "provider": "self-hosted"},
            headers=auth_headers,
        )

        assert response.status_code == 503
        data = response.json()
        assert data["error"] == "Image generation service not configured"
        assert "hint" in data
        assert "setupInstructions" in data

    def test_unknown_provider_is_400(self, client: TestClient, auth_headers: dict):
        response = client.post(
            "/api/ai/generate-image",
            json={"prompt": "A tea stall", "provider": "dall-e"},
            headers=auth_headers,
        )
        assert response.status_code == 400


class TestImageEditing:
    """Tests for ImageService.edit(), fuse() and nanobanana_health()."""

    @pytest.mark.asyncio
    async def test_edit_uses_process_key_and_records_usage(self, db: Session, test_tenant: Tenant):
        gemini = GeminiFactory()
        service = image_service(db, gemini, gemini_api_key="AIzaProcessKey")
        source = SourceImage(b"\x89PNG", "image/png")

        result = await service.edit(test_tenant, source, "Remove the background")

        assert result.service == ProviderType.NANOBANANA
        assert gemini.built == [("AIzaProcessKey", ProviderType.NANOBANANA)]
        assert gemini.providers[0].sources == [source]
        usage = db.query(AIUsage).one()
        assert usage.service == "nanobanana"
        assert usage.feature == "image-edit"

    @pytest.mark.asyncio
    async def test_fuse_records_usage(self, db: Session, test_tenant: Tenant):
        service = image_service(db, gemini_api_key="AIzaProcessKey")

        await service.fuse(test_tenant, [SourceImage(b"one"), SourceImage(b"two")], "Blend them")

        assert db.query(AIUsage).one().feature == "image-fusion"

    @pytest.mark.asyncio
    async def test_edit_without_key(self, db: Session, test_tenant: Tenant):
        with pytest.raises(ConfigurationError) as exc_info:
            await image_service(db).edit(test_tenant, SourceImage(b"one"), "Blend")

        assert exc_info.value.status_code == 503
        assert exc_info.value.error == "Nano Banana service not configured"
        assert db.query(AIUsage).count() == 0

    @pytest.mark.asyncio
    async def test_health_without_key(self, db: Session):
        health = await image_service(db).nanobanana_health()

        assert health["status"] == "unavailable"
        assert health["error"] == "GEMINI_API_KEY not configured"

    @pytest.mark.asyncio
    async def test_health_generates_test_image(self, db: Session):
        gemini = GeminiFactory()
        health = await image_service(db, gemini, gemini_api_key="AIzaProcessKey").nanobanana_health()

        assert health["status"] == "healthy"
        assert health["apiKey"] == "AIzaProces..."
        assert health["processingTimeMs"] == 413
        assert health["costPerImageINR"] == "3.23"
        assert gemini.providers[0].prompts == ["a simple blue square"]
        assert db.query(AIUsage).count() == 0

    @pytest.mark.asyncio
    async def test_health_reports_vendor_failure(self, db: Session):
        service = image_service(db, GeminiFactory(fail=True), gemini_api_key="AIzaProcessKey")

        health = await service.nanobanana_health()

        assert health["status"] == "unhealthy"
        assert health["error"] == "Rate limit exceeded"


PIXEL = "data:image/png;base64,iVBORw=="


class TestNanoBananaEndpoints:
    """Tests for /api/ai/nanobanana/*."""

    def use_images(self, db: Session, gemini: Optional[GeminiFactory] = None,
                   gemini_api_key: str = "AIzaProcessKey"):
        app.dependency_overrides[get_image_service] = lambda: image_service(
            db, gemini, gemini_api_key=gemini_api_key
        )

    def test_edit_image(self, client: TestClient, db: Session, auth_headers: dict):
        gemini = GeminiFactory()
        self.use_images(db, gemini)

        response = client.post(
            "/api/ai/nanobanana/edit-image",
            json={"imageBase64": PIXEL, "imageMimeType": "image/png", "editPrompt": "Make it blue"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["imageUrl"] == "data:image/png;base64,AAAA"
        assert data["base64"] == "AAAA"
        assert data["prompt"] == "Make it blue"
        assert data["costInINR"] == 3.23
        assert data["service"] == "nanobanana"
        assert gemini.providers[0].sources[0].data == b"\x89PNG"

    def test_edit_image_without_key_is_503(self, client: TestClient, db: Session, auth_headers: dict):
        self.use_images(db, gemini_api_key="")

        response = client.post(
            "/api/ai/nanobanana/edit-image",
            json={"imageBase64": PIXEL, "editPrompt": "Make it blue"},
            headers=auth_headers,
        )

        assert response.status_code == 503
        assert response.json()["error"] == "Nano Banana service not configured"

    def test_edit_image_bad_base64_is_400(self, client: TestClient, db: Session, auth_headers: dict):
        self.use_images(db)

        response = client.post(
            "/api/ai/nanobanana/edit-image",
            json={"imageBase64": "not base64!", "editPrompt": "Make it blue"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "imageBase64"

    def test_edit_image_unexpected_failure(self, client: TestClient, db: Session, auth_headers: dict):
        self.use_images(db, GeminiFactory(crash=True))

        response = client.post(
            "/api/ai/nanobanana/edit-image",
            json={"imageBase64": PIXEL, "editPrompt": "Make it blue"},
            headers=auth_headers,
        )

        assert response.status_code == 500
        data = response.json()
        assert data["error"] == "Image edit failed"
        assert data["success"] is False
        assert "GEMINI_API_KEY" in data["hint"]

    def test_fuse_images(self, client: TestClient, db: Session, auth_headers: dict):
        gemini = GeminiFactory()
        self.use_images(db, gemini)

        response = client.post(
            "/api/ai/nanobanana/fuse-images",
            json={
                "images": [
                    {"base64": PIXEL, "mimeType": "image/png"},
                    {"base64": "iVBORw==", "mimeType": "image/jpeg"},
                ],
                "fusionPrompt": "Product on a beach",
            },
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["prompt"] == "Product on a beach"
        assert [source.mime_type for source in gemini.providers[0].sources] == ["image/png", "image/jpeg"]

    def test_fuse_needs_two_images(self, client: TestClient, db: Session, auth_headers: dict):
        self.use_images(db)

        response = client.post(
            "/api/ai/nanobanana/fuse-images",
            json={"images": [{"base64": PIXEL, "mimeType": "image/png"}], "fusionPrompt": "Blend"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Validation error"

    def test_requires_auth(self, client: TestClient, db: Session):
        self.use_images(db)
        response = client.post(
            "/api/ai/nanobanana/edit-image",
            json={"imageBase64": PIXEL, "editPrompt": "Make it blue"},
        )
        assert response.status_code in (401, 403)

    def test_health_without_key_is_503(self, client: TestClient, db: Session):
        self.use_images(db, gemini_api_key="")

        response = client.get("/api/ai/nanobanana/health")

        assert response.status_code == 503
        assert response.json()["status"] == "unavailable"

    def test_health_is_public(self, client: TestClient, db: Session):
        self.use_images(db)

        response = client.get("/api/ai/nanobanana/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestGoogleAIStudioImage:
    """Tests for POST /api/ai/google-ai-studio/generate-image."""

    def test_without_tenant_key_is_403(self, client: TestClient, db: Session, auth_headers: dict):
        app.dependency_overrides[get_image_service] = lambda: image_service(db)

        response = client.post(
            "/api/ai/google-ai-studio/generate-image",
            json={"prompt": "A tea stall"},
            headers=auth_headers,
        )

        assert response.status_code == 403
        data = response.json()
        assert data["error"] == "Google AI Studio not configured"
        assert "googleAiStudio" in data["setupInstructions"]

    def test_uses_tenant_key(self, client: TestClient, db: Session, tenant_with_key: Tenant,
                             auth_headers: dict):
        gemini = GeminiFactory()
        app.dependency_overrides[get_image_service] = lambda: image_service(db, gemini)

        response = client.post(
            "/api/ai/google-ai-studio/generate-image",
            json={"prompt": "A tea stall", "style": "vintage"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json() == {
            "imageUrl": "data:image/png;base64,AAAA",
            "revisedPrompt": "A tea stall, enhanced",
            "originalPrompt": "A tea stall",
            "enhancementService": "basic",
            "service": "google-ai-studio",
        }
        assert gemini.built == [("AIzaTenantKey", ProviderType.GOOGLE_AI_STUDIO)]

    def test_unexpected_failure_is_500(self, client: TestClient, db: Session, tenant_with_key: Tenant,
                                       auth_headers: dict):
        app.dependency_overrides[get_image_service] = lambda: image_service(db, GeminiFactory(crash=True))

        response = client.post(
            "/api/ai/google-ai-studio/generate-image",
            json={"prompt": "A tea stall"},
            headers=auth_headers,
        )

        assert response.status_code == 500
        data = response.json()
        assert data["error"] == "Failed to generate image"
        assert "unknown shape" in data["details"]


# ---------------------------------------------------------------------------
# GATEWAY ROUTES
# ---------------------------------------------------------------------------


def use_gateway(monkeypatch, handler):
    monkeypatch.setattr(settings, "AI_GATEWAY_URL", "http://gateway.local")
    app.dependency_overrides[get_gateway_client] = lambda: AIGatewayClient(
        "http://gateway.local", token="user-jwt", transport=httpx.MockTransport(handler)
    )


class TestGatewayRoutes:
    """Speech and vision passthrough."""

    def test_not_configured(self, client: TestClient, auth_headers: dict, monkeypatch):
        monkeypatch.setattr(settings, "AI_GATEWAY_URL", "")
        monkeypatch.setattr(settings, "USE_AI_GATEWAY", False)

        response = client.post(
            "/api/ai/speech-to-text",
            json={"audio_url": "https://cdn.example.com/a.mp3"},
            headers=auth_headers,
        )

        assert response.status_code == 503
        assert response.json()["error"] == "STT service not configured"

    def test_text_to_speech(self, client: TestClient, auth_headers: dict, monkeypatch):
        use_gateway(monkeypatch, lambda r: httpx.Response(200, json={
            "audio_url": "https://cdn.example.com/out.wav", "duration": 2.5,
        }))

        response = client.post(
            "/api/ai/text-to-speech",
            json={"text": "Namaste", "speed": 1.2},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json() == {
            "audioUrl": "https://cdn.example.com/out.wav",
            "duration": 2.5,
            "service": "self-hosted",
        }

    def test_gateway_failure_is_503(self, client: TestClient, auth_headers: dict, monkeypatch):
        use_gateway(monkeypatch, lambda r: httpx.Response(502, text="upstream down"))

        response = client.post(
            "/api/ai/image-to-text",
            json={"image_url": "https://cdn.example.com/receipt.jpg", "task": "ocr"},
            headers=auth_headers,
        )

        assert response.status_code == 503
        data = response.json()
        assert data["error"] == "Image-to-text service unavailable"
        assert "502" in data["details"]

    def test_speed_out_of_range(self, client: TestClient, auth_headers: dict):
        response = client.post(
            "/api/ai/text-to-speech",
            json={"text": "Namaste", "speed": 3},
            headers=auth_headers,
        )
        assert response.status_code == 400

    def test_usage_includes_gateway_report(self, client: TestClient, auth_headers: dict, monkeypatch):
        use_gateway(monkeypatch, lambda r: httpx.Response(200, json={"minutes": 12}))

        response = client.get("/api/ai/usage", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["gateway"] == {"minutes": 12}


class TestImageToImage:
    def test_with_huggingface_key_is_501(self, client: TestClient, auth_headers: dict, monkeypatch):
        monkeypatch.setattr(settings, "HUGGINGFACE_API_KEY", "hf_test")

        response = client.post(
            "/api/ai/image-to-image",
            json={"image_url": "https://cdn.example.com/a.png", "prompt": "make it blue"},
            headers=auth_headers,
        )

        assert response.status_code == 501
        assert len(response.json()["alternatives"]) == 2

    def test_without_key_is_503(self, client: TestClient, auth_headers: dict, monkeypatch):
        monkeypatch.setattr(settings, "HUGGINGFACE_API_KEY", "")

        response = client.post(
            "/api/ai/image-to-image",
            json={"image_url": "https://cdn.example.com/a.png", "prompt": "make it blue"},
            headers=auth_headers,
        )
        assert response.status_code == 503


# ---------------------------------------------------------------------------
# DIAGNOSTICS
# ---------------------------------------------------------------------------


class CannedChatProvider(ChatProvider):
    def __init__(self, provider_type: ProviderType, reply: Optional[str]):
        self.provider_type = provider_type
        self.model = "canned"
        self.reply = reply
        self.calls = 0

    async def chat(self, messages, temperature=0.7, max_tokens=1024) -> AIResponse:
        self.calls += 1
        if self.reply is None:
            return self._create_error_response("Connection refused")
        return AIResponse(content=self.reply, provider=self.provider_type, model=self.model)


class TestProviderDiagnostics:
    """Tests for GET /api/ai/test."""

    def test_reports_each_provider(self, client: TestClient, auth_headers: dict, monkeypatch):
        monkeypatch.setattr(settings, "GROQ_API_KEY", "gsk_test")
        monkeypatch.setattr(settings, "HUGGINGFACE_API_KEY", "")
        monkeypatch.setattr(settings, "GEMINI_API_KEY", "")
        providers_under_test = {
            "groq": CannedChatProvider(ProviderType.GROQ, " test "),
            "ollama": CannedChatProvider(ProviderType.OLLAMA, None),
            "huggingface": CannedChatProvider(ProviderType.HUGGINGFACE, "test"),
        }
        app.dependency_overrides[get_test_providers] = lambda: providers_under_test

        response = client.get("/api/ai/test", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["groq"]["testResult"] == "success"
        assert data["groq"]["response"] == "test"
        assert data["groq"]["apiKeyLength"] == 8
        assert data["ollama"]["testResult"] == "failed"
        assert "Connection refused" in data["ollama"]["error"]
        assert data["huggingface"]["configured"] is False
        assert data["huggingface"]["testResult"] is None
        assert providers_under_test["huggingface"].calls == 0
        assert data["imageProviders"] == []


def ollama_server(models, chat_reply: Optional[str] = "OK", reachable: bool = True) -> OllamaProvider:
    def handler(request: httpx.Request) -> httpx.Response:
        if not reachable:
            raise httpx.ConnectError("refused", request=request)
        if request.url.path == "/api/tags":
            return httpx.Response(200, json={"models": models})
        if chat_reply is None:
            return httpx.Response(500, json={"error": "model crashed"})
        return httpx.Response(200, json={"message": {"content": chat_reply}})

    return OllamaProvider(base_url="http://ollama.local", model="mistral:7b", api_key="",
                          transport=httpx.MockTransport(handler))


class TestOllamaHealth:
    """Tests for GET /api/ai/ollama/health."""

    def check(self, client: TestClient, auth_headers: dict, provider: OllamaProvider) -> dict:
        app.dependency_overrides[get_ollama_provider] = lambda: provider
        response = client.get("/api/ai/ollama/health", headers=auth_headers)
        assert response.status_code == 200
        return response.json()

    def test_healthy(self, client: TestClient, auth_headers: dict):
        health = self.check(client, auth_headers, ollama_server([{"name": "mistral:7b", "size": 4}]))

        assert health["status"] == "healthy"
        assert health["details"]["modelExists"] is True
        assert health["details"]["responsePreview"] == "OK"
        assert health["hasApiKey"] is False

    def test_model_family_match_is_enough(self, client: TestClient, auth_headers: dict):
        health = self.check(client, auth_headers, ollama_server([{"name": "mistral:latest"}]))
        assert health["details"]["modelExists"] is True

    def test_missing_model(self, client: TestClient, auth_headers: dict):
        health = self.check(client, auth_headers, ollama_server([{"name": "llama3.2:latest"}]))

        assert health["status"] == "unhealthy"
        assert health["details"]["suggestion"] == "Available models: llama3.2:latest"

    def test_unreachable(self, client: TestClient, auth_headers: dict):
        health = self.check(client, auth_headers, ollama_server([], reachable=False))

        assert health["status"] == "unhealthy"
        assert health["details"]["error"].startswith("Connection refused")
        assert "suggestion" in health["details"]

    def test_chat_check_fails(self, client: TestClient, auth_headers: dict):
        health = self.check(client, auth_headers, ollama_server([{"name": "mistral:7b"}], chat_reply=None))

        assert health["status"] == "unhealthy"
        assert health["details"]["chatTestFailed"] is True
        assert health["details"]["error"] == "model crashed"
