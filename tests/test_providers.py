"""
Tests for the vendor adapters.

These tests verify:
- Ollama chat and model listing over a mocked HTTP transport
- OpenAI-compatible providers never raise, even when the SDK does
- Image providers (Gemini via a fake SDK client, Hugging Face over HTTP)
- The AI gateway client
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import json
import openai
import pytest
from google.genai import errors as genai_errors
from google.genai import types

from aistudio.ai.providers import ChatMessage, GroqProvider, OllamaProvider, ProviderType
from aistudio.ai.providers.gateway import AIGatewayClient
from aistudio.ai.providers.images import (
    GeminiImageProvider,
    HuggingFaceImageProvider,
    SourceImage,
    decode_source_image,
    enhance_image_prompt,
    google_error,
    parse_size,
)
from aistudio.core.errors import ProviderError

MESSAGES = [ChatMessage("system", "You are helpful."), ChatMessage("user", "Hello")]


# ---------------------------------------------------------------------------
# OLLAMA
# ---------------------------------------------------------------------------


def ollama(handler, api_key: str = "") -> OllamaProvider:
    return OllamaProvider(
        base_url="http://ollama.local/",
        model="llama3.2",
        api_key=api_key,
        transport=httpx.MockTransport(handler),
    )


class TestOllamaProvider:
    """Tests for OllamaProvider."""

    @pytest.mark.asyncio
    async def test_chat_success(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            seen["auth"] = request.headers.get("authorization")
            return httpx.Response(200, json={
                "message": {"role": "assistant", "content": "Namaste!"},
                "prompt_eval_count": 12,
                "eval_count": 4,
            })

        response = await ollama(handler, api_key="secret").chat(MESSAGES, temperature=0.2)

        assert response.success is True
        assert response.content == "Namaste!"
        assert response.provider == ProviderType.OLLAMA
        assert response.usage.total_tokens == 16
        assert seen["url"] == "http://ollama.local/api/chat"
        assert seen["body"]["stream"] is False
        assert seen["body"]["options"]["temperature"] == 0.2
        assert seen["body"]["messages"][0] == {"role": "system", "content": "You are helpful."}
        assert seen["auth"] == "Bearer secret"

    @pytest.mark.asyncio
    async def test_unreachable_returns_error_response(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        response = await ollama(handler).chat(MESSAGES)

        assert response.success is False
        assert response.content == ""
        assert response.error.vendor_status is None
        assert "ConnectError" in response.error.message

    @pytest.mark.asyncio
    async def test_vendor_status_is_kept(self):
        response = await ollama(lambda r: httpx.Response(404, json={"error": "model not found"})).chat(MESSAGES)

        assert response.success is False
        assert response.error.vendor_status == 404
        assert response.error.message == "model not found"

    @pytest.mark.asyncio
    async def test_empty_message_is_failure(self):
        response = await ollama(lambda r: httpx.Response(200, json={"message": {"content": "  "}})).chat(MESSAGES)
        assert response.success is False

    @pytest.mark.parametrize("payload", [
        {"message": "not-an-object"},
        [{"message": {"content": "hi"}}],
        {"message": {"content": ["hi"]}},
    ])
    @pytest.mark.asyncio
    async def test_malformed_payload_is_failure(self, payload):
        response = await ollama(lambda r: httpx.Response(200, json=payload)).chat(MESSAGES)

        assert response.success is False
        assert response.error.message in (
            "Ollama returned a malformed payload",
            "Ollama returned an empty message",
        )

    @pytest.mark.asyncio
    async def test_list_models(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/tags"
            return httpx.Response(200, json={"models": [{"name": "llama3.2:latest", "size": 2019393189}]})

        models = await ollama(handler).list_models()
        assert models[0]["name"] == "llama3.2:latest"

    @pytest.mark.asyncio
    async def test_list_models_unreachable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(ProviderError) as exc_info:
            await ollama(handler).list_models()
        assert "Connection refused" in exc_info.value.message
        assert exc_info.value.hint


# ---------------------------------------------------------------------------
# OPENAI-COMPATIBLE
# ---------------------------------------------------------------------------


def fake_openai(create) -> MagicMock:
    client = MagicMock()
    client.chat.completions.create = create
    return client


class TestOpenAICompatibleProvider:
    """Tests for the Groq / Hugging Face / OpenAI adapter."""

    @pytest.mark.asyncio
    async def test_success_with_usage(self):
        completion = SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content="Follow up with Ravi."))],
            usage=SimpleNamespace(prompt_tokens=100, completion_tokens=20),
        )
        create = AsyncMock(return_value=completion)
        provider = GroqProvider(model="llama-3.1-8b-instant", client=fake_openai(create))

        response = await provider.chat(MESSAGES, max_tokens=256)

        assert response.success is True
        assert response.provider == ProviderType.GROQ
        assert response.content == "Follow up with Ravi."
        assert response.usage.total_tokens == 120
        kwargs = create.await_args.kwargs
        assert kwargs["model"] == "llama-3.1-8b-instant"
        assert kwargs["max_tokens"] == 256
        assert kwargs["messages"][1] == {"role": "user", "content": "Hello"}

    @pytest.mark.asyncio
    async def test_status_error_becomes_error_response(self):
        request = httpx.Request("POST", "https://api.groq.com/openai/v1/chat/completions")
        error = openai.APIStatusError(
            "Rate limit reached",
            response=httpx.Response(429, request=request),
            body=None,
        )
        provider = GroqProvider(client=fake_openai(AsyncMock(side_effect=error)))

        response = await provider.chat(MESSAGES)

        assert response.success is False
        assert response.error.vendor_status == 429
        assert response.error.message == "Rate limit reached"

    @pytest.mark.asyncio
    async def test_connection_error_has_no_status(self):
        request = httpx.Request("POST", "https://api.groq.com/openai/v1/chat/completions")
        provider = GroqProvider(client=fake_openai(AsyncMock(side_effect=openai.APIConnectionError(request=request))))

        response = await provider.chat(MESSAGES)

        assert response.success is False
        assert response.error.vendor_status is None

    @pytest.mark.asyncio
    async def test_unconfigured_provider_does_not_raise(self):
        provider = GroqProvider(api_key="")

        assert provider.is_configured is False
        response = await provider.chat(MESSAGES)
        assert response.success is False
        assert "not configured" in response.error.message


# ---------------------------------------------------------------------------
# IMAGES
# ---------------------------------------------------------------------------


class TestImageHelpers:
    def test_known_style(self):
        assert enhance_image_prompt("A tea cup", "Minimalist") == (
            "A tea cup, minimalist, clean, simple design style, high quality, detailed"
        )

    def test_unknown_style_passed_through(self):
        assert enhance_image_prompt("A tea cup", "watercolor").startswith("A tea cup, watercolor style")

    def test_no_style(self):
        assert enhance_image_prompt("A tea cup") == "A tea cup, high quality, detailed, professional"

    @pytest.mark.parametrize("size,expected", [
        ("1024x768", (1024, 768)),
        ("512X512", (512, 512)),
        ("large", None),
        ("x512", None),
        (None, None),
    ])
    def test_parse_size(self, size, expected):
        assert parse_size(size) == expected

    def test_google_quota_without_free_tier(self):
        error = google_error(429, "Quota exceeded for metric, limit: 0")
        assert error.status_code == 429
        assert error.message.startswith("Free tier quota not available")
        assert error.hint.startswith("1.")

    def test_google_server_error_maps_to_502(self):
        assert google_error(500, "backend error").status_code == 502


def gemini_client(generate) -> MagicMock:
    client = MagicMock()
    client.aio.models.generate_content = generate
    return client


def image_reply(data: bytes = b"\x89PNG") -> SimpleNamespace:
    part = SimpleNamespace(inline_data=SimpleNamespace(data=data, mime_type="image/png"), text=None)
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))])


class TestGeminiImageProvider:
    """Tests for GeminiImageProvider with a fake google-genai client."""

    @pytest.mark.asyncio
    async def test_inline_image_becomes_data_url(self):
        part = SimpleNamespace(inline_data=SimpleNamespace(data=b"\x89PNG", mime_type="image/png"), text=None)
        response = SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))])
        generate = AsyncMock(return_value=response)
        provider = GeminiImageProvider("AIzaTest", client=gemini_client(generate))

        result = await provider.generate_image("A tea stall", style="vintage")

        assert result.image_url == "data:image/png;base64,iVBORw=="
        assert result.service == ProviderType.GOOGLE_AI_STUDIO
        assert "vintage style" in generate.await_args.kwargs["contents"]

    @pytest.mark.asyncio
    async def test_text_only_reply(self):
        part = SimpleNamespace(inline_data=None, text="I cannot draw that.")
        response = SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))])
        provider = GeminiImageProvider("AIzaTest", client=gemini_client(AsyncMock(return_value=response)))

        with pytest.raises(ProviderError) as exc_info:
            await provider.generate_image("A tea stall")

        assert exc_info.value.error == "Image generation not supported"
        assert exc_info.value.details == {"textResponse": "I cannot draw that."}

    @pytest.mark.asyncio
    async def test_vendor_rejection(self):
        error = genai_errors.ClientError(
            403, {"error": {"code": 403, "message": "Permission denied", "status": "PERMISSION_DENIED"}}
        )
        provider = GeminiImageProvider("AIzaTest", client=gemini_client(AsyncMock(side_effect=error)))

        with pytest.raises(ProviderError) as exc_info:
            await provider.generate_image("A tea stall")

        assert exc_info.value.status_code == 403
        assert exc_info.value.vendor_status == 403

    def test_process_key_reports_nanobanana(self):
        provider = GeminiImageProvider("AIzaTest", provider_type=ProviderType.NANOBANANA, client=MagicMock())
        assert provider.provider_type == ProviderType.NANOBANANA

    @pytest.mark.asyncio
    async def test_edit_sends_image_part_then_instruction(self):
        generate = AsyncMock(return_value=image_reply())
        provider = GeminiImageProvider("AIzaTest", provider_type=ProviderType.NANOBANANA,
                                       client=gemini_client(generate))

        result = await provider.edit_image(SourceImage(b"\xff\xd8jpeg", "image/jpeg"), "Make the sky orange")

        contents = generate.await_args.kwargs["contents"]
        assert isinstance(contents[0], types.Part)
        assert contents[0].inline_data.mime_type == "image/jpeg"
        assert contents[0].inline_data.data == b"\xff\xd8jpeg"
        assert contents[1] == "Make the sky orange"
        assert result.revised_prompt == "Make the sky orange"
        assert result.service == ProviderType.NANOBANANA

    @pytest.mark.asyncio
    async def test_fuse_sends_every_image(self):
        generate = AsyncMock(return_value=image_reply())
        provider = GeminiImageProvider("AIzaTest", client=gemini_client(generate))
        sources = [SourceImage(b"one"), SourceImage(b"two", "image/webp")]

        result = await provider.fuse_images(sources, "Put the product on the beach")

        contents = generate.await_args.kwargs["contents"]
        assert [part.inline_data.data for part in contents[:2]] == [b"one", b"two"]
        assert contents[2] == "Put the product on the beach"
        assert result.base64 == "iVBORw=="

    @pytest.mark.asyncio
    async def test_fuse_needs_two_images(self):
        generate = AsyncMock(return_value=image_reply())
        provider = GeminiImageProvider("AIzaTest", client=gemini_client(generate))

        with pytest.raises(ProviderError) as exc_info:
            await provider.fuse_images([SourceImage(b"one")], "Blend")

        assert exc_info.value.status_code == 400
        generate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_huggingface_cannot_edit(self):
        with pytest.raises(ProviderError) as exc_info:
            await HuggingFaceImageProvider("hf_test").edit_image(SourceImage(b"one"), "Blend")
        assert exc_info.value.status_code == 501


class TestDecodeSourceImage:
    def test_plain_base64(self):
        image = decode_source_image("iVBORw==", "image/png")
        assert image.data == b"\x89PNG"
        assert image.mime_type == "image/png"

    def test_data_url_prefix_is_stripped(self):
        assert decode_source_image("data:image/jpeg;base64,iVBORw==", "image/jpeg").data == b"\x89PNG"

    @pytest.mark.parametrize("value", ["not base64!", "data:image/png;base64,"])
    def test_invalid_data(self, value):
        with pytest.raises(ValueError):
            decode_source_image(value)

    def test_unsupported_type(self):
        with pytest.raises(ValueError):
            decode_source_image("iVBORw==", "image/gif")


class TestHuggingFaceImageProvider:
    """Tests for HuggingFaceImageProvider."""

    @pytest.mark.asyncio
    async def test_png_bytes_become_data_url(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, content=b"\x89PNG", headers={"content-type": "image/png"})

        provider = HuggingFaceImageProvider("hf_test", model="black-forest-labs/FLUX.1-schnell",
                                            transport=httpx.MockTransport(handler))
        result = await provider.generate_image("A tea stall", size="768x512")

        assert result.image_url == "data:image/png;base64,iVBORw=="
        assert seen["path"] == "/hf-inference/models/black-forest-labs/FLUX.1-schnell"
        assert seen["body"]["parameters"] == {"width": 768, "height": 512}

    @pytest.mark.asyncio
    async def test_model_loading(self):
        transport = httpx.MockTransport(
            lambda r: httpx.Response(503, json={"error": "Model is loading", "estimated_time": 19.4})
        )
        provider = HuggingFaceImageProvider("hf_test", transport=transport)

        with pytest.raises(ProviderError) as exc_info:
            await provider.generate_image("A tea stall")

        assert exc_info.value.message == "Model is loading, estimated time: 20 seconds"
        assert exc_info.value.vendor_status == 503

    @pytest.mark.asyncio
    async def test_missing_key(self):
        with pytest.raises(ProviderError):
            await HuggingFaceImageProvider(api_key="").generate_image("A tea stall")


# ---------------------------------------------------------------------------
# GATEWAY
# ---------------------------------------------------------------------------


class TestAIGatewayClient:
    """Tests for AIGatewayClient."""

    @pytest.mark.asyncio
    async def test_forwards_token_and_drops_nulls(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["auth"] = request.headers.get("authorization")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"text": "hello"})

        client = AIGatewayClient("http://gateway.local/", token="user-jwt", transport=httpx.MockTransport(handler))
        result = await client.speech_to_text("https://cdn/audio.mp3", language="hi")

        assert result == {"text": "hello"}
        assert seen["path"] == "/api/stt/transcribe"
        assert seen["auth"] == "Bearer user-jwt"
        assert seen["body"] == {"audio_url": "https://cdn/audio.mp3", "language": "hi"}

    @pytest.mark.asyncio
    async def test_error_status_raises(self):
        client = AIGatewayClient(
            "http://gateway.local",
            transport=httpx.MockTransport(lambda r: httpx.Response(500, text="boom")),
        )

        with pytest.raises(ProviderError) as exc_info:
            await client.usage()
        assert exc_info.value.vendor_status == 500
