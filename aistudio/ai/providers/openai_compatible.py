"""
OpenAI-compatible chat providers - Groq, Hugging Face and OpenAI.

All three vendors speak the OpenAI chat-completions wire format, so they
share one implementation built on the official `openai` SDK and differ
only in base URL, key and model:

    Groq          https://api.groq.com/openai/v1      (primary, fastest)
    Hugging Face  https://router.huggingface.co/v1    (secondary hosted)
    OpenAI        https://api.openai.com/v1           (legacy hosted)

The SDK's own retry loop is disabled (max_retries=0): the chat pipeline's
fallback chain is the only retry mechanism.
"""

import logging
import time
from typing import List, Optional

import openai
from openai import AsyncOpenAI

from aistudio.core.config import settings
from aistudio.ai.providers.base import (
    AIResponse,
    ChatMessage,
    ChatProvider,
    ProviderType,
    TokenUsage,
)


class OpenAICompatibleProvider(ChatProvider):
    """
    Chat provider for any OpenAI-compatible endpoint.

    Usage:
        provider = OpenAICompatibleProvider(
            provider_type=ProviderType.GROQ,
            display_name="Groq",
            model="llama-3.1-8b-instant",
            api_key="gsk_...",
            base_url="https://api.groq.com/openai/v1",
        )
        response = await provider.chat([ChatMessage("user", "Hi")])
    """

    def __init__(
        self,
        provider_type: ProviderType,
        display_name: str,
        model: str,
        api_key: str,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.provider_type = provider_type
        self.display_name = display_name
        self.model = model
        self.api_key = api_key
        self._logger = logging.getLogger(f"aistudio.ai.{provider_type.value}")

        if client is not None:
            self._client = client
        elif api_key:
            self._client = AsyncOpenAI(
                api_key=api_key,
                base_url=base_url,
                timeout=timeout or settings.AI_REQUEST_TIMEOUT,
                max_retries=0,
            )
            self._logger.info(f"{display_name} provider initialized with model: {model}")
        else:
            self._client = None
            self._logger.warning(f"{display_name} API key not configured - provider unavailable")

    @property
    def is_configured(self) -> bool:
        return self._client is not None

    async def chat(
        self,
        messages: List[ChatMessage],
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ) -> AIResponse:
        start_time = time.time()

        if not self._client:
            return self._create_error_response(
                f"{self.display_name} API key not configured",
                latency_ms=self._measure_latency(start_time),
            )

        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=[m.to_dict() for m in messages],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except openai.APIStatusError as e:
            return self._create_error_response(
                e.message,
                vendor_status=e.status_code,
                latency_ms=self._measure_latency(start_time),
            )
        except openai.APIError as e:
            # Connection failures and timeouts: no HTTP status
            return self._create_error_response(
                f"{type(e).__name__}: {e}",
                latency_ms=self._measure_latency(start_time),
            )

        latency_ms = self._measure_latency(start_time)

        content = ""
        if response.choices:
            content = response.choices[0].message.content or ""
        if not content.strip():
            return self._create_error_response(
                f"{self.display_name} returned an empty completion",
                latency_ms=latency_ms,
            )

        usage = None
        if response.usage:
            usage = TokenUsage(
                prompt_tokens=response.usage.prompt_tokens or 0,
                completion_tokens=response.usage.completion_tokens or 0,
            )

        self._logger.info(
            f"{self.display_name} request completed in {latency_ms:.0f}ms, "
            f"tokens: {usage.total_tokens if usage else 0}"
        )

        return AIResponse(
            content=content,
            provider=self.provider_type,
            model=self.model,
            usage=usage,
            latency_ms=latency_ms,
            success=True,
        )


class GroqProvider(OpenAICompatibleProvider):
    def __init__(self, model: str = None, api_key: str = None, client: Optional[AsyncOpenAI] = None):
        super().__init__(
            provider_type=ProviderType.GROQ,
            display_name="Groq",
            model=model or settings.GROQ_MODEL,
            api_key=api_key if api_key is not None else settings.GROQ_API_KEY,
            base_url=settings.GROQ_BASE_URL,
            client=client,
        )


class HuggingFaceProvider(OpenAICompatibleProvider):
    def __init__(self, model: str = None, api_key: str = None, client: Optional[AsyncOpenAI] = None):
        super().__init__(
            provider_type=ProviderType.HUGGINGFACE,
            display_name="Hugging Face",
            model=model or settings.HUGGINGFACE_MODEL,
            api_key=api_key if api_key is not None else settings.HUGGINGFACE_API_KEY,
            base_url=settings.HUGGINGFACE_BASE_URL,
            client=client,
        )


class OpenAIProvider(OpenAICompatibleProvider):
    def __init__(self, model: str = None, api_key: str = None, client: Optional[AsyncOpenAI] = None):
        super().__init__(
            provider_type=ProviderType.OPENAI,
            display_name="OpenAI",
            model=model or settings.OPENAI_MODEL,
            api_key=api_key if api_key is not None else settings.OPENAI_API_KEY,
            client=client,
        )
