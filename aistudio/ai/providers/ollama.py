"""
Ollama Provider - self-hosted models over Ollama's native HTTP API.

Ollama is the second stage of the chat fallback chain. It runs next to the
application (or on a private host), so no key is required; when
OLLAMA_API_KEY is set it is sent as a bearer token for hosted gateways.

API: POST {OLLAMA_BASE_URL}/api/chat   {"model", "messages", "stream": false}
     GET  {OLLAMA_BASE_URL}/api/tags   (installed models)
"""

import logging
import time
from typing import Any, Dict, List, Optional

import httpx

from aistudio.core.config import settings
from aistudio.core.errors import ProviderError
from aistudio.ai.providers.base import (
    AIResponse,
    ChatMessage,
    ChatProvider,
    ProviderType,
    TokenUsage,
)

logger = logging.getLogger("aistudio.ai.ollama")


class OllamaProvider(ChatProvider):
    """
    Ollama chat provider.

    Usage:
        provider = OllamaProvider()
        response = await provider.chat([ChatMessage("user", "Hello")])

    `transport` lets tests plug in an httpx.MockTransport.
    """

    provider_type = ProviderType.OLLAMA

    def __init__(
        self,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.OLLAMA_BASE_URL).rstrip("/")
        self.model = model or settings.OLLAMA_MODEL
        self.api_key = api_key if api_key is not None else settings.OLLAMA_API_KEY
        self.timeout = timeout or settings.AI_REQUEST_TIMEOUT
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _client(self, timeout: Optional[float] = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=timeout or self.timeout,
            transport=self._transport,
        )

    async def chat(
        self,
        messages: List[ChatMessage],
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ) -> AIResponse:
        start_time = time.time()
        payload = {
            "model": self.model,
            "messages": [m.to_dict() for m in messages],
            "stream": False,
            "options": {"temperature": temperature, "num_predict": max_tokens},
        }

        async with self._client() as client:
            try:
                response = await client.post(
                    f"{self.base_url}/api/chat",
                    json=payload,
                    headers=self._headers(),
                )
            except httpx.RequestError as e:
                logger.warning(
                    f"Ollama unreachable at {self.base_url} - is it running? ({type(e).__name__})"
                )
                return self._create_error_response(
                    f"{type(e).__name__}: {e}",
                    latency_ms=self._measure_latency(start_time),
                )

        latency_ms = self._measure_latency(start_time)

        if response.status_code != 200:
            return self._create_error_response(
                _error_text(response),
                vendor_status=response.status_code,
                latency_ms=latency_ms,
            )

        try:
            data = response.json()
        except ValueError:
            return self._create_error_response("Ollama returned invalid JSON", latency_ms=latency_ms)

        message = data.get("message") if isinstance(data, dict) else None
        if not isinstance(data, dict) or (message is not None and not isinstance(message, dict)):
            return self._create_error_response("Ollama returned a malformed payload", latency_ms=latency_ms)

        content = (message or {}).get("content") or data.get("response") or ""
        if not isinstance(content, str) or not content.strip():
            return self._create_error_response("Ollama returned an empty message", latency_ms=latency_ms)

        usage = TokenUsage(
            prompt_tokens=data.get("prompt_eval_count") or 0,
            completion_tokens=data.get("eval_count") or 0,
        )
        logger.info(f"Ollama request completed in {latency_ms:.0f}ms, tokens: {usage.total_tokens}")

        return AIResponse(
            content=content,
            provider=self.provider_type,
            model=self.model,
            usage=usage if usage.total_tokens else None,
            latency_ms=latency_ms,
        )

    async def list_models(self) -> List[Dict[str, Any]]:
        """
        List installed models.

        Raises:
            ProviderError: if the server is unreachable or answers non-200
        """
        async with self._client(timeout=5.0) as client:
            try:
                response = await client.get(f"{self.base_url}/api/tags", headers=self._headers())
            except httpx.TimeoutException:
                raise ProviderError(
                    "ollama",
                    "Connection timeout - Ollama server may be unreachable or slow",
                    hint=f"Check if Ollama is running and accessible at {self.base_url}",
                )
            except httpx.RequestError:
                raise ProviderError(
                    "ollama",
                    "Connection refused - Ollama server is not running or not accessible",
                    hint="Start Ollama locally (ollama serve) or point OLLAMA_BASE_URL at a running server",
                )

        if response.status_code != 200:
            raise ProviderError(
                "ollama",
                f"Tags endpoint returned {response.status_code}: {response.reason_phrase}",
                vendor_status=response.status_code,
            )
        try:
            return response.json().get("models", [])
        except ValueError:
            return []


def _error_text(response: httpx.Response) -> str:
    """Pull the vendor's error message out of a failed response."""
    try:
        data = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict):
            return str(error.get("message") or error)
        if error:
            return str(error)
    return response.text[:200]
