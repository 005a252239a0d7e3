"""
AI Gateway client - speech-to-text, text-to-speech and image-to-text.

The gateway is a separately deployed service that fronts the speech and
vision models. It authenticates callers with the same bearer token the
user presented to us, so the client is built per request with that token.

Endpoints (relative to AI_GATEWAY_URL):
    POST /api/stt/transcribe     {"audio_url", "language", "task"}
    POST /api/tts/synthesize     {"text", "language", "voice", "speed"}
    POST /api/vision/describe    {"image_url", "task"}
    GET  /api/usage
"""

import logging
from typing import Any, Dict, Optional

import httpx

from aistudio.core.config import settings
from aistudio.core.errors import ProviderError

logger = logging.getLogger("aistudio.ai.gateway")


class AIGatewayClient:
    """
    Thin async client for the AI gateway.

    Every method makes one request and raises ProviderError on network
    failure or non-2xx status.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url if base_url is not None else settings.AI_GATEWAY_URL).rstrip("/")
        self.token = token
        self.timeout = timeout
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.request(method, url, json=payload, headers=self._headers())
            except httpx.RequestError as e:
                logger.error(f"Gateway request to {path} failed: {e}")
                raise ProviderError("gateway", f"Gateway unreachable: {e}")

        if response.status_code >= 400:
            logger.error(f"Gateway {path} returned {response.status_code}")
            raise ProviderError(
                "gateway",
                f"Gateway returned {response.status_code}: {response.text[:200]}",
                vendor_status=response.status_code,
            )
        try:
            return response.json()
        except ValueError:
            raise ProviderError("gateway", f"Gateway returned invalid JSON from {path}")

    @staticmethod
    def _compact(payload: Dict[str, Any]) -> Dict[str, Any]:
        return {k: v for k, v in payload.items() if v is not None}

    async def speech_to_text(
        self,
        audio_url: str,
        language: Optional[str] = None,
        task: Optional[str] = None,
    ) -> Dict[str, Any]:
        return await self._request(
            "POST",
            "/api/stt/transcribe",
            self._compact({"audio_url": audio_url, "language": language, "task": task}),
        )

    async def text_to_speech(
        self,
        text: str,
        language: Optional[str] = None,
        voice: Optional[str] = None,
        speed: Optional[float] = None,
    ) -> Dict[str, Any]:
        return await self._request(
            "POST",
            "/api/tts/synthesize",
            self._compact({"text": text, "language": language, "voice": voice, "speed": speed}),
        )

    async def image_to_text(self, image_url: str, task: Optional[str] = None) -> Dict[str, Any]:
        return await self._request(
            "POST",
            "/api/vision/describe",
            self._compact({"image_url": image_url, "task": task}),
        )

    async def usage(self) -> Dict[str, Any]:
        return await self._request("GET", "/api/usage")
