"""
Generative Language API client - verifies a tenant's Google AI Studio key.

ListModels is the lightest authenticated call the API offers, so a key
that can list models is a key that works.
"""

import logging
from typing import List, Optional

import httpx

from aistudio.environments.base import APIError

logger = logging.getLogger("aistudio.environments.google.generative")

API_KEY_PREFIX = "AIza"


def looks_like_api_key(api_key: str) -> bool:
    """Google API keys always start with "AIza"."""
    return api_key.startswith(API_KEY_PREFIX)


class GenerativeLanguageClient:
    MODELS_URL = "https://generativelanguage.googleapis.com/v1beta/models"

    def __init__(self, api_key: str, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_key = api_key
        self._transport = transport

    async def list_models(self) -> List[str]:
        """
        Model names available to this key.

        Raises:
            APIError: On network failure, a rejected key, or a malformed reply
        """
        async with httpx.AsyncClient(timeout=30.0, transport=self._transport) as client:
            try:
                response = await client.get(self.MODELS_URL, headers={"x-goog-api-key": self.api_key})
            except httpx.RequestError as e:
                logger.error(f"Google AI Studio unreachable: {e}")
                raise APIError(
                    "Failed to connect to Google AI Studio. Please check your internet connection and try again."
                )

        try:
            data = response.json()
        except ValueError:
            data = {}

        if response.status_code != 200:
            vendor_message = (data.get("error") or {}).get("message") if isinstance(data, dict) else None
            if response.status_code in (401, 403):
                message = "Invalid API key. Please check that your API key is correct and has not been revoked."
            elif response.status_code == 400 and vendor_message and "API key" in vendor_message:
                message = "Invalid API key format or the key does not have required permissions."
            else:
                message = vendor_message or f"API returned {response.status_code}"
            logger.warning(f"Google API key test failed ({response.status_code}): {vendor_message}")
            raise APIError(message, status_code=response.status_code, response=data)

        models = data.get("models") if isinstance(data, dict) else None
        if not isinstance(models, list):
            raise APIError("Unexpected response from Google API. The API key may be invalid.")

        return [m.get("name") or m.get("displayName") for m in models if m.get("name") or m.get("displayName")]
