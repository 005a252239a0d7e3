"""
Diagnostics Router - is each AI provider configured, and does it answer?

Endpoints:
==========
- GET /api/ai/test            -> config + one-line live test for groq, ollama, huggingface
- GET /api/ai/ollama/health   -> Ollama reachability, installed models and a chat check

Both always answer 200 with the findings; a provider failing is a finding,
not an error.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends

from aistudio.ai.providers.base import ChatMessage, ChatProvider
from aistudio.ai.providers.ollama import OllamaProvider
from aistudio.ai.providers.openai_compatible import GroqProvider, HuggingFaceProvider
from aistudio.core.config import settings
from aistudio.core.errors import ProviderError
from aistudio.deps import TenantContext, require_ai_studio
from aistudio.services.image_service import available_providers

logger = logging.getLogger("aistudio.routers.diagnostics")

router = APIRouter(prefix="/api/ai", tags=["ai-diagnostics"])

TEST_MESSAGE = 'Say "test" if you can read this.'
HEALTH_CHECK_MESSAGE = 'Say "OK" if you can read this.'


def get_test_providers() -> Dict[str, ChatProvider]:
    return {
        "groq": GroqProvider(),
        "ollama": OllamaProvider(),
        "huggingface": HuggingFaceProvider(),
    }


def get_ollama_provider() -> OllamaProvider:
    return OllamaProvider()


def _configuration() -> Dict[str, Dict[str, Any]]:
    return {
        "groq": {
            "configured": bool(settings.GROQ_API_KEY),
            "apiKeyLength": len(settings.GROQ_API_KEY),
            "model": settings.GROQ_MODEL,
        },
        "ollama": {
            "configured": bool(settings.OLLAMA_API_KEY or settings.OLLAMA_BASE_URL),
            "baseUrl": settings.OLLAMA_BASE_URL,
            "apiKeyLength": len(settings.OLLAMA_API_KEY),
            "model": settings.OLLAMA_MODEL,
        },
        "huggingface": {
            "configured": bool(settings.HUGGINGFACE_API_KEY),
            "apiKeyLength": len(settings.HUGGINGFACE_API_KEY),
            "model": settings.HUGGINGFACE_MODEL,
        },
    }


async def _live_test(provider: ChatProvider) -> Dict[str, Any]:
    response = await provider.chat([ChatMessage("user", TEST_MESSAGE)], max_tokens=10)
    if response.success:
        return {"testResult": "success", "response": response.content.strip() or "no content", "error": None}
    return {"testResult": "failed", "error": str(response.error) if response.error else "no content"}


@router.get("/test")
async def test_providers(
    ctx: TenantContext = Depends(require_ai_studio),
    providers: Dict[str, ChatProvider] = Depends(get_test_providers),
):
    """Unconfigured providers are reported but not called."""
    results = _configuration()
    for name, report in results.items():
        report["testResult"] = None
        report["error"] = None
        provider = providers.get(name)
        if provider is None or not report["configured"] or not provider.is_configured:
            continue
        report.update(await _live_test(provider))

    results["imageProviders"] = available_providers(ctx.tenant)
    return results


@router.get("/ollama/health")
async def ollama_health(
    ctx: TenantContext = Depends(require_ai_studio),
    ollama: OllamaProvider = Depends(get_ollama_provider),
):
    """
    Returns:
        {"service": "Ollama", "baseUrl", "model", "hasApiKey",
         "status": "healthy" | "unhealthy", "details": {...}, "timestamp"}
    """
    health: Dict[str, Any] = {
        "service": "Ollama",
        "baseUrl": ollama.base_url,
        "model": ollama.model,
        "hasApiKey": bool(ollama.api_key),
        "status": "unknown",
        "details": {},
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    details = health["details"]

    try:
        models = await ollama.list_models()
    except ProviderError as e:
        health["status"] = "unhealthy"
        details["error"] = e.message
        if e.hint:
            details["suggestion"] = e.hint
        return health

    family = ollama.model.split(":")[0]
    model_exists = any(
        m.get("name") == ollama.model or family in (m.get("name") or "")
        for m in models
    )
    details["availableModels"] = [
        {"name": m.get("name"), "size": m.get("size"), "modified": m.get("modified_at")}
        for m in models
    ]
    details["modelExists"] = model_exists
    details["totalModels"] = len(models)

    if not model_exists:
        health["status"] = "unhealthy"
        details["error"] = f'Configured model "{ollama.model}" not found in available models'
        details["suggestion"] = "Available models: " + ", ".join(m.get("name") or "" for m in models)
        return health

    response = await ollama.chat([ChatMessage("user", HEALTH_CHECK_MESSAGE)])
    if response.success:
        health["status"] = "healthy"
        details["testResponse"] = "Model responded successfully"
        details["responsePreview"] = response.content[:100]
    else:
        health["status"] = "unhealthy"
        details["error"] = response.error.message if response.error else "Model did not return a valid response"
        details["chatTestFailed"] = True

    logger.info(f"Ollama health: {health['status']}")
    return health
