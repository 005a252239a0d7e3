"""
AI Logger - Structured logging for AI operations.

Every provider attempt in the chat pipeline is logged as one JSON line:
the request, the response (or failure), each advance of the fallback
chain, cache hits, and pipeline errors. Prompts are truncated and the
business context is never logged in full.

Log Format:
==========
    [2025-01-01 10:00:00] INFO [aistudio.ai] AI Response: {"event": "ai_response", ...}
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from aistudio.ai.providers.base import AIResponse

logger = logging.getLogger("aistudio.ai")
logger.setLevel(logging.INFO)

if not logger.handlers:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.INFO)
    formatter = logging.Formatter(
        '[%(asctime)s] %(levelname)s [%(name)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _preview(text: str, limit: int = 100) -> str:
    return text[:limit] + "..." if len(text) > limit else text


class AILogger:
    """
    Structured logger for AI operations.

    Usage:
        ai_logger.log_request(request_id, prompt="What needs attention?",
                              provider="groq", model="llama-3.1-8b-instant")
        ai_logger.log_response(request_id, response)
        ai_logger.log_fallback(request_id, failed="groq", next_provider="ollama", error="429 ...")
    """

    def __init__(self):
        self._logger = logger

    def log_request(
        self,
        request_id: str,
        prompt: str,
        provider: str,
        model: str,
        tenant_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        log_data = {
            "event": "ai_request",
            "request_id": request_id,
            "provider": provider,
            "model": model,
            "prompt_length": len(prompt),
            "prompt_preview": _preview(prompt),
            "tenant_id": tenant_id,
            "timestamp": _now(),
        }
        if metadata:
            log_data["metadata"] = metadata
        self._logger.info(f"AI Request: {json.dumps(log_data)}")

    def log_response(
        self,
        request_id: str,
        response: AIResponse,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        log_data = {
            "event": "ai_response",
            "request_id": request_id,
            "provider": response.provider.value,
            "model": response.model,
            "success": response.success,
            "latency_ms": round(response.latency_ms, 2),
            "tokens": response.usage.total_tokens if response.usage else 0,
            "response_length": len(response.content),
            "timestamp": _now(),
        }
        if not response.success and response.error:
            log_data["error"] = str(response.error)
            log_data["vendor_status"] = response.error.vendor_status
        if metadata:
            log_data["metadata"] = metadata

        level = logging.INFO if response.success else logging.WARNING
        self._logger.log(level, f"AI Response: {json.dumps(log_data)}")

    def log_fallback(
        self,
        request_id: str,
        failed: str,
        next_provider: str,
        error: Optional[str] = None,
    ) -> None:
        log_data = {
            "event": "ai_fallback",
            "request_id": request_id,
            "failed_provider": failed,
            "next_provider": next_provider,
            "error": error,
            "timestamp": _now(),
        }
        self._logger.warning(f"AI Fallback: {json.dumps(log_data)}")

    def log_cache_hit(self, request_id: str, service: str, tenant_id: Optional[str] = None) -> None:
        log_data = {
            "event": "ai_cache_hit",
            "request_id": request_id,
            "service": service,
            "tenant_id": tenant_id,
            "timestamp": _now(),
        }
        self._logger.info(f"AI Cache Hit: {json.dumps(log_data)}")

    def log_error(
        self,
        request_id: str,
        error: str,
        stage: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Log an error in the AI pipeline.

        Args:
            request_id: Request identifier
            error: Error message
            stage: Where the error occurred (context, cache, dispatch, ...)
            metadata: Additional context
        """
        log_data = {
            "event": "ai_error",
            "request_id": request_id,
            "error": error,
            "stage": stage,
            "timestamp": _now(),
        }
        if metadata:
            log_data["metadata"] = metadata
        self._logger.error(f"AI Error: {json.dumps(log_data)}")

    def log_event(
        self,
        request_id: str,
        event_type: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> None:
        log_data = {
            "event": event_type,
            "request_id": request_id,
            "timestamp": _now(),
        }
        if data:
            log_data.update(data)
        self._logger.info(f"AI Event: {json.dumps(log_data, default=str)}")


# ---------------------------------------------------------------------------
# SINGLETON INSTANCE
# ---------------------------------------------------------------------------
ai_logger = AILogger()
