"""
Chat Pipeline - answers a business question from the tenant's own data.

Flow:
1. Topic filter: personal questions get a canned redirect, no provider call
2. Cache: an exact (tenant, message) hit is returned as-is
3. Context: tenant-scoped business records rendered into one text block
4. Sufficiency: LOW confidence returns a clarifying question, no provider call
5. Prompt: system prompt + user message embedding the context block
6. Fallback: providers tried one at a time, in a fixed order; the first
   success wins. The rule-based responder is last and cannot fail.
7. Side effects: cache write (networked answers only), usage row, and a
   best-effort interaction-log job

Providers are injected, constructed once per process:

    pipeline = ChatPipeline(providers=[GroqProvider(), OllamaProvider(), ...])
    outcome = await pipeline.run(db, tenant_id, user_id, "What needs attention?")
    outcome.to_dict()  # {"message": ..., "service": "groq", "cached": False, "usage": {...}}
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

from fastapi import Depends
from sqlalchemy.orm import Session

from aistudio.ai.context import BusinessContextAssembler
from aistudio.ai.context_analyzer import (
    ConfidencePolicy,
    analyze_context,
    format_clarifying_message,
)
from aistudio.ai.monitoring import ai_logger
from aistudio.ai.prompts.chat_prompts import build_system_prompt, build_user_message
from aistudio.ai.providers import (
    AIResponse,
    ChatPrompt,
    ChatProvider,
    GroqProvider,
    HuggingFaceProvider,
    OllamaProvider,
    OpenAIProvider,
    ProviderType,
    TokenUsage,
)
from aistudio.ai.rule_based import RuleBasedResponder
from aistudio.ai.topic_filter import FILTERED_MESSAGE, is_personal
from aistudio.core.errors import ProviderError, ValidationError
from aistudio.services.job_queue import LOG_AI_INTERACTION, JobDispatcher, get_job_dispatcher
from aistudio.services.response_cache import ResponseCache
from aistudio.services.usage_service import record_usage

logger = logging.getLogger("aistudio.services.chat_pipeline")

FILTERED_SERVICE = "filtered"
CLARIFICATION_SERVICE = "context-analyzer"


@dataclass
class ChatOutcome:
    """What the chat endpoint returns."""
    message: str
    service: str
    cached: bool = False
    usage: Optional[TokenUsage] = None
    needs_clarification: bool = False
    suggested_questions: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "message": self.message,
            "service": self.service,
            "cached": self.cached,
        }
        if self.usage is not None:
            body["usage"] = self.usage.to_dict()
        if self.needs_clarification:
            body["needsClarification"] = True
            body["suggestedQuestions"] = self.suggested_questions
        return body


class ChatPipeline:
    """
    The chat orchestration pipeline.

    Args:
        providers: Networked providers in fallback order
        dispatcher: Where interaction-log jobs are sent
        policy: Confidence threshold table (configured values by default)
        fallback: The last-resort responder (rule-based by default)
    """

    def __init__(
        self,
        providers: Sequence[ChatProvider],
        dispatcher: JobDispatcher,
        policy: Optional[ConfidencePolicy] = None,
        fallback: Optional[ChatProvider] = None,
    ):
        self.providers = list(providers)
        self.dispatcher = dispatcher
        self.policy = policy
        self.fallback = fallback or RuleBasedResponder()

    @property
    def chain(self) -> List[ChatProvider]:
        return self.providers + [self.fallback]

    async def run(
        self,
        db: Session,
        tenant_id: UUID,
        user_id: Optional[UUID],
        message: str,
        module: Optional[str] = None,
    ) -> ChatOutcome:
        if not message:
            raise ValidationError("Message is required", details=[{"field": "message", "issue": "empty"}])

        request_id = str(uuid.uuid4())[:8]

        if is_personal(message):
            ai_logger.log_event(request_id, "ai_filtered", {"tenant_id": str(tenant_id)})
            return ChatOutcome(message=FILTERED_MESSAGE, service=FILTERED_SERVICE)

        cache = ResponseCache(db)
        hit = cache.get(tenant_id, message)
        if hit is not None:
            ai_logger.log_cache_hit(request_id, hit.service, tenant_id=str(tenant_id))
            return ChatOutcome(message=hit.response, service=hit.service, cached=True)

        context = BusinessContextAssembler(db).build(tenant_id, message)
        analysis = analyze_context(message, context, self.policy)
        ai_logger.log_event(request_id, "ai_context_analysis", {
            "confidence": analysis.confidence.value,
            "signals": analysis.signal_count,
            "context_available": context.available,
        })

        if analysis.needs_clarification:
            return ChatOutcome(
                message=format_clarifying_message(analysis),
                service=CLARIFICATION_SERVICE,
                needs_clarification=True,
                suggested_questions=analysis.suggested_questions,
            )

        prompt = ChatPrompt(
            system=build_system_prompt(str(tenant_id), module),
            user=build_user_message(message, context.text, analysis),
            question=message,
            context=context.text,
        )

        response = await self._answer(request_id, prompt, str(tenant_id))

        if response.provider != ProviderType.RULE_BASED:
            cache.put(tenant_id, message, response.content, response.provider.value)
            record_usage(
                db,
                tenant_id,
                service=response.provider.value,
                feature="chat",
                tokens=response.usage.total_tokens if response.usage else 0,
                user_id=user_id,
            )

        self.dispatcher.dispatch(LOG_AI_INTERACTION, {
            "tenant_id": str(tenant_id),
            "user_id": str(user_id) if user_id else None,
            "query": message,
            "response": response.content,
            "module": module,
        })

        return ChatOutcome(
            message=response.content,
            service=response.provider.value,
            usage=response.usage,
        )

    async def _answer(self, request_id: str, prompt: ChatPrompt, tenant_id: str) -> AIResponse:
        """Walk the fallback chain; the first successful response wins."""
        chain = self.chain
        response: Optional[AIResponse] = None
        for index, provider in enumerate(chain):
            ai_logger.log_request(
                request_id,
                prompt=prompt.question,
                provider=provider.provider_type.value,
                model=provider.model,
                tenant_id=tenant_id,
            )
            try:
                response = await provider.answer(prompt)
            except Exception as e:
                ai_logger.log_error(
                    request_id,
                    error=f"{type(e).__name__}: {e}",
                    stage="provider",
                    metadata={"provider": provider.provider_type.value},
                )
                response = AIResponse(
                    content="",
                    provider=provider.provider_type,
                    model=provider.model,
                    success=False,
                    error=ProviderError(provider.provider_type.value, f"{type(e).__name__}: {e}"),
                )
            ai_logger.log_response(request_id, response)
            if response.success and response.content:
                return response
            if index + 1 < len(chain):
                ai_logger.log_fallback(
                    request_id,
                    failed=provider.provider_type.value,
                    next_provider=chain[index + 1].provider_type.value,
                    error=str(response.error) if response.error else None,
                )
        # Only reachable with a custom fallback that failed too
        return response


# ---------------------------------------------------------------------------
# DEPENDENCY
# ---------------------------------------------------------------------------
_chat_providers: Optional[List[ChatProvider]] = None


def default_chat_providers() -> List[ChatProvider]:
    """Groq -> Ollama -> Hugging Face -> OpenAI."""
    return [GroqProvider(), OllamaProvider(), HuggingFaceProvider(), OpenAIProvider()]


def get_chat_pipeline(dispatcher: JobDispatcher = Depends(get_job_dispatcher)) -> ChatPipeline:
    """FastAPI dependency. Providers are constructed once per process and reused."""
    global _chat_providers
    if _chat_providers is None:
        _chat_providers = default_chat_providers()
    return ChatPipeline(_chat_providers, dispatcher)
