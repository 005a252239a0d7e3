"""
Post Service - social media posts, Groq -> Ollama -> rule-based template.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy.orm import Session

from aistudio.ai.prompts.post_prompts import build_post_prompts
from aistudio.ai.providers import ChatMessage, ChatProvider, GroqProvider, OllamaProvider, ProviderType
from aistudio.ai.rule_based import rule_based_post
from aistudio.core.errors import ValidationError
from aistudio.models.tenant import Tenant
from aistudio.services.usage_service import record_usage

logger = logging.getLogger("aistudio.services.post")

MIN_TOPIC_LENGTH = 10

TOPIC_QUESTIONS = [
    "What is the main message or theme of this post?",
    "What should readers learn or take away?",
    "Is this about a product, company update, industry insight, or something else?",
]


@dataclass
class GeneratedPost:
    post: str
    service: str
    platform: Optional[str] = None
    tone: Optional[str] = None
    length: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "post": self.post,
            "service": self.service,
            "platform": self.platform,
            "tone": self.tone,
            "length": self.length,
        }


class PostService:
    def __init__(self, providers: Sequence[ChatProvider]):
        self.providers = list(providers)

    async def generate(
        self,
        db: Session,
        tenant: Tenant,
        topic: str,
        platform: Optional[str] = None,
        tone: Optional[str] = None,
        length: Optional[str] = None,
        user_id: Optional[UUID] = None,
    ) -> GeneratedPost:
        if len(topic.strip()) < MIN_TOPIC_LENGTH:
            raise ValidationError(
                "To create an engaging post, I need more details about the topic.",
                error="Topic too vague",
                extra={"needsClarification": True, "suggestedQuestions": TOPIC_QUESTIONS},
            )

        system, user = build_post_prompts(
            topic,
            business_name=tenant.name,
            website=tenant.website,
            platform=platform,
            tone=tone,
            length=length,
        )
        messages = [ChatMessage("system", system), ChatMessage("user", user)]

        for provider in self.providers:
            response = await provider.chat(messages)
            if response.success and response.content:
                record_usage(
                    db,
                    tenant.id,
                    service=response.provider.value,
                    feature="generate-post",
                    tokens=response.usage.total_tokens if response.usage else 0,
                    user_id=user_id,
                )
                return GeneratedPost(response.content, response.provider.value, platform, tone, length)
            logger.warning(f"Post generation via {provider.provider_type.value} failed: {response.error}")

        return GeneratedPost(
            rule_based_post(topic, platform, tone, length),
            ProviderType.RULE_BASED.value,
            platform,
            tone,
            length,
        )


_post_providers: Optional[List[ChatProvider]] = None


def get_post_service() -> PostService:
    global _post_providers
    if _post_providers is None:
        _post_providers = [GroqProvider(), OllamaProvider()]
    return PostService(_post_providers)
