"""
AI Chat Router - the business assistant and social post generator.

Endpoints:
==========
- POST /api/ai/chat           -> answer a business question from tenant data
- POST /api/ai/generate-post  -> write a social media post

Both require the AI Studio module license.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from aistudio.core.errors import AppError
from aistudio.db.session import get_db
from aistudio.deps import TenantContext, require_ai_studio
from aistudio.schemas.ai import ChatRequest, PostGenerateRequest
from aistudio.services.chat_pipeline import ChatPipeline, get_chat_pipeline
from aistudio.services.post_service import PostService, get_post_service

logger = logging.getLogger("aistudio.routers.ai_chat")

router = APIRouter(prefix="/api/ai", tags=["ai"])


def chat_failure_hint(message: str) -> tuple[str, str]:
    """Map a raw failure message to (user-facing message, operator hint)."""
    if "GROQ_API_KEY" in message:
        return (
            "Groq API key is not configured",
            "Please set GROQ_API_KEY in your .env file. Groq provides fast AI responses.",
        )
    if "ollama" in message.lower() and "memory" in message.lower():
        return (
            "Ollama model requires more memory than available",
            "The local model needs more RAM than is available. Use Groq instead or configure a smaller OLLAMA_MODEL.",
        )
    if "Connection refused" in message or "ConnectError" in message:
        return (
            "Cannot connect to AI service",
            "Please check your internet connection and ensure AI services are accessible.",
        )
    return message, ""


@router.post("/chat")
async def chat(
    payload: ChatRequest,
    ctx: TenantContext = Depends(require_ai_studio),
    db: Session = Depends(get_db),
    pipeline: ChatPipeline = Depends(get_chat_pipeline),
):
    """
    Answer a business question grounded in the tenant's own records.

    Returns:
        {"message", "service", "cached", "usage"?, "needsClarification"?, "suggestedQuestions"?}
    """
    try:
        outcome = await pipeline.run(db, ctx.tenant_id, ctx.user_id, payload.message, payload.module)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"AI chat error: {e}", exc_info=True)
        message, hint = chat_failure_hint(str(e))
        raise AppError(message, error="Failed to process chat request", hint=hint or None)

    return outcome.to_dict()


@router.post("/generate-post")
async def generate_post(
    payload: PostGenerateRequest,
    ctx: TenantContext = Depends(require_ai_studio),
    db: Session = Depends(get_db),
    posts: PostService = Depends(get_post_service),
):
    try:
        post = await posts.generate(
            db,
            ctx.tenant,
            payload.topic,
            platform=payload.platform,
            tone=payload.tone,
            length=payload.length,
            user_id=ctx.user_id,
        )
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Post generation error: {e}", exc_info=True)
        raise AppError(error="Failed to generate post", details=str(e))

    return post.to_dict()
