"""
Integrations Router - per-tenant Google AI Studio connection.

Endpoints:
==========
- GET    /api/ai/integrations                          -> connected integrations + config status
- PUT    /api/ai/integrations/google-ai-studio         -> store the tenant's API key (encrypted)
- DELETE /api/ai/integrations/google-ai-studio         -> remove OAuth integration and stored key
- POST   /api/ai/integrations/google-ai-studio/test    -> verify a key against the Generative Language API

Each tenant brings its own key; there is no process-wide Google AI Studio key.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from aistudio.core.encryption import encrypt_secret
from aistudio.core.errors import AppError, NotFoundError, ValidationError
from aistudio.db.session import get_db
from aistudio.deps import TenantContext, require_ai_studio
from aistudio.environments.base import APIError
from aistudio.environments.google import GenerativeLanguageClient, looks_like_api_key
from aistudio.models.integration import OAuthIntegration
from aistudio.schemas.ai import GoogleApiKeyRequest

logger = logging.getLogger("aistudio.routers.integrations")

router = APIRouter(prefix="/api/ai/integrations", tags=["ai-integrations"])

GOOGLE_AI_STUDIO = "google-ai-studio"
INVALID_KEY_FORMAT = 'Invalid API key format. Google API keys must start with "AIza"'


def get_generative_client_factory():
    """Dependency returning a factory so tests can swap the HTTP transport."""
    return GenerativeLanguageClient


@router.get("")
def list_integrations(
    ctx: TenantContext = Depends(require_ai_studio),
    db: Session = Depends(get_db),
):
    """Tokens are never returned."""
    integrations = (
        db.query(OAuthIntegration)
        .filter(OAuthIntegration.tenant_id == ctx.tenant_id)
        .order_by(OAuthIntegration.created_at.desc())
        .all()
    )
    return {
        "integrations": [
            {
                "id": str(i.id),
                "provider": i.provider,
                "providerEmail": i.provider_email,
                "providerName": i.provider_name,
                "isActive": i.is_active,
                "lastUsedAt": i.last_used_at.isoformat() if i.last_used_at else None,
                "expiresAt": i.expires_at.isoformat() if i.expires_at else None,
                "createdAt": i.created_at.isoformat() if i.created_at else None,
            }
            for i in integrations
        ],
        "configurations": {
            GOOGLE_AI_STUDIO: {
                "configured": bool(ctx.tenant.google_ai_studio_api_key),
                "method": "api-key",
            },
        },
    }


@router.put("/google-ai-studio")
def save_google_api_key(
    payload: GoogleApiKeyRequest,
    ctx: TenantContext = Depends(require_ai_studio),
    db: Session = Depends(get_db),
):
    api_key = payload.api_key.strip()
    if not looks_like_api_key(api_key):
        raise ValidationError(error=INVALID_KEY_FORMAT)

    ctx.tenant.google_ai_studio_api_key = encrypt_secret(api_key)
    db.commit()
    logger.info(f"Stored Google AI Studio key for tenant {ctx.tenant_id}")
    return {"success": True, "configured": True}


@router.delete("/google-ai-studio")
def disconnect_google_ai_studio(
    ctx: TenantContext = Depends(require_ai_studio),
    db: Session = Depends(get_db),
):
    integration = (
        db.query(OAuthIntegration)
        .filter(
            OAuthIntegration.tenant_id == ctx.tenant_id,
            OAuthIntegration.provider == GOOGLE_AI_STUDIO,
        )
        .first()
    )
    if integration is None and not ctx.tenant.google_ai_studio_api_key:
        raise NotFoundError(error="Integration not found")

    if integration is not None:
        db.delete(integration)
    ctx.tenant.google_ai_studio_api_key = None
    db.commit()
    logger.info(f"Disconnected Google AI Studio for tenant {ctx.tenant_id}")
    return {"success": True}


@router.post("/google-ai-studio/test")
async def test_google_api_key(
    payload: GoogleApiKeyRequest,
    ctx: TenantContext = Depends(require_ai_studio),
    client_factory=Depends(get_generative_client_factory),
):
    """
    Returns:
        {"success": true, "message": ..., "availableModels": [first 5 model names]}
    """
    api_key = payload.api_key.strip()
    if not looks_like_api_key(api_key):
        raise ValidationError(error=INVALID_KEY_FORMAT, extra={"success": False})

    try:
        models = await client_factory(api_key).list_models()
    except APIError as e:
        if e.status_code is None and e.response is None:
            raise AppError(error=str(e), extra={"success": False})
        extra = {"success": False}
        if e.status_code is not None:
            extra["statusCode"] = e.status_code
        raise ValidationError(error=str(e), details=e.response, extra=extra)

    return {
        "success": True,
        "message": "API key verified successfully!",
        "availableModels": models[:5],
    }
