"""
Google AI Studio Router - OAuth connection and tenant-key image generation.

Endpoints:
==========
- GET  /api/ai/google-ai-studio/authorize -> {"authUrl"} for the consent screen
- GET  /api/ai/google-ai-studio/callback  -> Google redirects here; we redirect to settings
- POST /api/ai/google-ai-studio/refresh   -> renew an expired access token
- POST /api/ai/google-ai-studio/generate-image -> image from the tenant's own API key

The state parameter is signed with the app secret and carries the tenant
id, so the callback (which has no bearer token) knows whose connection it
is completing. The callback never returns JSON: every outcome is a redirect
to /dashboard/settings/ai with ?success= or ?error=.

generate-image never falls back to another provider: without a tenant key
it answers 403 with setup instructions.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from aistudio.core.errors import AppError, ConfigurationError, NotFoundError
from aistudio.core.security import create_oauth_state, read_oauth_state
from aistudio.db.session import get_db
from aistudio.deps import TenantContext, require_ai_studio
from aistudio.environments.base import AuthenticationError, TokenExpiredError
from aistudio.environments.google import GENERATIVE_LANGUAGE_SCOPES, GoogleAuthClient
from aistudio.models.integration import OAuthIntegration
from aistudio.models.tenant import Tenant
from aistudio.schemas.ai import GoogleImageRequest
from aistudio.services.image_service import ImageService, get_image_service

logger = logging.getLogger("aistudio.routers.google_ai_studio")

router = APIRouter(prefix="/api/ai/google-ai-studio", tags=["ai-integrations"])

SETTINGS_PAGE = "/dashboard/settings/ai"


def get_google_auth_client() -> GoogleAuthClient:
    return GoogleAuthClient()


def _settings_redirect(**params: str) -> RedirectResponse:
    query = "&".join(f"{key}={value}" for key, value in params.items())
    return RedirectResponse(url=f"{SETTINGS_PAGE}?{query}", status_code=302)


def _find_integration(db: Session, tenant_id: uuid.UUID, provider: str) -> Optional[OAuthIntegration]:
    return (
        db.query(OAuthIntegration)
        .filter(OAuthIntegration.tenant_id == tenant_id, OAuthIntegration.provider == provider)
        .first()
    )


@router.get("/authorize")
def authorize(
    ctx: TenantContext = Depends(require_ai_studio),
    auth_client: GoogleAuthClient = Depends(get_google_auth_client),
):
    if not auth_client.client_id:
        raise ConfigurationError(
            "Google OAuth is not configured.",
            error="Google OAuth not configured",
            hint="Set GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET in your .env file.",
            status_code=500,
        )

    state = create_oauth_state(str(ctx.tenant_id))
    auth_url = auth_client.get_authorization_url(GENERATIVE_LANGUAGE_SCOPES, state)
    logger.info(f"Starting Google AI Studio OAuth for tenant {ctx.tenant_id}")
    return {"authUrl": auth_url}


@router.get("/callback")
async def callback(
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    auth_client: GoogleAuthClient = Depends(get_google_auth_client),
):
    if error:
        logger.warning(f"Google OAuth error: {error}")
        return _settings_redirect(error=error)

    if not code or not state:
        return _settings_redirect(error="missing_parameters")

    tenant_id = read_oauth_state(state)
    if tenant_id is None:
        return _settings_redirect(error="invalid_state")
    try:
        tenant_uuid = uuid.UUID(tenant_id)
    except ValueError:
        return _settings_redirect(error="invalid_state")

    if db.query(Tenant).filter(Tenant.id == tenant_uuid).first() is None:
        return _settings_redirect(error="invalid_state")

    if not auth_client.is_configured:
        return _settings_redirect(error="oauth_not_configured")

    try:
        tokens = await auth_client.exchange_code_for_tokens(code)
    except AuthenticationError as e:
        logger.error(f"Token exchange failed for tenant {tenant_id}: {e}")
        return _settings_redirect(error="token_exchange_failed")

    if not tokens.access_token:
        return _settings_redirect(error="no_access_token")

    # Profile is metadata only; a failure here does not block the connection
    provider_email = provider_name = provider_account_id = None
    try:
        user_info = await auth_client.get_user_info(tokens.access_token)
        provider_email = user_info.email
        provider_name = user_info.name
        provider_account_id = user_info.provider_user_id
    except AuthenticationError as e:
        logger.warning(f"Failed to fetch Google user info: {e}")

    integration = _find_integration(db, tenant_uuid, auth_client.provider_name)
    if integration is None:
        integration = OAuthIntegration(tenant_id=tenant_uuid, provider=auth_client.provider_name)
        db.add(integration)

    integration.access_token = tokens.access_token
    if tokens.refresh_token:
        integration.refresh_token = tokens.refresh_token
    integration.expires_at = tokens.expires_at
    integration.scope = tokens.scope
    integration.provider_email = provider_email
    integration.provider_name = provider_name
    integration.provider_account_id = provider_account_id
    integration.is_active = True
    integration.last_used_at = datetime.now(timezone.utc)
    db.commit()

    logger.info(f"Google AI Studio connected for tenant {tenant_id}")
    return _settings_redirect(success="google_connected")


@router.post("/refresh")
async def refresh(
    ctx: TenantContext = Depends(require_ai_studio),
    db: Session = Depends(get_db),
    auth_client: GoogleAuthClient = Depends(get_google_auth_client),
):
    """
    Refresh the stored access token if it has expired (or is about to).

    Returns:
        {"success": true, "refreshed": bool, "expiresAt": "..."}
    """
    integration = _find_integration(db, ctx.tenant_id, auth_client.provider_name)
    if integration is None:
        raise NotFoundError(error="Integration not found")

    if not integration.is_expired():
        return {
            "success": True,
            "refreshed": False,
            "expiresAt": integration.expires_at.isoformat() if integration.expires_at else None,
        }

    if not integration.refresh_token:
        raise AppError(
            "The stored Google connection has no refresh token.",
            error="Reconnect required",
            hint="Disconnect and reconnect Google AI Studio in Settings > AI Integrations.",
            status_code=400,
        )

    try:
        tokens = await auth_client.refresh_access_token(integration.refresh_token)
    except TokenExpiredError as e:
        logger.error(f"Token refresh failed for tenant {ctx.tenant_id}: {e}")
        integration.is_active = False
        db.commit()
        raise AppError(
            str(e),
            error="Failed to refresh token",
            hint="Disconnect and reconnect Google AI Studio in Settings > AI Integrations.",
            status_code=400,
        )

    integration.access_token = tokens.access_token
    integration.refresh_token = tokens.refresh_token
    integration.expires_at = tokens.expires_at
    integration.is_active = True
    db.commit()

    return {
        "success": True,
        "refreshed": True,
        "expiresAt": tokens.expires_at.isoformat() if tokens.expires_at else None,
    }


@router.post("/generate-image")
async def generate_image(
    payload: GoogleImageRequest,
    ctx: TenantContext = Depends(require_ai_studio),
    images: ImageService = Depends(get_image_service),
):
    try:
        result = await images.generate(
            ctx.tenant,
            payload.prompt,
            style=payload.style,
            size=payload.size,
            provider="google-ai-studio",
            user_id=ctx.user_id,
        )
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Google AI Studio image error: {e}", exc_info=True)
        raise AppError(error="Failed to generate image", details=str(e), status_code=500)

    return {
        "imageUrl": result.image_url,
        "revisedPrompt": result.revised_prompt,
        "originalPrompt": payload.prompt,
        "enhancementService": "basic",
        "service": result.service.value,
    }
