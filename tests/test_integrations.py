"""
Tests for the per-tenant Google AI Studio connection.

These tests verify:
- API key storage (format check, encryption at rest, removal)
- API key verification against a mocked Generative Language API
- The OAuth authorize -> callback -> refresh flow with a mocked Google
"""

import json
from datetime import datetime, timedelta, timezone
from urllib.parse import parse_qs, urlparse

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from aistudio.core.encryption import reveal_secret
from aistudio.core.security import create_oauth_state
from aistudio.environments.google import GenerativeLanguageClient, GoogleAuthClient
from aistudio.main import app
from aistudio.models.integration import OAuthIntegration
from aistudio.models.tenant import Tenant
from aistudio.routers.google_ai_studio import get_google_auth_client
from aistudio.routers.integrations import INVALID_KEY_FORMAT, get_generative_client_factory

VALID_KEY = "AIzaSyTestKey1234567890"


def google_transport(token_status: int = 200, refresh_token: str = "1//refresh", userinfo_status: int = 200):
    """Mock Google's token and userinfo endpoints."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/token":
            if token_status != 200:
                return httpx.Response(token_status, json={"error": "invalid_grant"})
            body = parse_qs(request.content.decode())
            payload = {"access_token": "ya29.new", "expires_in": 3599, "token_type": "Bearer",
                       "scope": "https://www.googleapis.com/auth/generative-language"}
            if body.get("grant_type") == ["authorization_code"] and refresh_token:
                payload["refresh_token"] = refresh_token
            return httpx.Response(200, json=payload)
        if request.url.path == "/oauth2/v2/userinfo":
            if userinfo_status != 200:
                return httpx.Response(userinfo_status)
            return httpx.Response(200, json={"id": "g-123", "email": "owner@acme.in", "name": "Acme Owner"})
        return httpx.Response(404)

    return httpx.MockTransport(handler)


def auth_client(transport=None, configured: bool = True) -> GoogleAuthClient:
    return GoogleAuthClient(
        client_id="client-id" if configured else "",
        client_secret="client-secret" if configured else "",
        redirect_uri="http://testserver/api/ai/google-ai-studio/callback",
        transport=transport,
    )


def use_models_api(handler):
    transport = httpx.MockTransport(handler)
    app.dependency_overrides[get_generative_client_factory] = lambda: (
        lambda api_key: GenerativeLanguageClient(api_key, transport=transport)
    )


# ---------------------------------------------------------------------------
# API KEY
# ---------------------------------------------------------------------------


class TestApiKeyStorage:
    """PUT / DELETE /api/ai/integrations/google-ai-studio and the listing."""

    def test_rejects_wrong_prefix(self, client: TestClient, auth_headers: dict):
        response = client.put(
            "/api/ai/integrations/google-ai-studio",
            json={"apiKey": "sk-not-google"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"] == INVALID_KEY_FORMAT

    def test_key_is_encrypted_at_rest(
        self, client: TestClient, auth_headers: dict, db: Session, test_tenant: Tenant, encryption_key: str
    ):
        response = client.put(
            "/api/ai/integrations/google-ai-studio",
            json={"apiKey": f"  {VALID_KEY}  "},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "configured": True}

        db.refresh(test_tenant)
        stored = test_tenant.google_ai_studio_api_key
        assert stored != VALID_KEY
        assert stored.count(":") == 1
        assert reveal_secret(stored) == VALID_KEY

        listing = client.get("/api/ai/integrations", headers=auth_headers).json()
        assert listing["configurations"]["google-ai-studio"] == {"configured": True, "method": "api-key"}

    def test_missing_encryption_key_is_500(self, client: TestClient, auth_headers: dict, monkeypatch):
        from aistudio.core.config import settings
        monkeypatch.setattr(settings, "ENCRYPTION_KEY", "")

        response = client.put(
            "/api/ai/integrations/google-ai-studio",
            json={"apiKey": VALID_KEY},
            headers=auth_headers,
        )

        assert response.status_code == 500
        assert response.json()["error"] == "Encryption not configured"

    def test_delete_without_integration_is_404(self, client: TestClient, auth_headers: dict):
        response = client.delete("/api/ai/integrations/google-ai-studio", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["error"] == "Integration not found"

    def test_delete_clears_key_and_oauth(
        self, client: TestClient, auth_headers: dict, db: Session, test_tenant: Tenant
    ):
        test_tenant.google_ai_studio_api_key = "legacy-plain-key"
        db.add(OAuthIntegration(tenant_id=test_tenant.id, provider="google-ai-studio", access_token="ya29.x"))
        db.commit()

        response = client.delete("/api/ai/integrations/google-ai-studio", headers=auth_headers)

        assert response.status_code == 200
        db.refresh(test_tenant)
        assert test_tenant.google_ai_studio_api_key is None
        assert db.query(OAuthIntegration).count() == 0

    def test_listing_never_returns_tokens(
        self, client: TestClient, auth_headers: dict, db: Session, test_tenant: Tenant
    ):
        db.add(OAuthIntegration(tenant_id=test_tenant.id, provider="google-ai-studio",
                                access_token="ya29.secret", refresh_token="1//secret",
                                provider_email="owner@acme.in"))
        db.commit()

        response = client.get("/api/ai/integrations", headers=auth_headers)

        assert response.status_code == 200
        assert "secret" not in response.text
        assert response.json()["integrations"][0]["providerEmail"] == "owner@acme.in"


class TestApiKeyVerification:
    """POST /api/ai/integrations/google-ai-studio/test."""

    def test_valid_key_lists_models(self, client: TestClient, auth_headers: dict):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.headers["x-goog-api-key"] == VALID_KEY
            return httpx.Response(200, json={"models": [{"name": f"models/gemini-{i}"} for i in range(8)]})

        use_models_api(handler)
        response = client.post(
            "/api/ai/integrations/google-ai-studio/test",
            json={"apiKey": VALID_KEY},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["availableModels"] == [f"models/gemini-{i}" for i in range(5)]

    def test_rejected_key(self, client: TestClient, auth_headers: dict):
        use_models_api(lambda request: httpx.Response(403, json={"error": {"message": "API key not valid"}}))

        response = client.post(
            "/api/ai/integrations/google-ai-studio/test",
            json={"apiKey": VALID_KEY},
            headers=auth_headers,
        )

        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert data["statusCode"] == 403
        assert data["error"].startswith("Invalid API key.")

    def test_network_failure_is_500(self, client: TestClient, auth_headers: dict):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        use_models_api(handler)
        response = client.post(
            "/api/ai/integrations/google-ai-studio/test",
            json={"apiKey": VALID_KEY},
            headers=auth_headers,
        )

        assert response.status_code == 500
        assert response.json()["success"] is False
        assert "Failed to connect" in response.json()["error"]

    def test_bad_format_never_calls_google(self, client: TestClient, auth_headers: dict):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("Google must not be called")

        use_models_api(handler)
        response = client.post(
            "/api/ai/integrations/google-ai-studio/test",
            json={"apiKey": "bad"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["success"] is False


# ---------------------------------------------------------------------------
# OAUTH
# ---------------------------------------------------------------------------


class TestOAuthAuthorize:
    """GET /api/ai/google-ai-studio/authorize."""

    def test_returns_consent_url(self, client: TestClient, auth_headers: dict, test_tenant: Tenant):
        app.dependency_overrides[get_google_auth_client] = lambda: auth_client()

        response = client.get("/api/ai/google-ai-studio/authorize", headers=auth_headers)

        assert response.status_code == 200
        url = urlparse(response.json()["authUrl"])
        params = parse_qs(url.query)
        assert url.netloc == "accounts.google.com"
        assert params["client_id"] == ["client-id"]
        assert params["access_type"] == ["offline"]
        assert params["scope"] == ["https://www.googleapis.com/auth/generative-language"]
        assert params["state"][0]

    def test_unconfigured_is_500(self, client: TestClient, auth_headers: dict):
        app.dependency_overrides[get_google_auth_client] = lambda: auth_client(configured=False)

        response = client.get("/api/ai/google-ai-studio/authorize", headers=auth_headers)

        assert response.status_code == 500
        assert response.json()["error"] == "Google OAuth not configured"


class TestOAuthCallback:
    """GET /api/ai/google-ai-studio/callback always redirects to settings."""

    def callback(self, client: TestClient, **params) -> str:
        response = client.get("/api/ai/google-ai-studio/callback", params=params, follow_redirects=False)
        assert response.status_code == 302
        return response.headers["location"]

    def test_provider_error(self, client: TestClient):
        assert self.callback(client, error="access_denied") == "/dashboard/settings/ai?error=access_denied"

    def test_missing_parameters(self, client: TestClient):
        assert self.callback(client, code="abc").endswith("error=missing_parameters")

    def test_forged_state(self, client: TestClient):
        app.dependency_overrides[get_google_auth_client] = lambda: auth_client(google_transport())
        assert self.callback(client, code="abc", state="forged").endswith("error=invalid_state")

    def test_unconfigured(self, client: TestClient, test_tenant: Tenant):
        app.dependency_overrides[get_google_auth_client] = lambda: auth_client(configured=False)
        state = create_oauth_state(str(test_tenant.id))
        assert self.callback(client, code="abc", state=state).endswith("error=oauth_not_configured")

    def test_token_exchange_failure(self, client: TestClient, test_tenant: Tenant):
        app.dependency_overrides[get_google_auth_client] = lambda: auth_client(google_transport(token_status=400))
        state = create_oauth_state(str(test_tenant.id))
        assert self.callback(client, code="abc", state=state).endswith("error=token_exchange_failed")

    def test_success_stores_integration(self, client: TestClient, db: Session, test_tenant: Tenant):
        app.dependency_overrides[get_google_auth_client] = lambda: auth_client(google_transport())
        state = create_oauth_state(str(test_tenant.id))

        location = self.callback(client, code="abc", state=state)

        assert location == "/dashboard/settings/ai?success=google_connected"
        integration = db.query(OAuthIntegration).one()
        assert integration.tenant_id == test_tenant.id
        assert integration.access_token == "ya29.new"
        assert integration.refresh_token == "1//refresh"
        assert integration.provider_email == "owner@acme.in"
        assert integration.has_scope("https://www.googleapis.com/auth/generative-language")
        assert integration.is_active is True

    def test_userinfo_failure_still_connects(self, client: TestClient, db: Session, test_tenant: Tenant):
        app.dependency_overrides[get_google_auth_client] = lambda: auth_client(
            google_transport(userinfo_status=401)
        )
        state = create_oauth_state(str(test_tenant.id))

        assert self.callback(client, code="abc", state=state).endswith("success=google_connected")
        assert db.query(OAuthIntegration).one().provider_email is None


class TestOAuthRefresh:
    """POST /api/ai/google-ai-studio/refresh."""

    @pytest.fixture
    def integration(self, db: Session, test_tenant: Tenant) -> OAuthIntegration:
        row = OAuthIntegration(
            tenant_id=test_tenant.id,
            provider="google-ai-studio",
            access_token="ya29.old",
            refresh_token="1//keep",
            expires_at=datetime.now(timezone.utc) - timedelta(minutes=1),
        )
        db.add(row)
        db.commit()
        db.refresh(row)
        return row

    def test_no_integration_is_404(self, client: TestClient, auth_headers: dict):
        app.dependency_overrides[get_google_auth_client] = lambda: auth_client(google_transport())
        response = client.post("/api/ai/google-ai-studio/refresh", headers=auth_headers)
        assert response.status_code == 404

    def test_fresh_token_not_refreshed(
        self, client: TestClient, auth_headers: dict, db: Session, integration: OAuthIntegration
    ):
        integration.expires_at = datetime.now(timezone.utc) + timedelta(hours=1)
        db.commit()
        app.dependency_overrides[get_google_auth_client] = lambda: auth_client(google_transport())

        response = client.post("/api/ai/google-ai-studio/refresh", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["refreshed"] is False

    def test_expired_token_refreshed(
        self, client: TestClient, auth_headers: dict, db: Session, integration: OAuthIntegration
    ):
        app.dependency_overrides[get_google_auth_client] = lambda: auth_client(google_transport())

        response = client.post("/api/ai/google-ai-studio/refresh", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["refreshed"] is True
        db.refresh(integration)
        assert integration.access_token == "ya29.new"
        assert integration.refresh_token == "1//keep"
        assert integration.is_expired() is False

    def test_revoked_refresh_token(
        self, client: TestClient, auth_headers: dict, db: Session, integration: OAuthIntegration
    ):
        app.dependency_overrides[get_google_auth_client] = lambda: auth_client(google_transport(token_status=400))

        response = client.post("/api/ai/google-ai-studio/refresh", headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error"] == "Failed to refresh token"
        db.refresh(integration)
        assert integration.is_active is False

    def test_missing_refresh_token(
        self, client: TestClient, auth_headers: dict, db: Session, integration: OAuthIntegration
    ):
        integration.refresh_token = None
        db.commit()
        app.dependency_overrides[get_google_auth_client] = lambda: auth_client(google_transport())

        response = client.post("/api/ai/google-ai-studio/refresh", headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error"] == "Reconnect required"


class TestIntegrationModel:
    def test_naive_expiry_treated_as_utc(self):
        naive = (datetime.now(timezone.utc) + timedelta(hours=1)).replace(tzinfo=None)
        assert OAuthIntegration(expires_at=naive).is_expired() is False

    def test_expiring_within_margin(self):
        soon = datetime.now(timezone.utc) + timedelta(minutes=2)
        assert OAuthIntegration(expires_at=soon).is_expired() is True

    def test_no_expiry_is_expired(self):
        assert OAuthIntegration().is_expired() is True
