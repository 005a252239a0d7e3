"""
Google OAuth Client - authorization-code flow for Google AI Studio.

OAuth 2.0 Flow:
===============
1. get_authorization_url()     -> user is sent to Google's consent screen
2. exchange_code_for_tokens()  -> called from the callback with ?code=
3. get_user_info()             -> who granted access (metadata only)
4. refresh_access_token()      -> renew an expired access token

The "state" parameter is a signed token carrying the tenant id
(aistudio.core.security.create_oauth_state), so no server-side state
storage is needed.

References:
===========
- Token endpoint: https://oauth2.googleapis.com/token
- Userinfo: https://www.googleapis.com/oauth2/v2/userinfo
"""

import logging
from typing import List, Optional
from urllib.parse import urlencode

import httpx

from aistudio.core.config import settings
from aistudio.environments.base import (
    AuthenticationError,
    EnvironmentProvider,
    OAuthTokens,
    TokenExpiredError,
    UserInfo,
)
from aistudio.environments.google.auth.schemas import GoogleTokenResponse, GoogleUserInfo

logger = logging.getLogger("aistudio.environments.google.auth")


class GoogleAuthClient(EnvironmentProvider):
    """
    Google OAuth 2.0 client.

    Example Usage:
        client = GoogleAuthClient()
        auth_url = client.get_authorization_url(GENERATIVE_LANGUAGE_SCOPES, state)
        # ... user consents, Google calls back with ?code=...
        tokens = await client.exchange_code_for_tokens(code)
        user_info = await client.get_user_info(tokens.access_token)
    """

    provider_name = "google-ai-studio"

    AUTHORIZATION_URL = "https://accounts.google.com/o/oauth2/v2/auth"
    TOKEN_URL = "https://oauth2.googleapis.com/token"
    USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        redirect_uri: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.client_id = client_id if client_id is not None else settings.GOOGLE_CLIENT_ID
        self.client_secret = client_secret if client_secret is not None else settings.GOOGLE_CLIENT_SECRET
        self.redirect_uri = redirect_uri or settings.google_redirect_uri
        self._transport = transport

        if not self.client_id or not self.client_secret:
            logger.warning(
                "Google OAuth not configured. Set GOOGLE_CLIENT_ID and "
                "GOOGLE_CLIENT_SECRET in environment variables."
            )

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=30.0, transport=self._transport)

    # -------------------------------------------------------------------------
    # AUTHORIZATION URL
    # -------------------------------------------------------------------------

    def get_authorization_url(
        self,
        scopes: List[str],
        state: str,
        access_type: str = "offline",
        prompt: str = "consent",
    ) -> str:
        """
        Build the consent-screen URL.

        access_type=offline plus prompt=consent makes Google issue a refresh
        token every time, not only on the first grant.
        """
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(scopes),
            "state": state,
            "access_type": access_type,
            "prompt": prompt,
        }
        return f"{self.AUTHORIZATION_URL}?{urlencode(params)}"

    # -------------------------------------------------------------------------
    # TOKEN EXCHANGE
    # -------------------------------------------------------------------------

    async def exchange_code_for_tokens(self, code: str) -> OAuthTokens:
        """
        Raises:
            AuthenticationError: If Google rejects the code or is unreachable
        """
        token_data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": code,
            "grant_type": "authorization_code",
            "redirect_uri": self.redirect_uri,
        }

        logger.info("Exchanging authorization code for tokens")

        async with self._client() as client:
            try:
                response = await client.post(self.TOKEN_URL, data=token_data)
            except httpx.RequestError as e:
                logger.error(f"Network error during token exchange: {e}")
                raise AuthenticationError(f"Network error: {e}")

        if response.status_code != 200:
            logger.error(f"Token exchange failed: {_error_description(response)}")
            raise AuthenticationError(f"Token exchange failed: {_error_description(response)}")

        token_response = GoogleTokenResponse(**response.json())
        logger.info(
            "Obtained Google AI Studio tokens",
            extra={"has_refresh_token": token_response.refresh_token is not None},
        )
        return OAuthTokens(
            access_token=token_response.access_token,
            token_type=token_response.token_type,
            refresh_token=token_response.refresh_token,
            expires_at=token_response.get_expires_at(),
            scopes=token_response.get_scopes_list(),
        )

    # -------------------------------------------------------------------------
    # TOKEN REFRESH
    # -------------------------------------------------------------------------

    async def refresh_access_token(self, refresh_token: str) -> OAuthTokens:
        """
        Raises:
            TokenExpiredError: If the refresh token is invalid or revoked
        """
        refresh_data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "refresh_token": refresh_token,
            "grant_type": "refresh_token",
        }

        async with self._client() as client:
            try:
                response = await client.post(self.TOKEN_URL, data=refresh_data)
            except httpx.RequestError as e:
                logger.error(f"Network error during token refresh: {e}")
                raise TokenExpiredError(f"Network error: {e}")

        if response.status_code != 200:
            logger.error(f"Token refresh failed: {_error_description(response)}")
            raise TokenExpiredError(f"Token refresh failed: {_error_description(response)}")

        token_response = GoogleTokenResponse(**response.json())
        # Google usually omits refresh_token on refresh; keep the old one
        return OAuthTokens(
            access_token=token_response.access_token,
            token_type=token_response.token_type,
            refresh_token=token_response.refresh_token or refresh_token,
            expires_at=token_response.get_expires_at(),
            scopes=token_response.get_scopes_list(),
        )

    # -------------------------------------------------------------------------
    # USER INFO
    # -------------------------------------------------------------------------

    async def get_user_info(self, access_token: str) -> UserInfo:
        async with self._client() as client:
            try:
                response = await client.get(
                    self.USERINFO_URL,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
            except httpx.RequestError as e:
                raise AuthenticationError(f"Network error: {e}")

        if response.status_code != 200:
            raise AuthenticationError("Failed to fetch user info")

        google_user = GoogleUserInfo(**response.json())
        return UserInfo(
            provider_user_id=google_user.id,
            email=google_user.email,
            name=google_user.name,
            extra_data={"picture": google_user.picture},
        )


def _error_description(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text
    if isinstance(data, dict):
        return data.get("error_description") or data.get("error") or response.text
    return response.text
