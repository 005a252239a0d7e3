"""
Base classes for third-party environment integrations.

An environment is an external account a tenant connects to AI Studio
(today: Google, for the Generative Language API). Providers implement the
OAuth authorization-code flow behind EnvironmentProvider so routes never
touch provider-specific endpoints.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional


# ---------------------------------------------------------------------------
# CUSTOM EXCEPTIONS
# ---------------------------------------------------------------------------


class EnvironmentError(Exception):
    """Base exception for all environment-related errors."""
    pass


class AuthenticationError(EnvironmentError):
    """Raised when authentication with a provider fails."""
    pass


class TokenExpiredError(EnvironmentError):
    """Raised when an OAuth token has expired and refresh failed."""
    pass


class APIError(EnvironmentError):
    """Raised when an API call to the provider fails."""

    def __init__(self, message: str, status_code: Optional[int] = None, response: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.response = response


# ---------------------------------------------------------------------------
# DATA STRUCTURES
# ---------------------------------------------------------------------------


@dataclass
class OAuthTokens:
    """Provider-agnostic token set from an OAuth exchange or refresh."""
    access_token: str
    token_type: str = "Bearer"
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None
    scopes: Optional[List[str]] = None

    @property
    def scope(self) -> Optional[str]:
        return " ".join(self.scopes) if self.scopes else None


@dataclass
class UserInfo:
    """The provider account that granted access."""
    provider_user_id: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None
    extra_data: Optional[Dict[str, Any]] = None


# ---------------------------------------------------------------------------
# ABSTRACT BASE CLASSES
# ---------------------------------------------------------------------------


class EnvironmentProvider(ABC):
    """
    Abstract base class for OAuth providers.

    The provider is responsible for:
    - Generating authorization URLs
    - Exchanging authorization codes for tokens
    - Refreshing expired tokens
    - Fetching the granting account's profile
    """

    provider_name: str = ""

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """Whether client credentials are set."""
        pass

    @abstractmethod
    def get_authorization_url(self, scopes: List[str], state: str) -> str:
        pass

    @abstractmethod
    async def exchange_code_for_tokens(self, code: str) -> OAuthTokens:
        pass

    @abstractmethod
    async def refresh_access_token(self, refresh_token: str) -> OAuthTokens:
        pass

    @abstractmethod
    async def get_user_info(self, access_token: str) -> UserInfo:
        pass
