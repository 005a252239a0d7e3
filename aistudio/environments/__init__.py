"""
Environments - external accounts a tenant connects to AI Studio.
"""

from aistudio.environments.base import (
    APIError,
    AuthenticationError,
    EnvironmentError,
    EnvironmentProvider,
    OAuthTokens,
    TokenExpiredError,
    UserInfo,
)

__all__ = [
    "APIError",
    "AuthenticationError",
    "EnvironmentError",
    "EnvironmentProvider",
    "OAuthTokens",
    "TokenExpiredError",
    "UserInfo",
]
