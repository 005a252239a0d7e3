"""
Google Auth Module - OAuth 2.0 connection to Google AI Studio.
"""

from aistudio.environments.google.auth.client import GoogleAuthClient
from aistudio.environments.google.auth.schemas import (
    GENERATIVE_LANGUAGE_SCOPES,
    GoogleTokenResponse,
    GoogleUserInfo,
)

__all__ = [
    "GoogleAuthClient",
    "GoogleTokenResponse",
    "GoogleUserInfo",
    "GENERATIVE_LANGUAGE_SCOPES",
]
