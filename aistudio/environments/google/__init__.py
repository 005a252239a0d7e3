"""
Google Environment Module

google/
├── auth/            # OAuth connection (authorize, callback, refresh)
│   ├── client.py
│   └── schemas.py
└── generative.py    # API-key verification against the Generative Language API

Usage:
    from aistudio.environments.google import GoogleAuthClient, GENERATIVE_LANGUAGE_SCOPES

    auth_client = GoogleAuthClient()
    auth_url = auth_client.get_authorization_url(GENERATIVE_LANGUAGE_SCOPES, state)
"""

from aistudio.environments.google.auth import GENERATIVE_LANGUAGE_SCOPES, GoogleAuthClient
from aistudio.environments.google.generative import GenerativeLanguageClient, looks_like_api_key

__all__ = [
    "GoogleAuthClient",
    "GenerativeLanguageClient",
    "GENERATIVE_LANGUAGE_SCOPES",
    "looks_like_api_key",
]
