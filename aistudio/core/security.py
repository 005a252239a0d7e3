"""
Security utilities - password hashing, JWT access tokens and signed OAuth state.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from aistudio.core.config import settings

# ---------------------------------------------------------------------------
# PASSWORD HASHING CONTEXT
# ---------------------------------------------------------------------------
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """Hash a plaintext password using bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plaintext password against a stored hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(subject: str, expires_delta: timedelta | None = None) -> str:
    """
    Create a JWT access token.

    Args:
        subject: The token's subject claim - the user's ID
        expires_delta: Optional custom expiration time
                      If None, uses ACCESS_TOKEN_EXPIRE_MINUTES from settings

    Returns:
        A signed JWT string
    """
    expire = datetime.now(timezone.utc) + (
        expires_delta
        if expires_delta
        else timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode = {"sub": subject, "exp": expire}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


# ---------------------------------------------------------------------------
# OAUTH STATE
# ---------------------------------------------------------------------------
# The OAuth "state" round-trips through Google. Signing it means the callback
# can trust the tenant id inside without any server-side storage.

OAUTH_STATE_PURPOSE = "google-ai-studio"


def create_oauth_state(tenant_id: str, expires_minutes: int = 15) -> str:
    """Create a short-lived signed state token carrying the tenant id."""
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    payload = {"tenant_id": tenant_id, "purpose": OAUTH_STATE_PURPOSE, "exp": expire}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def read_oauth_state(state: str) -> Optional[str]:
    """
    Verify a state token and return the tenant id inside it.

    Returns:
        The tenant id, or None if the state is forged, expired or malformed
    """
    try:
        payload = jwt.decode(state, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    if payload.get("purpose") != OAUTH_STATE_PURPOSE:
        return None
    return payload.get("tenant_id")
