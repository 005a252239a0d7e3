"""
Dependencies module - reusable FastAPI dependencies for route handlers.

get_current_user validates the JWT; require_module_access builds on it and
checks that the user's tenant is licensed for a module, yielding a
TenantContext every tenant-scoped route works from.
"""

import uuid
from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from aistudio.ai.providers.gateway import AIGatewayClient
from aistudio.core.config import settings
from aistudio.core.errors import LicenseError
from aistudio.db.session import get_db
from aistudio.models.tenant import Tenant
from aistudio.models.user import User

# ---------------------------------------------------------------------------
# SECURITY SCHEME
# ---------------------------------------------------------------------------
# HTTPBearer extracts "Authorization: Bearer <token>" and rejects requests
# without it before any route code runs.
security = HTTPBearer()


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """
    Validate the JWT and return the authenticated user.

    Raises:
        401 Unauthorized: Token missing, invalid or expired, or user not found
        403 Forbidden: User account is deactivated
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(
            credentials.credentials, settings.SECRET_KEY, algorithms=[settings.ALGORITHM]
        )
        user_id: str | None = payload.get("sub")
        if user_id is None:
            raise credentials_exception
    except JWTError:
        raise credentials_exception

    try:
        uid = uuid.UUID(user_id)
    except ValueError:
        raise credentials_exception

    user = db.query(User).filter(User.id == uid).first()
    if user is None:
        raise credentials_exception

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive",
        )

    return user


def get_bearer_token(credentials: HTTPAuthorizationCredentials = Depends(security)) -> str:
    """The caller's raw bearer token, for services that expect it forwarded."""
    return credentials.credentials


def get_gateway_client(token: str = Depends(get_bearer_token)) -> AIGatewayClient:
    """AI gateway client that authenticates as the calling user."""
    return AIGatewayClient(token=token)


# ---------------------------------------------------------------------------
# MODULE LICENSING
# ---------------------------------------------------------------------------


@dataclass
class TenantContext:
    """The resolved identity of a request: who is asking, for which business."""
    tenant: Tenant
    user: User

    @property
    def tenant_id(self) -> uuid.UUID:
        return self.tenant.id

    @property
    def user_id(self) -> uuid.UUID:
        return self.user.id


def require_module_access(module_id: str):
    """
    Build a dependency that admits only tenants licensed for `module_id`.

    Usage:
        @router.post("/chat")
        async def chat(ctx: TenantContext = Depends(require_module_access("ai-studio"))):
            ...

    Raises:
        LicenseError (403): The tenant's plan does not include the module
    """

    def dependency(user: User = Depends(get_current_user)) -> TenantContext:
        tenant = user.tenant
        if tenant is None or not tenant.has_module(module_id):
            raise LicenseError(module_id)
        return TenantContext(tenant=tenant, user=user)

    return dependency


def require_ai_studio(user: User = Depends(get_current_user)) -> TenantContext:
    """require_module_access for the configured AI Studio module id."""
    return require_module_access(settings.AI_STUDIO_MODULE)(user)
