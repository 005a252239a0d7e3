"""
Auth router - signup, login and the current user.
These are public endpoints except /auth/me.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from aistudio.core.config import settings
from aistudio.core.security import create_access_token, hash_password, verify_password
from aistudio.db.session import get_db
from aistudio.deps import get_current_user
from aistudio.models.tenant import Tenant
from aistudio.models.user import User
from aistudio.schemas.auth import TenantRegister, Token, UserLogin, UserOut

router = APIRouter(prefix="/auth", tags=["auth"])


# ---------------------------------------------------------------------------
# POST /auth/register - Create a business and its first user
# ---------------------------------------------------------------------------
@router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def register(payload: TenantRegister, db: Session = Depends(get_db)):
    """
    Register a new tenant together with its owner account.

    New tenants are licensed for AI Studio out of the box.

    Raises:
        400 Bad Request: If email is already registered
    """
    existing = db.query(User).filter(User.email == payload.email).first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )

    tenant = Tenant(
        name=payload.business_name,
        email=payload.email,
        licensed_modules=[settings.AI_STUDIO_MODULE],
    )
    db.add(tenant)
    db.flush()

    user = User(
        tenant_id=tenant.id,
        email=payload.email,
        hashed_password=hash_password(payload.password),
        display_name=payload.display_name,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


# ---------------------------------------------------------------------------
# POST /auth/login - Authenticate and get a JWT token
# ---------------------------------------------------------------------------
@router.post("/login", response_model=Token)
def login(payload: UserLogin, db: Session = Depends(get_db)):
    """
    Raises:
        401 Unauthorized: If email doesn't exist or password is wrong
        403 Forbidden: If the account is deactivated
    """
    user = db.query(User).filter(User.email == payload.email).first()

    # Same message for both cases so emails can't be enumerated
    if not user or not verify_password(payload.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive",
        )

    return Token(access_token=create_access_token(subject=str(user.id)))


@router.get("/me", response_model=UserOut)
def me(user: User = Depends(get_current_user)):
    return user
