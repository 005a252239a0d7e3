"""
Auth schemas - signup, login and the current user.

Signup creates a tenant (the business) together with its first user.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field

from aistudio.schemas.base import APIModel


class TenantRegister(APIModel):
    """
    Schema for POST /auth/register request body.

    Example request body:
    {
        "email": "owner@acme.in",
        "password": "securePassword123",
        "displayName": "Priya",
        "businessName": "Acme Traders"
    }
    """
    email: EmailStr
    password: str = Field(..., min_length=8)
    display_name: Optional[str] = Field(None, alias="displayName", max_length=100)
    business_name: str = Field(..., alias="businessName", min_length=1, max_length=255)


class UserLogin(APIModel):
    email: EmailStr
    password: str


class Token(APIModel):
    """
    Schema for POST /auth/login response.

    Clients send it back as: Authorization: Bearer <access_token>
    """
    access_token: str
    token_type: str = "bearer"


class UserOut(APIModel):
    """User data in API responses. Never includes the password hash."""
    id: uuid.UUID
    tenant_id: uuid.UUID = Field(..., alias="tenantId")
    email: EmailStr
    display_name: Optional[str] = Field(None, alias="displayName")
    is_active: bool = Field(..., alias="isActive")
    created_at: datetime = Field(..., alias="createdAt")
