"""
Website builder schemas - sites and their pages.

Subdomains are lowercase letters, digits and hyphens. Page paths always
start with "/".
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from aistudio.schemas.base import APIModel

WebsiteStatus = Literal["DRAFT", "PUBLISHED", "ARCHIVED"]

SUBDOMAIN_PATTERN = r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$"
PAGE_PATH_PATTERN = r"^/[A-Za-z0-9/_-]*$"


class WebsiteCreate(APIModel):
    """
    Example request body:
    {
        "name": "Acme Traders",
        "subdomain": "acme",
        "metaTitle": "Acme Traders - Wholesale spices"
    }
    """
    name: str = Field(..., min_length=1, max_length=255)
    domain: Optional[str] = Field(None, max_length=255)
    subdomain: Optional[str] = Field(None, pattern=SUBDOMAIN_PATTERN)
    meta_title: Optional[str] = Field(None, alias="metaTitle", max_length=255)
    meta_description: Optional[str] = Field(None, alias="metaDescription", max_length=500)


class WebsiteUpdate(APIModel):
    """All fields optional - only provided fields are updated."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    domain: Optional[str] = Field(None, max_length=255)
    subdomain: Optional[str] = Field(None, pattern=SUBDOMAIN_PATTERN)
    meta_title: Optional[str] = Field(None, alias="metaTitle", max_length=255)
    meta_description: Optional[str] = Field(None, alias="metaDescription", max_length=500)
    status: Optional[WebsiteStatus] = None


class PageCreate(APIModel):
    path: str = Field(..., pattern=PAGE_PATH_PATTERN, max_length=255)
    title: str = Field(..., min_length=1, max_length=255)
    content: Optional[Dict[str, Any]] = None


class PageUpdate(APIModel):
    path: Optional[str] = Field(None, pattern=PAGE_PATH_PATTERN, max_length=255)
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[Dict[str, Any]] = None
    is_published: Optional[bool] = Field(None, alias="isPublished")


class PageOut(APIModel):
    id: uuid.UUID
    website_id: uuid.UUID = Field(..., alias="websiteId")
    path: str
    title: str
    content: Optional[Dict[str, Any]] = None
    is_published: bool = Field(..., alias="isPublished")
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")


class WebsiteOut(APIModel):
    id: uuid.UUID
    name: str
    domain: Optional[str] = None
    subdomain: Optional[str] = None
    status: str
    tracking_code: str = Field(..., alias="trackingCode")
    meta_title: Optional[str] = Field(None, alias="metaTitle")
    meta_description: Optional[str] = Field(None, alias="metaDescription")
    visit_count: int = Field(0, alias="visitCount")
    session_count: int = Field(0, alias="sessionCount")
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")
    pages: List[PageOut] = []


class WebsiteList(APIModel):
    websites: List[WebsiteOut]
