"""
Logo schemas.
"""

import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from aistudio.schemas.base import APIModel

LogoStyle = Literal["modern", "traditional", "playful", "elegant", "minimal", "bold"]


class LogoCreate(APIModel):
    business_name: str = Field(..., alias="businessName", min_length=1, max_length=255)
    industry: Optional[str] = None
    style: LogoStyle = "modern"
    colors: Optional[List[str]] = None


class LogoVariationOut(APIModel):
    id: uuid.UUID
    image_url: str = Field(..., alias="imageUrl")
    thumbnail_url: Optional[str] = Field(None, alias="thumbnailUrl")
    icon_style: Optional[str] = Field(None, alias="iconStyle")
    is_selected: bool = Field(..., alias="isSelected")
    created_at: datetime = Field(..., alias="createdAt")


class LogoOut(APIModel):
    id: uuid.UUID
    business_name: str = Field(..., alias="businessName")
    industry: Optional[str] = None
    style: str
    colors: List[str] = []
    prompt: Optional[str] = None
    status: str
    error: Optional[str] = None
    created_at: datetime = Field(..., alias="createdAt")
    variations: List[LogoVariationOut] = []
    variation_count: int = Field(0, alias="variationCount")


class LogoList(APIModel):
    logos: List[LogoOut]
