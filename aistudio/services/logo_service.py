"""
Logo Service - generates logo variations through the image service.

A logo is created in GENERATING state, then one image is generated per
icon style. All variations succeed -> COMPLETED. The first failure marks
the logo FAILED, stores the error and re-raises it to the caller.
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from aistudio.core.errors import AppError, NotFoundError
from aistudio.models.media import Logo, LogoVariation
from aistudio.models.tenant import Tenant
from aistudio.services.image_service import ImageService

logger = logging.getLogger("aistudio.services.logo")

LOGO_STYLES = ("modern", "traditional", "playful", "elegant", "minimal", "bold")

LOGO_STYLE_DESCRIPTIONS = {
    "modern": "clean lines, contemporary geometric shapes",
    "traditional": "classic, timeless, heritage feel",
    "playful": "fun, rounded shapes, friendly",
    "elegant": "refined, sophisticated, graceful typography",
    "minimal": "minimal, flat, lots of negative space",
    "bold": "strong, high-contrast, impactful",
}

ICON_STYLES = ("icon", "wordmark", "emblem")


def build_logo_prompt(
    business_name: str,
    style: str,
    industry: Optional[str] = None,
    colors: Optional[List[str]] = None,
    icon_style: Optional[str] = None,
) -> str:
    parts = [f'Professional logo for "{business_name}"']
    if industry:
        parts.append(f"a {industry} business")
    parts.append(LOGO_STYLE_DESCRIPTIONS.get(style, style))
    if colors:
        parts.append(f"color palette: {', '.join(colors)}")
    if icon_style:
        parts.append(f"{icon_style} logo")
    parts.append("vector style, white background")
    return ", ".join(parts)


class LogoService:
    def __init__(self, db: Session, images: ImageService):
        self.db = db
        self.images = images

    async def create(
        self,
        tenant: Tenant,
        business_name: str,
        style: str = "modern",
        industry: Optional[str] = None,
        colors: Optional[List[str]] = None,
        user_id: Optional[UUID] = None,
    ) -> Logo:
        logo = Logo(
            tenant_id=tenant.id,
            business_name=business_name,
            industry=industry,
            style=style,
            colors=colors or [],
            prompt=build_logo_prompt(business_name, style, industry, colors),
            status="GENERATING",
        )
        self.db.add(logo)
        self.db.commit()
        self.db.refresh(logo)

        try:
            for icon_style in ICON_STYLES:
                result = await self.images.generate(
                    tenant,
                    build_logo_prompt(business_name, style, industry, colors, icon_style),
                    provider="auto",
                    user_id=user_id,
                    feature="logo",
                )
                self.db.add(LogoVariation(
                    logo_id=logo.id,
                    image_url=result.image_url,
                    icon_style=icon_style,
                ))
        except AppError as e:
            logger.error(f"Logo generation failed for {logo.id}: {e}")
            logo.status = "FAILED"
            logo.error = e.message or e.error
            self.db.commit()
            e.extra["logoId"] = str(logo.id)
            raise

        logo.status = "COMPLETED"
        self.db.commit()
        self.db.refresh(logo)
        return logo

    def get(self, tenant_id: UUID, logo_id: UUID) -> Logo:
        logo = (
            self.db.query(Logo)
            .filter(Logo.id == logo_id, Logo.tenant_id == tenant_id)
            .first()
        )
        if logo is None:
            raise NotFoundError(error="Logo not found")
        return logo

    def select_variation(self, tenant_id: UUID, logo_id: UUID, variation_id: UUID) -> Logo:
        """Mark exactly one variation as selected."""
        logo = self.get(tenant_id, logo_id)
        if not any(v.id == variation_id for v in logo.variations):
            raise NotFoundError(error="Variation not found")
        for variation in logo.variations:
            variation.is_selected = variation.id == variation_id
        self.db.commit()
        self.db.refresh(logo)
        return logo
