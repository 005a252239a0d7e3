"""
Websites Router - the website builder.

Endpoints:
==========
- GET    /api/websites                          -> {"websites": [...]}
- POST   /api/websites                          -> create (201), tracking code generated
- GET    /api/websites/{id}
- PATCH  /api/websites/{id}                     -> partial update
- DELETE /api/websites/{id}                     -> 204, pages go with it
- POST   /api/websites/{id}/pages               -> add a page (201)
- PATCH  /api/websites/{id}/pages/{pageId}
- DELETE /api/websites/{id}/pages/{pageId}      -> 204

Subdomains are unique across all tenants; page paths are unique per site.
Either collision is a 400.
"""

import logging
import secrets
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from aistudio.core.errors import NotFoundError, ValidationError
from aistudio.db.session import get_db
from aistudio.deps import TenantContext, require_ai_studio
from aistudio.models.website import Website, WebsitePage
from aistudio.schemas.websites import (
    PageCreate,
    PageOut,
    PageUpdate,
    WebsiteCreate,
    WebsiteList,
    WebsiteOut,
    WebsiteUpdate,
)

logger = logging.getLogger("aistudio.routers.websites")

router = APIRouter(prefix="/api/websites", tags=["websites"])

TRACKING_CODE_PREFIX = "ws_"

# Non-nullable columns; an explicit null in a PATCH body leaves them unchanged
REQUIRED_WEBSITE_FIELDS = ("name", "status")
REQUIRED_PAGE_FIELDS = ("path", "title", "is_published")


def new_tracking_code() -> str:
    return TRACKING_CODE_PREFIX + secrets.token_hex(12)


def _get_website(db: Session, tenant_id: uuid.UUID, website_id: uuid.UUID) -> Website:
    website = (
        db.query(Website)
        .filter(Website.id == website_id, Website.tenant_id == tenant_id)
        .first()
    )
    if website is None:
        raise NotFoundError(error="Website not found")
    return website


def _get_page(db: Session, website: Website, page_id: uuid.UUID) -> WebsitePage:
    page = (
        db.query(WebsitePage)
        .filter(WebsitePage.id == page_id, WebsitePage.website_id == website.id)
        .first()
    )
    if page is None:
        raise NotFoundError(error="Page not found")
    return page


def _check_subdomain(db: Session, subdomain: Optional[str], exclude_id: Optional[uuid.UUID] = None) -> None:
    if not subdomain:
        return
    query = db.query(Website).filter(Website.subdomain == subdomain)
    if exclude_id is not None:
        query = query.filter(Website.id != exclude_id)
    if query.first() is not None:
        raise ValidationError(error="Subdomain already taken")


def _check_domain(db: Session, domain: Optional[str], exclude_id: Optional[uuid.UUID] = None) -> None:
    if not domain:
        return
    query = db.query(Website).filter(Website.domain == domain)
    if exclude_id is not None:
        query = query.filter(Website.id != exclude_id)
    if query.first() is not None:
        raise ValidationError(error="Domain already in use")


def _check_path(db: Session, website: Website, path: str, exclude_id: Optional[uuid.UUID] = None) -> None:
    query = db.query(WebsitePage).filter(
        WebsitePage.website_id == website.id,
        WebsitePage.path == path,
    )
    if exclude_id is not None:
        query = query.filter(WebsitePage.id != exclude_id)
    if query.first() is not None:
        raise ValidationError(error="A page with this path already exists")


# ---------------------------------------------------------------------------
# WEBSITES
# ---------------------------------------------------------------------------


@router.get("", response_model=WebsiteList)
def list_websites(
    ctx: TenantContext = Depends(require_ai_studio),
    db: Session = Depends(get_db),
):
    websites = (
        db.query(Website)
        .filter(Website.tenant_id == ctx.tenant_id)
        .order_by(Website.created_at.desc())
        .all()
    )
    return WebsiteList(websites=[WebsiteOut.model_validate(w) for w in websites])


@router.post("", response_model=WebsiteOut, status_code=status.HTTP_201_CREATED)
def create_website(
    payload: WebsiteCreate,
    ctx: TenantContext = Depends(require_ai_studio),
    db: Session = Depends(get_db),
):
    _check_subdomain(db, payload.subdomain)
    _check_domain(db, payload.domain)

    website = Website(
        tenant_id=ctx.tenant_id,
        name=payload.name,
        domain=payload.domain,
        subdomain=payload.subdomain,
        meta_title=payload.meta_title,
        meta_description=payload.meta_description,
        status="DRAFT",
        tracking_code=new_tracking_code(),
    )
    db.add(website)
    db.commit()
    db.refresh(website)
    logger.info(f"Website {website.id} created for tenant {ctx.tenant_id}")
    return website


@router.get("/{website_id}", response_model=WebsiteOut)
def get_website(
    website_id: uuid.UUID,
    ctx: TenantContext = Depends(require_ai_studio),
    db: Session = Depends(get_db),
):
    return _get_website(db, ctx.tenant_id, website_id)


@router.patch("/{website_id}", response_model=WebsiteOut)
def update_website(
    website_id: uuid.UUID,
    payload: WebsiteUpdate,
    ctx: TenantContext = Depends(require_ai_studio),
    db: Session = Depends(get_db),
):
    """Only fields present in the body are changed."""
    website = _get_website(db, ctx.tenant_id, website_id)
    changes = payload.model_dump(exclude_unset=True)

    if "subdomain" in changes:
        _check_subdomain(db, changes["subdomain"], exclude_id=website.id)
    if "domain" in changes:
        _check_domain(db, changes["domain"], exclude_id=website.id)

    for field, value in changes.items():
        if value is None and field in REQUIRED_WEBSITE_FIELDS:
            continue
        setattr(website, field, value)

    db.commit()
    db.refresh(website)
    return website


@router.delete("/{website_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_website(
    website_id: uuid.UUID,
    ctx: TenantContext = Depends(require_ai_studio),
    db: Session = Depends(get_db),
):
    website = _get_website(db, ctx.tenant_id, website_id)
    db.delete(website)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------------
# PAGES
# ---------------------------------------------------------------------------


@router.post("/{website_id}/pages", response_model=PageOut, status_code=status.HTTP_201_CREATED)
def create_page(
    website_id: uuid.UUID,
    payload: PageCreate,
    ctx: TenantContext = Depends(require_ai_studio),
    db: Session = Depends(get_db),
):
    website = _get_website(db, ctx.tenant_id, website_id)
    _check_path(db, website, payload.path)

    page = WebsitePage(
        website_id=website.id,
        path=payload.path,
        title=payload.title,
        content=payload.content,
    )
    db.add(page)
    db.commit()
    db.refresh(page)
    return page


@router.patch("/{website_id}/pages/{page_id}", response_model=PageOut)
def update_page(
    website_id: uuid.UUID,
    page_id: uuid.UUID,
    payload: PageUpdate,
    ctx: TenantContext = Depends(require_ai_studio),
    db: Session = Depends(get_db),
):
    website = _get_website(db, ctx.tenant_id, website_id)
    page = _get_page(db, website, page_id)
    changes = payload.model_dump(exclude_unset=True)

    if changes.get("path"):
        _check_path(db, website, changes["path"], exclude_id=page.id)

    for field, value in changes.items():
        if value is None and field in REQUIRED_PAGE_FIELDS:
            continue
        setattr(page, field, value)

    db.commit()
    db.refresh(page)
    return page


@router.delete("/{website_id}/pages/{page_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_page(
    website_id: uuid.UUID,
    page_id: uuid.UUID,
    ctx: TenantContext = Depends(require_ai_studio),
    db: Session = Depends(get_db),
):
    website = _get_website(db, ctx.tenant_id, website_id)
    page = _get_page(db, website, page_id)
    db.delete(page)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
