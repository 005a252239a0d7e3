"""
Tests for the website builder endpoints (/api/websites).
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from aistudio.models.tenant import Tenant
from aistudio.models.website import Website, WebsitePage
from aistudio.routers.websites import new_tracking_code


@pytest.fixture
def website(client: TestClient, auth_headers: dict) -> dict:
    response = client.post(
        "/api/websites",
        json={"name": "Acme Home", "subdomain": "acme", "metaTitle": "Acme Traders"},
        headers=auth_headers,
    )
    assert response.status_code == 201
    return response.json()


class TestWebsites:
    """Website CRUD."""

    def test_create_defaults(self, website: dict):
        assert website["name"] == "Acme Home"
        assert website["status"] == "DRAFT"
        assert website["trackingCode"].startswith("ws_")
        assert website["metaTitle"] == "Acme Traders"

    def test_tracking_codes_are_unique(self):
        assert new_tracking_code() != new_tracking_code()

    def test_duplicate_subdomain_rejected(self, client: TestClient, auth_headers: dict, website: dict):
        response = client.post(
            "/api/websites",
            json={"name": "Another", "subdomain": "acme"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Subdomain already taken"

    def test_subdomain_unique_across_tenants(
        self, client: TestClient, auth_headers: dict, db: Session, other_tenant: Tenant
    ):
        db.add(Website(tenant_id=other_tenant.id, name="Globex", subdomain="globex", tracking_code="ws_other"))
        db.commit()

        response = client.post(
            "/api/websites",
            json={"name": "Mine", "subdomain": "globex"},
            headers=auth_headers,
        )
        assert response.status_code == 400

    def test_list_only_own_sites(
        self, client: TestClient, auth_headers: dict, db: Session, other_tenant: Tenant, website: dict
    ):
        db.add(Website(tenant_id=other_tenant.id, name="Globex", tracking_code="ws_other"))
        db.commit()

        sites = client.get("/api/websites", headers=auth_headers).json()["websites"]
        assert [s["name"] for s in sites] == ["Acme Home"]

    def test_partial_update(self, client: TestClient, auth_headers: dict, website: dict):
        response = client.patch(
            f"/api/websites/{website['id']}",
            json={"status": "PUBLISHED", "name": None},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "PUBLISHED"
        assert data["name"] == "Acme Home"
        assert data["subdomain"] == "acme"

    def test_update_to_own_subdomain_allowed(self, client: TestClient, auth_headers: dict, website: dict):
        response = client.patch(
            f"/api/websites/{website['id']}",
            json={"subdomain": "acme"},
            headers=auth_headers,
        )
        assert response.status_code == 200

    def test_other_tenant_site_is_404(
        self, client: TestClient, auth_headers: dict, db: Session, other_tenant: Tenant
    ):
        site = Website(tenant_id=other_tenant.id, name="Globex", tracking_code="ws_other")
        db.add(site)
        db.commit()

        response = client.get(f"/api/websites/{site.id}", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["error"] == "Website not found"

    def test_delete_removes_pages(self, client: TestClient, auth_headers: dict, db: Session, website: dict):
        client.post(
            f"/api/websites/{website['id']}/pages",
            json={"path": "/", "title": "Home"},
            headers=auth_headers,
        )

        response = client.delete(f"/api/websites/{website['id']}", headers=auth_headers)

        assert response.status_code == 204
        assert db.query(Website).count() == 0
        assert db.query(WebsitePage).count() == 0


class TestPages:
    """Page CRUD under a website."""

    def test_add_page(self, client: TestClient, auth_headers: dict, website: dict):
        response = client.post(
            f"/api/websites/{website['id']}/pages",
            json={"path": "/about", "title": "About us", "content": {"blocks": [{"type": "text"}]}},
            headers=auth_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["path"] == "/about"
        assert data["isPublished"] is False
        assert data["content"] == {"blocks": [{"type": "text"}]}

    def test_duplicate_path_rejected(self, client: TestClient, auth_headers: dict, website: dict):
        url = f"/api/websites/{website['id']}/pages"
        client.post(url, json={"path": "/about", "title": "About"}, headers=auth_headers)
        response = client.post(url, json={"path": "/about", "title": "About again"}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error"] == "A page with this path already exists"

    def test_update_and_delete_page(self, client: TestClient, auth_headers: dict, website: dict):
        url = f"/api/websites/{website['id']}/pages"
        page = client.post(url, json={"path": "/about", "title": "About"}, headers=auth_headers).json()

        updated = client.patch(
            f"{url}/{page['id']}",
            json={"isPublished": True, "title": "About Acme"},
            headers=auth_headers,
        )
        assert updated.status_code == 200
        assert updated.json()["isPublished"] is True
        assert updated.json()["title"] == "About Acme"

        deleted = client.delete(f"{url}/{page['id']}", headers=auth_headers)
        assert deleted.status_code == 204

        missing = client.patch(f"{url}/{page['id']}", json={"title": "x"}, headers=auth_headers)
        assert missing.status_code == 404
        assert missing.json()["error"] == "Page not found"
