"""
Tests for signup, login and the current user.
"""

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from aistudio.models.tenant import Tenant
from aistudio.models.user import User


class TestRegister:
    """Tests for POST /auth/register."""

    def test_creates_licensed_tenant(self, client: TestClient, db: Session):
        response = client.post(
            "/auth/register",
            json={
                "email": "priya@chaipoint.in",
                "password": "securePassword123",
                "displayName": "Priya",
                "businessName": "Chai Point",
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["email"] == "priya@chaipoint.in"
        assert data["displayName"] == "Priya"
        assert "hashed_password" not in data

        tenant = db.query(Tenant).filter(Tenant.name == "Chai Point").one()
        assert str(tenant.id) == data["tenantId"]
        assert tenant.has_module("ai-studio")

    def test_duplicate_email(self, client: TestClient, test_user: User):
        response = client.post(
            "/auth/register",
            json={"email": "test@example.com", "password": "anotherPass1", "businessName": "Dup"},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Email already registered"

    def test_short_password_rejected(self, client: TestClient, db: Session):
        response = client.post(
            "/auth/register",
            json={"email": "new@example.com", "password": "short", "businessName": "Shop"},
        )
        assert response.status_code == 422


class TestLogin:
    """Tests for POST /auth/login."""

    def test_login_returns_token(self, client: TestClient, test_user: User):
        response = client.post("/auth/login", json={"email": "test@example.com", "password": "testpassword"})

        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"

        me = client.get("/auth/me", headers={"Authorization": f"Bearer {data['access_token']}"})
        assert me.status_code == 200
        assert me.json()["id"] == str(test_user.id)

    def test_wrong_password(self, client: TestClient, test_user: User):
        response = client.post("/auth/login", json={"email": "test@example.com", "password": "nope12345"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"

    def test_unknown_email(self, client: TestClient, db: Session):
        response = client.post("/auth/login", json={"email": "ghost@example.com", "password": "whatever1"})
        assert response.status_code == 401

    def test_inactive_account(self, client: TestClient, db: Session, test_user: User):
        test_user.is_active = False
        db.commit()

        response = client.post("/auth/login", json={"email": "test@example.com", "password": "testpassword"})
        assert response.status_code == 403


class TestMe:
    def test_me(self, client: TestClient, auth_headers: dict, test_user: User, test_tenant: Tenant):
        response = client.get("/auth/me", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["email"] == "test@example.com"
        assert data["tenantId"] == str(test_tenant.id)
        assert data["isActive"] is True

    def test_inactive_user_token_rejected(self, client: TestClient, auth_headers: dict, db: Session,
                                          test_user: User):
        test_user.is_active = False
        db.commit()

        response = client.get("/auth/me", headers=auth_headers)
        assert response.status_code == 403
