"""
Test configuration and fixtures for pytest.

This module provides shared fixtures used across all tests:
- Test database (SQLite in-memory for speed)
- Test client (FastAPI TestClient) with the job dispatcher bound to the test DB
- Tenants, users and authentication helpers
- Business data factories for the chat and insights tests
"""

import pytest
from datetime import datetime, timedelta, timezone
from typing import Generator
from uuid import uuid4

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from aistudio.main import app
from aistudio.db.base import Base
from aistudio.db.session import get_db
from aistudio.models import calls, commerce, crm, integration, media, usage, website  # noqa: F401
from aistudio.models.commerce import Invoice
from aistudio.models.crm import Contact
from aistudio.models.tenant import Tenant
from aistudio.models.user import User
from aistudio.core.security import hash_password, create_access_token
from aistudio.services.job_queue import JobDispatcher, get_job_dispatcher


# ---------------------------------------------------------------------------
# TEST DATABASE SETUP
# ---------------------------------------------------------------------------
# SQLite in-memory, no PostgreSQL needed.
# StaticPool keeps the same connection across all operations, so the job
# dispatcher's own sessions see the rows the test wrote.

SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

ENCRYPTION_KEY = "0123456789abcdef" * 4


# ---------------------------------------------------------------------------
# DATABASE FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Fresh schema per test; dropped afterwards."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def dispatcher() -> JobDispatcher:
    """A job dispatcher whose jobs write to the test database. Tests drain it by hand."""
    return JobDispatcher(max_size=100, session_factory=TestingSessionLocal)


@pytest.fixture(scope="function")
def client(db: Session, dispatcher: JobDispatcher) -> Generator[TestClient, None, None]:
    """
    Test client using the test database and the test dispatcher.
    """
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_job_dispatcher] = lambda: dispatcher

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def encryption_key(monkeypatch) -> str:
    """Configure a valid 32-byte ENCRYPTION_KEY for the test."""
    from aistudio.core.config import settings
    monkeypatch.setattr(settings, "ENCRYPTION_KEY", ENCRYPTION_KEY)
    return ENCRYPTION_KEY


# ---------------------------------------------------------------------------
# TENANT / USER FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture
def test_tenant(db: Session) -> Tenant:
    """A business licensed for AI Studio."""
    tenant = Tenant(
        id=uuid4(),
        name="Acme Traders",
        city="Pune",
        state="Maharashtra",
        email="owner@acme.in",
        licensed_modules=["ai-studio", "crm"],
    )
    db.add(tenant)
    db.commit()
    db.refresh(tenant)
    return tenant


@pytest.fixture
def test_user(db: Session, test_tenant: Tenant) -> User:
    """
    Returns:
        User "test@example.com" / "testpassword" in test_tenant
    """
    user = User(
        id=uuid4(),
        tenant_id=test_tenant.id,
        email="test@example.com",
        hashed_password=hash_password("testpassword"),
        display_name="Test User",
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def test_user_token(test_user: User) -> str:
    return create_access_token(subject=str(test_user.id))


@pytest.fixture
def auth_headers(test_user_token: str) -> dict:
    return {"Authorization": f"Bearer {test_user_token}"}


@pytest.fixture
def other_tenant(db: Session) -> Tenant:
    """A second licensed business, for isolation checks."""
    tenant = Tenant(id=uuid4(), name="Globex Corp", licensed_modules=["ai-studio"])
    db.add(tenant)
    db.commit()
    db.refresh(tenant)
    return tenant


@pytest.fixture
def unlicensed_headers(db: Session) -> dict:
    """Auth headers for a user whose tenant has no AI Studio license."""
    tenant = Tenant(id=uuid4(), name="Basic Plan Ltd", licensed_modules=["crm"])
    db.add(tenant)
    db.flush()
    user = User(
        id=uuid4(),
        tenant_id=tenant.id,
        email="basic@example.com",
        hashed_password=hash_password("testpassword"),
    )
    db.add(user)
    db.commit()
    return {"Authorization": f"Bearer {create_access_token(subject=str(user.id))}"}


# ---------------------------------------------------------------------------
# BUSINESS DATA FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture
def overdue_invoice(db: Session, test_tenant: Tenant) -> Invoice:
    """One overdue invoice from a customer; no tasks, deals or products."""
    customer = Contact(id=uuid4(), tenant_id=test_tenant.id, name="Ravi Kumar", type="customer")
    db.add(customer)
    db.flush()
    invoice = Invoice(
        id=uuid4(),
        tenant_id=test_tenant.id,
        customer_id=customer.id,
        invoice_number="INV-1001",
        total=25000.0,
        status="overdue",
        due_date=datetime.now(timezone.utc) - timedelta(days=10),
    )
    db.add(invoice)
    db.commit()
    db.refresh(invoice)
    return invoice
