import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-crm-tests")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from datetime import datetime, timedelta, UTC
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from jose import jwt

from crm.database import get_db
from crm.config import settings
from crm.core.security import hash_password
from crm.models.base import Base
from crm.models.role import UserRole
# Import all model classes to ensure they're registered with SQLAlchemy
from crm.models.tenant import Tenant
from crm.models.user import User
from crm.models.company import Company
from crm.models.contact import Contact
from crm.models.deal import Deal
from crm.models.activity import Activity
from crm.models.note import Note
# Import FastAPI app AFTER model imports
from crm.main import app

PASSWORD = "password123"

# Test database (SQLite in-memory for speed)
# Use StaticPool to ensure all connections share the same in-memory database
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create fresh database for each test"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """FastAPI test client with test database"""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def create_test_token(
    user_id: str,
    tenant_id: str,
    email: str = "test@example.com",
    expired: bool = False,
) -> str:
    """
    Generate JWT token for testing.

    Args:
        user_id: User ID to embed in 'sub' claim
        tenant_id: Tenant ID to embed in 'tenantId' claim
        expired: If True, create expired token

    Returns:
        Encoded JWT token
    """
    if expired:
        exp = datetime.now(UTC) - timedelta(minutes=5)
    else:
        exp = datetime.now(UTC) + timedelta(minutes=15)

    payload = {
        "sub": user_id,
        "email": email,
        "tenantId": tenant_id,
        "exp": exp,
        "iat": datetime.now(UTC),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm="HS256")


def make_tenant(db, name: str, subdomain: str, is_active: bool = True) -> Tenant:
    tenant = Tenant(name=name, subdomain=subdomain, is_active=is_active)
    db.add(tenant)
    db.commit()
    db.refresh(tenant)
    return tenant


def make_user(
    db,
    tenant: Tenant,
    email: str,
    role: UserRole = UserRole.USER,
    first_name: str = "Test",
    last_name: str = "User",
    is_active: bool = True,
) -> User:
    user = User(
        tenant_id=tenant.id,
        email=email,
        password=hash_password(PASSWORD),
        first_name=first_name,
        last_name=last_name,
        role=role,
        is_active=is_active,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def headers_for(user: User, tenant_id: str | None = None) -> dict:
    """Bearer token for `user` addressed to its own tenant (or `tenant_id`)"""
    token = create_test_token(user.id, user.tenant_id, email=user.email)
    return {
        "Authorization": f"Bearer {token}",
        "x-tenant-id": tenant_id or user.tenant_id,
    }


@pytest.fixture
def tenant_a(db_session):
    """Tenant A (subdomain 'acme')"""
    return make_tenant(db_session, "Acme Inc", "acme")


@pytest.fixture
def tenant_b(db_session):
    """Tenant B (subdomain 'beta')"""
    return make_tenant(db_session, "Beta LLC", "beta")


@pytest.fixture
def admin_a(db_session, tenant_a):
    return make_user(db_session, tenant_a, "admin@acme.com", UserRole.ADMIN, "Alice", "Admin")


@pytest.fixture
def user_a(db_session, tenant_a):
    """Regular USER in tenant A"""
    return make_user(db_session, tenant_a, "user@acme.com", UserRole.USER, "Uma", "User")


@pytest.fixture
def manager_a(db_session, tenant_a):
    return make_user(db_session, tenant_a, "manager@acme.com", UserRole.MANAGER, "Max", "Manager")


@pytest.fixture
def admin_b(db_session, tenant_b):
    return make_user(db_session, tenant_b, "admin@beta.com", UserRole.ADMIN, "Bob", "Boss")


@pytest.fixture
def headers_a(admin_a):
    """Authorization + tenant headers for tenant A's admin"""
    return headers_for(admin_a)


@pytest.fixture
def user_headers_a(user_a):
    return headers_for(user_a)


@pytest.fixture
def headers_b(admin_b):
    """Authorization + tenant headers for tenant B's admin"""
    return headers_for(admin_b)


@pytest.fixture
def company_a(client, headers_a):
    """Company 'Acme Corp' created through the API in tenant A"""
    response = client.post("/api/companies", headers=headers_a, json={"name": "Acme Corp"})
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def company_b(client, headers_b):
    response = client.post("/api/companies", headers=headers_b, json={"name": "Beta Corp"})
    assert response.status_code == 201
    return response.json()
