import pytest
from sqlalchemy.exc import IntegrityError

from crm.core.exceptions import ConflictException, UnauthorizedException
from crm.core.security import decode_jwt
from crm.models.role import UserRole
from crm.models.tenant import Tenant
from crm.models.user import User
from crm.repositories.user_repository import UserRepository
from crm.schemas.auth_schemas import CreateTenantRequest, RegisterRequest
from crm.services.auth_service import AuthService
from tests.conftest import PASSWORD, make_tenant, make_user

TENANT_PAYLOAD = {
    "name": "Gamma Co",
    "subdomain": "gamma",
    "adminEmail": "owner@gamma.com",
    "adminPassword": "secret123",
    "adminFirstName": "Gina",
    "adminLastName": "Gamma",
}


class TestCreateTenant:
    """Tests for POST /api/auth/create-tenant"""

    def test_create_tenant_returns_admin_token(self, client, db_session):
        """Bootstrap creates tenant + ADMIN and signs the admin in"""
        response = client.post("/api/auth/create-tenant", json=TENANT_PAYLOAD)

        assert response.status_code == 201
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["user"]["email"] == "owner@gamma.com"
        assert data["user"]["role"] == UserRole.ADMIN
        assert data["user"]["tenant"]["subdomain"] == "gamma"
        assert data["user"]["tenant"]["plan"] == "free"
        assert data["user"]["tenant"]["isActive"] is True

        claims = decode_jwt(data["access_token"])
        assert claims["sub"] == data["user"]["id"]
        assert claims["tenantId"] == data["user"]["tenant"]["id"]

    def test_create_tenant_needs_no_headers_or_token(self, client):
        """Bootstrap is exempt from tenant resolution and authentication"""
        response = client.post(
            "/api/auth/create-tenant",
            json={**TENANT_PAYLOAD, "plan": "pro"},
            headers={"x-tenant-id": "does-not-exist"},
        )

        assert response.status_code == 201
        assert response.json()["user"]["tenant"]["plan"] == "pro"

    def test_subdomain_is_normalized(self, client):
        response = client.post(
            "/api/auth/create-tenant", json={**TENANT_PAYLOAD, "subdomain": "  Gamma "}
        )

        assert response.status_code == 201
        assert response.json()["user"]["tenant"]["subdomain"] == "gamma"

    def test_invalid_subdomain_rejected(self, client):
        response = client.post(
            "/api/auth/create-tenant", json={**TENANT_PAYLOAD, "subdomain": "bad_sub.domain"}
        )

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    def test_duplicate_subdomain_conflict(self, client, db_session, tenant_a):
        response = client.post(
            "/api/auth/create-tenant", json={**TENANT_PAYLOAD, "subdomain": "acme"}
        )

        assert response.status_code == 409
        assert response.json()["error"] == "conflict"
        assert db_session.query(Tenant).count() == 1

    def test_admin_email_used_in_any_tenant_conflict(self, client, db_session, admin_b):
        """Admin e-mail must be new across all tenants"""
        response = client.post(
            "/api/auth/create-tenant", json={**TENANT_PAYLOAD, "adminEmail": "admin@beta.com"}
        )

        assert response.status_code == 409
        assert db_session.query(Tenant).filter(Tenant.subdomain == "gamma").first() is None

    def test_failed_admin_insert_leaves_no_tenant(self, db_session, monkeypatch):
        """Tenant and admin are written atomically"""

        def failing_add(self, user):
            raise IntegrityError("INSERT INTO users", {}, Exception("duplicate"))

        monkeypatch.setattr(UserRepository, "add", failing_add)
        service = AuthService(db_session)

        with pytest.raises(ConflictException):
            service.create_tenant(CreateTenantRequest(**TENANT_PAYLOAD))

        assert db_session.query(Tenant).count() == 0
        assert db_session.query(User).count() == 0

    def test_unexpected_error_rolls_back_and_propagates(self, db_session, monkeypatch):
        def failing_add(self, user):
            raise RuntimeError("boom")

        monkeypatch.setattr(UserRepository, "add", failing_add)
        service = AuthService(db_session)

        with pytest.raises(RuntimeError):
            service.create_tenant(CreateTenantRequest(**TENANT_PAYLOAD))

        assert db_session.query(Tenant).count() == 0

    def test_tenant_id_not_accepted_in_body(self, client):
        response = client.post(
            "/api/auth/create-tenant", json={**TENANT_PAYLOAD, "tenantId": "forced"}
        )
        assert response.status_code == 400


class TestLogin:
    """Tests for POST /api/auth/login"""

    def test_login_without_tenant_headers(self, client, admin_a, tenant_a):
        response = client.post(
            "/api/auth/login", json={"email": "admin@acme.com", "password": PASSWORD}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["user"]["id"] == admin_a.id
        assert data["user"]["tenant"]["id"] == tenant_a.id
        assert decode_jwt(data["access_token"])["tenantId"] == tenant_a.id

    def test_login_scoped_by_tenant_header(self, client, db_session, tenant_a, tenant_b):
        """Same e-mail in two tenants: the header picks the user"""
        make_user(db_session, tenant_a, "shared@example.com")
        user_in_b = make_user(db_session, tenant_b, "shared@example.com")

        response = client.post(
            "/api/auth/login",
            json={"email": "shared@example.com", "password": PASSWORD},
            headers={"x-tenant-subdomain": "beta"},
        )

        assert response.status_code == 200
        assert response.json()["user"]["id"] == user_in_b.id

    def test_login_into_other_tenant_rejected(self, client, admin_a, tenant_b):
        response = client.post(
            "/api/auth/login",
            json={"email": "admin@acme.com", "password": PASSWORD},
            headers={"x-tenant-id": tenant_b.id},
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid credentials"

    def test_wrong_password_rejected(self, client, admin_a):
        response = client.post(
            "/api/auth/login", json={"email": "admin@acme.com", "password": "wrong-password"}
        )

        assert response.status_code == 401
        assert response.json() == {"error": "unauthorized", "detail": "Invalid credentials"}
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_unknown_email_rejected_with_same_message(self, client, admin_a):
        response = client.post(
            "/api/auth/login", json={"email": "nobody@acme.com", "password": PASSWORD}
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid credentials"

    def test_inactive_user_rejected(self, client, db_session, tenant_a):
        make_user(db_session, tenant_a, "gone@acme.com", is_active=False)

        response = client.post(
            "/api/auth/login", json={"email": "gone@acme.com", "password": PASSWORD}
        )
        assert response.status_code == 401

    def test_user_of_inactive_tenant_rejected(self, client, db_session):
        dormant = make_tenant(db_session, "Dormant", "dormant", is_active=False)
        make_user(db_session, dormant, "someone@dormant.com")

        response = client.post(
            "/api/auth/login", json={"email": "someone@dormant.com", "password": PASSWORD}
        )
        assert response.status_code == 401

    def test_login_with_unknown_tenant_header(self, client, admin_a):
        response = client.post(
            "/api/auth/login",
            json={"email": "admin@acme.com", "password": PASSWORD},
            headers={"x-tenant-id": "missing"},
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid credentials"

    def test_login_with_inactive_tenant_header(self, client, db_session):
        dormant = make_tenant(db_session, "Dormant", "dormant", is_active=False)
        make_user(db_session, dormant, "someone@dormant.com")

        response = client.post(
            "/api/auth/login",
            json={"email": "someone@dormant.com", "password": PASSWORD},
            headers={"x-tenant-subdomain": "dormant"},
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid credentials"


class TestRegister:
    """Tests for POST /api/auth/register"""

    def test_register_user_in_tenant(self, client, db_session, tenant_a):
        response = client.post(
            "/api/auth/register",
            headers={"x-tenant-id": tenant_a.id},
            json={
                "email": "new@acme.com",
                "password": "secret123",
                "firstName": "Nina",
                "lastName": "New",
                "tenantId": tenant_a.id,
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["user"]["role"] == UserRole.USER
        assert data["user"]["tenant"]["id"] == tenant_a.id
        assert decode_jwt(data["access_token"])["tenantId"] == tenant_a.id

        user = db_session.query(User).filter(User.email == "new@acme.com").one()
        assert user.password != "secret123"

    def test_same_email_allowed_in_another_tenant(self, client, admin_a, tenant_b):
        response = client.post(
            "/api/auth/register",
            headers={"x-tenant-subdomain": "beta"},
            json={
                "email": "admin@acme.com",
                "password": "secret123",
                "firstName": "Other",
                "lastName": "Person",
                "tenantId": tenant_b.id,
            },
        )
        assert response.status_code == 201

    def test_duplicate_email_in_tenant_conflict(self, client, admin_a, tenant_a):
        response = client.post(
            "/api/auth/register",
            headers={"x-tenant-id": tenant_a.id},
            json={
                "email": "admin@acme.com",
                "password": "secret123",
                "firstName": "Dup",
                "lastName": "Licate",
                "tenantId": tenant_a.id,
            },
        )
        assert response.status_code == 409

    def test_body_tenant_must_match_header(self, client, tenant_a, tenant_b):
        response = client.post(
            "/api/auth/register",
            headers={"x-tenant-id": tenant_a.id},
            json={
                "email": "sneaky@acme.com",
                "password": "secret123",
                "firstName": "Sneaky",
                "lastName": "Person",
                "tenantId": tenant_b.id,
            },
        )
        assert response.status_code == 400

    def test_register_requires_tenant_headers(self, client, tenant_a):
        response = client.post(
            "/api/auth/register",
            json={
                "email": "new@acme.com",
                "password": "secret123",
                "firstName": "Nina",
                "lastName": "New",
                "tenantId": tenant_a.id,
            },
        )
        assert response.status_code == 404
        assert response.json()["detail"] == "Tenant identifier is required"

    def test_short_password_rejected(self, client, tenant_a):
        response = client.post(
            "/api/auth/register",
            headers={"x-tenant-id": tenant_a.id},
            json={
                "email": "new@acme.com",
                "password": "123",
                "firstName": "Nina",
                "lastName": "New",
                "tenantId": tenant_a.id,
            },
        )
        assert response.status_code == 400


class TestAuthServiceRegister:
    """Service-level checks the tenant gate normally shadows"""

    def _request(self, tenant_id: str, email: str = "new@acme.com"):
        return RegisterRequest(
            email=email,
            password="secret123",
            first_name="Nina",
            last_name="New",
            tenant_id=tenant_id,
        )

    def test_unknown_tenant_unauthorized(self, db_session):
        with pytest.raises(UnauthorizedException):
            AuthService(db_session).register(self._request("missing-tenant"))

    def test_inactive_tenant_unauthorized(self, db_session):
        dormant = make_tenant(db_session, "Dormant", "dormant", is_active=False)

        with pytest.raises(UnauthorizedException):
            AuthService(db_session).register(self._request(dormant.id))

        assert db_session.query(User).count() == 0
