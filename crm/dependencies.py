import logging
from typing import Optional
from fastapi import Depends, Header, Query
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from crm.core.security import decode_jwt
from crm.core.exceptions import ForbiddenException, NotFoundException, UnauthorizedException
from crm.database import get_db
from crm.models.tenant import Tenant
from crm.models.tenant_context import TenantContext
from crm.models.user import User
from crm.repositories.user_repository import UserRepository
from crm.services.tenant_service import TenantService

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def resolve_tenant(
    x_tenant_id: Optional[str] = Header(None, alias="x-tenant-id"),
    x_tenant_subdomain: Optional[str] = Header(None, alias="x-tenant-subdomain"),
    db: Session = Depends(get_db),
) -> Tenant:
    """
    Resolve the active tenant from the x-tenant-id / x-tenant-subdomain headers.

    Raises:
        NotFoundException 404: If no identifier is given, or the tenant is
            unknown or inactive
    """
    return TenantService(db).resolve(x_tenant_id, x_tenant_subdomain)


def optional_tenant(
    x_tenant_id: Optional[str] = Header(None, alias="x-tenant-id"),
    x_tenant_subdomain: Optional[str] = Header(None, alias="x-tenant-subdomain"),
    db: Session = Depends(get_db),
) -> Optional[Tenant]:
    """
    Tenant hint for sign-in.

    A request without tenant headers yields None. An unknown or inactive
    tenant is reported like any other failed sign-in.

    Raises:
        UnauthorizedException 401: If the named tenant cannot be resolved
    """
    if not x_tenant_id and not x_tenant_subdomain:
        return None
    try:
        return TenantService(db).resolve(x_tenant_id, x_tenant_subdomain)
    except NotFoundException:
        raise UnauthorizedException("Invalid credentials")


def get_token_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> dict:
    """
    Validate the bearer token and return its claims.

    Raises:
        UnauthorizedException 401: If the header is missing, or the token is
            malformed, expired or incomplete
    """
    if credentials is None:
        raise UnauthorizedException("Missing bearer token")
    return decode_jwt(credentials.credentials)


def get_current_user(
    claims: dict = Depends(get_token_claims), db: Session = Depends(get_db)
) -> User:
    """
    FastAPI dependency to validate JWT and load the user it names.

    Flow:
    1. Extract token from Authorization: Bearer <token>
    2. Validate signature and expiry using SECRET_KEY
    3. Load the User named by the 'sub' claim
    4. Reject users that no longer exist or were deactivated

    Raises:
        UnauthorizedException 401: If token invalid or user unusable
    """
    user = UserRepository(db).get_by_id(claims["sub"])
    if not user or not user.is_active:
        logger.info("Token for unknown or inactive user %s rejected", claims["sub"])
        raise UnauthorizedException("User not found or inactive")
    return user


def get_tenant_context(
    tenant: Tenant = Depends(resolve_tenant),
    claims: dict = Depends(get_token_claims),
    user: User = Depends(get_current_user),
) -> TenantContext:
    """
    Build the request's TenantContext.

    The tenant is resolved from the headers first; the token must then
    belong to a user of that same tenant.

    Raises:
        NotFoundException 404: If the tenant cannot be resolved
        UnauthorizedException 401: If the token is missing or invalid
        ForbiddenException 403: If the token was issued for another tenant
    """
    if claims["tenantId"] != tenant.id or user.tenant_id != tenant.id:
        logger.warning(
            "User %s of tenant %s attempted access to tenant %s",
            user.id,
            user.tenant_id,
            tenant.id,
        )
        raise ForbiddenException("Token does not belong to this tenant")

    return TenantContext(user=user, tenant=tenant)


class Pagination:
    """Shared page/limit query parameters (1-indexed pages)"""

    def __init__(
        self,
        page: int = Query(1, ge=1, description="Page number"),
        limit: int = Query(10, ge=1, description="Items per page"),
    ):
        self.page = page
        self.limit = limit
