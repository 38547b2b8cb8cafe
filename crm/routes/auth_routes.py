from typing import Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from crm.database import get_db
from crm.dependencies import resolve_tenant, optional_tenant
from crm.models.tenant import Tenant
from crm.services.auth_service import AuthService
from crm.schemas.auth_schemas import (
    LoginRequest,
    RegisterRequest,
    CreateTenantRequest,
    AuthResponse,
)
from crm.core.exceptions import ValidationException

router = APIRouter()


@router.post("/create-tenant", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def create_tenant(data: CreateTenantRequest, db: Session = Depends(get_db)):
    """
    Create a tenant together with its first ADMIN user.

    - No tenant headers or token required
    - Tenant and admin are created atomically
    - Returns a token for the new admin
    """
    service = AuthService(db)
    return service.create_tenant(data)


@router.post("/login", response_model=AuthResponse)
def login(
    data: LoginRequest,
    tenant: Optional[Tenant] = Depends(optional_tenant),
    db: Session = Depends(get_db),
):
    """
    Sign in with e-mail and password.

    Tenant headers are optional; when present, only users of that tenant
    can sign in. The issued token is bound to the user's tenant.
    """
    service = AuthService(db)
    return service.login(data, tenant)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    data: RegisterRequest,
    tenant: Tenant = Depends(resolve_tenant),
    db: Session = Depends(get_db),
):
    """
    Register a USER in the tenant named by the request headers.

    - tenantId in the body must match the resolved tenant
    - E-mail must be unused within the tenant
    """
    if data.tenant_id != tenant.id:
        raise ValidationException("tenantId does not match the requested tenant")

    service = AuthService(db)
    return service.register(data)
