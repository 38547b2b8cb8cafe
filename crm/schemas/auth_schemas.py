from datetime import datetime
from typing import Optional
from pydantic import EmailStr, Field, field_validator

from crm.models.role import UserRole
from crm.schemas.common_schemas import CamelModel, RequestModel

SUBDOMAIN_PATTERN = r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$"


class LoginRequest(RequestModel):
    """Credentials for POST /auth/login"""

    email: EmailStr
    password: str = Field(..., min_length=1)


class RegisterRequest(RequestModel):
    """Self-registration of a USER into an existing tenant"""

    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    tenant_id: str = Field(..., min_length=1)


class CreateTenantRequest(RequestModel):
    """Bootstrap a tenant together with its first ADMIN user"""

    name: str = Field(..., min_length=1, max_length=255)
    subdomain: str = Field(..., min_length=1, max_length=63, pattern=SUBDOMAIN_PATTERN)
    admin_email: EmailStr
    admin_password: str = Field(..., min_length=6, max_length=128)
    admin_first_name: str = Field(..., min_length=1, max_length=100)
    admin_last_name: str = Field(..., min_length=1, max_length=100)
    plan: Optional[str] = Field(None, min_length=1, max_length=50)

    @field_validator("subdomain", mode="before")
    @classmethod
    def normalize_subdomain(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value


class TenantResponse(CamelModel):
    """Tenant details"""

    id: str
    name: str
    subdomain: str
    plan: str
    is_active: bool
    created_at: datetime


class AuthUserResponse(CamelModel):
    """Profile of the signed-in user, including its tenant"""

    id: str
    email: str
    first_name: str
    last_name: str
    role: UserRole
    tenant: TenantResponse


class AuthResponse(CamelModel):
    """Issued token plus the user it was issued for"""

    access_token: str = Field(..., alias="access_token")
    token_type: str = Field("bearer", alias="token_type")
    user: AuthUserResponse
