"""Tenant context for request authorization."""

from dataclasses import dataclass
from crm.models.user import User
from crm.models.tenant import Tenant
from crm.models.role import UserRole


ROLE_HIERARCHY = {
    UserRole.ADMIN: 3,
    UserRole.MANAGER: 2,
    UserRole.USER: 1,
}


@dataclass(frozen=True)
class TenantContext:
    """
    Complete tenant context for request authorization.

    Built once per request from the resolved tenant headers and the bearer
    token (which must name the same tenant), then passed explicitly into
    every service call. Services scope all reads and writes by
    `tenant_id` and never take a tenant id from client input.

    Attributes:
        user: The authenticated User object
        tenant: The active Tenant the request is addressed to
    """

    user: User
    tenant: Tenant

    @property
    def tenant_id(self) -> str:
        return self.tenant.id

    @property
    def user_id(self) -> str:
        return self.user.id

    @property
    def role(self) -> UserRole:
        return self.user.role

    def has_permission(self, required_role: UserRole) -> bool:
        """
        Check if user's role meets or exceeds required role.

        Role hierarchy: ADMIN (3) > MANAGER (2) > USER (1)
        """
        return ROLE_HIERARCHY[self.role] >= ROLE_HIERARCHY[required_role]

    def __repr__(self) -> str:
        return f"<TenantContext(user_id={self.user.id}, tenant_id={self.tenant.id}, role={self.role.value})>"
