import logging
from typing import Optional
from sqlalchemy.orm import Session

from crm.models.tenant import Tenant
from crm.repositories.tenant_repository import TenantRepository
from crm.core.exceptions import NotFoundException

logger = logging.getLogger(__name__)


class TenantService:
    """Resolves the tenant a request is addressed to"""

    def __init__(self, db: Session):
        self.db = db
        self.tenant_repo = TenantRepository(db)

    def resolve(self, tenant_id: Optional[str], subdomain: Optional[str]) -> Tenant:
        """
        Look up the active tenant named by the request headers.

        The id takes precedence when both identifiers are given. Unknown
        and inactive tenants produce the same error so that disabled
        tenants cannot be told apart from missing ones.

        Args:
            tenant_id: Value of the x-tenant-id header
            subdomain: Value of the x-tenant-subdomain header

        Returns:
            The active Tenant

        Raises:
            NotFoundException: If no identifier is given, or the tenant is
                unknown or inactive
        """
        if not tenant_id and not subdomain:
            raise NotFoundException("Tenant identifier is required")

        if tenant_id:
            tenant = self.tenant_repo.get_by_id(tenant_id)
        else:
            tenant = self.tenant_repo.get_by_subdomain(subdomain)

        if tenant is None:
            logger.info("Tenant lookup failed: id=%s subdomain=%s", tenant_id, subdomain)
            raise NotFoundException("Tenant not found")

        if not tenant.is_active:
            logger.warning("Request addressed to inactive tenant %s", tenant.id)
            raise NotFoundException("Tenant not found")

        return tenant
