"""Repository for Tenant model operations."""

from sqlalchemy.orm import Session
from crm.models.tenant import Tenant


class TenantRepository:
    """Repository for Tenant model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, tenant_id: str) -> Tenant | None:
        """
        Get tenant by ID.

        Args:
            tenant_id: Tenant ID

        Returns:
            Tenant object or None if not found
        """
        return self.db.query(Tenant).filter(Tenant.id == tenant_id).first()

    def get_by_subdomain(self, subdomain: str) -> Tenant | None:
        """
        Get tenant by its globally unique subdomain.

        Args:
            subdomain: Tenant subdomain (e.g. "acme")

        Returns:
            Tenant object or None if not found
        """
        return self.db.query(Tenant).filter(Tenant.subdomain == subdomain).first()

    def add(self, tenant: Tenant) -> Tenant:
        """
        Stage a new tenant without committing.

        Caller responsible for commit. Used by the tenant bootstrap so the
        tenant and its first admin are written in one transaction.
        """
        self.db.add(tenant)
        self.db.flush()  # Assign ID without committing
        return tenant
