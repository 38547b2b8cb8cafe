import logging
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from crm.models.tenant import Tenant
from crm.models.user import User
from crm.models.role import UserRole
from crm.repositories.tenant_repository import TenantRepository
from crm.repositories.user_repository import UserRepository
from crm.schemas.auth_schemas import LoginRequest, RegisterRequest, CreateTenantRequest
from crm.core.security import hash_password, verify_password, create_access_token
from crm.core.exceptions import ConflictException, UnauthorizedException

logger = logging.getLogger(__name__)


class AuthService:
    """Service layer for sign-in, registration and tenant bootstrap"""

    def __init__(self, db: Session):
        self.db = db
        self.tenant_repo = TenantRepository(db)
        self.user_repo = UserRepository(db)

    @staticmethod
    def _issue(user: User) -> dict:
        token = create_access_token(user.id, user.email, user.tenant_id)
        return {"access_token": token, "user": user}

    def login(self, data: LoginRequest, tenant: Optional[Tenant] = None) -> dict:
        """
        Verify credentials and issue a token bound to the user's tenant.

        Args:
            data: E-mail and password
            tenant: Tenant named by the request headers, if any. When given,
                only users of that tenant are considered.

        Returns:
            Dict with access_token and the user (tenant loaded)

        Raises:
            UnauthorizedException: Unknown e-mail, wrong password, inactive
                user or inactive tenant - all with the same message
        """
        candidates = self.user_repo.find_login_candidates(
            data.email, tenant.id if tenant else None
        )

        for user in candidates:
            if not user.is_active or not user.tenant.is_active:
                continue
            if verify_password(data.password, user.password):
                logger.info("User %s signed in to tenant %s", user.id, user.tenant_id)
                return self._issue(user)

        logger.info("Failed sign-in for %s", data.email)
        raise UnauthorizedException("Invalid credentials")

    def register(self, data: RegisterRequest) -> dict:
        """
        Create a USER in an existing tenant and sign it in.

        Raises:
            ConflictException: If the e-mail is already used in that tenant
            UnauthorizedException: If the tenant is unknown or inactive
        """
        if self.user_repo.get_by_email_and_tenant(data.email, data.tenant_id):
            raise ConflictException("User already exists")

        tenant = self.tenant_repo.get_by_id(data.tenant_id)
        if not tenant or not tenant.is_active:
            raise UnauthorizedException("Invalid tenant")

        user = User(
            email=data.email,
            password=hash_password(data.password),
            first_name=data.first_name,
            last_name=data.last_name,
            role=UserRole.USER,
            tenant_id=tenant.id,
        )
        try:
            user = self.user_repo.create(user)
        except IntegrityError:
            # Lost a race against a concurrent registration
            self.db.rollback()
            raise ConflictException("User already exists")

        logger.info("Registered user %s in tenant %s", user.id, tenant.id)
        return self._issue(user)

    def create_tenant(self, data: CreateTenantRequest) -> dict:
        """
        Create a tenant and its first ADMIN user atomically.

        Both rows are written in one transaction: if the user cannot be
        created, no tenant row remains.

        Raises:
            ConflictException: If the subdomain is taken or the admin e-mail
                is registered in any tenant
        """
        if self.tenant_repo.get_by_subdomain(data.subdomain):
            raise ConflictException("Tenant with this subdomain already exists")

        if self.user_repo.email_exists(data.admin_email):
            raise ConflictException("User with this email already exists")

        hashed_password = hash_password(data.admin_password)

        try:
            tenant = self.tenant_repo.add(
                Tenant(name=data.name, subdomain=data.subdomain, plan=data.plan or "free")
            )
            admin = self.user_repo.add(
                User(
                    email=data.admin_email,
                    password=hashed_password,
                    first_name=data.admin_first_name,
                    last_name=data.admin_last_name,
                    role=UserRole.ADMIN,
                    tenant_id=tenant.id,
                )
            )
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning("Tenant bootstrap for '%s' rolled back on conflict", data.subdomain)
            raise ConflictException("Tenant or user already exists")
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(admin)
        logger.info("Created tenant %s (%s) with admin %s", tenant.id, tenant.subdomain, admin.id)
        return self._issue(admin)
