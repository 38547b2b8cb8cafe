from sqlalchemy.orm import Session, joinedload
from crm.models.user import User


class UserRepository:
    """Repository for User model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: str) -> User | None:
        """Get user by ID regardless of tenant (token validation only)"""
        return self.db.query(User).filter(User.id == user_id).first()

    def get_by_id_and_tenant(self, user_id: str, tenant_id: str) -> User | None:
        """
        Get user ensuring it belongs to tenant.

        Used to validate owner/assignee references before writes.
        """
        return (
            self.db.query(User)
            .filter(User.id == user_id, User.tenant_id == tenant_id)
            .first()
        )

    def get_by_email_and_tenant(self, email: str, tenant_id: str) -> User | None:
        return (
            self.db.query(User)
            .filter(User.email == email, User.tenant_id == tenant_id)
            .first()
        )

    def find_login_candidates(self, email: str, tenant_id: str | None = None) -> list[User]:
        """
        Users matching an e-mail, with their tenant loaded.

        E-mail is only unique within a tenant, so without a tenant hint
        several users may match; they are returned oldest first.
        """
        query = self.db.query(User).options(joinedload(User.tenant)).filter(User.email == email)
        if tenant_id is not None:
            query = query.filter(User.tenant_id == tenant_id)
        return query.order_by(User.created_at.asc()).all()

    def email_exists(self, email: str) -> bool:
        """Check whether an e-mail is registered in any tenant"""
        return self.db.query(User.id).filter(User.email == email).first() is not None

    def add(self, user: User) -> User:
        """Stage a new user without committing (caller commits)"""
        self.db.add(user)
        self.db.flush()
        return user

    def create(self, user: User) -> User:
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user
