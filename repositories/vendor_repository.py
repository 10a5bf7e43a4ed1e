"""Repository for vendor and user lookups."""
from typing import List, Optional

from sqlalchemy.orm import Session

from models import Vendor, User, UserRole
from repositories.base import BaseRepository


class VendorRepository(BaseRepository[Vendor]):
    """Repository for vendor-specific database operations."""

    def __init__(self, db: Session):
        super().__init__(Vendor, db)

    def list_vendors(self, user_id: Optional[int] = None) -> List[Vendor]:
        """
        List vendors newest first.

        Args:
            user_id: Restrict to vendors registered by this user

        Returns:
            List of vendors
        """
        query = self.db.query(Vendor)
        if user_id is not None:
            query = query.filter(Vendor.user_id == user_id)
        return query.order_by(Vendor.created_at.desc(), Vendor.id.desc()).all()

    def ids_for_user(self, user_id: int) -> List[int]:
        return [row[0] for row in self.db.query(Vendor.id).filter(Vendor.user_id == user_id).all()]


class UserRepository(BaseRepository[User]):
    """Read access to principals owned by the auth service."""

    def __init__(self, db: Session):
        super().__init__(User, db)

    def get_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username).first()

    def list_regular_users(self, active_only: bool = False) -> List[User]:
        """Users with the plain user role, ordered by ID."""
        query = self.db.query(User).filter(User.role == UserRole.USER)
        if active_only:
            query = query.filter(User.is_active.is_(True))
        return query.order_by(User.id.asc()).all()
