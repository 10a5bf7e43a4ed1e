"""Repository for container and content line-item operations."""
from typing import Dict, List, Optional

from sqlalchemy.orm import Session, selectinload
from sqlalchemy import func

from models import Container, ContainerStatus, ContentItem
from repositories.base import BaseRepository
from logging_config import get_logger

logger = get_logger(__name__)


class ContainerRepository(BaseRepository[Container]):
    """Repository for container-specific database operations."""

    def __init__(self, db: Session):
        """
        Initialize container repository.

        Args:
            db: Database session
        """
        super().__init__(Container, db)

    def get_by_code_for_owner(self, user_id: int, container_code: str) -> Optional[Container]:
        """
        Get an owner's container by its business code.

        Args:
            user_id: Owning user ID
            container_code: Business-facing container code

        Returns:
            Container or None
        """
        return self.db.query(Container).filter(
            Container.user_id == user_id,
            Container.container_code == container_code,
        ).first()

    def get_detail(self, container_id: int) -> Optional[Container]:
        """
        Get a container with contents, vendor, documents and owner loaded.

        Args:
            container_id: Container ID

        Returns:
            Container or None
        """
        return self.db.query(Container).options(
            selectinload(Container.contents),
            selectinload(Container.vendor),
            selectinload(Container.documents),
            selectinload(Container.user),
        ).filter(Container.id == container_id).first()

    def list_containers(
        self,
        user_id: Optional[int] = None,
        status: Optional[ContainerStatus] = None,
        with_details: bool = False,
    ) -> List[Container]:
        """
        List containers newest first.

        Args:
            user_id: Restrict to one owner (None for all owners)
            status: Optional status filter
            with_details: Eager-load the relations used by the detail projection

        Returns:
            List of containers
        """
        query = self.db.query(Container)
        if with_details:
            query = query.options(
                selectinload(Container.contents),
                selectinload(Container.vendor),
                selectinload(Container.documents),
                selectinload(Container.user),
            )
        if user_id is not None:
            query = query.filter(Container.user_id == user_id)
        if status is not None:
            query = query.filter(Container.status == status)
        return query.order_by(Container.created_at.desc(), Container.id.desc()).all()

    def list_for_users(self, user_ids: List[int]) -> List[Container]:
        """Containers owned by any of the given users, with sales and expenses loaded."""
        if not user_ids:
            return []
        return self.db.query(Container).options(
            selectinload(Container.sales),
            selectinload(Container.expenses),
        ).filter(Container.user_id.in_(user_ids)).all()

    def list_with_ledgers(self) -> List[Container]:
        """All containers with sales and expenses loaded."""
        return self.db.query(Container).options(
            selectinload(Container.sales),
            selectinload(Container.expenses),
        ).all()

    def count_by_status(self) -> Dict[ContainerStatus, int]:
        """
        Count containers per status.

        Returns:
            Mapping of status to count (statuses with no containers omitted)
        """
        rows = self.db.query(Container.status, func.count(Container.id)).group_by(
            Container.status
        ).all()
        return {status: count for status, count in rows}

    def sum_grand_total(self, since=None) -> float:
        """Sum of grand totals, optionally for containers created since a datetime."""
        query = self.db.query(func.coalesce(func.sum(Container.grand_total), 0.0))
        if since is not None:
            query = query.filter(Container.created_at >= since)
        return float(query.scalar() or 0.0)

    def grand_totals_since(self, since) -> List[tuple]:
        """(grand_total, created_at) pairs for containers created since a datetime."""
        return self.db.query(Container.grand_total, Container.created_at).filter(
            Container.created_at >= since
        ).all()

    def vendor_rollup(self) -> List[tuple]:
        """(vendor_id, container_count, grand_total_sum) grouped by vendor."""
        return self.db.query(
            Container.vendor_id,
            func.count(Container.id),
            func.coalesce(func.sum(Container.grand_total), 0.0),
        ).group_by(Container.vendor_id).order_by(Container.vendor_id).all()


class ContentRepository(BaseRepository[ContentItem]):
    """Repository for container content line items."""

    def __init__(self, db: Session):
        super().__init__(ContentItem, db)

    def list_for_container(self, container_id: int) -> List[ContentItem]:
        """Content items ordered by sequence number."""
        return self.db.query(ContentItem).filter(
            ContentItem.container_id == container_id
        ).order_by(ContentItem.number.asc(), ContentItem.id.asc()).all()

    def delete_for_container(self, container_id: int) -> int:
        """
        Delete every content item of a container.

        Returns:
            Number of rows deleted
        """
        deleted = self.db.query(ContentItem).filter(
            ContentItem.container_id == container_id
        ).delete(synchronize_session=False)
        self.db.flush()
        return deleted

    def sum_totals(self, container_id: int) -> float:
        """Sum of line totals for a container."""
        total = self.db.query(func.coalesce(func.sum(ContentItem.total), 0.0)).filter(
            ContentItem.container_id == container_id
        ).scalar()
        return float(total or 0.0)
