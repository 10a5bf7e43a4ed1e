"""Repository for transfer operations."""
from typing import List, Optional

from sqlalchemy.orm import Session, selectinload
from sqlalchemy import func, or_

from models import Transfer
from repositories.base import BaseRepository


class TransferRepository(BaseRepository[Transfer]):
    """Repository for vendor payments."""

    def __init__(self, db: Session):
        super().__init__(Transfer, db)

    def _with_relations(self):
        return self.db.query(Transfer).options(
            selectinload(Transfer.sender),
            selectinload(Transfer.receiver),
            selectinload(Transfer.vendor),
            selectinload(Transfer.container),
            selectinload(Transfer.documents),
        )

    def get_detail(self, transfer_id: int) -> Optional[Transfer]:
        """Get a transfer with its parties and documents loaded."""
        return self._with_relations().filter(Transfer.id == transfer_id).first()

    def list_for_container(
        self,
        container_id: int,
        sender_id: Optional[int] = None
    ) -> List[Transfer]:
        """
        Transfers earmarked to a container, newest first.

        Args:
            container_id: Container ID
            sender_id: Restrict to transfers sent by this user

        Returns:
            List of transfers
        """
        query = self._with_relations().filter(Transfer.container_id == container_id)
        if sender_id is not None:
            query = query.filter(Transfer.sender_id == sender_id)
        return query.order_by(Transfer.created_at.desc(), Transfer.id.desc()).all()

    def list_sent_or_received(
        self,
        user_id: int,
        vendor_ids: List[int],
        vendor_id: Optional[int] = None
    ) -> List[Transfer]:
        """
        Transfers a user sent, plus transfers to vendors the user registered.

        Args:
            user_id: User ID
            vendor_ids: Vendors registered by the user
            vendor_id: Optional vendor filter

        Returns:
            List of transfers, newest first
        """
        condition = Transfer.sender_id == user_id
        if vendor_ids:
            condition = or_(condition, Transfer.vendor_id.in_(vendor_ids))
        query = self._with_relations().filter(condition)
        if vendor_id is not None:
            query = query.filter(Transfer.vendor_id == vendor_id)
        return query.order_by(Transfer.created_at.desc(), Transfer.id.desc()).all()

    def total_amount(self, container_id: int) -> float:
        """Sum of every transfer amount recorded against a container."""
        total = self.db.query(func.coalesce(func.sum(Transfer.amount), 0.0)).filter(
            Transfer.container_id == container_id
        ).scalar()
        return float(total or 0.0)

    def count_for_container(self, container_id: int) -> int:
        return self.db.query(func.count(Transfer.id)).filter(
            Transfer.container_id == container_id
        ).scalar() or 0
