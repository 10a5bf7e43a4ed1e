"""Repository for destination-market sale and expense lines."""
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session, selectinload
from sqlalchemy import func

from models import Container, SaleItem, ExpenseItem
from repositories.base import BaseRepository


class SalesRepository(BaseRepository[SaleItem]):
    """Repository for sale lines, with expense-line helpers alongside."""

    def __init__(self, db: Session):
        super().__init__(SaleItem, db)

    def list_sales(self, container_id: int) -> List[SaleItem]:
        return self.db.query(SaleItem).filter(
            SaleItem.container_id == container_id
        ).order_by(SaleItem.number.asc(), SaleItem.id.asc()).all()

    def list_expenses(self, container_id: int) -> List[ExpenseItem]:
        return self.db.query(ExpenseItem).filter(
            ExpenseItem.container_id == container_id
        ).order_by(ExpenseItem.created_at.asc(), ExpenseItem.id.asc()).all()

    def delete_for_container(self, container_id: int) -> tuple[int, int]:
        """
        Delete all sale and expense lines of a container.

        Returns:
            (sales deleted, expenses deleted)
        """
        sales = self.db.query(SaleItem).filter(
            SaleItem.container_id == container_id
        ).delete(synchronize_session=False)
        expenses = self.db.query(ExpenseItem).filter(
            ExpenseItem.container_id == container_id
        ).delete(synchronize_session=False)
        self.db.flush()
        return sales, expenses

    def add_expenses(self, rows: List[dict]) -> List[ExpenseItem]:
        created = [ExpenseItem(**row) for row in rows]
        self.db.add_all(created)
        self.db.flush()
        return created

    def total_sales(self, container_id: Optional[int] = None, since: Optional[datetime] = None) -> float:
        """Sum of sale prices, for one container or globally."""
        query = self.db.query(func.coalesce(func.sum(SaleItem.sale_price), 0.0))
        if container_id is not None:
            query = query.filter(SaleItem.container_id == container_id)
        if since is not None:
            query = query.filter(SaleItem.created_at >= since)
        return float(query.scalar() or 0.0)

    def total_expenses(self, container_id: Optional[int] = None) -> float:
        """Sum of expense amounts, for one container or globally."""
        query = self.db.query(func.coalesce(func.sum(ExpenseItem.amount), 0.0))
        if container_id is not None:
            query = query.filter(ExpenseItem.container_id == container_id)
        return float(query.scalar() or 0.0)

    def count_lines(self, container_id: int) -> int:
        """Number of sale plus expense lines for a container."""
        sales = self.db.query(func.count(SaleItem.id)).filter(
            SaleItem.container_id == container_id
        ).scalar() or 0
        expenses = self.db.query(func.count(ExpenseItem.id)).filter(
            ExpenseItem.container_id == container_id
        ).scalar() or 0
        return sales + expenses

    def sales_since(self, since: datetime) -> List[tuple]:
        """(sale_price, created_at) pairs for sale lines created since a datetime."""
        return self.db.query(SaleItem.sale_price, SaleItem.created_at).filter(
            SaleItem.created_at >= since
        ).all()

    def expenses_since(self, since: datetime) -> List[tuple]:
        """(amount, created_at) pairs for expense lines created since a datetime."""
        return self.db.query(ExpenseItem.amount, ExpenseItem.created_at).filter(
            ExpenseItem.created_at >= since
        ).all()

    def sold_containers(self) -> List[Container]:
        """Containers with at least one sale line, newest first."""
        return self.db.query(Container).options(
            selectinload(Container.sales),
            selectinload(Container.expenses),
            selectinload(Container.contents),
            selectinload(Container.documents),
            selectinload(Container.user),
        ).filter(Container.sales.any()).order_by(Container.created_at.desc(), Container.id.desc()).all()
