"""Destination-market sale and expense line items."""
from datetime import datetime
from enum import Enum
from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, Text, Enum as SQLEnum
from sqlalchemy.orm import relationship

from models.database import Base


class ExpenseCategory(str, Enum):
    """Closed set of destination-market expense categories."""
    PORT = "port"
    AREA_RENT = "area_rent"
    LABOR_TIPS = "labor_tips"
    OVER_EXPEND = "over_expend"


class SaleItem(Base):
    """Revenue line for a sold unit (AED)."""

    __tablename__ = "sale_items"

    id = Column(Integer, primary_key=True, index=True)

    container_id = Column(Integer, ForeignKey("containers.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    number = Column(Integer, default=0)
    item = Column(String(255), default="")
    sale_price = Column(Float, default=0.0)
    lot_number = Column(String(100), default="")
    note = Column(Text, default="")

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    # Relationships
    container = relationship("Container", back_populates="sales")

    def __repr__(self):
        return f"<SaleItem(number={self.number}, price={self.sale_price})>"


class ExpenseItem(Base):
    """Cost line incurred in the destination market (AED)."""

    __tablename__ = "expense_items"

    id = Column(Integer, primary_key=True, index=True)

    container_id = Column(Integer, ForeignKey("containers.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    category = Column(SQLEnum(ExpenseCategory), nullable=False)
    amount = Column(Float, default=0.0)
    description = Column(Text, default="")

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    # Relationships
    container = relationship("Container", back_populates="expenses")

    def __repr__(self):
        return f"<ExpenseItem(category='{self.category}', amount={self.amount})>"
