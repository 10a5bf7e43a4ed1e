"""Purchase container and content line-item models."""
from datetime import datetime, date
from enum import Enum
from sqlalchemy import (
    Column, Integer, String, Float, Date, DateTime, ForeignKey,
    Enum as SQLEnum, UniqueConstraint,
)
from sqlalchemy.orm import relationship

from models.database import Base


class ContainerStatus(str, Enum):
    """Container lifecycle status."""
    PENDING = "pending"
    SHIPPED = "shipped"
    COMPLETED = "completed"


class Container(Base):
    """One shipment of vehicle parts bought in the origin market."""

    __tablename__ = "containers"
    __table_args__ = (
        UniqueConstraint("user_id", "container_code", name="uq_container_owner_code"),
    )

    id = Column(Integer, primary_key=True, index=True)

    # Business-facing code, unique per owner
    container_code = Column(String(50), nullable=False, index=True)

    # Status
    status = Column(SQLEnum(ContainerStatus), nullable=False, default=ContainerStatus.PENDING, index=True)

    # Purchase Info
    city = Column(String(100), default="")
    purchase_date = Column(Date, default=date.today)

    # Amounts (USD)
    rent = Column(Float, default=0.0)
    grand_total = Column(Float, default=0.0)  # rent + sum(content.total)

    # References
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    vendor_id = Column(Integer, ForeignKey("vendors.id"), nullable=False, index=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="containers")
    vendor = relationship("Vendor", back_populates="containers")
    contents = relationship(
        "ContentItem",
        back_populates="container",
        order_by="ContentItem.number",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    transfers = relationship("Transfer", back_populates="container")
    sales = relationship("SaleItem", back_populates="container", order_by="SaleItem.number")
    expenses = relationship("ExpenseItem", back_populates="container", order_by="ExpenseItem.created_at")
    documents = relationship("Document", order_by="Document.created_at", viewonly=True)

    def __repr__(self):
        return f"<Container(code='{self.container_code}', status='{self.status}', total={self.grand_total})>"


class ContentItem(Base):
    """One acquired unit within a container."""

    __tablename__ = "container_contents"

    id = Column(Integer, primary_key=True, index=True)

    # Container Reference
    container_id = Column(
        Integer, ForeignKey("containers.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Display order, not a key
    number = Column(Integer, default=0)

    # Description
    item = Column(String(255), default="")
    model = Column(String(255), default="")
    year = Column(String(10), default="")
    lot_number = Column(String(100), default="")

    # Cost components (USD)
    price = Column(Float, default=0.0)
    recovery = Column(Float, default=0.0)
    cutting = Column(Float, default=0.0)
    total = Column(Float, default=0.0)  # price + recovery + cutting

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    container = relationship("Container", back_populates="contents")

    def __repr__(self):
        return f"<ContentItem(number={self.number}, item='{self.item}', total={self.total})>"
