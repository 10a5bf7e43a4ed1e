"""Vendor payment (transfer) model."""
from datetime import datetime, date
from enum import Enum
from sqlalchemy import Column, Integer, String, Float, Date, DateTime, ForeignKey, Text, Enum as SQLEnum
from sqlalchemy.orm import relationship

from models.database import Base


class TransferType(str, Enum):
    """How the funds reached the vendor."""
    BANK = "bank"
    CASH = "cash"
    HAND = "hand"


class Transfer(Base):
    """Payment toward a vendor, earmarked to a container."""

    __tablename__ = "transfers"

    id = Column(Integer, primary_key=True, index=True)

    # References
    sender_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    receiver_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    vendor_id = Column(Integer, ForeignKey("vendors.id"), nullable=False, index=True)
    container_id = Column(Integer, ForeignKey("containers.id"), nullable=False, index=True)

    # Payment Details
    amount = Column(Float, nullable=False)  # USD
    transfer_type = Column(SQLEnum(TransferType), nullable=False)
    transfer_date = Column(Date, nullable=False, default=date.today)

    # Person who physically delivered the funds
    sender_name = Column(String(255), default="")
    description = Column(Text, default="")

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    sender = relationship("User", foreign_keys=[sender_id])
    receiver = relationship("User", foreign_keys=[receiver_id])
    vendor = relationship("Vendor", back_populates="transfers")
    container = relationship("Container", back_populates="transfers")
    documents = relationship(
        "Document",
        back_populates="transfer",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Transfer(id={self.id}, amount=${self.amount}, type='{self.transfer_type}')>"
