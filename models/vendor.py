"""Vendor model."""
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship

from models.database import Base
from constants import DEFAULT_VENDOR_COUNTRY


class Vendor(Base):
    """Counterparty that sells container contents and receives transfers."""

    __tablename__ = "vendors"

    id = Column(Integer, primary_key=True, index=True)

    # Company Info
    company_name = Column(String(255), nullable=False)
    company_address = Column(Text, default="")
    representative_name = Column(String(255), nullable=False)
    email = Column(String(255))
    phone = Column(String(50))
    country = Column(String(100), default=DEFAULT_VENDOR_COUNTRY)

    # Registered by
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="vendors")
    containers = relationship("Container", back_populates="vendor")
    transfers = relationship("Transfer", back_populates="vendor")

    def __repr__(self):
        return f"<Vendor(id={self.id}, company='{self.company_name}')>"
