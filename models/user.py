"""User model (identity is owned by the external auth service)."""
from datetime import datetime
from enum import Enum
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum as SQLEnum
from sqlalchemy.orm import relationship

from models.database import Base


class UserRole(str, Enum):
    """Roles a principal can hold."""
    MANAGER = "manager"
    USER = "user"


class User(Base):
    """Principal that owns containers and vendors and sends transfers."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)

    username = Column(String(100), unique=True, nullable=False, index=True)
    name = Column(String(255))
    role = Column(SQLEnum(UserRole), nullable=False, default=UserRole.USER, index=True)
    is_active = Column(Boolean, default=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    containers = relationship("Container", back_populates="user")
    vendors = relationship("Vendor", back_populates="user")

    @property
    def is_manager(self) -> bool:
        return self.role == UserRole.MANAGER

    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}', role='{self.role}')>"
