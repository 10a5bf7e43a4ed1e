"""Document metadata (file bytes live in the document store)."""
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from models.database import Base


class Document(Base):
    """Stored file tagged to a container and optionally a transfer."""

    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, index=True)

    filename = Column(String(255), nullable=False)
    original_name = Column(String(255), nullable=False)
    path = Column(String(500), nullable=False)  # opaque path from the store
    doc_type = Column(String(50), default="purchase")

    container_id = Column(Integer, ForeignKey("containers.id"), index=True)
    transfer_id = Column(Integer, ForeignKey("transfers.id", ondelete="CASCADE"), index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    container = relationship("Container", foreign_keys=[container_id])
    transfer = relationship("Transfer", back_populates="documents")

    def __repr__(self):
        return f"<Document(id={self.id}, name='{self.original_name}', type='{self.doc_type}')>"
