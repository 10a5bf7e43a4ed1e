"""Repository for document metadata."""
from typing import List

from sqlalchemy.orm import Session

from models import Document
from repositories.base import BaseRepository


class DocumentRepository(BaseRepository[Document]):
    """Repository for stored-document records."""

    def __init__(self, db: Session):
        super().__init__(Document, db)

    def list_for_container(self, container_id: int) -> List[Document]:
        return self.db.query(Document).filter(
            Document.container_id == container_id
        ).order_by(Document.created_at.desc(), Document.id.desc()).all()

    def list_for_transfer(self, transfer_id: int) -> List[Document]:
        return self.db.query(Document).filter(
            Document.transfer_id == transfer_id
        ).order_by(Document.created_at.desc(), Document.id.desc()).all()
