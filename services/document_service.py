"""Attach stored documents to containers and transfers."""
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from models import Document
from repositories import ContainerRepository, DocumentRepository, TransferRepository, transaction
from services.access import Principal, ensure_owner_or_manager
from integrations.document_store import DocumentStore, UploadedFile
from exceptions import DocumentStorageError, InvalidInputError, NotFoundError
from constants import DOCUMENT_PURCHASE, DOCUMENT_SALE, DOCUMENT_TRANSFER
from logging_config import get_logger

logger = get_logger(__name__)

DOCUMENT_TYPES = (DOCUMENT_PURCHASE, DOCUMENT_TRANSFER, DOCUMENT_SALE)


def document_view(document: Document) -> dict:
    return {
        "id": document.id,
        "filename": document.filename,
        "original_name": document.original_name,
        "path": document.path,
        "type": document.doc_type,
        "container_id": document.container_id,
        "transfer_id": document.transfer_id,
        "created_at": document.created_at,
    }


class DocumentService:
    """
    Stores file batches and records their paths against ledger entries.

    Each file is stored independently; a file the store rejects is reported
    under ``failed`` and never undoes the ledger write it accompanies.
    """

    def __init__(self, db: Session, store: DocumentStore):
        """
        Initialize document service.

        Args:
            db: Database session
            store: Document-storage collaborator
        """
        self.db = db
        self.store = store
        self.documents = DocumentRepository(db)
        self.containers = ContainerRepository(db)
        self.transfers = TransferRepository(db)

    def _attach(
        self,
        principal: Principal,
        files: Iterable[UploadedFile],
        doc_type: str,
        container_id: Optional[int],
        transfer_id: Optional[int] = None,
    ) -> Dict[str, List]:
        stored: List[tuple] = []
        failed: List[dict] = []

        for upload in files:
            try:
                path = self.store.store(upload.content, upload.filename)
            except DocumentStorageError as e:
                logger.warning("Document upload failed", filename=upload.filename, error=e.message)
                failed.append({"original_name": upload.filename, "error": e.message})
                continue
            stored.append((upload.filename, path))

        try:
            with transaction(self.db):
                created = self.documents.bulk_create([
                    {
                        "filename": path.rsplit("/", 1)[-1],
                        "original_name": original_name,
                        "path": path,
                        "doc_type": doc_type,
                        "container_id": container_id,
                        "transfer_id": transfer_id,
                        "user_id": principal.id,
                    }
                    for original_name, path in stored
                ])
        except Exception:
            # No row points at these files any more
            self._discard([path for _, path in stored])
            raise

        logger.info(
            "Documents attached",
            container_id=container_id,
            transfer_id=transfer_id,
            uploaded=len(created),
            failed=len(failed),
        )
        return {"uploaded": [document_view(doc) for doc in created], "failed": failed}

    def _discard(self, paths: List[str]) -> None:
        for path in paths:
            try:
                self.store.delete(path)
            except DocumentStorageError as e:
                logger.error("Orphaned document left in store", path=path, error=e.message)

    def attach_to_container(
        self,
        principal: Principal,
        container_id: int,
        files: Iterable[UploadedFile],
        doc_type: str = DOCUMENT_PURCHASE,
    ) -> Dict[str, List]:
        """
        Store files and tag them to a container.

        Returns:
            {"uploaded": [document...], "failed": [{"original_name", "error"}...]}

        Raises:
            InvalidInputError: Unknown document type
            NotFoundError: Unknown container
            ForbiddenError: Caller is neither owner nor manager
        """
        if doc_type not in DOCUMENT_TYPES:
            raise InvalidInputError(f"Unknown document type {doc_type!r}")
        container = self.containers.get_by_id(container_id)
        if not container:
            raise NotFoundError("Container", container_id)
        ensure_owner_or_manager(principal, container.user_id, "container", "attach documents to")
        result = self._attach(principal, files, doc_type, container.id)
        self.db.expire(container, ["documents"])
        return result

    def attach_to_transfer(
        self,
        principal: Principal,
        transfer_id: int,
        files: Iterable[UploadedFile],
    ) -> Dict[str, List]:
        """Store files and tag them to a transfer (and its container)."""
        transfer = self.transfers.get_by_id(transfer_id)
        if not transfer:
            raise NotFoundError("Transfer", transfer_id)
        ensure_owner_or_manager(principal, transfer.sender_id, "transfer", "attach documents to")
        result = self._attach(principal, files, DOCUMENT_TRANSFER, transfer.container_id, transfer.id)
        self.db.expire(transfer, ["documents"])
        return result

    def list_for_container(self, container_id: int, principal: Principal) -> List[Document]:
        container = self.containers.get_by_id(container_id)
        if not container:
            raise NotFoundError("Container", container_id)
        ensure_owner_or_manager(principal, container.user_id, "container", "view documents of")
        return self.documents.list_for_container(container.id)
