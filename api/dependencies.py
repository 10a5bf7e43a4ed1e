"""Request-scoped dependencies: principal resolution and service wiring."""
from typing import List, Optional

from fastapi import Depends, Header, HTTPException, UploadFile
from sqlalchemy.orm import Session

from config import get_settings
from models import get_db
from repositories import UserRepository
from integrations.document_store import DocumentStore, LocalDocumentStore, UploadedFile
from services import (
    ContainerLifecycleManager,
    DocumentService,
    Principal,
    ReconciliationEngine,
    SalesExpenseLedger,
    TransferLedger,
    VendorService,
)
from services.access import ensure_active
from logging_config import bind_context

settings = get_settings()


def get_principal(
    x_user_id: Optional[int] = Header(None),
    db: Session = Depends(get_db),
) -> Principal:
    """
    Resolve the caller from the X-User-Id header set by the auth gateway.

    Raises:
        HTTPException: 401 when the header is missing or names no user
        ForbiddenError: When the user is inactive
    """
    if x_user_id is None:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")

    user = UserRepository(db).get_by_id(x_user_id)
    if not user:
        raise HTTPException(status_code=401, detail="Unknown user")

    principal = Principal.from_user(user)
    ensure_active(principal)
    bind_context(principal_id=principal.id)
    return principal


def get_document_store() -> DocumentStore:
    return LocalDocumentStore(settings.upload_dir, settings.max_upload_bytes)


def get_lifecycle(
    db: Session = Depends(get_db),
    store: DocumentStore = Depends(get_document_store),
) -> ContainerLifecycleManager:
    return ContainerLifecycleManager(db, document_store=store)


def get_transfer_ledger(
    db: Session = Depends(get_db),
    store: DocumentStore = Depends(get_document_store),
) -> TransferLedger:
    return TransferLedger(db, document_store=store)


def get_sales_ledger(db: Session = Depends(get_db)) -> SalesExpenseLedger:
    return SalesExpenseLedger(db)


def get_reconciliation(db: Session = Depends(get_db)) -> ReconciliationEngine:
    return ReconciliationEngine(db, rate=settings.usd_to_aed_rate)


def get_document_service(
    db: Session = Depends(get_db),
    store: DocumentStore = Depends(get_document_store),
) -> DocumentService:
    return DocumentService(db, store)


def get_vendor_service(db: Session = Depends(get_db)) -> VendorService:
    return VendorService(db)


async def read_uploads(files: Optional[List[UploadFile]]) -> List[UploadedFile]:
    """Read multipart uploads into UploadedFile values for the document service."""
    uploads = []
    for upload in files or []:
        uploads.append(UploadedFile(
            filename=upload.filename or "upload",
            content=await upload.read(),
            content_type=upload.content_type,
        ))
    return uploads
