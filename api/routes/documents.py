"""Container document endpoints."""
from typing import List

from fastapi import APIRouter, Depends, File, Form, UploadFile

from api.dependencies import get_document_service, get_principal, read_uploads
from services import DocumentService, Principal
from services.document_service import document_view
from constants import DOCUMENT_PURCHASE

router = APIRouter()


@router.get("/containers/{container_id}/documents")
async def list_documents(
    container_id: int,
    principal: Principal = Depends(get_principal),
    service: DocumentService = Depends(get_document_service),
):
    return [document_view(doc) for doc in service.list_for_container(container_id, principal)]


@router.post("/containers/{container_id}/documents", status_code=201)
async def upload_documents(
    container_id: int,
    files: List[UploadFile] = File(...),
    type: str = Form(DOCUMENT_PURCHASE),
    principal: Principal = Depends(get_principal),
    service: DocumentService = Depends(get_document_service),
):
    """Store a batch of files; per-file failures are reported, not raised."""
    return service.attach_to_container(principal, container_id, await read_uploads(files), type)
