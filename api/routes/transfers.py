"""Transfer endpoints."""
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, File, Response, UploadFile
from pydantic import BaseModel

from api.dependencies import get_document_service, get_principal, get_transfer_ledger, read_uploads
from services import DocumentService, Principal, TransferLedger
from services.transfer_ledger import transfer_view

router = APIRouter()


class TransferCreateRequest(BaseModel):
    vendor_id: Any = None
    container_id: Any = None
    amount: Any = None
    type: Any = None
    date: Any = None
    description: Optional[str] = None
    sender_name: Optional[str] = None


@router.post("/transfers", status_code=201)
async def create_transfer(
    request: TransferCreateRequest,
    principal: Principal = Depends(get_principal),
    ledger: TransferLedger = Depends(get_transfer_ledger),
):
    """Record a payment to a vendor against a container."""
    transfer = ledger.create(
        principal,
        vendor_id=request.vendor_id,
        container_id=request.container_id,
        amount=request.amount,
        transfer_type=request.type,
        transfer_date=request.date,
        description=request.description,
        sender_name=request.sender_name,
    )
    return transfer_view(ledger.get(transfer.id, principal))


@router.get("/transfers/mine")
async def my_transfers(
    vendor_id: Optional[int] = None,
    principal: Principal = Depends(get_principal),
    ledger: TransferLedger = Depends(get_transfer_ledger),
):
    """Transfers the caller sent or that were paid to the caller's vendors."""
    return [transfer_view(t) for t in ledger.list_for_principal(principal, vendor_id=vendor_id)]


@router.get("/transfers/{transfer_id}")
async def get_transfer(
    transfer_id: int,
    principal: Principal = Depends(get_principal),
    ledger: TransferLedger = Depends(get_transfer_ledger),
):
    return transfer_view(ledger.get(transfer_id, principal))


@router.delete("/transfers/{transfer_id}", status_code=204)
async def delete_transfer(
    transfer_id: int,
    principal: Principal = Depends(get_principal),
    ledger: TransferLedger = Depends(get_transfer_ledger),
):
    ledger.delete(transfer_id, principal)
    return Response(status_code=204)


@router.post("/transfers/{transfer_id}/documents", status_code=201)
async def attach_transfer_documents(
    transfer_id: int,
    files: List[UploadFile] = File(...),
    principal: Principal = Depends(get_principal),
    documents: DocumentService = Depends(get_document_service),
):
    return documents.attach_to_transfer(principal, transfer_id, await read_uploads(files))


@router.get("/containers/{container_id}/transfers")
async def container_transfers(
    container_id: int,
    principal: Principal = Depends(get_principal),
    ledger: TransferLedger = Depends(get_transfer_ledger),
):
    """Every transfer for managers; only the caller's own otherwise."""
    transfers = ledger.list_for_container(container_id, principal)
    return {
        "transfers": [transfer_view(t) for t in transfers],
        "total_amount": round(sum(t.amount for t in transfers), 2),
    }
