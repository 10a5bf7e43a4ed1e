"""Container endpoints: lifecycle, contents, profit and balance."""
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile
from pydantic import BaseModel, ConfigDict, ValidationError as PydanticValidationError

from api.dependencies import (
    get_document_service,
    get_lifecycle,
    get_principal,
    get_reconciliation,
    read_uploads,
)
from services import (
    ContainerLifecycleManager,
    DocumentService,
    Principal,
    Projection,
    ReconciliationEngine,
)
from services.container_lifecycle import content_view, parse_status
from exceptions import InvalidInputError

router = APIRouter()


class ContentItemIn(BaseModel):
    """Content line as submitted; numerics are coerced server-side."""
    model_config = ConfigDict(extra="ignore")

    number: Any = None
    item: Optional[str] = None
    model: Optional[str] = None
    year: Any = None
    lot_number: Any = None
    price: Any = None
    recovery: Any = None
    cutting: Any = None


class ContainerCreateRequest(BaseModel):
    vendor_id: Any = None
    container_code: Optional[str] = None
    city: Optional[str] = None
    purchase_date: Any = None
    rent: Any = None
    contents: List[ContentItemIn] = []


class ContainerUpdateRequest(ContainerCreateRequest):
    status: Optional[str] = None
    contents: Optional[List[ContentItemIn]] = None


class StatusRequest(BaseModel):
    status: Any = None


class ContentsRequest(BaseModel):
    items: List[ContentItemIn] = []


def _items(contents: Optional[List[ContentItemIn]]) -> Optional[List[dict]]:
    if contents is None:
        return None
    return [item.model_dump() for item in contents]


@router.get("/containers")
async def list_containers(
    projection: Projection = Projection.SUMMARY,
    status: Optional[str] = None,
    principal: Principal = Depends(get_principal),
    lifecycle: ContainerLifecycleManager = Depends(get_lifecycle),
):
    """List containers visible to the caller, newest first."""
    return lifecycle.list_containers(
        principal,
        projection=projection,
        status=parse_status(status) if status else None,
    )


@router.post("/containers", status_code=201)
async def create_container(
    request: ContainerCreateRequest,
    principal: Principal = Depends(get_principal),
    lifecycle: ContainerLifecycleManager = Depends(get_lifecycle),
):
    """Create a pending container with its contents."""
    container = lifecycle.create(
        principal,
        vendor_id=request.vendor_id,
        container_code=request.container_code,
        city=request.city,
        purchase_date=request.purchase_date,
        rent=request.rent,
        contents=_items(request.contents),
    )
    return lifecycle.describe(container.id, principal)


@router.post("/containers/with-documents", status_code=201)
async def create_container_with_documents(
    payload: str = Form(...),
    files: List[UploadFile] = File(default=[]),
    principal: Principal = Depends(get_principal),
    lifecycle: ContainerLifecycleManager = Depends(get_lifecycle),
    documents: DocumentService = Depends(get_document_service),
):
    """
    Create a container, then attach purchase documents.

    The container is committed before any file is stored; failed uploads
    are listed in the response and leave the container in place.
    """
    try:
        request = ContainerCreateRequest.model_validate_json(payload)
    except PydanticValidationError as e:
        raise InvalidInputError("Malformed container payload", {"errors": e.errors()}) from e

    container = lifecycle.create(
        principal,
        vendor_id=request.vendor_id,
        container_code=request.container_code,
        city=request.city,
        purchase_date=request.purchase_date,
        rent=request.rent,
        contents=_items(request.contents),
    )
    attached = documents.attach_to_container(principal, container.id, await read_uploads(files))
    return {
        "container": lifecycle.describe(container.id, principal),
        "documents": attached,
    }


@router.get("/containers/{container_id}")
async def get_container(
    container_id: int,
    projection: Projection = Projection.DETAIL,
    principal: Principal = Depends(get_principal),
    lifecycle: ContainerLifecycleManager = Depends(get_lifecycle),
):
    return lifecycle.describe(container_id, principal, projection)


@router.put("/containers/{container_id}")
async def update_container(
    container_id: int,
    request: ContainerUpdateRequest,
    principal: Principal = Depends(get_principal),
    lifecycle: ContainerLifecycleManager = Depends(get_lifecycle),
):
    """Update fields; a contents list replaces the stored lines."""
    lifecycle.update(
        container_id,
        principal,
        vendor_id=request.vendor_id,
        container_code=request.container_code,
        city=request.city,
        purchase_date=request.purchase_date,
        rent=request.rent,
        status=request.status,
        contents=_items(request.contents),
    )
    return lifecycle.describe(container_id, principal)


@router.patch("/containers/{container_id}/status")
async def set_container_status(
    container_id: int,
    request: StatusRequest,
    principal: Principal = Depends(get_principal),
    lifecycle: ContainerLifecycleManager = Depends(get_lifecycle),
):
    container = lifecycle.set_status(container_id, principal, request.status)
    return lifecycle.describe(container.id, principal, Projection.SUMMARY)


@router.delete("/containers/{container_id}", status_code=204)
async def delete_container(
    container_id: int,
    principal: Principal = Depends(get_principal),
    lifecycle: ContainerLifecycleManager = Depends(get_lifecycle),
):
    lifecycle.delete(container_id, principal)
    return Response(status_code=204)


@router.get("/containers/{container_id}/contents")
async def list_contents(
    container_id: int,
    principal: Principal = Depends(get_principal),
    lifecycle: ContainerLifecycleManager = Depends(get_lifecycle),
):
    return [content_view(item) for item in lifecycle.list_contents(container_id, principal)]


@router.put("/containers/{container_id}/contents")
async def replace_contents(
    container_id: int,
    request: ContentsRequest,
    principal: Principal = Depends(get_principal),
    lifecycle: ContainerLifecycleManager = Depends(get_lifecycle),
):
    """Replace the content lines wholesale; totals are recomputed."""
    items = lifecycle.contents.replace_contents(container_id, _items(request.items), principal)
    return [content_view(item) for item in items]


@router.delete("/contents/{item_id}")
async def delete_content_item(
    item_id: int,
    principal: Principal = Depends(get_principal),
    lifecycle: ContainerLifecycleManager = Depends(get_lifecycle),
):
    container = lifecycle.contents.delete_item(item_id, principal)
    return {"container_id": container.id, "grand_total": container.grand_total}


@router.get("/containers/{container_id}/profit")
async def container_profit(
    container_id: int,
    principal: Principal = Depends(get_principal),
    engine: ReconciliationEngine = Depends(get_reconciliation),
):
    return engine.container_profit(container_id, principal).to_dict()


@router.get("/containers/{container_id}/balance")
async def container_balance(
    container_id: int,
    principal: Principal = Depends(get_principal),
    engine: ReconciliationEngine = Depends(get_reconciliation),
):
    return engine.container_balance(container_id, principal).to_dict()
