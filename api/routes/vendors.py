"""Vendor and user endpoints."""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict

from api.dependencies import get_principal, get_vendor_service
from services import Principal, VendorService

router = APIRouter()


class VendorCreateRequest(BaseModel):
    company_name: Optional[str] = None
    company_address: Optional[str] = None
    representative_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    country: Optional[str] = None


class VendorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_name: str
    company_address: Optional[str]
    representative_name: str
    email: Optional[str]
    phone: Optional[str]
    country: Optional[str]
    user_id: int
    created_at: Optional[datetime]


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    name: Optional[str]
    is_active: bool


@router.post("/vendors", response_model=VendorResponse, status_code=201)
async def create_vendor(
    request: VendorCreateRequest,
    principal: Principal = Depends(get_principal),
    service: VendorService = Depends(get_vendor_service),
):
    return service.create_vendor(principal, **request.model_dump())


@router.get("/vendors", response_model=List[VendorResponse])
async def list_vendors(
    principal: Principal = Depends(get_principal),
    service: VendorService = Depends(get_vendor_service),
):
    """Every vendor for managers; the caller's own vendors otherwise."""
    return service.list_vendors(principal)


@router.get("/vendors/{vendor_id}", response_model=VendorResponse)
async def get_vendor(
    vendor_id: int,
    principal: Principal = Depends(get_principal),
    service: VendorService = Depends(get_vendor_service),
):
    return service.get_vendor(vendor_id, principal)


@router.get("/users", response_model=List[UserResponse])
async def list_users(
    principal: Principal = Depends(get_principal),
    service: VendorService = Depends(get_vendor_service),
):
    """Active non-manager users (manager only)."""
    return service.list_active_users(principal)
