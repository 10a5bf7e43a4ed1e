"""Destination-market sales and expense endpoints."""
from typing import Any, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict

from api.dependencies import get_principal, get_reconciliation, get_sales_ledger
from services import Principal, ReconciliationEngine, SalesExpenseLedger

router = APIRouter()


class SaleLineIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    number: Any = None
    item: Optional[str] = None
    sale_price: Any = None
    lot_number: Any = None
    note: Optional[str] = None


class ExpenseLineIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    category: Any = None
    amount: Any = None
    description: Optional[str] = None


class SalesSheetRequest(BaseModel):
    sales: List[SaleLineIn] = []
    expenses: List[ExpenseLineIn] = []


@router.get("/containers/{container_id}/sales")
async def read_sales_ledger(
    container_id: int,
    principal: Principal = Depends(get_principal),
    ledger: SalesExpenseLedger = Depends(get_sales_ledger),
):
    return ledger.get_ledger(container_id, principal)


@router.put("/containers/{container_id}/sales")
async def replace_sales_ledger(
    container_id: int,
    request: SalesSheetRequest,
    principal: Principal = Depends(get_principal),
    ledger: SalesExpenseLedger = Depends(get_sales_ledger),
):
    """Replace both line sets of a completed container (manager only)."""
    ledger.replace(
        container_id,
        principal,
        sales=[line.model_dump() for line in request.sales],
        expenses=[line.model_dump() for line in request.expenses],
    )
    return ledger.get_ledger(container_id, principal)


@router.get("/sales/sold-containers")
async def sold_containers(
    principal: Principal = Depends(get_principal),
    engine: ReconciliationEngine = Depends(get_reconciliation),
):
    return engine.sold_containers(principal)
