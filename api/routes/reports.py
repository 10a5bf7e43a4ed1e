"""Report and dashboard endpoints (manager only)."""
from fastapi import APIRouter, Depends

from api.dependencies import get_principal, get_reconciliation
from services import Principal, ReconciliationEngine
from constants import RANGE_MONTH

router = APIRouter()


@router.get("/reports/dashboard")
async def dashboard(
    principal: Principal = Depends(get_principal),
    engine: ReconciliationEngine = Depends(get_reconciliation),
):
    return engine.dashboard_summary(principal).to_dict()


@router.get("/reports/revenue")
async def revenue(
    range: str = RANGE_MONTH,
    principal: Principal = Depends(get_principal),
    engine: ReconciliationEngine = Depends(get_reconciliation),
):
    """Monthly revenue, cost and profit since the range cutoff (sparse)."""
    return [period.to_dict() for period in engine.revenue_series(principal, range)]


@router.get("/reports/status-breakdown")
async def status_breakdown(
    principal: Principal = Depends(get_principal),
    engine: ReconciliationEngine = Depends(get_reconciliation),
):
    return engine.container_status_breakdown(principal)


@router.get("/reports/profit-by-status")
async def profit_by_status(
    principal: Principal = Depends(get_principal),
    engine: ReconciliationEngine = Depends(get_reconciliation),
):
    return engine.profit_by_status(principal)


@router.get("/reports/users")
async def manager_report(
    principal: Principal = Depends(get_principal),
    engine: ReconciliationEngine = Depends(get_reconciliation),
):
    return engine.manager_report(principal)


@router.get("/reports/vendors")
async def vendor_report(
    principal: Principal = Depends(get_principal),
    engine: ReconciliationEngine = Depends(get_reconciliation),
):
    return [rollup.to_dict() for rollup in engine.vendor_rollup(principal)]
