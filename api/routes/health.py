"""Health check endpoints."""
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from api.dependencies import get_document_store
from health_checks import HealthCheckService, HealthStatus
from integrations.document_store import DocumentStore
from models import get_db

router = APIRouter()


@router.get("/health")
async def health_check(
    db: Session = Depends(get_db),
    store: DocumentStore = Depends(get_document_store),
):
    """Database and document-store health."""
    result = HealthCheckService(db=db, store=store).check_all()
    status_code = 503 if result["status"] == HealthStatus.UNHEALTHY.value else 200
    return JSONResponse(status_code=status_code, content=result)


@router.get("/health/live")
async def liveness():
    return HealthCheckService().check_liveness()
