"""Health probes for the ledger's two collaborators: database and document store."""
from datetime import datetime
from typing import Dict, Any, Optional
from enum import Enum

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import get_settings
from integrations.document_store import DocumentStore
from logging_config import get_logger

logger = get_logger(__name__)
settings = get_settings()


class HealthStatus(str, Enum):
    """Health check status values."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class ComponentHealth:
    """Health status for a system component."""

    def __init__(
        self,
        status: HealthStatus,
        message: Optional[str] = None,
        latency_ms: Optional[float] = None
    ):
        self.status = status
        self.message = message
        self.latency_ms = latency_ms

    def to_dict(self) -> Dict[str, Any]:
        result = {"status": self.status.value}
        if self.message:
            result["message"] = self.message
        if self.latency_ms is not None:
            result["latency_ms"] = round(self.latency_ms, 2)
        return result


class HealthCheckService:
    """Runs the database and document-store probes."""

    def __init__(self, db: Optional[Session] = None, store: Optional[DocumentStore] = None):
        self.db = db
        self.store = store

    def check_database(self) -> ComponentHealth:
        """Check database connectivity."""
        if not self.db:
            return ComponentHealth(HealthStatus.UNHEALTHY, "Database session not available")

        start_time = datetime.now()
        try:
            result = self.db.execute(text("SELECT 1")).scalar()
        except SQLAlchemyError as e:
            logger.error("Database health check failed", error=str(e))
            return ComponentHealth(HealthStatus.UNHEALTHY, f"Database error: {e}")

        latency_ms = (datetime.now() - start_time).total_seconds() * 1000
        if result != 1:
            return ComponentHealth(HealthStatus.UNHEALTHY, "Database query returned unexpected result")
        return ComponentHealth(HealthStatus.HEALTHY, "Database connection OK", latency_ms)

    def check_document_store(self) -> ComponentHealth:
        """
        Check the document store accepts writes.

        An unavailable store only degrades the service: ledger writes
        still succeed and uploads are reported as failed.
        """
        if not self.store:
            return ComponentHealth(HealthStatus.DEGRADED, "Document store not configured")
        if not self.store.is_available():
            logger.warning("Document store unavailable")
            return ComponentHealth(HealthStatus.DEGRADED, "Document store not writable")
        return ComponentHealth(HealthStatus.HEALTHY, "Document store OK")

    def check_all(self) -> Dict[str, Any]:
        """Run all health checks."""
        checks = {
            "database": self.check_database(),
            "document_store": self.check_document_store(),
        }

        statuses = [check.status for check in checks.values()]
        if all(s == HealthStatus.HEALTHY for s in statuses):
            overall_status = HealthStatus.HEALTHY
        elif any(s == HealthStatus.UNHEALTHY for s in statuses):
            overall_status = HealthStatus.UNHEALTHY
        else:
            overall_status = HealthStatus.DEGRADED

        logger.info("Health checks completed", overall_status=overall_status.value)
        return {
            "status": overall_status.value,
            "timestamp": datetime.utcnow().isoformat(),
            "environment": settings.app_env,
            "checks": {name: check.to_dict() for name, check in checks.items()},
        }

    def check_liveness(self) -> Dict[str, Any]:
        return {
            "alive": True,
            "timestamp": datetime.utcnow().isoformat(),
            "environment": settings.app_env,
        }
