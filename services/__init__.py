"""Ledger services."""
from services.access import Principal
from services.content_ledger import ContentLedger
from services.container_lifecycle import ContainerLifecycleManager, Projection
from services.transfer_ledger import TransferLedger
from services.sales_ledger import SalesExpenseLedger
from services.reconciliation import ReconciliationEngine
from services.document_service import DocumentService
from services.vendor_service import VendorService

__all__ = [
    "Principal",
    "ContentLedger",
    "ContainerLifecycleManager",
    "Projection",
    "TransferLedger",
    "SalesExpenseLedger",
    "ReconciliationEngine",
    "DocumentService",
    "VendorService",
]
