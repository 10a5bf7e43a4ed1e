"""Repository pattern for database access."""
from repositories.base import BaseRepository, transaction
from repositories.container_repository import ContainerRepository, ContentRepository
from repositories.transfer_repository import TransferRepository
from repositories.sales_repository import SalesRepository
from repositories.vendor_repository import VendorRepository, UserRepository
from repositories.document_repository import DocumentRepository

__all__ = [
    "BaseRepository",
    "transaction",
    "ContainerRepository",
    "ContentRepository",
    "TransferRepository",
    "SalesRepository",
    "VendorRepository",
    "UserRepository",
    "DocumentRepository",
]
