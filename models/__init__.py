"""Database models."""
from models.database import Base, get_db, init_db
from models.user import User, UserRole
from models.vendor import Vendor
from models.container import Container, ContainerStatus, ContentItem
from models.transfer import Transfer, TransferType
from models.sales import SaleItem, ExpenseItem, ExpenseCategory
from models.document import Document

__all__ = [
    "Base",
    "get_db",
    "init_db",
    "User",
    "UserRole",
    "Vendor",
    "Container",
    "ContainerStatus",
    "ContentItem",
    "Transfer",
    "TransferType",
    "SaleItem",
    "ExpenseItem",
    "ExpenseCategory",
    "Document",
]
