"""Transfer ledger: vendor payments earmarked to containers."""
from typing import Any, List, Optional

from sqlalchemy.orm import Session

from models import Transfer, TransferType, Vendor
from repositories import (
    ContainerRepository,
    DocumentRepository,
    TransferRepository,
    VendorRepository,
    transaction,
)
from services.access import Principal, ensure_active, ensure_owner_or_manager
from integrations.document_store import DocumentStore
from exceptions import DocumentStorageError, ForbiddenError, InvalidInputError, NotFoundError
from utils.validation import optional_string, parse_date, validate_positive_amount
from constants import MAX_DESCRIPTION_LENGTH, MAX_SENDER_NAME_LENGTH
from logging_config import get_logger

logger = get_logger(__name__)

_TYPE_ALIASES = {
    "bank": TransferType.BANK,
    "bank transfer": TransferType.BANK,
    "wire": TransferType.BANK,
    "cash": TransferType.CASH,
    "hand": TransferType.HAND,
    "by hand": TransferType.HAND,
    "hand-delivery": TransferType.HAND,
}


def parse_transfer_type(value: Any) -> TransferType:
    """
    Parse a transfer type (bank, cash or hand).

    Raises:
        InvalidInputError: Missing or unknown type
    """
    if isinstance(value, TransferType):
        return value
    if value is None or not str(value).strip():
        raise InvalidInputError("Transfer type is required")
    key = str(value).strip().lower()
    if key not in _TYPE_ALIASES:
        raise InvalidInputError(f"Unknown transfer type {value!r}; expected bank, cash or hand")
    return _TYPE_ALIASES[key]


def transfer_view(transfer: Transfer) -> dict:
    """Plain-data projection of a transfer with its parties."""
    return {
        "id": transfer.id,
        "amount": transfer.amount,
        "type": TransferType(transfer.transfer_type).value,
        "date": transfer.transfer_date,
        "sender_name": transfer.sender_name,
        "description": transfer.description,
        "created_at": transfer.created_at,
        "sender": {"id": transfer.sender.id, "name": transfer.sender.name} if transfer.sender else None,
        "receiver": {"id": transfer.receiver.id, "name": transfer.receiver.name} if transfer.receiver else None,
        "vendor": {
            "id": transfer.vendor.id,
            "company_name": transfer.vendor.company_name,
            "representative_name": transfer.vendor.representative_name,
        } if transfer.vendor else None,
        "container": {
            "id": transfer.container.id,
            "container_code": transfer.container.container_code,
        } if transfer.container else None,
        "documents": [
            {"id": doc.id, "original_name": doc.original_name, "path": doc.path, "type": doc.doc_type}
            for doc in transfer.documents
        ],
    }


class TransferLedger:
    """Records payments against container/vendor pairs."""

    def __init__(self, db: Session, document_store: Optional[DocumentStore] = None):
        """
        Initialize transfer ledger.

        Args:
            db: Database session
            document_store: Store used to remove attached files on delete
        """
        self.db = db
        self.document_store = document_store
        self.transfers = TransferRepository(db)
        self.vendors = VendorRepository(db)
        self.containers = ContainerRepository(db)
        self.documents = DocumentRepository(db)

    def _resolve_vendor(self, vendor_id: Any, principal: Principal) -> Vendor:
        if vendor_id in (None, ""):
            raise InvalidInputError("Vendor is required")
        vendor = self.vendors.get_by_id(vendor_id)
        # Managers may pay any vendor; users only vendors they registered
        if not vendor or (not principal.is_manager and vendor.user_id != principal.id):
            raise NotFoundError("Vendor", vendor_id)
        return vendor

    def create(
        self,
        principal: Principal,
        vendor_id: Any,
        container_id: Any,
        amount: Any,
        transfer_type: Any,
        transfer_date: Any,
        description: Optional[str] = None,
        sender_name: Optional[str] = None,
    ) -> Transfer:
        """
        Record a payment.

        The receiver is the user who registered the vendor. ``sender_name``
        is the person who physically delivered the funds, which may differ
        from the authenticated sender.

        Raises:
            InvalidInputError: Missing fields, non-positive amount, bad type or date
            NotFoundError: Unknown container, or vendor unknown/not payable by caller
        """
        ensure_active(principal)
        value = validate_positive_amount(amount, "Amount")
        kind = parse_transfer_type(transfer_type)
        paid_on = parse_date(transfer_date, "Date")
        if container_id in (None, ""):
            raise InvalidInputError("Container is required")

        vendor = self._resolve_vendor(vendor_id, principal)
        container = self.containers.get_by_id(container_id)
        if not container:
            raise NotFoundError("Container", container_id)

        with transaction(self.db):
            transfer = self.transfers.create(
                sender_id=principal.id,
                receiver_id=vendor.user_id,
                vendor_id=vendor.id,
                container_id=container.id,
                amount=value,
                transfer_type=kind,
                transfer_date=paid_on,
                sender_name=optional_string(sender_name, MAX_SENDER_NAME_LENGTH),
                description=optional_string(description, MAX_DESCRIPTION_LENGTH),
            )

        logger.info(
            "Transfer recorded",
            transfer_id=transfer.id,
            container_id=container.id,
            vendor_id=vendor.id,
            amount=value,
            type=kind.value,
        )
        return transfer

    def get(self, transfer_id: int, principal: Principal) -> Transfer:
        """
        Load one transfer (manager or original sender only).

        Raises:
            NotFoundError: Unknown transfer
            ForbiddenError: Caller is neither manager nor sender
        """
        transfer = self.transfers.get_detail(transfer_id)
        if not transfer:
            raise NotFoundError("Transfer", transfer_id)
        ensure_owner_or_manager(principal, transfer.sender_id, "transfer", "view")
        return transfer

    def list_for_container(self, container_id: int, principal: Principal) -> List[Transfer]:
        """All transfers of a container for managers; only the caller's own otherwise."""
        ensure_active(principal)
        if not self.containers.exists(container_id):
            raise NotFoundError("Container", container_id)
        sender_id = None if principal.is_manager else principal.id
        return self.transfers.list_for_container(container_id, sender_id=sender_id)

    def list_for_principal(self, principal: Principal, vendor_id: Optional[int] = None) -> List[Transfer]:
        """Transfers the caller sent plus transfers to vendors the caller registered."""
        ensure_active(principal)
        vendor_ids = self.vendors.ids_for_user(principal.id)
        return self.transfers.list_sent_or_received(principal.id, vendor_ids, vendor_id=vendor_id)

    def delete(self, transfer_id: int, principal: Principal) -> None:
        """
        Delete a transfer and its attached documents.

        Raises:
            NotFoundError: Unknown transfer
            ForbiddenError: Caller is neither manager nor sender
        """
        transfer = self.transfers.get_detail(transfer_id)
        if not transfer:
            raise NotFoundError("Transfer", transfer_id)
        if not principal.is_manager and transfer.sender_id != principal.id:
            logger.warning("Transfer delete rejected", transfer_id=transfer_id, principal_id=principal.id)
            raise ForbiddenError("Only managers or the sender can delete a transfer")
        ensure_active(principal)

        paths = [doc.path for doc in self.documents.list_for_transfer(transfer.id)]
        with transaction(self.db):
            self.transfers.delete(transfer)

        for path in paths:
            if not self.document_store:
                break
            try:
                self.document_store.delete(path)
            except DocumentStorageError as e:
                logger.warning("Stored file left behind", path=path, error=str(e))

        logger.info("Transfer deleted", transfer_id=transfer_id, documents=len(paths))

    def total_amount(self, container_id: int) -> float:
        """Sum of every transfer recorded against the container."""
        return self.transfers.total_amount(container_id)
