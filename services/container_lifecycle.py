"""Container lifecycle: identity, status transitions, ownership and totals."""
from datetime import date
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models import Container, ContainerStatus, ContentItem
from repositories import (
    ContainerRepository,
    ContentRepository,
    DocumentRepository,
    SalesRepository,
    TransferRepository,
    VendorRepository,
    transaction,
)
from services.access import Principal, ensure_active, ensure_owner_or_manager
from services.content_ledger import ContentLedger, normalize_items
from integrations.document_store import DocumentStore
from exceptions import (
    ContainerHasLedgerEntriesError,
    DatabaseError,
    DocumentStorageError,
    DuplicateBusinessCodeError,
    InvalidInputError,
    InvalidStatusTransitionError,
    NotFoundError,
)
from utils.validation import (
    coerce_amount,
    optional_string,
    parse_date,
    validate_business_code,
)
from constants import MAX_CITY_LENGTH
from config import get_settings
from logging_config import get_logger

logger = get_logger(__name__)
settings = get_settings()


# Forward-only transition table; re-setting the current status is a no-op
ALLOWED_TRANSITIONS: Dict[ContainerStatus, frozenset] = {
    ContainerStatus.PENDING: frozenset({ContainerStatus.SHIPPED}),
    ContainerStatus.SHIPPED: frozenset({ContainerStatus.COMPLETED}),
    ContainerStatus.COMPLETED: frozenset(),
}


class Projection(str, Enum):
    """Named read shapes for containers."""
    SUMMARY = "summary"
    DETAIL = "detail"


def parse_status(value: Any) -> ContainerStatus:
    """
    Parse a status value.

    Raises:
        InvalidInputError: If the value is not pending, shipped or completed
    """
    if isinstance(value, ContainerStatus):
        return value
    try:
        return ContainerStatus(str(value).strip().lower())
    except ValueError as e:
        raise InvalidInputError(
            f"Invalid status {value!r}. Must be one of: pending, shipped, completed"
        ) from e


def can_transition(current: ContainerStatus, target: ContainerStatus) -> bool:
    """Whether a container may move from current to target."""
    return current == target or target in ALLOWED_TRANSITIONS[current]


def summary_view(container: Container) -> dict:
    """Minimal listing projection."""
    return {
        "id": container.id,
        "container_code": container.container_code,
        "status": ContainerStatus(container.status).value,
        "city": container.city,
        "purchase_date": container.purchase_date,
    }


def content_view(item: ContentItem) -> dict:
    return {
        "id": item.id,
        "number": item.number,
        "item": item.item,
        "model": item.model,
        "year": item.year,
        "lot_number": item.lot_number,
        "price": item.price,
        "recovery": item.recovery,
        "cutting": item.cutting,
        "total": item.total,
    }


def detail_view(container: Container) -> dict:
    """Full projection: contents, vendor, documents and owner."""
    vendor = container.vendor
    user = container.user
    return {
        **summary_view(container),
        "rent": container.rent,
        "grand_total": container.grand_total,
        "vendor_id": container.vendor_id,
        "user_id": container.user_id,
        "created_at": container.created_at,
        "updated_at": container.updated_at,
        "contents": [content_view(item) for item in container.contents],
        "vendor": {
            "id": vendor.id,
            "company_name": vendor.company_name,
            "representative_name": vendor.representative_name,
            "country": vendor.country,
        } if vendor else None,
        "documents": [
            {
                "id": doc.id,
                "original_name": doc.original_name,
                "path": doc.path,
                "type": doc.doc_type,
                "transfer_id": doc.transfer_id,
                "created_at": doc.created_at,
            }
            for doc in container.documents
        ],
        "user": {"id": user.id, "username": user.username, "name": user.name} if user else None,
    }


def project(container: Container, projection: Projection) -> dict:
    if projection == Projection.DETAIL:
        return detail_view(container)
    return summary_view(container)


class ContainerLifecycleManager:
    """Owns container identity, status and the grand-total invariant."""

    def __init__(self, db: Session, document_store: Optional[DocumentStore] = None):
        """
        Initialize lifecycle manager.

        Args:
            db: Database session
            document_store: Store used to remove files when a container is deleted
        """
        self.db = db
        self.document_store = document_store
        self.containers = ContainerRepository(db)
        self.contents_repo = ContentRepository(db)
        self.vendors = VendorRepository(db)
        self.transfers = TransferRepository(db)
        self.sales = SalesRepository(db)
        self.documents = DocumentRepository(db)
        self.contents = ContentLedger(db, on_contents_changed=self.recompute_grand_total)

    # ------------------------------------------------------------------ #
    # Invariant
    # ------------------------------------------------------------------ #

    def recompute_grand_total(self, container: Container) -> float:
        """
        Recompute grand total = rent + sum(content.total) from stored lines.

        Args:
            container: Container to update (flushed, not committed)

        Returns:
            The new grand total
        """
        grand_total = round((container.rent or 0.0) + self.contents_repo.sum_totals(container.id), 2)
        container.grand_total = grand_total
        self.db.flush()
        logger.debug("Grand total recomputed", container_id=container.id, grand_total=grand_total)
        return grand_total

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    def get_container(self, container_id: int, principal: Principal) -> Container:
        """
        Load a container the caller may see.

        Raises:
            NotFoundError: If the container does not exist
            ForbiddenError: If a non-manager asks for someone else's container
        """
        container = self.containers.get_detail(container_id)
        if not container:
            raise NotFoundError("Container", container_id)
        ensure_owner_or_manager(principal, container.user_id, "container", "view")
        return container

    def describe(
        self,
        container_id: int,
        principal: Principal,
        projection: Projection = Projection.DETAIL,
    ) -> dict:
        """Project one container as plain data."""
        return project(self.get_container(container_id, principal), projection)

    def list_containers(
        self,
        principal: Principal,
        projection: Projection = Projection.SUMMARY,
        status: Optional[ContainerStatus] = None,
    ) -> List[dict]:
        """
        List containers visible to the caller, newest first.

        Managers see every container; everyone else only sees their own,
        whatever scope they ask for.
        """
        ensure_active(principal)
        owner_id = None if principal.is_manager else principal.id
        containers = self.containers.list_containers(
            user_id=owner_id,
            status=status,
            with_details=projection == Projection.DETAIL,
        )
        return [project(container, projection) for container in containers]

    def list_contents(self, container_id: int, principal: Principal) -> List[ContentItem]:
        return self.contents.list_contents(container_id, principal)

    # ------------------------------------------------------------------ #
    # Writes
    # ------------------------------------------------------------------ #

    def _require_vendor(self, vendor_id: Any) -> int:
        if vendor_id in (None, ""):
            raise InvalidInputError("Vendor is required")
        vendor = self.vendors.get_by_id(vendor_id)
        if not vendor:
            raise NotFoundError("Vendor", vendor_id)
        return vendor.id

    def _ensure_code_available(self, owner_id: int, code: str, exclude_id: Optional[int] = None) -> None:
        existing = self.containers.get_by_code_for_owner(owner_id, code)
        if existing and existing.id != exclude_id:
            raise DuplicateBusinessCodeError(
                f"Container with code {code!r} already exists",
                {"container_code": code, "container_id": existing.id},
            )

    @staticmethod
    def _duplicate_code(error: DatabaseError, code: str) -> Optional[DuplicateBusinessCodeError]:
        """Map a unique-constraint failure on (owner, code) lost to a concurrent writer."""
        cause = error.__cause__
        if not isinstance(cause, IntegrityError):
            return None
        message = str(cause.orig)
        if "uq_container_owner_code" not in message and "container_code" not in message:
            return None
        return DuplicateBusinessCodeError(
            f"Container with code {code!r} already exists",
            {"container_code": code},
        )

    def _apply_status(self, container: Container, target: ContainerStatus) -> None:
        current = ContainerStatus(container.status)
        if settings.enforce_status_transitions and not can_transition(current, target):
            raise InvalidStatusTransitionError(
                f"Cannot move container from {current.value} to {target.value}",
                {"from": current.value, "to": target.value},
            )
        container.status = target

    def create(
        self,
        principal: Principal,
        vendor_id: Any,
        container_code: Optional[str],
        city: Optional[str] = None,
        purchase_date: Any = None,
        rent: Any = None,
        contents: Optional[Iterable[Mapping[str, Any]]] = None,
    ) -> Container:
        """
        Create a pending container with its initial content set.

        Args:
            principal: Owning user
            vendor_id: Vendor the contents are bought from
            container_code: Business code, unique per owner
            city: Origin city
            purchase_date: Acquisition date (default: today)
            rent: Rent cost in USD
            contents: Initial content lines

        Returns:
            The persisted container with grand total computed

        Raises:
            InvalidInputError: Missing code/vendor or non-numeric values
            NotFoundError: Unknown vendor
            DuplicateBusinessCodeError: Code already used by this owner
        """
        ensure_active(principal)
        code = validate_business_code(container_code)
        vendor_pk = self._require_vendor(vendor_id)
        rows = normalize_items(contents)
        rent_value = coerce_amount(rent, "Rent")

        self._ensure_code_available(principal.id, code)

        try:
            with transaction(self.db):
                container = self.containers.create(
                    container_code=code,
                    status=ContainerStatus.PENDING,
                    city=optional_string(city, MAX_CITY_LENGTH),
                    purchase_date=parse_date(purchase_date, "Date", default=date.today()),
                    rent=rent_value,
                    grand_total=0.0,
                    user_id=principal.id,
                    vendor_id=vendor_pk,
                )
                self.contents.write_contents(container, rows)
        except DatabaseError as e:
            duplicate = self._duplicate_code(e, code)
            if duplicate:
                raise duplicate from e
            raise

        logger.info(
            "Container created",
            container_id=container.id,
            container_code=code,
            owner_id=principal.id,
            item_count=len(rows),
            grand_total=container.grand_total,
        )
        return container

    def update(
        self,
        container_id: int,
        principal: Principal,
        vendor_id: Any,
        container_code: Optional[str],
        city: Optional[str] = None,
        purchase_date: Any = None,
        rent: Any = None,
        status: Any = None,
        contents: Optional[Iterable[Mapping[str, Any]]] = None,
    ) -> Container:
        """
        Update a container's fields and replace its contents.

        ``contents=None`` keeps the stored lines; any list (including an
        empty one) replaces them. The grand total is recomputed either way.

        Raises:
            NotFoundError: Unknown container or vendor
            ForbiddenError: Caller is neither owner nor manager
            DuplicateBusinessCodeError: New code clashes with another container
            InvalidStatusTransitionError: Status move not allowed
        """
        container = self.containers.get_by_id(container_id)
        if not container:
            raise NotFoundError("Container", container_id)
        ensure_owner_or_manager(principal, container.user_id, "container", "update")

        code = validate_business_code(container_code)
        vendor_pk = self._require_vendor(vendor_id)
        rows = normalize_items(contents) if contents is not None else None
        rent_value = coerce_amount(rent, "Rent")
        target_status = parse_status(status) if status not in (None, "") else None

        self._ensure_code_available(container.user_id, code, exclude_id=container.id)

        try:
            with transaction(self.db):
                container.container_code = code
                container.vendor_id = vendor_pk
                container.city = optional_string(city, MAX_CITY_LENGTH)
                container.purchase_date = parse_date(purchase_date, "Date", default=container.purchase_date)
                container.rent = rent_value
                if target_status is not None:
                    self._apply_status(container, target_status)

                if rows is not None:
                    self.contents.write_contents(container, rows)
                else:
                    self.recompute_grand_total(container)
        except DatabaseError as e:
            duplicate = self._duplicate_code(e, code)
            if duplicate:
                raise duplicate from e
            raise

        logger.info(
            "Container updated",
            container_id=container.id,
            principal_id=principal.id,
            grand_total=container.grand_total,
        )
        return container

    def set_status(self, container_id: int, principal: Principal, new_status: Any) -> Container:
        """
        Move a container along pending -> shipped -> completed.

        Raises:
            InvalidInputError: Unknown status value
            NotFoundError: Unknown container
            ForbiddenError: Caller is neither owner nor manager
            InvalidStatusTransitionError: Backward or skipping move
        """
        target = parse_status(new_status)
        container = self.containers.get_by_id(container_id)
        if not container:
            raise NotFoundError("Container", container_id)
        ensure_owner_or_manager(principal, container.user_id, "container", "change status of")

        previous = ContainerStatus(container.status)
        with transaction(self.db):
            self._apply_status(container, target)

        logger.info(
            "Container status changed",
            container_id=container.id,
            from_status=previous.value,
            to_status=target.value,
        )
        return container

    def delete(self, container_id: int, principal: Principal) -> None:
        """
        Delete a container, its content lines and its documents.

        Containers still referenced by transfers, sale lines or expense
        lines are not deleted.

        Raises:
            NotFoundError: Unknown container
            ForbiddenError: Caller is neither owner nor manager
            ContainerHasLedgerEntriesError: Transfers or sales exist
        """
        container = self.containers.get_by_id(container_id)
        if not container:
            raise NotFoundError("Container", container_id)
        ensure_owner_or_manager(principal, container.user_id, "container", "delete")

        transfer_count = self.transfers.count_for_container(container.id)
        sales_lines = self.sales.count_lines(container.id)
        if transfer_count or sales_lines:
            raise ContainerHasLedgerEntriesError(
                "Container has transfers or sales recorded and cannot be deleted",
                {"transfers": transfer_count, "sales_and_expenses": sales_lines},
            )

        documents = self.documents.list_for_container(container.id)
        paths = [doc.path for doc in documents]

        with transaction(self.db):
            for doc in documents:
                self.documents.delete(doc)
            self.contents_repo.delete_for_container(container.id)
            self.db.expire(container, ["contents"])
            self.containers.delete(container)

        self._remove_files(paths)
        logger.info("Container deleted", container_id=container_id, principal_id=principal.id)

    def _remove_files(self, paths: List[str]) -> None:
        if not self.document_store:
            return
        for path in paths:
            try:
                self.document_store.delete(path)
            except DocumentStorageError as e:
                logger.warning("Stored file left behind", path=path, error=str(e))
