"""Content ledger: per-item acquisition cost lines of a container."""
from typing import Any, Callable, Iterable, List, Mapping

from sqlalchemy.orm import Session

from models import Container, ContentItem
from repositories import ContainerRepository, ContentRepository, transaction
from services.access import Principal, ensure_owner_or_manager
from exceptions import NotFoundError
from utils.validation import coerce_amount, coerce_int, optional_string
from logging_config import get_logger

logger = get_logger(__name__)

COST_FIELDS = ("price", "recovery", "cutting")


def line_total(price: float, recovery: float, cutting: float) -> float:
    """Line total is always the sum of the three cost components."""
    return round(price + recovery + cutting, 2)


def normalize_item(raw: Mapping[str, Any], position: int = 0) -> dict:
    """
    Validate and coerce one client-supplied content line.

    Absent numerics default to 0 and any client-supplied total is ignored.

    Args:
        raw: Line as received (dict-like)
        position: Index in the submitted list, used in error messages

    Returns:
        Column values for a ContentItem, including the computed total
    """
    label = f"Item {position + 1}"
    costs = {
        field: coerce_amount(raw.get(field), f"{label} {field}")
        for field in COST_FIELDS
    }
    return {
        "number": coerce_int(raw.get("number"), f"{label} number"),
        "item": optional_string(raw.get("item"), 255),
        "model": optional_string(raw.get("model"), 255),
        "year": optional_string(raw.get("year"), 10),
        "lot_number": optional_string(raw.get("lot_number"), 100),
        **costs,
        "total": line_total(costs["price"], costs["recovery"], costs["cutting"]),
    }


def normalize_items(items: Iterable[Mapping[str, Any]] | None) -> List[dict]:
    """Normalize a full submitted content list (None means empty)."""
    return [normalize_item(raw, position) for position, raw in enumerate(items or [])]


class ContentLedger:
    """
    Stores the content lines of a container.

    The ledger does not own the container's grand total; every mutation
    calls ``on_contents_changed`` so the lifecycle manager can recompute it
    inside the same transaction.
    """

    def __init__(self, db: Session, on_contents_changed: Callable[[Container], float]):
        """
        Initialize content ledger.

        Args:
            db: Database session
            on_contents_changed: Called with the container after each mutation
        """
        self.db = db
        self.containers = ContainerRepository(db)
        self.contents = ContentRepository(db)
        self.on_contents_changed = on_contents_changed

    def _get_container(self, container_id: int) -> Container:
        container = self.containers.get_by_id(container_id)
        if not container:
            raise NotFoundError("Container", container_id)
        return container

    def write_contents(self, container: Container, rows: List[dict]) -> List[ContentItem]:
        """
        Delete-then-insert a normalized content set inside the caller's transaction.

        Args:
            container: Target container
            rows: Output of normalize_items()

        Returns:
            New content items ordered by sequence number
        """
        removed = self.contents.delete_for_container(container.id)
        self.contents.bulk_create([{**row, "container_id": container.id} for row in rows])
        self.db.expire(container, ["contents"])
        self.on_contents_changed(container)
        logger.info(
            "Contents replaced",
            container_id=container.id,
            removed=removed,
            inserted=len(rows),
        )
        return self.contents.list_for_container(container.id)

    def replace_contents(
        self,
        container_id: int,
        items: Iterable[Mapping[str, Any]],
        principal: Principal,
    ) -> List[ContentItem]:
        """
        Replace a container's content lines wholesale.

        Args:
            container_id: Container ID
            items: New content lines (totals are recomputed)
            principal: Caller; must own the container or be a manager

        Returns:
            The recomputed set ordered by sequence number

        Raises:
            NotFoundError: If the container does not exist
            ForbiddenError: If the caller may not edit the container
            InvalidInputError: If a numeric field is not numeric
        """
        container = self._get_container(container_id)
        ensure_owner_or_manager(principal, container.user_id, "container", "edit contents of")
        rows = normalize_items(items)

        with transaction(self.db):
            return self.write_contents(container, rows)

    def list_contents(self, container_id: int, principal: Principal) -> List[ContentItem]:
        """Content lines of a container, ordered by sequence number."""
        container = self._get_container(container_id)
        ensure_owner_or_manager(principal, container.user_id, "container", "view contents of")
        return self.contents.list_for_container(container_id)

    def delete_item(self, item_id: int, principal: Principal) -> Container:
        """
        Remove one content line without touching its siblings.

        Args:
            item_id: Content item ID
            principal: Caller; must own the parent container or be a manager

        Returns:
            The parent container with its grand total recomputed
        """
        item = self.contents.get_by_id(item_id)
        if not item:
            raise NotFoundError("Content item", item_id)

        container = self._get_container(item.container_id)
        ensure_owner_or_manager(principal, container.user_id, "container", "delete contents of")

        with transaction(self.db):
            self.contents.delete(item)
            self.db.expire(container, ["contents"])
            self.on_contents_changed(container)

        logger.info("Content item deleted", item_id=item_id, container_id=container.id)
        return container
