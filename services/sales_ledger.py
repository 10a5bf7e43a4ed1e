"""Sales & expense ledger: destination-market revenue and cost lines (AED)."""
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from sqlalchemy.orm import Session

from models import Container, ContainerStatus, ExpenseCategory, ExpenseItem, SaleItem
from repositories import ContainerRepository, SalesRepository, transaction
from services.access import Principal, ensure_manager, ensure_owner_or_manager
from exceptions import ContainerNotCompletedError, InvalidInputError, NotFoundError
from utils.validation import coerce_amount, coerce_int, optional_string
from constants import MAX_DESCRIPTION_LENGTH
from config import get_settings
from logging_config import get_logger

logger = get_logger(__name__)
settings = get_settings()

# Labels used by the sales entry sheet
_CATEGORY_ALIASES = {
    "labors_tips": ExpenseCategory.LABOR_TIPS,
    "labour_tips": ExpenseCategory.LABOR_TIPS,
    "overexpend": ExpenseCategory.OVER_EXPEND,
    "rent": ExpenseCategory.AREA_RENT,
}


def parse_category(value: Any) -> ExpenseCategory:
    """
    Normalize an expense category.

    Accepts the enum values as well as display labels such as
    "PORT", "Area Rent" or "Labors Tips".

    Raises:
        InvalidInputError: Missing or unknown category
    """
    if isinstance(value, ExpenseCategory):
        return value
    if value is None or not str(value).strip():
        raise InvalidInputError("Expense category is required")

    key = str(value).strip().lower().replace("-", "_").replace(" ", "_")
    if key in _CATEGORY_ALIASES:
        return _CATEGORY_ALIASES[key]
    try:
        return ExpenseCategory(key)
    except ValueError as e:
        allowed = ", ".join(c.value for c in ExpenseCategory)
        raise InvalidInputError(f"Unknown expense category {value!r}. Must be one of: {allowed}") from e


def normalize_sale(raw: Mapping[str, Any], position: int = 0) -> dict:
    label = f"Sale {position + 1}"
    return {
        "number": coerce_int(raw.get("number"), f"{label} number"),
        "item": optional_string(raw.get("item"), 255),
        "sale_price": coerce_amount(raw.get("sale_price", raw.get("price")), f"{label} price"),
        "lot_number": optional_string(raw.get("lot_number"), 100),
        "note": optional_string(raw.get("note"), MAX_DESCRIPTION_LENGTH),
    }


def normalize_expense(raw: Mapping[str, Any], position: int = 0) -> dict:
    label = f"Expense {position + 1}"
    return {
        "category": parse_category(raw.get("category")),
        "amount": coerce_amount(raw.get("amount"), f"{label} amount"),
        "description": optional_string(raw.get("description"), MAX_DESCRIPTION_LENGTH),
    }


def sale_view(sale: SaleItem) -> dict:
    return {
        "id": sale.id,
        "number": sale.number,
        "item": sale.item,
        "sale_price": sale.sale_price,
        "lot_number": sale.lot_number,
        "note": sale.note,
        "created_at": sale.created_at,
    }


def expense_view(expense: ExpenseItem) -> dict:
    return {
        "id": expense.id,
        "category": ExpenseCategory(expense.category).value,
        "amount": expense.amount,
        "description": expense.description,
        "created_at": expense.created_at,
    }


class SalesExpenseLedger:
    """
    Records what a completed container earned and cost in the destination market.

    Both line sets of a container are always replaced together, so saving the
    same sheet twice leaves the same ledger behind.
    """

    def __init__(self, db: Session):
        """
        Initialize sales ledger.

        Args:
            db: Database session
        """
        self.db = db
        self.sales = SalesRepository(db)
        self.containers = ContainerRepository(db)

    def _get_container(self, container_id: int) -> Container:
        container = self.containers.get_by_id(container_id)
        if not container:
            raise NotFoundError("Container", container_id)
        return container

    def replace(
        self,
        container_id: int,
        principal: Principal,
        sales: Optional[Iterable[Mapping[str, Any]]] = None,
        expenses: Optional[Iterable[Mapping[str, Any]]] = None,
    ) -> Tuple[List[SaleItem], List[ExpenseItem]]:
        """
        Replace a container's sale and expense lines in one transaction.

        Args:
            container_id: Container ID
            principal: Caller; must be a manager
            sales: New sale lines (AED)
            expenses: New expense lines (AED)

        Returns:
            (sales, expenses) as stored

        Raises:
            ForbiddenError: Caller is not a manager
            NotFoundError: Unknown container
            ContainerNotCompletedError: Container has not reached completed
            InvalidInputError: Bad numeric value or category
        """
        ensure_manager(principal, "record sales and expenses")
        container = self._get_container(container_id)

        status = ContainerStatus(container.status)
        if settings.gate_sales_on_completed and status != ContainerStatus.COMPLETED:
            raise ContainerNotCompletedError(
                "Sales and expenses can only be recorded for completed containers",
                {"container_id": container.id, "status": status.value},
            )

        sale_rows = [normalize_sale(raw, i) for i, raw in enumerate(sales or [])]
        expense_rows = [normalize_expense(raw, i) for i, raw in enumerate(expenses or [])]

        with transaction(self.db):
            removed_sales, removed_expenses = self.sales.delete_for_container(container.id)
            self.db.expire(container, ["sales", "expenses"])
            self.sales.bulk_create([
                {**row, "container_id": container.id, "user_id": principal.id}
                for row in sale_rows
            ])
            self.sales.add_expenses([
                {**row, "container_id": container.id, "user_id": principal.id}
                for row in expense_rows
            ])

        logger.info(
            "Sales ledger replaced",
            container_id=container.id,
            removed_sales=removed_sales,
            removed_expenses=removed_expenses,
            sales=len(sale_rows),
            expenses=len(expense_rows),
        )
        return self.sales.list_sales(container.id), self.sales.list_expenses(container.id)

    def get_ledger(self, container_id: int, principal: Principal) -> dict:
        """
        Sale and expense lines of a container with their totals.

        Managers may read any container; users only containers they own.
        """
        container = self._get_container(container_id)
        ensure_owner_or_manager(principal, container.user_id, "container", "view sales of")
        sales = self.sales.list_sales(container.id)
        expenses = self.sales.list_expenses(container.id)
        return {
            "container_id": container.id,
            "container_code": container.container_code,
            "status": ContainerStatus(container.status).value,
            "sales": [sale_view(s) for s in sales],
            "expenses": [expense_view(e) for e in expenses],
            "total_sales": round(sum(s.sale_price or 0.0 for s in sales), 2),
            "total_expenses": round(sum(e.amount or 0.0 for e in expenses), 2),
        }

    def total_sales(self, container_id: int) -> float:
        return self.sales.total_sales(container_id)

    def total_expenses(self, container_id: int) -> float:
        return self.sales.total_expenses(container_id)

    def list_sold_containers(self, principal: Principal) -> List[Container]:
        """Containers with at least one sale line (manager only)."""
        ensure_manager(principal, "list sold containers")
        return self.sales.sold_containers()
