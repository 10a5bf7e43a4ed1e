"""Tests for the sales & expense ledger."""
import pytest
from sqlalchemy.exc import OperationalError

from models import ExpenseCategory
from exceptions import (
    ContainerNotCompletedError,
    DatabaseError,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
)
from repositories import SalesRepository
from services import SalesExpenseLedger
from services.sales_ledger import parse_category

SALES = [
    {"number": 1, "item": "Engine", "sale_price": 300, "lot_number": "L1"},
    {"number": 2, "item": "Door", "sale_price": "200"},
]
EXPENSES = [
    {"category": "PORT", "amount": 30},
    {"category": "Labors Tips", "amount": 20, "description": "crew"},
]


@pytest.fixture
def ledger(db_session):
    return SalesExpenseLedger(db_session)


@pytest.fixture
def completed(lifecycle, container, alice):
    lifecycle.set_status(container.id, alice, "shipped")
    return lifecycle.set_status(container.id, alice, "completed")


def test_replace_records_both_sets(ledger, completed, manager):
    sales, expenses = ledger.replace(completed.id, manager, SALES, EXPENSES)

    assert [s.sale_price for s in sales] == [300.0, 200.0]
    assert [e.category for e in expenses] == [ExpenseCategory.PORT, ExpenseCategory.LABOR_TIPS]
    assert all(s.user_id == manager.id for s in sales)
    assert ledger.total_sales(completed.id) == 500.0
    assert ledger.total_expenses(completed.id) == 50.0


def test_replace_is_idempotent(ledger, completed, manager):
    ledger.replace(completed.id, manager, SALES, EXPENSES)
    sales, expenses = ledger.replace(completed.id, manager, SALES, EXPENSES)

    assert len(sales) == 2
    assert len(expenses) == 2
    assert ledger.total_sales(completed.id) == 500.0


def test_replace_with_empty_sets_clears_ledger(ledger, completed, manager):
    ledger.replace(completed.id, manager, SALES, EXPENSES)
    ledger.replace(completed.id, manager, [], [])

    assert ledger.total_sales(completed.id) == 0.0
    assert ledger.total_expenses(completed.id) == 0.0


def test_replace_bad_category_keeps_previous_ledger(ledger, completed, manager):
    ledger.replace(completed.id, manager, SALES, EXPENSES)

    with pytest.raises(InvalidInputError):
        ledger.replace(completed.id, manager, [{"sale_price": 1}], [{"category": "bribes", "amount": 1}])

    assert ledger.total_sales(completed.id) == 500.0


def _fail_expense_insert(self, rows):
    raise OperationalError("INSERT INTO expense_items", {}, Exception("disk I/O error"))


def test_replace_rolls_back_when_insert_fails(ledger, completed, manager, monkeypatch):
    ledger.replace(completed.id, manager, SALES, EXPENSES)
    monkeypatch.setattr(SalesRepository, "add_expenses", _fail_expense_insert)

    with pytest.raises(DatabaseError):
        ledger.replace(completed.id, manager, [{"sale_price": 9}], [{"category": "port", "amount": 1}])

    view = ledger.get_ledger(completed.id, manager)
    assert [s["sale_price"] for s in view["sales"]] == [300.0, 200.0]
    assert view["total_sales"] == 500.0
    assert view["total_expenses"] == 50.0


def test_replace_is_manager_only(ledger, completed, alice):
    with pytest.raises(ForbiddenError):
        ledger.replace(completed.id, alice, SALES, EXPENSES)


def test_replace_requires_completed_container(ledger, container, manager):
    with pytest.raises(ContainerNotCompletedError):
        ledger.replace(container.id, manager, SALES, EXPENSES)


def test_replace_unknown_container(ledger, manager):
    with pytest.raises(NotFoundError):
        ledger.replace(999, manager, SALES, EXPENSES)


def test_get_ledger_access(ledger, completed, manager, alice, bob):
    ledger.replace(completed.id, manager, SALES, EXPENSES)

    view = ledger.get_ledger(completed.id, alice)
    assert view["total_sales"] == 500.0
    assert view["total_expenses"] == 50.0
    assert [e["category"] for e in view["expenses"]] == ["port", "labor_tips"]

    assert ledger.get_ledger(completed.id, manager)["status"] == "completed"
    with pytest.raises(ForbiddenError):
        ledger.get_ledger(completed.id, bob)


def test_sold_containers(ledger, completed, manager, alice, lifecycle, vendor):
    lifecycle.create(alice, vendor_id=vendor.id, container_code="UNSOLD")
    ledger.replace(completed.id, manager, SALES, [])

    sold = ledger.list_sold_containers(manager)

    assert [c.container_code for c in sold] == ["CONT-001"]
    with pytest.raises(ForbiddenError):
        ledger.list_sold_containers(alice)


@pytest.mark.parametrize("raw,expected", [
    ("PORT", ExpenseCategory.PORT),
    ("Area Rent", ExpenseCategory.AREA_RENT),
    ("area-rent", ExpenseCategory.AREA_RENT),
    ("Labors Tips", ExpenseCategory.LABOR_TIPS),
    ("Over Expend", ExpenseCategory.OVER_EXPEND),
])
def test_parse_category_labels(raw, expected):
    assert parse_category(raw) == expected


def test_parse_category_rejects_missing():
    with pytest.raises(InvalidInputError):
        parse_category("  ")
