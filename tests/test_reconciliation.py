"""Tests for currency & profit reconciliation."""
from datetime import datetime

import pytest

from models import ExpenseCategory, ExpenseItem, SaleItem
from exceptions import ConfigurationError, ForbiddenError, InvalidInputError
from services import ReconciliationEngine, SalesExpenseLedger, TransferLedger

RATE = 3.67


@pytest.fixture
def engine_(db_session):
    return ReconciliationEngine(db_session, rate=RATE)


def _complete(lifecycle, container, principal):
    lifecycle.set_status(container.id, principal, "shipped")
    lifecycle.set_status(container.id, principal, "completed")


def _pay(db_session, principal, vendor, container, amount):
    TransferLedger(db_session).create(
        principal,
        vendor_id=vendor.id,
        container_id=container.id,
        amount=amount,
        transfer_type="bank",
        transfer_date="2025-02-01",
    )


def test_rate_must_be_positive(db_session):
    with pytest.raises(ConfigurationError):
        ReconciliationEngine(db_session, rate=0)


def test_profit_formula(engine_):
    assert engine_.compute_profit(1000, 5000, 500) == 830.0


def test_profit_uses_injected_rate(db_session):
    assert ReconciliationEngine(db_session, rate=2).compute_profit(100, 500, 50) == 250.0


def test_balance_formula(engine_, lifecycle, alice, vendor, db_session):
    container = lifecycle.create(
        alice, vendor_id=vendor.id, container_code="BAL", rent=1000,
    )
    _pay(db_session, alice, vendor, container, 400)
    _pay(db_session, alice, vendor, container, 250)

    balance = engine_.container_balance(container.id, alice)

    assert balance.grand_total == 1000.0
    assert balance.total_transfers == 650.0
    assert balance.remaining == 350.0


def test_full_lifecycle_scenario(engine_, lifecycle, container, alice, manager, vendor, db_session):
    assert container.grand_total == 365.0

    _pay(db_session, alice, vendor, container, 200)
    assert engine_.container_balance(container.id, alice).remaining == 165.0

    _complete(lifecycle, container, alice)
    SalesExpenseLedger(db_session).replace(
        container.id,
        manager,
        sales=[{"number": 1, "sale_price": 500}],
        expenses=[{"category": "port", "amount": 50}],
    )

    profit = engine_.container_profit(container.id, alice)
    assert profit.cost_aed == 1339.55
    assert profit.profit_aed == -889.55


def test_container_reads_respect_ownership(engine_, container, bob, manager):
    with pytest.raises(ForbiddenError):
        engine_.container_profit(container.id, bob)
    with pytest.raises(ForbiddenError):
        engine_.container_balance(container.id, bob)

    assert engine_.container_profit(container.id, manager).profit_aed == -1339.55


def test_user_rollup(engine_, lifecycle, container, alice, bob, manager, vendor, db_session):
    _complete(lifecycle, container, alice)
    SalesExpenseLedger(db_session).replace(
        container.id, manager, [{"sale_price": 2000}], [{"category": "port", "amount": 100}]
    )

    rollups = {r.username: r for r in engine_.user_rollup(manager)}

    assert set(rollups) == {"alice", "bob"}
    assert rollups["alice"].container_count == 1
    assert rollups["alice"].total_cost_usd == 365.0
    assert rollups["alice"].net_profit_aed == round(2000 - 100 - 365 * RATE, 2)
    assert rollups["bob"].container_count == 0
    assert rollups["bob"].net_profit_aed == 0.0

    with pytest.raises(ForbiddenError):
        engine_.user_rollup(alice)


def test_manager_report_summary(engine_, container, manager, bob):
    report = engine_.manager_report(manager)

    assert report["summary"]["total_users"] == 2
    assert report["summary"]["total_containers"] == 1
    assert report["summary"]["total_cost_usd"] == 365.0


def test_vendor_rollup(engine_, lifecycle, container, alice, manager, vendor, bob_vendor):
    lifecycle.create(alice, vendor_id=vendor.id, container_code="C2", rent=35)
    lifecycle.create(alice, vendor_id=bob_vendor.id, container_code="C3", rent=10)

    rollups = {r.vendor_id: r for r in engine_.vendor_rollup(manager)}

    assert rollups[vendor.id].container_count == 2
    assert rollups[vendor.id].total_grand_total == 400.0
    assert rollups[bob_vendor.id].company_name == "Bob Salvage"


def _sale(db_session, container, user, price, created_at):
    db_session.add(SaleItem(
        container_id=container.id, user_id=user.id, sale_price=price, created_at=created_at
    ))


def _expense(db_session, container, user, amount, created_at):
    db_session.add(ExpenseItem(
        container_id=container.id, user_id=user.id, category=ExpenseCategory.PORT,
        amount=amount, created_at=created_at,
    ))


def test_revenue_series_buckets_by_month(engine_, container, manager, manager_user, db_session):
    container.created_at = datetime(2025, 1, 20)
    _sale(db_session, container, manager_user, 1000, datetime(2025, 2, 10))
    _sale(db_session, container, manager_user, 500, datetime(2025, 2, 25))
    _expense(db_session, container, manager_user, 100, datetime(2025, 4, 1))
    _sale(db_session, container, manager_user, 999, datetime(2023, 1, 1))
    db_session.commit()

    series = engine_.revenue_series(manager, "year", now=datetime(2025, 6, 1))

    assert [p.period for p in series] == ["2025-01", "2025-02", "2025-04"]
    january, february, april = series
    assert january.revenue == 0.0
    assert january.cost == round(365 * RATE, 2)
    assert february.revenue == 1500.0
    assert february.profit == 1500.0
    assert april.profit == -100.0
    assert february.label == "Feb 25"


def test_revenue_series_week_range_is_sparse(engine_, container, manager, db_session):
    container.created_at = datetime(2025, 1, 1)
    db_session.commit()

    assert engine_.revenue_series(manager, "week", now=datetime(2025, 6, 1)) == []


def test_revenue_series_rejects_unknown_range(engine_, manager):
    with pytest.raises(InvalidInputError):
        engine_.revenue_series(manager, "decade")


def test_dashboard_summary(engine_, lifecycle, container, alice, manager, vendor, inactive_user, db_session):
    lifecycle.create(alice, vendor_id=vendor.id, container_code="C2")
    _complete(lifecycle, container, alice)
    SalesExpenseLedger(db_session).replace(
        container.id, manager, [{"sale_price": 2000}], [{"category": "port", "amount": 100}]
    )

    stats = engine_.dashboard_summary(manager)

    assert stats.total_vendors == 1
    assert stats.total_users == 1
    assert stats.total_containers == 2
    assert stats.pending_containers == 1
    assert stats.completed_containers == 1
    assert stats.shipped_containers == 0
    assert stats.total_revenue == 2000.0
    assert stats.total_costs == round(100 + 365 * RATE)
    assert stats.net_profit == round(2000 - 100 - 365 * RATE)
    assert stats.profit_margin == round((2000 - 100 - 365 * RATE) / 2000 * 100)
    assert stats.monthly_revenue == 2000


def test_dashboard_margin_is_zero_without_revenue(engine_, container, manager):
    stats = engine_.dashboard_summary(manager)

    assert stats.total_revenue == 0.0
    assert stats.profit_margin == 0


def test_status_breakdown(engine_, lifecycle, container, alice, manager, vendor):
    lifecycle.create(alice, vendor_id=vendor.id, container_code="C2")
    lifecycle.create(alice, vendor_id=vendor.id, container_code="C3")
    lifecycle.set_status(container.id, alice, "shipped")

    breakdown = {row["status"]: row for row in engine_.container_status_breakdown(manager)}

    assert breakdown["pending"] == {"status": "pending", "count": 2, "percentage": 67}
    assert breakdown["shipped"]["percentage"] == 33
    assert breakdown["completed"]["count"] == 0


def test_profit_by_status(engine_, lifecycle, container, alice, manager, vendor, db_session):
    _complete(lifecycle, container, alice)
    SalesExpenseLedger(db_session).replace(container.id, manager, [{"sale_price": 5000}], [])
    lifecycle.create(alice, vendor_id=vendor.id, container_code="C2", rent=100)

    totals = engine_.profit_by_status(manager)

    assert totals["completed"] == round(5000 - 365 * RATE, 2)
    assert totals["pending"] == round(-100 * RATE, 2)
    assert totals["shipped"] == 0.0


def test_sold_containers_include_profit(engine_, lifecycle, container, alice, manager, db_session):
    _complete(lifecycle, container, alice)
    SalesExpenseLedger(db_session).replace(container.id, manager, [{"sale_price": 5000}], [])

    sold = engine_.sold_containers(manager)

    assert len(sold) == 1
    assert sold[0]["container_code"] == "CONT-001"
    assert sold[0]["profit_aed"] == round(5000 - 365 * RATE, 2)
    assert sold[0]["item_count"] == 2
