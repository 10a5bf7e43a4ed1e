"""Currency & profit reconciliation across the container ledgers.

Every figure here is derived from the ledgers on each call; nothing is
cached or stored. Purchase cost is kept in USD and converted to AED with a
single fixed rate before it meets destination-market sales and expenses.
"""
from collections import defaultdict
from dataclasses import dataclass, asdict, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from models import Container, ContainerStatus, User
from repositories import (
    ContainerRepository,
    SalesRepository,
    TransferRepository,
    UserRepository,
    VendorRepository,
)
from services.access import Principal, ensure_manager, ensure_owner_or_manager
from exceptions import ConfigurationError, NotFoundError
from utils.date_helpers import month_key, month_label, range_start, start_of_month, utcnow_naive
from constants import RANGE_MONTH
from logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class ContainerProfit:
    """Profit of one container, in AED."""

    container_id: int
    container_code: str
    status: str
    grand_total_usd: float
    cost_aed: float
    total_sales_aed: float
    total_expenses_aed: float
    profit_aed: float

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


@dataclass
class ContainerBalance:
    """What is still owed to the vendor for one container, in USD."""

    container_id: int
    container_code: str
    grand_total: float
    total_transfers: float
    remaining: float

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


@dataclass
class UserRollup:
    """Totals across every container a user owns."""

    user_id: int
    username: str
    name: Optional[str]
    is_active: bool
    container_count: int
    total_cost_usd: float
    total_sales_aed: float
    total_expenses_aed: float
    net_profit_aed: float

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


@dataclass
class VendorRollup:
    vendor_id: int
    company_name: Optional[str]
    container_count: int
    total_grand_total: float

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


@dataclass
class PeriodTotals:
    """One calendar-month bucket of the revenue series."""

    period: str
    label: str
    revenue: float
    cost: float
    profit: float

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


@dataclass
class DashboardStats:
    total_vendors: int
    total_users: int
    total_containers: int
    pending_containers: int
    shipped_containers: int
    completed_containers: int
    total_revenue: float
    total_costs: float
    net_profit: float
    profit_margin: int
    monthly_revenue: float
    generated_at: datetime = field(default_factory=utcnow_naive)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


class ReconciliationEngine:
    """Combines purchase cost, transfers and sales into profit reports."""

    def __init__(self, db: Session, rate: float):
        """
        Initialize reconciliation engine.

        Args:
            db: Database session
            rate: USD -> AED multiplier

        Raises:
            ConfigurationError: If the rate is not positive
        """
        if rate is None or rate <= 0:
            raise ConfigurationError(f"Conversion rate must be positive, got {rate!r}")
        self.db = db
        self.rate = float(rate)
        self.containers = ContainerRepository(db)
        self.transfers = TransferRepository(db)
        self.sales = SalesRepository(db)
        self.vendors = VendorRepository(db)
        self.users = UserRepository(db)

    # ------------------------------------------------------------------ #
    # Formulas
    # ------------------------------------------------------------------ #

    def convert(self, amount_usd: float) -> float:
        """Convert a USD amount to AED."""
        return (amount_usd or 0.0) * self.rate

    def compute_profit(self, grand_total: float, total_sales: float, total_expenses: float) -> float:
        """profit = sales - expenses - grand_total * rate, rounded to fils."""
        return round((total_sales or 0.0) - (total_expenses or 0.0) - self.convert(grand_total), 2)

    def _profit_of_loaded(self, container: Container) -> ContainerProfit:
        """Profit of a container whose sales and expenses are already loaded."""
        return self._build_profit(
            container,
            sum(sale.sale_price or 0.0 for sale in container.sales),
            sum(expense.amount or 0.0 for expense in container.expenses),
        )

    def _build_profit(self, container: Container, total_sales: float, total_expenses: float) -> ContainerProfit:
        return ContainerProfit(
            container_id=container.id,
            container_code=container.container_code,
            status=ContainerStatus(container.status).value,
            grand_total_usd=container.grand_total or 0.0,
            cost_aed=round(self.convert(container.grand_total), 2),
            total_sales_aed=round(total_sales, 2),
            total_expenses_aed=round(total_expenses, 2),
            profit_aed=self.compute_profit(container.grand_total, total_sales, total_expenses),
        )

    # ------------------------------------------------------------------ #
    # Per container
    # ------------------------------------------------------------------ #

    def _get_visible_container(self, container_id: int, principal: Principal, action: str) -> Container:
        container = self.containers.get_by_id(container_id)
        if not container:
            raise NotFoundError("Container", container_id)
        ensure_owner_or_manager(principal, container.user_id, "container", action)
        return container

    def container_profit(self, container_id: int, principal: Principal) -> ContainerProfit:
        """
        Profit of one container.

        Raises:
            NotFoundError: Unknown container
            ForbiddenError: Caller is neither owner nor manager
        """
        container = self._get_visible_container(container_id, principal, "view profit of")
        return self._build_profit(
            container,
            self.sales.total_sales(container.id),
            self.sales.total_expenses(container.id),
        )

    def container_balance(self, container_id: int, principal: Principal) -> ContainerBalance:
        """
        Remaining amount owed to the vendor: grand total minus all transfers.

        Raises:
            NotFoundError: Unknown container
            ForbiddenError: Caller is neither owner nor manager
        """
        container = self._get_visible_container(container_id, principal, "view balance of")
        total_transfers = self.transfers.total_amount(container.id)
        return ContainerBalance(
            container_id=container.id,
            container_code=container.container_code,
            grand_total=container.grand_total or 0.0,
            total_transfers=round(total_transfers, 2),
            remaining=round((container.grand_total or 0.0) - total_transfers, 2),
        )

    def sold_containers(self, principal: Principal) -> List[dict]:
        """Containers with at least one sale line, each with its profit."""
        ensure_manager(principal, "view sold containers")
        results = []
        for container in self.sales.sold_containers():
            results.append({
                "id": container.id,
                "container_code": container.container_code,
                "status": ContainerStatus(container.status).value,
                "city": container.city,
                "purchase_date": container.purchase_date,
                "user": {"id": container.user.id, "name": container.user.name} if container.user else None,
                "item_count": len(container.contents),
                "document_count": len(container.documents),
                **{
                    key: value
                    for key, value in self._profit_of_loaded(container).to_dict().items()
                    if key not in ("container_id", "container_code", "status")
                },
            })
        return results

    # ------------------------------------------------------------------ #
    # Rollups
    # ------------------------------------------------------------------ #

    def _rollup_users(self, users: Iterable[User]) -> List[UserRollup]:
        users = list(users)
        by_owner: Dict[int, List[Container]] = defaultdict(list)
        for container in self.containers.list_for_users([user.id for user in users]):
            by_owner[container.user_id].append(container)

        rollups = []
        for user in users:
            owned = by_owner.get(user.id, [])
            cost = sum(c.grand_total or 0.0 for c in owned)
            sales = sum(s.sale_price or 0.0 for c in owned for s in c.sales)
            expenses = sum(e.amount or 0.0 for c in owned for e in c.expenses)
            rollups.append(UserRollup(
                user_id=user.id,
                username=user.username,
                name=user.name,
                is_active=bool(user.is_active),
                container_count=len(owned),
                total_cost_usd=round(cost, 2),
                total_sales_aed=round(sales, 2),
                total_expenses_aed=round(expenses, 2),
                net_profit_aed=self.compute_profit(cost, sales, expenses),
            ))
        return rollups

    def user_rollup(self, principal: Principal) -> List[UserRollup]:
        """Per-user totals for every non-manager user (manager only)."""
        ensure_manager(principal, "view user reports")
        return self._rollup_users(self.users.list_regular_users())

    def vendor_rollup(self, principal: Principal) -> List[VendorRollup]:
        """Container count and grand-total sum per vendor (manager only)."""
        ensure_manager(principal, "view vendor reports")
        names = {vendor.id: vendor.company_name for vendor in self.vendors.get_all(limit=None)}
        return [
            VendorRollup(
                vendor_id=vendor_id,
                company_name=names.get(vendor_id),
                container_count=count,
                total_grand_total=round(float(total or 0.0), 2),
            )
            for vendor_id, count, total in self.containers.vendor_rollup()
        ]

    def manager_report(self, principal: Principal) -> dict:
        """Per-user rollups plus a summary across all of them."""
        users = self.user_rollup(principal)
        summary = {
            "total_users": len(users),
            "total_containers": sum(u.container_count for u in users),
            "total_cost_usd": round(sum(u.total_cost_usd for u in users), 2),
            "total_sales_aed": round(sum(u.total_sales_aed for u in users), 2),
            "total_expenses_aed": round(sum(u.total_expenses_aed for u in users), 2),
            "total_net_profit_aed": round(sum(u.net_profit_aed for u in users), 2),
        }
        return {"users": [u.to_dict() for u in users], "summary": summary}

    # ------------------------------------------------------------------ #
    # Time series and dashboard
    # ------------------------------------------------------------------ #

    def revenue_series(
        self,
        principal: Principal,
        range_name: str = RANGE_MONTH,
        now: Optional[datetime] = None,
    ) -> List[PeriodTotals]:
        """
        Revenue, cost and profit per calendar month since the range cutoff.

        Months with no sales, expenses or purchases are left out rather than
        zero-filled.

        Raises:
            InvalidInputError: Unknown range name
        """
        ensure_manager(principal, "view revenue reports")
        since = range_start(range_name, now)

        revenue: Dict[str, float] = defaultdict(float)
        cost: Dict[str, float] = defaultdict(float)
        for sale_price, created_at in self.sales.sales_since(since):
            revenue[month_key(created_at)] += sale_price or 0.0
        for amount, created_at in self.sales.expenses_since(since):
            cost[month_key(created_at)] += amount or 0.0
        for grand_total, created_at in self.containers.grand_totals_since(since):
            cost[month_key(created_at)] += self.convert(grand_total)

        series = [
            PeriodTotals(
                period=period,
                label=month_label(period),
                revenue=round(revenue[period], 2),
                cost=round(cost[period], 2),
                profit=round(revenue[period] - cost[period], 2),
            )
            for period in sorted(set(revenue) | set(cost))
        ]
        logger.debug("Revenue series computed", range=range_name, since=since.isoformat(), buckets=len(series))
        return series

    def dashboard_summary(self, principal: Principal, now: Optional[datetime] = None) -> DashboardStats:
        """Headline counts and the global profit figures (manager only)."""
        ensure_manager(principal, "view the dashboard")
        by_status = self.containers.count_by_status()

        total_revenue = self.sales.total_sales()
        total_costs = self.sales.total_expenses() + self.convert(self.containers.sum_grand_total())
        net_profit = total_revenue - total_costs
        profit_margin = round(net_profit / total_revenue * 100) if total_revenue > 0 else 0

        return DashboardStats(
            total_vendors=self.vendors.count(),
            total_users=len(self.users.list_regular_users(active_only=True)),
            total_containers=sum(by_status.values()),
            pending_containers=by_status.get(ContainerStatus.PENDING, 0),
            shipped_containers=by_status.get(ContainerStatus.SHIPPED, 0),
            completed_containers=by_status.get(ContainerStatus.COMPLETED, 0),
            total_revenue=round(total_revenue, 2),
            total_costs=round(total_costs),
            net_profit=round(net_profit),
            profit_margin=int(profit_margin),
            monthly_revenue=round(self.sales.total_sales(since=start_of_month(now))),
        )

    def container_status_breakdown(self, principal: Principal) -> List[dict]:
        """Count and integer percentage of containers per status."""
        ensure_manager(principal, "view status reports")
        by_status = self.containers.count_by_status()
        total = sum(by_status.values())
        return [
            {
                "status": status.value,
                "count": by_status.get(status, 0),
                "percentage": round(by_status.get(status, 0) / total * 100) if total else 0,
            }
            for status in ContainerStatus
        ]

    def profit_by_status(self, principal: Principal) -> Dict[str, float]:
        """Sum of per-container profit grouped by status."""
        ensure_manager(principal, "view profit reports")
        totals = {status.value: 0.0 for status in ContainerStatus}
        for container in self.containers.list_with_ledgers():
            profit = self._profit_of_loaded(container)
            totals[profit.status] += profit.profit_aed
        return {status: round(total, 2) for status, total in totals.items()}
