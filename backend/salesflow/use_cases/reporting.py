"""Read-only projections over the state: exports, dashboard figures and approver queues."""
from __future__ import annotations

import csv
import io
from collections import defaultdict
from dataclasses import dataclass
from datetime import date

from ..domain_errors import not_found
from ..services.order_rules import review_stage_for
from ..state import AppState, Order, OrderStatus, User, UserRole

EXPORT_HEADER = ["Username", "Sales Name", "Product", "Quantity", "Status"]


@dataclass(frozen=True)
class DashboardStats:
    total_warehouse: int
    total_return: int
    total_orders: int
    total_users: int


@dataclass(frozen=True)
class SalesSummaryRow:
    sales_id: str
    username: str
    sales_name: str
    status: OrderStatus
    total_qty: int
    order_count: int


def export_filename(today: date | None = None) -> str:
    return f"sales_orders_export_{(today or date.today()).isoformat()}.csv"


def export_orders_csv(state: AppState) -> str:
    """One CSV row per order line item."""
    if not state.orders:
        raise not_found("NO_ORDERS_TO_EXPORT", "No sales orders found to export.")

    usernames = {u.id: u.username for u in state.users}
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(EXPORT_HEADER)
    for order in state.orders:
        username = usernames.get(order.sales_id, "unknown")
        for item in order.items:
            writer.writerow([username, order.sales_name, item.sku_name, item.quantity, order.status.value])
    return buffer.getvalue()


def dashboard_stats(state: AppState) -> DashboardStats:
    return DashboardStats(
        total_warehouse=sum(s.warehouse_stock for s in state.skus),
        total_return=sum(r.quantity for r in state.returns),
        total_orders=len(state.orders),
        total_users=len(state.users),
    )


def sales_summary(state: AppState) -> list[SalesSummaryRow]:
    """Quantities and order counts per (salesperson, status), sorted by salesperson name."""
    usernames = {u.id: u.username for u in state.users}
    totals: dict[tuple[str, OrderStatus], list] = {}
    for order in state.orders:
        key = (order.sales_id, order.status)
        if key not in totals:
            totals[key] = [order.sales_name, 0, 0]
        totals[key][1] += order.total_quantity
        totals[key][2] += 1

    rows = [
        SalesSummaryRow(
            sales_id=sales_id,
            username=usernames.get(sales_id, "unknown"),
            sales_name=sales_name,
            status=status,
            total_qty=total_qty,
            order_count=order_count,
        )
        for (sales_id, status), (sales_name, total_qty, order_count) in totals.items()
    ]
    return sorted(rows, key=lambda row: row.sales_name.lower())


def return_stock_for_sku(state: AppState, sku_id: str, sales_username: str | None = None) -> int:
    """Returned quantity of a SKU, across all sales or for one salesperson's username."""
    sku_id = sku_id.strip().upper()
    wanted = sales_username.lower() if sales_username else None
    return sum(
        r.quantity
        for r in state.returns
        if r.sku_id == sku_id and (wanted is None or r.sales_id.lower() == wanted)
    )


def orders_for_sales(state: AppState, user: User) -> list[Order]:
    mine = [o for o in state.orders if o.sales_id == user.id]
    return sorted(mine, key=lambda o: o.created_at, reverse=True)


def approver_queue(state: AppState, role: UserRole) -> list[Order]:
    """Orders waiting on this approver role."""
    pending = review_stage_for(role)["pending"]
    return [o for o in state.orders if o.status == pending]


def approver_history(state: AppState, role: UserRole) -> list[Order]:
    """Orders this approver role has already acted on."""
    review_stage_for(role)
    if role == UserRole.SPV:
        return [o for o in state.orders if o.status not in (OrderStatus.PENDING_SPV, OrderStatus.NEW)]
    return [o for o in state.orders if o.status in (OrderStatus.APPROVED, OrderStatus.REJECTED_MANAGER)]


def group_by_sales_name(orders: list[Order]) -> dict[str, list[Order]]:
    grouped: dict[str, list[Order]] = defaultdict(list)
    for order in orders:
        grouped[order.sales_name].append(order)
    return dict(grouped)
