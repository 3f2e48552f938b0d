from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from salesflow.domain_errors import DomainError
from salesflow.state import (
    AppState,
    Order,
    OrderItem,
    OrderStatus,
    OrderType,
    ReturnRecord,
    Sku,
    User,
    UserRole,
)
from salesflow.use_cases.reporting import (
    EXPORT_HEADER,
    approver_history,
    approver_queue,
    dashboard_stats,
    export_filename,
    export_orders_csv,
    group_by_sales_name,
    orders_for_sales,
    return_stock_for_sku,
    sales_summary,
)

T0 = datetime(2026, 2, 1, tzinfo=timezone.utc)

AGUS = User(id="U02", username="agus_sales", name="Agus", password_hash="x", role=UserRole.SALES)
TEDY = User(id="U03", username="tedy_sales", name="tedy", password_hash="x", role=UserRole.SALES)


def _order(order_id: str, sales: User, status: OrderStatus, *quantities: int, minutes: int = 0) -> Order:
    return Order(
        id=order_id,
        sales_id=sales.id,
        sales_name=sales.name,
        type=OrderType.REGULAR,
        items=tuple(OrderItem(sku_id=f"S{i}", sku_name=f"Sku {i}", quantity=q) for i, q in enumerate(quantities)),
        status=status,
        created_at=T0 + timedelta(minutes=minutes),
    )


def _state() -> AppState:
    return AppState(
        users=(AGUS, TEDY),
        skus=(Sku(id="S0", name="Sku 0", warehouse_stock=10), Sku(id="S1", name="Sku 1", warehouse_stock=5)),
        returns=(
            ReturnRecord(id="R1", sales_id="agus_sales", sales_name="Agus", sku_id="S0", sku_name="Sku 0", quantity=5, created_at=T0),
            ReturnRecord(id="R2", sales_id="Tedy_sales", sales_name="Tedy", sku_id="S0", sku_name="Sku 0", quantity=2, created_at=T0),
        ),
        orders=(
            _order("ORD-1", AGUS, OrderStatus.PENDING_SPV, 2, 3, minutes=1),
            _order("ORD-2", TEDY, OrderStatus.PENDING_MANAGER, 4, minutes=2),
            _order("ORD-3", AGUS, OrderStatus.APPROVED, 1, minutes=3),
            _order("ORD-4", AGUS, OrderStatus.REJECTED_SPV, 6, minutes=4),
        ),
    )


def test_export_has_one_row_per_line_item() -> None:
    lines = export_orders_csv(_state()).splitlines()

    assert lines[0] == ",".join(EXPORT_HEADER)
    assert lines[1:3] == ["agus_sales,Agus,Sku 0,2,PENDING_SPV", "agus_sales,Agus,Sku 1,3,PENDING_SPV"]
    assert len(lines) == 1 + 5


def test_export_unknown_salesperson_and_empty_store() -> None:
    state = _state().model_copy(update={"users": ()})
    assert export_orders_csv(state).splitlines()[1].startswith("unknown,")

    with pytest.raises(DomainError) as exc:
        export_orders_csv(AppState())
    assert exc.value.code == "NO_ORDERS_TO_EXPORT"


def test_export_filename_uses_date() -> None:
    assert export_filename(date(2026, 3, 9)) == "sales_orders_export_2026-03-09.csv"


def test_dashboard_stats() -> None:
    stats = dashboard_stats(_state())

    assert (stats.total_warehouse, stats.total_return, stats.total_orders, stats.total_users) == (15, 7, 4, 2)


def test_sales_summary_groups_by_salesperson_and_status() -> None:
    rows = sales_summary(_state())

    assert [(r.sales_name, r.status, r.total_qty, r.order_count) for r in rows] == [
        ("Agus", OrderStatus.PENDING_SPV, 5, 1),
        ("Agus", OrderStatus.APPROVED, 1, 1),
        ("Agus", OrderStatus.REJECTED_SPV, 6, 1),
        ("tedy", OrderStatus.PENDING_MANAGER, 4, 1),
    ]


def test_return_stock_all_or_per_salesperson() -> None:
    state = _state()

    assert return_stock_for_sku(state, "S0") == 7
    assert return_stock_for_sku(state, "S0", "TEDY_SALES") == 2
    assert return_stock_for_sku(state, "S1") == 0
    assert return_stock_for_sku(state, " s0 ") == 7


def test_orders_for_sales_newest_first() -> None:
    assert [o.id for o in orders_for_sales(_state(), AGUS)] == ["ORD-4", "ORD-3", "ORD-1"]


def test_approver_queues_and_history() -> None:
    state = _state()

    assert [o.id for o in approver_queue(state, UserRole.SPV)] == ["ORD-1"]
    assert [o.id for o in approver_queue(state, UserRole.MANAGER)] == ["ORD-2"]
    assert [o.id for o in approver_history(state, UserRole.SPV)] == ["ORD-2", "ORD-3", "ORD-4"]
    assert [o.id for o in approver_history(state, UserRole.MANAGER)] == ["ORD-3"]

    with pytest.raises(DomainError):
        approver_queue(state, UserRole.SALES)


def test_group_by_sales_name() -> None:
    grouped = group_by_sales_name(list(_state().orders))

    assert sorted(grouped) == ["Agus", "tedy"]
    assert [o.id for o in grouped["Agus"]] == ["ORD-1", "ORD-3", "ORD-4"]
