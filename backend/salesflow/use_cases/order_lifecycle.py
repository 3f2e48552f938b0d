"""Order lifecycle use-cases: submission and approval transitions.

Each use case is a pure function of the current state: it returns the new
state together with the order and the notifications it emitted. Callers own
persistence.
"""
from __future__ import annotations

import base64
import binascii
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable

from ..config import settings
from ..domain_errors import forbidden, invalid, not_found
from ..services.notification_router import notify_role, notify_user
from ..services.order_rules import (
    INITIAL_ORDER_STATUS,
    clean_message,
    is_rejection,
    require_rejection_reason,
    review_stage_for,
    validate_order_transition,
)
from ..state import (
    AppState,
    Notification,
    NotificationType,
    Order,
    OrderItem,
    OrderStatus,
    OrderType,
    User,
    UserRole,
    new_id,
    now_utc,
)

logger = logging.getLogger(__name__)

DEFAULT_REJECTION_REASON = "No details provided."

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.*)$", re.DOTALL)


@dataclass(frozen=True)
class OrderTransition:
    state: AppState
    order: Order
    notifications: tuple[Notification, ...] = field(default_factory=tuple)


def _get_order_or_404(state: AppState, order_id: str) -> Order:
    order = state.find_order(order_id)
    if order is None:
        raise not_found("ORDER_NOT_FOUND", "Order not found", order_id=order_id)
    return order


def _validate_po_file(po_file: str | None) -> str | None:
    """Accept an optional purchase-order image given as a base64 data URL."""
    if not po_file:
        return None
    match = _DATA_URL_RE.match(po_file)
    if not match:
        raise invalid("PO_FILE_INVALID", "Purchase order must be an image data URL")
    mime = match.group("mime").lower()
    if mime not in settings.allowed_po_mime_types_list:
        raise invalid("PO_FILE_INVALID", f"Unsupported purchase order type: {mime}", mime=mime)
    try:
        raw = base64.b64decode(match.group("data"), validate=True)
    except (binascii.Error, ValueError):
        raise invalid("PO_FILE_INVALID", "Purchase order image is not valid base64")
    if len(raw) > settings.MAX_PO_FILE_SIZE:
        raise invalid(
            "PO_FILE_TOO_LARGE",
            "Purchase order image is too large",
            max_bytes=settings.MAX_PO_FILE_SIZE,
        )
    return po_file


def _build_items(state: AppState, items: Iterable[tuple[str, int]]) -> tuple[OrderItem, ...]:
    # Repeated SKUs collapse into one line, keeping first-seen order.
    quantities: dict[str, int] = {}
    for raw_id, quantity in items:
        sku_id = raw_id.strip().upper()
        if quantity <= 0:
            raise invalid("ORDER_ITEM_QUANTITY_INVALID", "Item quantity must be positive", sku_id=sku_id)
        quantities[sku_id] = quantities.get(sku_id, 0) + quantity

    if not quantities:
        raise invalid("ORDER_ITEMS_REQUIRED", "An order needs at least one item")

    lines = []
    for sku_id, quantity in quantities.items():
        sku = state.find_sku(sku_id)
        if sku is None:
            raise not_found("SKU_NOT_FOUND", f"SKU {sku_id} not found", sku_id=sku_id)
        lines.append(OrderItem(sku_id=sku.id, sku_name=sku.name, quantity=quantity))
    return tuple(lines)


def submit_order_use_case(
    *,
    state: AppState,
    current_user: User,
    order_type: OrderType,
    items: Iterable[tuple[str, int]],
    po_file: str | None = None,
    at: datetime | None = None,
) -> OrderTransition:
    """Create an order for a salesperson; it starts out waiting on the supervisor."""
    if current_user.role != UserRole.SALES:
        raise forbidden("ORDER_SUBMIT_FORBIDDEN", "Only sales users can submit orders")

    ts = at or now_utc()
    order = Order(
        id=new_id("ORD"),
        sales_id=current_user.id,
        sales_name=current_user.name,
        type=order_type,
        items=_build_items(state, items),
        status=INITIAL_ORDER_STATUS,
        po_file=_validate_po_file(po_file),
        created_at=ts,
    )
    notification = notify_role(
        UserRole.SPV,
        title="New Order Submission",
        message=f"{order.sales_name} has submitted a new order ({order.id}). Pending your review.",
        type=NotificationType.ALERT,
        at=ts,
    )

    new_state = state.model_copy(update={"orders": state.orders + (order,)})
    new_state = new_state.with_notifications(notification)
    logger.info("Order %s submitted by %s with %d item(s)", order.id, current_user.username, len(order.items))
    return OrderTransition(state=new_state, order=order, notifications=(notification,))


def _notifications_for(order: Order, status: OrderStatus, reason: str | None, ts: datetime) -> list[Notification]:
    if status == OrderStatus.PENDING_MANAGER:
        return [
            notify_role(
                UserRole.MANAGER,
                title="Order Reviewed by SPV",
                message=(
                    f"Order {order.id} from {order.sales_name} has been reviewed by Supervisor "
                    "and is pending Manager approval."
                ),
                type=NotificationType.INFO,
                at=ts,
            )
        ]
    if status == OrderStatus.APPROVED:
        return [
            notify_role(
                UserRole.ADMIN,
                title="Order Final Approval",
                message=f"Manager has approved order {order.id} from {order.sales_name}. Ready for processing.",
                type=NotificationType.SUCCESS,
                at=ts,
            ),
            notify_user(
                order.sales_id,
                title="Order Approved",
                message=f"Your order {order.id} has received final approval from the Manager.",
                type=NotificationType.SUCCESS,
                at=ts,
            ),
        ]
    if is_rejection(status):
        return [
            notify_user(
                order.sales_id,
                title="Order Rejected",
                message=f"Your order {order.id} was rejected. Reason: {reason or DEFAULT_REJECTION_REASON}",
                type=NotificationType.ALERT,
                at=ts,
            )
        ]
    return []


def advance_order_use_case(
    *,
    state: AppState,
    order_id: str,
    target_status: OrderStatus,
    current_user: User,
    message: str | None = None,
    at: datetime | None = None,
) -> OrderTransition:
    """Move an order to ``target_status`` if the acting role may do so from its current status."""
    order = _get_order_or_404(state, order_id)
    validate_order_transition(
        current_status=order.status,
        next_status=target_status,
        acting_role=current_user.role,
    )

    ts = at or now_utc()
    reason = clean_message(message)
    old_status = order.status
    updated = order.model_copy(update={"status": target_status, "rejection_message": reason})
    notifications = _notifications_for(updated, target_status, reason, ts)

    new_state = state.replace_order(updated).with_notifications(*notifications)
    logger.info(
        "Order %s moved %s -> %s by %s",
        order.id,
        old_status.value,
        target_status.value,
        current_user.username,
    )
    return OrderTransition(state=new_state, order=updated, notifications=tuple(notifications))


def approve_order_use_case(
    *,
    state: AppState,
    order_id: str,
    current_user: User,
    at: datetime | None = None,
) -> OrderTransition:
    """Approve at the acting approver's stage (SPV forwards to manager, manager finalizes)."""
    stage = review_stage_for(current_user.role)
    return advance_order_use_case(
        state=state,
        order_id=order_id,
        target_status=stage["approve"],
        current_user=current_user,
        at=at,
    )


def reject_order_use_case(
    *,
    state: AppState,
    order_id: str,
    current_user: User,
    message: str | None,
    at: datetime | None = None,
) -> OrderTransition:
    """Reject at the acting approver's stage; a reason is mandatory here."""
    stage = review_stage_for(current_user.role)
    reason = require_rejection_reason(message)
    return advance_order_use_case(
        state=state,
        order_id=order_id,
        target_status=stage["reject"],
        current_user=current_user,
        message=reason,
        at=at,
    )
