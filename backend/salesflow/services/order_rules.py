"""Order status transition rules."""

from __future__ import annotations

from ..domain_errors import DomainError
from ..state import OrderStatus, UserRole


# (current, requested) -> role allowed to request it
_ALLOWED_TRANSITIONS: dict[tuple[OrderStatus, OrderStatus], UserRole] = {
    (OrderStatus.PENDING_SPV, OrderStatus.PENDING_MANAGER): UserRole.SPV,
    (OrderStatus.PENDING_SPV, OrderStatus.REJECTED_SPV): UserRole.SPV,
    (OrderStatus.PENDING_MANAGER, OrderStatus.APPROVED): UserRole.MANAGER,
    (OrderStatus.PENDING_MANAGER, OrderStatus.REJECTED_MANAGER): UserRole.MANAGER,
}
_TERMINAL_STATUSES: set[OrderStatus] = {
    OrderStatus.APPROVED,
    OrderStatus.REJECTED_SPV,
    OrderStatus.REJECTED_MANAGER,
}
REJECTION_STATUSES: set[OrderStatus] = {OrderStatus.REJECTED_SPV, OrderStatus.REJECTED_MANAGER}

INITIAL_ORDER_STATUS = OrderStatus.PENDING_SPV

# Status an approver is waiting on, and where their approve/reject leads.
REVIEW_STAGES: dict[UserRole, dict[str, OrderStatus]] = {
    UserRole.SPV: {
        "pending": OrderStatus.PENDING_SPV,
        "approve": OrderStatus.PENDING_MANAGER,
        "reject": OrderStatus.REJECTED_SPV,
    },
    UserRole.MANAGER: {
        "pending": OrderStatus.PENDING_MANAGER,
        "approve": OrderStatus.APPROVED,
        "reject": OrderStatus.REJECTED_MANAGER,
    },
}


def is_terminal_status(status: OrderStatus) -> bool:
    return status in _TERMINAL_STATUSES


def is_rejection(status: OrderStatus) -> bool:
    return status in REJECTION_STATUSES


def allowed_next_statuses(current_status: OrderStatus, role: UserRole | None = None) -> set[OrderStatus]:
    """Statuses reachable from ``current_status``, optionally only those ``role`` may request."""
    return {
        nxt
        for (cur, nxt), allowed_role in _ALLOWED_TRANSITIONS.items()
        if cur == current_status and (role is None or allowed_role == role)
    }


def review_stage_for(role: UserRole) -> dict[str, OrderStatus]:
    stage = REVIEW_STAGES.get(role)
    if stage is None:
        raise DomainError(
            code="ORDER_REVIEW_FORBIDDEN",
            http_status=403,
            message="Only supervisors and managers review orders",
            details={"role": role.value},
        )
    return stage


def validate_order_transition(
    *,
    current_status: OrderStatus,
    next_status: OrderStatus,
    acting_role: UserRole,
) -> OrderStatus:
    """Check ``(current, next, role)`` against the allow-list and return ``next_status``."""
    allowed_role = _ALLOWED_TRANSITIONS.get((current_status, next_status))
    if allowed_role is None:
        raise DomainError(
            code="ORDER_INVALID_TRANSITION",
            http_status=409,
            message=f"Invalid order status transition: {current_status.value} -> {next_status.value}",
            details={"from": current_status.value, "to": next_status.value},
        )
    if allowed_role != acting_role:
        raise DomainError(
            code="ORDER_TRANSITION_FORBIDDEN",
            http_status=403,
            message=f"Only {allowed_role.value} can move an order to {next_status.value}",
            details={"from": current_status.value, "to": next_status.value, "role": acting_role.value},
        )
    return next_status


def clean_message(message: str | None) -> str | None:
    reason = (message or "").strip()
    return reason or None


def require_rejection_reason(message: str | None) -> str:
    """Approver-facing rejections need a non-blank reason."""
    reason = clean_message(message)
    if reason is None:
        raise DomainError(
            code="REJECTION_MESSAGE_REQUIRED",
            http_status=422,
            message="A rejection reason is required",
        )
    return reason
