"""Order endpoints: submission by sales, review by supervisors and managers."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import PermissionChecker, get_current_user
from ..database import get_db
from ..repository import StateRepository
from ..schemas import OrderAdvanceRequest, OrderCreate, OrderRejectRequest, OrderResponse
from ..state import User
from ..use_cases.order_lifecycle import (
    OrderTransition,
    advance_order_use_case,
    approve_order_use_case,
    reject_order_use_case,
    submit_order_use_case,
)
from ..use_cases.reporting import (
    approver_history,
    approver_queue,
    group_by_sales_name,
    orders_for_sales,
)

router = APIRouter(prefix="/orders", tags=["orders"])


def _commit(repo: StateRepository, result: OrderTransition) -> OrderResponse:
    repo.save(result.state)
    return OrderResponse.model_validate(result.order)


@router.get("/mine", response_model=list[OrderResponse])
def get_my_orders(
    current_user: User = Depends(PermissionChecker("canSubmitOrders")),
    db: Session = Depends(get_db),
):
    """Order history of the logged-in salesperson, newest first."""
    state = StateRepository(db).load()
    return [OrderResponse.model_validate(o) for o in orders_for_sales(state, current_user)]


@router.post("", response_model=OrderResponse, status_code=201)
def submit_order(
    data: OrderCreate,
    current_user: User = Depends(PermissionChecker("canSubmitOrders")),
    db: Session = Depends(get_db),
):
    """Submit a new order for supervisor review."""
    repo = StateRepository(db)
    result = submit_order_use_case(
        state=repo.load(),
        current_user=current_user,
        order_type=data.type,
        items=[(item.sku_id, item.quantity) for item in data.items],
        po_file=data.po_file,
    )
    return _commit(repo, result)


@router.get("/queue", response_model=list[OrderResponse])
def get_review_queue(
    current_user: User = Depends(PermissionChecker("canReviewOrders")),
    db: Session = Depends(get_db),
):
    """Orders waiting on the current approver's role."""
    state = StateRepository(db).load()
    return [OrderResponse.model_validate(o) for o in approver_queue(state, current_user.role)]


@router.get("/queue/by-sales", response_model=dict[str, list[OrderResponse]])
def get_review_queue_by_sales(
    current_user: User = Depends(PermissionChecker("canReviewOrders")),
    db: Session = Depends(get_db),
):
    """Review queue grouped by salesperson name."""
    state = StateRepository(db).load()
    grouped = group_by_sales_name(approver_queue(state, current_user.role))
    return {
        sales_name: [OrderResponse.model_validate(o) for o in orders]
        for sales_name, orders in grouped.items()
    }


@router.get("/history", response_model=list[OrderResponse])
def get_review_history(
    current_user: User = Depends(PermissionChecker("canReviewOrders")),
    db: Session = Depends(get_db),
):
    """Orders the current approver's role has already acted on."""
    state = StateRepository(db).load()
    return [OrderResponse.model_validate(o) for o in approver_history(state, current_user.role)]


@router.post("/{order_id}/approve", response_model=OrderResponse)
def approve_order(
    order_id: str,
    current_user: User = Depends(PermissionChecker("canReviewOrders")),
    db: Session = Depends(get_db),
):
    """Approve at the current approver's stage."""
    repo = StateRepository(db)
    result = approve_order_use_case(state=repo.load(), order_id=order_id, current_user=current_user)
    return _commit(repo, result)


@router.post("/{order_id}/reject", response_model=OrderResponse)
def reject_order(
    order_id: str,
    data: OrderRejectRequest,
    current_user: User = Depends(PermissionChecker("canReviewOrders")),
    db: Session = Depends(get_db),
):
    """Reject at the current approver's stage with a reason."""
    repo = StateRepository(db)
    result = reject_order_use_case(
        state=repo.load(),
        order_id=order_id,
        current_user=current_user,
        message=data.message,
    )
    return _commit(repo, result)


@router.post("/{order_id}/advance", response_model=OrderResponse)
def advance_order(
    order_id: str,
    data: OrderAdvanceRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Request an explicit target status; the allow-list decides."""
    repo = StateRepository(db)
    result = advance_order_use_case(
        state=repo.load(),
        order_id=order_id,
        target_status=data.status,
        current_user=current_user,
        message=data.message,
    )
    return _commit(repo, result)
