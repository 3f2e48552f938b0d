"""Notification endpoints."""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..database import get_db
from ..repository import StateRepository
from ..schemas import MarkReadResponse, NotificationResponse, UnreadCountResponse
from ..services.notification_router import mark_all_read, unread_count, visible_to
from ..state import User

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationResponse])
def get_notifications(
    unread: bool = False,
    limit: int = Query(50, le=200),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Notifications addressed to the current user or their role, newest first."""
    state = StateRepository(db).load()
    items = visible_to(current_user, state.notifications)
    if unread:
        items = [n for n in items if not n.is_read]
    return [NotificationResponse.from_notification(n) for n in items[offset: offset + limit]]


@router.get("/unread-count", response_model=UnreadCountResponse)
def get_unread_count(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    state = StateRepository(db).load()
    return UnreadCountResponse(unread=unread_count(current_user, state.notifications))


@router.post("/mark-all-read", response_model=MarkReadResponse)
def mark_notifications_read(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Mark every notification visible to the current user as read."""
    repo = StateRepository(db)
    state, updated = mark_all_read(repo.load(), current_user)
    if updated:
        repo.save(state)
    return MarkReadResponse(updated=updated, unread=unread_count(current_user, state.notifications))
