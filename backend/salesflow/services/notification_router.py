"""Notification construction and recipient visibility."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable

from ..state import (
    AppState,
    ByRole,
    ByUser,
    Notification,
    NotificationType,
    User,
    UserRole,
    new_id,
    now_utc,
)


def notify_user(
    user_id: str,
    *,
    title: str,
    message: str,
    type: NotificationType,
    at: datetime | None = None,
) -> Notification:
    return Notification(
        id=new_id("NT"),
        target=ByUser(user_id=user_id),
        title=title,
        message=message,
        type=type,
        is_read=False,
        created_at=at or now_utc(),
    )


def notify_role(
    role: UserRole,
    *,
    title: str,
    message: str,
    type: NotificationType,
    at: datetime | None = None,
) -> Notification:
    return Notification(
        id=new_id("NT"),
        target=ByRole(role=role),
        title=title,
        message=message,
        type=type,
        is_read=False,
        created_at=at or now_utc(),
    )


def is_visible_to(notification: Notification, user: User) -> bool:
    target = notification.target
    if isinstance(target, ByUser):
        return target.user_id == user.id
    return target.role == user.role


def visible_to(user: User, notifications: Iterable[Notification]) -> list[Notification]:
    """Notifications addressed to the user or their role, in store order (newest first)."""
    return [n for n in notifications if is_visible_to(n, user)]


def unread_count(user: User, notifications: Iterable[Notification]) -> int:
    return sum(1 for n in notifications if not n.is_read and is_visible_to(n, user))


def mark_all_read(state: AppState, user: User) -> tuple[AppState, int]:
    """Flip ``is_read`` on every notification visible to ``user``; returns (new state, changed count)."""
    changed = 0
    updated: list[Notification] = []
    for notification in state.notifications:
        if not notification.is_read and is_visible_to(notification, user):
            notification = notification.model_copy(update={"is_read": True})
            changed += 1
        updated.append(notification)
    if not changed:
        return state, 0
    return state.model_copy(update={"notifications": tuple(updated)}), changed
