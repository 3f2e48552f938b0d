"""User account use-cases: administration, login and logout."""
from __future__ import annotations

import logging

from ..config import settings
from ..domain_errors import DomainError, conflict, invalid, not_found
from ..security import get_password_hash, verify_password
from ..state import AppState, User, UserRole, new_id

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid credentials. Please verify your username and password."


def _get_user_or_404(state: AppState, user_id: str) -> User:
    user = state.find_user(user_id)
    if user is None:
        raise not_found("USER_NOT_FOUND", "User not found", user_id=user_id)
    return user


def validate_new_password(password: str) -> None:
    if len(password) < settings.PASSWORD_MIN_LENGTH:
        raise invalid(
            "PASSWORD_TOO_SHORT",
            f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters",
        )


def create_user_use_case(
    *,
    state: AppState,
    username: str,
    name: str,
    role: UserRole,
    email: str = "",
    password: str | None = None,
) -> tuple[AppState, User]:
    """Add a user; usernames are stored lower-cased and must be unique ignoring case."""
    normalized = username.strip().lower()
    if not normalized or not name.strip():
        raise invalid("USER_FIELDS_REQUIRED", "Username and name are required")
    if state.find_user_by_username(normalized) is not None:
        raise conflict("USERNAME_TAKEN", "Username already exists", username=normalized)

    raw_password = password or settings.DEFAULT_USER_PASSWORD
    validate_new_password(raw_password)

    user = User(
        id=new_id("U"),
        username=normalized,
        name=name.strip(),
        email=email.strip(),
        password_hash=get_password_hash(raw_password),
        role=role,
    )
    logger.info("User %s created with role %s", user.username, user.role.value)
    return state.model_copy(update={"users": state.users + (user,)}), user


def reset_password_use_case(*, state: AppState, user_id: str, new_password: str) -> AppState:
    user = _get_user_or_404(state, user_id)
    validate_new_password(new_password)
    updated = user.model_copy(update={"password_hash": get_password_hash(new_password)})
    users = tuple(updated if u.id == user.id else u for u in state.users)
    logger.info("Password reset for user %s", user.username)
    return state.model_copy(update={"users": users})


def delete_user_use_case(*, state: AppState, user_id: str, current_user: User) -> AppState:
    user = _get_user_or_404(state, user_id)
    if user.id == current_user.id:
        raise conflict("USER_DELETE_SELF", "You cannot delete your own account")
    if any(order.sales_id == user.id for order in state.orders):
        raise conflict(
            "USER_HAS_ORDERS",
            "User is referenced by existing orders and cannot be deleted",
            user_id=user.id,
        )
    update: dict = {"users": tuple(u for u in state.users if u.id != user.id)}
    if state.current_user_id == user.id:
        update["current_user_id"] = None
    logger.info("User %s deleted", user.username)
    return state.model_copy(update=update)


def authenticate_use_case(*, state: AppState, username: str, password: str) -> User:
    """Match username ignoring case and verify the password hash."""
    user = state.find_user_by_username(username)
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("Failed login attempt for %r", username)
        raise DomainError(
            code="INVALID_CREDENTIALS",
            http_status=401,
            message=INVALID_CREDENTIALS_MESSAGE,
        )
    return user


def login_use_case(*, state: AppState, username: str, password: str) -> tuple[AppState, User]:
    user = authenticate_use_case(state=state, username=username, password=password)
    logger.info("User %s logged in", user.username)
    return state.model_copy(update={"current_user_id": user.id}), user


def logout_use_case(*, state: AppState, user: User) -> AppState:
    """Clear ``currentUserId`` if it still points at ``user``.

    The field only records the most recent login; API requests authenticate
    with their own bearer token, so another user's logout must not touch it.
    """
    if state.current_user_id != user.id:
        return state
    return state.model_copy(update={"current_user_id": None})
