"""Security helpers (password hashing and role permission matrix)."""

from __future__ import annotations

import logging

from passlib.context import CryptContext

from .state import User, UserRole

logger = logging.getLogger(__name__)

# Password hashing
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        # Invalid/corrupted hash should not crash login flow.
        logger.exception("Password verification failed due to invalid hash format")
        return False


def get_password_hash(password: str) -> str:
    """Hash password."""
    return pwd_context.hash(password)


# Role permissions matrix
ROLE_PERMISSIONS: dict[UserRole, dict[str, bool]] = {
    UserRole.ADMIN: {
        "canManageCatalog": True,
        "canManageReturns": True,
        "canManageUsers": True,
        "canExportOrders": True,
        "canViewReports": True,
        "canSubmitOrders": False,
        "canReviewOrders": False,
    },
    UserRole.SALES: {
        "canManageCatalog": False,
        "canManageReturns": False,
        "canManageUsers": False,
        "canExportOrders": False,
        "canViewReports": False,
        "canSubmitOrders": True,
        "canReviewOrders": False,
    },
    UserRole.SPV: {
        "canManageCatalog": False,
        "canManageReturns": False,
        "canManageUsers": False,
        "canExportOrders": False,
        "canViewReports": False,
        "canSubmitOrders": False,
        "canReviewOrders": True,
    },
    UserRole.MANAGER: {
        "canManageCatalog": False,
        "canManageReturns": False,
        "canManageUsers": False,
        "canExportOrders": False,
        "canViewReports": False,
        "canSubmitOrders": False,
        "canReviewOrders": True,
    },
}


UI_PERMISSION_KEYS = (
    "canManageCatalog",
    "canManageReturns",
    "canManageUsers",
    "canExportOrders",
    "canViewReports",
    "canSubmitOrders",
    "canReviewOrders",
)


def check_permission(user: User, permission: str) -> bool:
    """Check if user has specific permission."""
    permissions = ROLE_PERMISSIONS.get(user.role, {})
    return permissions.get(permission, False)


def get_role_ui_permissions(role) -> dict[str, bool]:
    """Permission flags the client uses to decide which screens to show."""
    permissions = ROLE_PERMISSIONS.get(role, {})
    return {key: bool(permissions.get(key, False)) for key in UI_PERMISSION_KEYS}
