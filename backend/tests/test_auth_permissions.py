from __future__ import annotations

from types import SimpleNamespace

import pytest

from salesflow.security import (
    ROLE_PERMISSIONS,
    UI_PERMISSION_KEYS,
    check_permission,
    get_password_hash,
    get_role_ui_permissions,
    verify_password,
)
from salesflow.state import UserRole

_NONE = {key: False for key in UI_PERMISSION_KEYS}


@pytest.mark.parametrize(
    ("role", "expected"),
    [
        (
            UserRole.ADMIN,
            {
                **_NONE,
                "canManageCatalog": True,
                "canManageReturns": True,
                "canManageUsers": True,
                "canExportOrders": True,
                "canViewReports": True,
            },
        ),
        (UserRole.SALES, {**_NONE, "canSubmitOrders": True}),
        (UserRole.SPV, {**_NONE, "canReviewOrders": True}),
        (UserRole.MANAGER, {**_NONE, "canReviewOrders": True}),
    ],
)
def test_role_ui_permissions_matrix_is_stable(role: UserRole, expected: dict[str, bool]) -> None:
    assert get_role_ui_permissions(role) == expected


def test_role_ui_permissions_has_exact_ui_keyset_for_each_role() -> None:
    expected_keys = set(UI_PERMISSION_KEYS)
    for role in ROLE_PERMISSIONS:
        assert set(get_role_ui_permissions(role).keys()) == expected_keys


def test_plain_role_string_resolves_like_enum() -> None:
    assert get_role_ui_permissions("SPV") == get_role_ui_permissions(UserRole.SPV)


def test_unknown_role_denies_all_ui_permissions() -> None:
    permissions = get_role_ui_permissions("unknown-role")
    assert set(permissions.keys()) == set(UI_PERMISSION_KEYS)
    assert all(value is False for value in permissions.values())


def test_check_permission_uses_user_role() -> None:
    sales = SimpleNamespace(role=UserRole.SALES)

    assert check_permission(sales, "canSubmitOrders") is True
    assert check_permission(sales, "canReviewOrders") is False
    assert check_permission(sales, "noSuchPermission") is False


def test_password_hash_round_trip_and_corrupt_hash() -> None:
    hashed = get_password_hash("password123")

    assert hashed != "password123"
    assert verify_password("password123", hashed)
    assert not verify_password("password124", hashed)
    assert not verify_password("password123", "not-a-hash")
