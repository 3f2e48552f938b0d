from __future__ import annotations

from fastapi.testclient import TestClient

API = "/api/v1"


def _login(client: TestClient, username: str, password: str = "password123") -> dict[str, str]:
    response = client.post(f"{API}/auth/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    assert response.headers["cache-control"] == "no-store"
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def _submit(client: TestClient, headers: dict[str, str], quantity: int = 5) -> dict:
    response = client.post(
        f"{API}/orders",
        json={"type": "REGULAR", "items": [{"sku_id": "10228494", "quantity": quantity}]},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_login_returns_role_permissions(client: TestClient) -> None:
    response = client.post(f"{API}/auth/login", json={"username": "TITI_SPV", "password": "password123"})

    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["username"] == "titi_spv"
    assert body["user"]["permissions"]["canReviewOrders"] is True
    assert body["user"]["permissions"]["canSubmitOrders"] is False

    me = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.json()["role"] == "SPV"


def test_bad_credentials_are_problem_details(client: TestClient) -> None:
    response = client.post(f"{API}/auth/login", json={"username": "admin", "password": "nope"})

    assert response.status_code == 401
    assert response.headers["content-type"].startswith("application/problem+json")
    assert response.json()["code"] == "INVALID_CREDENTIALS"


def test_order_travels_from_sales_to_final_approval(client: TestClient) -> None:
    sales = _login(client, "agus_sales")
    spv = _login(client, "titi_spv")
    manager = _login(client, "jeffri_mgr")

    order = _submit(client, sales)
    assert order["status"] == "PENDING_SPV"
    assert order["sales_name"] == "Agus"

    assert client.get(f"{API}/notifications/unread-count", headers=spv).json() == {"unread": 1}
    queue = client.get(f"{API}/orders/queue", headers=spv).json()
    assert [o["id"] for o in queue] == [order["id"]]
    grouped = client.get(f"{API}/orders/queue/by-sales", headers=spv).json()
    assert list(grouped) == ["Agus"]

    reviewed = client.post(f"{API}/orders/{order['id']}/approve", headers=spv)
    assert reviewed.status_code == 200
    assert reviewed.json()["status"] == "PENDING_MANAGER"
    assert client.get(f"{API}/orders/queue", headers=spv).json() == []
    assert [o["id"] for o in client.get(f"{API}/orders/history", headers=spv).json()] == [order["id"]]

    approved = client.post(f"{API}/orders/{order['id']}/approve", headers=manager)
    assert approved.json()["status"] == "APPROVED"

    notes = client.get(f"{API}/notifications", headers=sales).json()
    assert [n["title"] for n in notes] == ["Order Approved"]
    assert notes[0]["to_user_id"] == "U02"

    admin = _login(client, "admin")
    admin_notes = client.get(f"{API}/notifications", headers=admin).json()
    assert [n["to_role"] for n in admin_notes] == ["ADMIN"]

    mine = client.get(f"{API}/orders/mine", headers=sales).json()
    assert [o["status"] for o in mine] == ["APPROVED"]


def test_rejection_reaches_salesperson(client: TestClient) -> None:
    sales = _login(client, "agus_sales")
    spv = _login(client, "titi_spv")
    order = _submit(client, sales)

    blank = client.post(f"{API}/orders/{order['id']}/reject", json={"message": "   "}, headers=spv)
    assert blank.status_code == 422
    assert blank.json()["code"] == "REJECTION_MESSAGE_REQUIRED"
    for body in ({"message": ""}, {}):
        empty = client.post(f"{API}/orders/{order['id']}/reject", json=body, headers=spv)
        assert empty.status_code == 422
        assert empty.json()["code"] == "REJECTION_MESSAGE_REQUIRED"

    rejected = client.post(f"{API}/orders/{order['id']}/reject", json={"message": "wrong quantity"}, headers=spv)
    assert rejected.json()["status"] == "REJECTED_SPV"
    assert rejected.json()["rejection_message"] == "wrong quantity"

    notes = client.get(f"{API}/notifications?unread=true", headers=sales).json()
    assert len(notes) == 1
    assert notes[0]["message"].endswith("Reason: wrong quantity")

    marked = client.post(f"{API}/notifications/mark-all-read", headers=sales).json()
    assert marked == {"updated": 1, "unread": 0}
    again = client.post(f"{API}/notifications/mark-all-read", headers=sales).json()
    assert again == {"updated": 0, "unread": 0}

    terminal = client.post(
        f"{API}/orders/{order['id']}/advance",
        json={"status": "PENDING_MANAGER"},
        headers=spv,
    )
    assert terminal.status_code == 409
    assert terminal.json()["code"] == "ORDER_INVALID_TRANSITION"


def test_roles_are_enforced(client: TestClient) -> None:
    sales = _login(client, "agus_sales")
    spv = _login(client, "titi_spv")
    manager = _login(client, "jeffri_mgr")
    order = _submit(client, sales)

    assert client.get(f"{API}/users", headers=sales).status_code == 403
    assert client.post(f"{API}/orders/{order['id']}/approve", headers=sales).status_code == 403

    early = client.post(f"{API}/orders/{order['id']}/approve", headers=manager)
    assert early.status_code == 409

    forged = client.post(
        f"{API}/orders/{order['id']}/advance",
        json={"status": "PENDING_MANAGER"},
        headers=manager,
    )
    assert forged.status_code == 403
    assert forged.json()["code"] == "ORDER_TRANSITION_FORBIDDEN"

    missing = client.post(f"{API}/orders/ORD-NOPE/approve", headers=spv)
    assert missing.status_code == 404
    assert missing.json()["code"] == "ORDER_NOT_FOUND"


def test_admin_catalog_import_sync_and_export(client: TestClient) -> None:
    admin = _login(client, "admin")
    sales = _login(client, "agus_sales")

    empty_export = client.get(f"{API}/reports/orders.csv", headers=admin)
    assert empty_export.status_code == 404

    bad = client.post(
        f"{API}/catalog/skus/import",
        files={"file": ("stock.csv", b"garbage\n", "text/csv")},
        headers=admin,
    )
    assert bad.status_code == 422
    assert bad.json()["code"] == "IMPORT_NO_VALID_ROWS"

    imported = client.post(
        f"{API}/catalog/skus/import",
        files={"file": ("stock.csv", b"10228494,DHM 20 Y25 A,90\nbad,row\nx9,New SKU,4\n", "text/csv")},
        headers=admin,
    )
    assert imported.json() == {"imported": 2}
    skus = client.get(f"{API}/catalog/skus", headers=sales).json()
    assert [(s["id"], s["warehouse_stock"]) for s in skus] == [("10228494", 90), ("X9", 4)]

    stock = client.get(f"{API}/catalog/skus/10228494/return-stock?sales_username=tedy_sales", headers=sales).json()
    assert stock == {"sku_id": "10228494", "sales_username": "Agus_sales", "quantity": 5}

    sync = client.post(f"{API}/catalog/sync", headers=admin)
    assert sync.json()["to_role"] == "SALES"
    assert client.get(f"{API}/notifications/unread-count", headers=sales).json() == {"unread": 1}

    _submit(client, sales, quantity=7)
    export = client.get(f"{API}/reports/orders.csv", headers=admin)
    assert export.status_code == 200
    assert export.headers["content-disposition"].startswith('attachment; filename="sales_orders_export_')
    lines = export.text.splitlines()
    assert lines[0] == "Username,Sales Name,Product,Quantity,Status"
    assert lines[1] == "Agus_sales,Agus,DHM 20 Y25 A,7,PENDING_SPV"

    stats = client.get(f"{API}/reports/stats", headers=admin).json()
    assert stats == {"total_warehouse": 94, "total_return": 7, "total_orders": 1, "total_users": 5}


def test_admin_manages_users(client: TestClient) -> None:
    admin = _login(client, "admin")

    created = client.post(
        f"{API}/users",
        json={"username": "Budi_Sales", "name": "Budi", "role": "SALES"},
        headers=admin,
    )
    assert created.status_code == 201
    user = created.json()
    assert user["username"] == "budi_sales"

    duplicate = client.post(
        f"{API}/users",
        json={"username": "BUDI_sales", "name": "Budi 2", "role": "SALES"},
        headers=admin,
    )
    assert duplicate.status_code == 409

    budi = _login(client, "budi_sales")
    assert client.get(f"{API}/auth/me", headers=budi).json()["name"] == "Budi"

    reset = client.post(
        f"{API}/users/{user['id']}/reset-password",
        json={"new_password": "better-pass", "confirm_password": "better-pass"},
        headers=admin,
    )
    assert reset.status_code == 204
    _login(client, "budi_sales", "better-pass")

    assert client.delete(f"{API}/users/{user['id']}", headers=admin).status_code == 204
    sales_users = client.get(f"{API}/users?role=SALES", headers=admin).json()
    assert [u["username"] for u in sales_users] == ["Agus_sales", "tedy_sales"]
    assert client.delete(f"{API}/users/U01", headers=admin).status_code == 409
