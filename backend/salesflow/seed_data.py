"""Seed dataset used when no persisted state exists for the configured key."""
from datetime import datetime, timezone

from .security import get_password_hash
from .state import AppState, ReturnRecord, Sku, User, UserRole

SEED_PASSWORD = "password123"

SKUS = [
    {"id": "10228494", "name": "DHM 20 Y25 A", "warehouse_stock": 1150},
    {"id": "10235628", "name": "DHM 20 Y25 B", "warehouse_stock": 800},
    {"id": "10220528", "name": "DHF 16 Y25", "warehouse_stock": 2500},
    {"id": "10229572", "name": "DHF 16 Y25 A", "warehouse_stock": 4005},
]

USERS = [
    {"id": "U01", "username": "admin", "name": "Admin User", "email": "admin@Ep.com", "role": UserRole.ADMIN},
    {"id": "U02", "username": "Agus_sales", "name": "Agus", "email": "Agus@Ep.com", "role": UserRole.SALES},
    {"id": "U03", "username": "tedy_sales", "name": "Tedy", "email": "tedy@EP.com", "role": UserRole.SALES},
    {"id": "U04", "username": "titi_spv", "name": "Titi", "email": "Titi@Ep.com", "role": UserRole.SPV},
    {"id": "U05", "username": "Jeffri_mgr", "name": "Jeffri", "email": "Jeff@Ep.com", "role": UserRole.MANAGER},
]

RETURNS = [
    {
        "id": "RET-001",
        "sales_id": "Agus_sales",
        "sales_name": "Agus",
        "sku_id": "10228494",
        "sku_name": "DHM 20 Y25 A",
        "quantity": 5,
    },
    {
        "id": "RET-002",
        "sales_id": "Tedy_sales",
        "sales_name": "Tedi",
        "sku_id": "10235628",
        "sku_name": "DHM 20 Y25 B",
        "quantity": 2,
    },
]


def build_seed_state(*, at: datetime | None = None) -> AppState:
    """Build the bootstrap state: catalog, users and returns, no orders or notifications."""
    ts = at or datetime.now(timezone.utc)
    return AppState(
        current_user_id=None,
        users=tuple(User(password_hash=get_password_hash(SEED_PASSWORD), **data) for data in USERS),
        skus=tuple(Sku(**data) for data in SKUS),
        orders=(),
        returns=tuple(ReturnRecord(created_at=ts, **data) for data in RETURNS),
        notifications=(),
    )
