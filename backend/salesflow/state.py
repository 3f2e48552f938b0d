"""State document: entities, enums and the aggregate that holds them.

Every entity serializes to the camelCase JSON layout of the persisted
document (``model_dump(by_alias=True)``) and accepts both camelCase and
snake_case names on input. Entities are frozen; use cases build new
instances with ``model_copy(update=...)`` instead of mutating in place.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    SALES = "SALES"
    SPV = "SPV"
    MANAGER = "MANAGER"


class OrderStatus(str, Enum):
    NEW = "NEW"
    PENDING_SPV = "PENDING_SPV"
    PENDING_MANAGER = "PENDING_MANAGER"
    APPROVED = "APPROVED"
    REJECTED_SPV = "REJECTED_SPV"
    REJECTED_MANAGER = "REJECTED_MANAGER"


class OrderType(str, Enum):
    REGULAR = "REGULAR"
    ADDITIONAL = "ADDITIONAL"


class NotificationType(str, Enum):
    INFO = "INFO"
    SUCCESS = "SUCCESS"
    ALERT = "ALERT"


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:10].upper()}"


class _Entity(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class User(_Entity):
    id: str
    username: str
    name: str
    email: str = ""
    password_hash: str
    role: UserRole


class Sku(_Entity):
    id: str
    name: str
    warehouse_stock: int


class ReturnRecord(_Entity):
    id: str
    # Sales *username* (lower-cased on import), not the user id.
    sales_id: str
    sales_name: str
    sku_id: str
    sku_name: str
    quantity: int
    created_at: datetime


class OrderItem(_Entity):
    sku_id: str
    sku_name: str
    quantity: int = Field(gt=0)


class Order(_Entity):
    id: str
    sales_id: str
    sales_name: str
    type: OrderType
    items: tuple[OrderItem, ...]
    status: OrderStatus
    po_file: Optional[str] = None
    rejection_message: Optional[str] = None
    created_at: datetime

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity for item in self.items)


class ByUser(_Entity):
    kind: Literal["user"] = "user"
    user_id: str


class ByRole(_Entity):
    kind: Literal["role"] = "role"
    role: UserRole


NotificationTarget = Annotated[Union[ByUser, ByRole], Field(discriminator="kind")]


class Notification(_Entity):
    id: str
    target: NotificationTarget
    title: str
    message: str
    type: NotificationType
    is_read: bool = False
    created_at: datetime


class AppState(_Entity):
    """The whole store. Collections are tuples so a state value is never shared-mutable."""

    current_user_id: Optional[str] = None
    users: tuple[User, ...] = ()
    skus: tuple[Sku, ...] = ()
    orders: tuple[Order, ...] = ()
    returns: tuple[ReturnRecord, ...] = ()
    # Newest first.
    notifications: tuple[Notification, ...] = ()

    def find_user(self, user_id: str) -> User | None:
        return next((u for u in self.users if u.id == user_id), None)

    def find_user_by_username(self, username: str) -> User | None:
        wanted = username.strip().lower()
        return next((u for u in self.users if u.username.lower() == wanted), None)

    def find_order(self, order_id: str) -> Order | None:
        return next((o for o in self.orders if o.id == order_id), None)

    def find_sku(self, sku_id: str) -> Sku | None:
        return next((s for s in self.skus if s.id == sku_id), None)

    @property
    def current_user(self) -> User | None:
        if self.current_user_id is None:
            return None
        return self.find_user(self.current_user_id)

    def replace_order(self, order: Order) -> "AppState":
        orders = tuple(order if o.id == order.id else o for o in self.orders)
        return self.model_copy(update={"orders": orders})

    def with_notifications(self, *new: Notification) -> "AppState":
        """Prepend notifications, newest first."""
        if not new:
            return self
        ordered = tuple(reversed(new)) + self.notifications
        return self.model_copy(update={"notifications": ordered})

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "AppState":
        return cls.model_validate(document)
