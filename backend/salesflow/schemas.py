"""Pydantic schemas for API."""
from pydantic import BaseModel, Field, ConfigDict, model_validator
from typing import Optional
from datetime import datetime

from .state import (
    ByUser,
    Notification,
    NotificationType,
    OrderStatus,
    OrderType,
    UserRole,
)


# User schemas
class UserBase(BaseModel):
    username: str
    name: str
    email: str = ""
    role: UserRole


class UserCreate(UserBase):
    # Falls back to settings.DEFAULT_USER_PASSWORD when omitted.
    password: Optional[str] = None


class UserResponse(UserBase):
    id: str
    model_config = ConfigDict(from_attributes=True)


class AuthUserResponse(UserResponse):
    permissions: dict[str, bool]


class PasswordResetRequest(BaseModel):
    new_password: str
    confirm_password: str

    @model_validator(mode="after")
    def passwords_match(self):
        if self.new_password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


# Auth schemas
class LoginRequest(BaseModel):
    username: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: AuthUserResponse


# Catalog schemas
class SkuResponse(BaseModel):
    id: str
    name: str
    warehouse_stock: int
    model_config = ConfigDict(from_attributes=True)


class ReturnStockResponse(BaseModel):
    sku_id: str
    sales_username: Optional[str] = None
    quantity: int


class ReturnRecordCreate(BaseModel):
    sales_username: str
    sales_name: str
    sku_id: str
    sku_name: Optional[str] = None
    quantity: int = Field(gt=0)


class ReturnRecordResponse(BaseModel):
    id: str
    sales_id: str
    sales_name: str
    sku_id: str
    sku_name: str
    quantity: int
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class ImportResultResponse(BaseModel):
    imported: int


# Order schemas
class OrderItemRequest(BaseModel):
    sku_id: str
    quantity: int = Field(gt=0)


class OrderCreate(BaseModel):
    type: OrderType = OrderType.REGULAR
    items: list[OrderItemRequest] = Field(min_length=1)
    po_file: Optional[str] = None


class OrderRejectRequest(BaseModel):
    # Blank reasons are rejected by the use case with REJECTION_MESSAGE_REQUIRED.
    message: str = ""


class OrderAdvanceRequest(BaseModel):
    status: OrderStatus
    message: Optional[str] = None


class OrderItemResponse(BaseModel):
    sku_id: str
    sku_name: str
    quantity: int
    model_config = ConfigDict(from_attributes=True)


class OrderResponse(BaseModel):
    id: str
    sales_id: str
    sales_name: str
    type: OrderType
    items: list[OrderItemResponse]
    status: OrderStatus
    po_file: Optional[str] = None
    rejection_message: Optional[str] = None
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


# Notification schemas
class NotificationResponse(BaseModel):
    id: str
    to_user_id: Optional[str] = None
    to_role: Optional[UserRole] = None
    title: str
    message: str
    type: NotificationType
    is_read: bool
    created_at: datetime

    @classmethod
    def from_notification(cls, notification: Notification) -> "NotificationResponse":
        target = notification.target
        return cls(
            id=notification.id,
            to_user_id=target.user_id if isinstance(target, ByUser) else None,
            to_role=None if isinstance(target, ByUser) else target.role,
            title=notification.title,
            message=notification.message,
            type=notification.type,
            is_read=notification.is_read,
            created_at=notification.created_at,
        )


class UnreadCountResponse(BaseModel):
    unread: int


class MarkReadResponse(BaseModel):
    updated: int
    unread: int


# Report schemas
class DashboardStatsResponse(BaseModel):
    total_warehouse: int
    total_return: int
    total_orders: int
    total_users: int
    model_config = ConfigDict(from_attributes=True)


class SalesSummaryResponse(BaseModel):
    sales_id: str
    username: str
    sales_name: str
    status: OrderStatus
    total_qty: int
    order_count: int
    model_config = ConfigDict(from_attributes=True)
