"""Catalog and return-log administration use-cases."""
from __future__ import annotations

import logging
from datetime import datetime

from ..domain_errors import invalid, not_found
from ..services.csv_rows import (
    CATALOG_FORMAT,
    RETURNS_FORMAT,
    parse_catalog_rows,
    parse_return_rows,
    split_lines,
)
from ..services.notification_router import notify_role
from ..state import (
    AppState,
    Notification,
    NotificationType,
    ReturnRecord,
    UserRole,
    new_id,
    now_utc,
)

logger = logging.getLogger(__name__)


def import_catalog_use_case(*, state: AppState, text: str) -> AppState:
    """Replace the whole SKU catalog with the rows parsed from ``text``."""
    skus = parse_catalog_rows(split_lines(text))
    if not skus:
        raise invalid(
            "IMPORT_NO_VALID_ROWS",
            f"No valid SKU data found in file. Ensure format is: {CATALOG_FORMAT}",
            expected_format=CATALOG_FORMAT,
        )
    logger.info("Catalog replaced with %d SKU(s)", len(skus))
    return state.model_copy(update={"skus": tuple(skus)})


def import_returns_use_case(*, state: AppState, text: str, at: datetime | None = None) -> AppState:
    """Replace the whole return log with the rows parsed from ``text``."""
    records = parse_return_rows(split_lines(text), at=at)
    if not records:
        raise invalid(
            "IMPORT_NO_VALID_ROWS",
            f"No valid return data found. Ensure format is: {RETURNS_FORMAT}",
            expected_format=RETURNS_FORMAT,
        )
    logger.info("Return log replaced with %d record(s)", len(records))
    return state.model_copy(update={"returns": tuple(records)})


def add_return_record_use_case(
    *,
    state: AppState,
    sales_username: str,
    sales_name: str,
    sku_id: str,
    quantity: int,
    sku_name: str | None = None,
    at: datetime | None = None,
) -> tuple[AppState, ReturnRecord]:
    if quantity <= 0:
        raise invalid("RETURN_QUANTITY_INVALID", "Return quantity must be positive")
    sku_id = sku_id.strip().upper()
    if sku_name is None:
        sku = state.find_sku(sku_id)
        if sku is None:
            raise not_found("SKU_NOT_FOUND", f"SKU {sku_id} not found", sku_id=sku_id)
        sku_name = sku.name

    record = ReturnRecord(
        id=new_id("RET"),
        sales_id=sales_username.strip().lower(),
        sales_name=sales_name.strip(),
        sku_id=sku_id,
        sku_name=sku_name,
        quantity=quantity,
        created_at=at or now_utc(),
    )
    return state.model_copy(update={"returns": state.returns + (record,)}), record


def delete_return_record_use_case(*, state: AppState, record_id: str) -> AppState:
    remaining = tuple(r for r in state.returns if r.id != record_id)
    if len(remaining) == len(state.returns):
        raise not_found("RETURN_NOT_FOUND", "Return record not found", record_id=record_id)
    return state.model_copy(update={"returns": remaining})


def trigger_sync_notification_use_case(*, state: AppState, at: datetime | None = None) -> tuple[AppState, Notification]:
    """Tell every salesperson the catalog and return log changed."""
    notification = notify_role(
        UserRole.SALES,
        title="Inventory Synchronized",
        message="Admin has updated the stock and returns catalog. Please verify your dashboard.",
        type=NotificationType.INFO,
        at=at,
    )
    return state.with_notifications(notification), notification
