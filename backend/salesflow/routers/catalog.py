"""Catalog and return-log endpoints."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlalchemy.orm import Session

from ..auth import PermissionChecker, get_current_user
from ..database import get_db
from ..repository import StateRepository
from ..schemas import (
    ImportResultResponse,
    NotificationResponse,
    ReturnRecordCreate,
    ReturnRecordResponse,
    ReturnStockResponse,
    SkuResponse,
)
from ..state import User, UserRole
from ..use_cases.catalog_admin import (
    add_return_record_use_case,
    delete_return_record_use_case,
    import_catalog_use_case,
    import_returns_use_case,
    trigger_sync_notification_use_case,
)
from ..use_cases.reporting import return_stock_for_sku

router = APIRouter(prefix="/catalog", tags=["catalog"])
logger = logging.getLogger(__name__)

_MAX_IMPORT_BYTES = 2 * 1024 * 1024


async def _read_upload_text(file: UploadFile) -> str:
    if not file.filename:
        raise HTTPException(status_code=400, detail="Filename is required")
    if not file.filename.lower().endswith(".csv"):
        raise HTTPException(status_code=400, detail="Only .csv files are accepted")
    raw = await file.read(_MAX_IMPORT_BYTES + 1)
    if len(raw) > _MAX_IMPORT_BYTES:
        raise HTTPException(status_code=413, detail="File too large")
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="File must be UTF-8 encoded")


@router.get("/skus", response_model=list[SkuResponse])
def get_skus(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    state = StateRepository(db).load()
    return [SkuResponse.model_validate(s) for s in state.skus]


@router.get("/skus/{sku_id}/return-stock", response_model=ReturnStockResponse)
def get_return_stock(
    sku_id: str,
    sales_username: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Returned quantity of a SKU; salespeople only ever see their own returns."""
    if current_user.role == UserRole.SALES:
        sales_username = current_user.username
    state = StateRepository(db).load()
    return ReturnStockResponse(
        sku_id=sku_id.strip().upper(),
        sales_username=sales_username,
        quantity=return_stock_for_sku(state, sku_id, sales_username),
    )


@router.post("/skus/import", response_model=ImportResultResponse)
async def import_skus(
    file: UploadFile = File(...),
    current_user: User = Depends(PermissionChecker("canManageCatalog")),
    db: Session = Depends(get_db),
):
    """Replace the SKU catalog from a CSV file (SKU_ID, SKU_Name, Quantity)."""
    text = await _read_upload_text(file)
    repo = StateRepository(db)
    state = import_catalog_use_case(state=repo.load(), text=text)
    repo.save(state)
    return ImportResultResponse(imported=len(state.skus))


@router.get("/returns", response_model=list[ReturnRecordResponse])
def get_returns(
    current_user: User = Depends(PermissionChecker("canManageReturns")),
    db: Session = Depends(get_db),
):
    state = StateRepository(db).load()
    return [ReturnRecordResponse.model_validate(r) for r in state.returns]


@router.post("/returns", response_model=ReturnRecordResponse, status_code=201)
def add_return(
    data: ReturnRecordCreate,
    current_user: User = Depends(PermissionChecker("canManageReturns")),
    db: Session = Depends(get_db),
):
    repo = StateRepository(db)
    state, record = add_return_record_use_case(
        state=repo.load(),
        sales_username=data.sales_username,
        sales_name=data.sales_name,
        sku_id=data.sku_id,
        sku_name=data.sku_name,
        quantity=data.quantity,
    )
    repo.save(state)
    return ReturnRecordResponse.model_validate(record)


@router.post("/returns/import", response_model=ImportResultResponse)
async def import_returns(
    file: UploadFile = File(...),
    current_user: User = Depends(PermissionChecker("canManageReturns")),
    db: Session = Depends(get_db),
):
    """Replace the return log from a CSV file (SalesUsername, SalesName, SKU_ID, SKU_Name, Quantity)."""
    text = await _read_upload_text(file)
    repo = StateRepository(db)
    state = import_returns_use_case(state=repo.load(), text=text)
    repo.save(state)
    return ImportResultResponse(imported=len(state.returns))


@router.delete("/returns/{record_id}", status_code=204)
def delete_return(
    record_id: str,
    current_user: User = Depends(PermissionChecker("canManageReturns")),
    db: Session = Depends(get_db),
):
    repo = StateRepository(db)
    repo.save(delete_return_record_use_case(state=repo.load(), record_id=record_id))


@router.post("/sync", response_model=NotificationResponse)
def sync_inventory(
    current_user: User = Depends(PermissionChecker("canManageCatalog")),
    db: Session = Depends(get_db),
):
    """Notify all salespeople that catalog and returns were refreshed."""
    repo = StateRepository(db)
    state, notification = trigger_sync_notification_use_case(state=repo.load())
    repo.save(state)
    logger.info("Inventory sync announced by %s", current_user.username)
    return NotificationResponse.from_notification(notification)
