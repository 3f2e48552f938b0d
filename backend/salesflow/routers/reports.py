"""Report endpoints for the administrator."""
from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from ..auth import PermissionChecker
from ..database import get_db
from ..repository import StateRepository
from ..schemas import DashboardStatsResponse, SalesSummaryResponse
from ..state import User
from ..use_cases.reporting import dashboard_stats, export_filename, export_orders_csv, sales_summary

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/orders.csv")
def export_orders(
    current_user: User = Depends(PermissionChecker("canExportOrders")),
    db: Session = Depends(get_db),
):
    """Download all orders, one row per line item."""
    content = export_orders_csv(StateRepository(db).load())
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'},
    )


@router.get("/stats", response_model=DashboardStatsResponse)
def get_stats(
    current_user: User = Depends(PermissionChecker("canViewReports")),
    db: Session = Depends(get_db),
):
    return DashboardStatsResponse.model_validate(dashboard_stats(StateRepository(db).load()))


@router.get("/sales-summary", response_model=list[SalesSummaryResponse])
def get_sales_summary(
    current_user: User = Depends(PermissionChecker("canViewReports")),
    db: Session = Depends(get_db),
):
    """Quantities and order counts per salesperson and status."""
    rows = sales_summary(StateRepository(db).load())
    return [SalesSummaryResponse.model_validate(row) for row in rows]
