"""
Inventory Reports Router

FastAPI router for the current stock report.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database.database import get_db
from app.modules.auth.dependencies import AuthDependencies
from app.modules.auth.schemas import AuthContext
from ..services.inventory import InventoryReportService
from ..schemas import InventoryReportResponse
from ..utils import create_csv_response, prepare_inventory_csv, CSV_HEADERS


router = APIRouter(prefix="/reports/inventory", tags=["Reports"])


@router.get("/", response_model=None)
def get_inventory_report(
    category_id: Optional[int] = Query(None, description="Filter by product category"),
    low_stock_only: bool = Query(False, description="Show only products with low stock"),
    export: Optional[str] = Query(None, pattern="^(csv)$", description="Export format: csv"),
    auth_context: AuthContext = Depends(AuthDependencies.require_any_role()),
    db: Session = Depends(get_db)
):
    """
    Current stock valued at cost price.

    Includes totals per category and a low-stock flag per product.
    """
    service = InventoryReportService(db)
    report_data = service.get_inventory_report(category_id, low_stock_only)

    if export == "csv":
        filename = f"inventory_{report_data['as_of_date']}.csv"
        return create_csv_response(prepare_inventory_csv(report_data), filename, CSV_HEADERS["inventory"])

    return InventoryReportResponse(**report_data)
