"""
Sales Reports Router
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database.database import get_db
from app.modules.auth.dependencies import AuthDependencies
from app.modules.auth.schemas import AuthContext
from ..services.sales import SalesReportService
from ..schemas import SalesReportResponse
from ..utils import create_csv_response, prepare_documents_csv, CSV_HEADERS


router = APIRouter(prefix="/reports/sales", tags=["Reports"])


@router.get("/", response_model=None)
def get_sales_report(
    start_date: date = Query(..., description="Start date for the report period"),
    end_date: date = Query(..., description="End date for the report period"),
    customer_id: Optional[int] = Query(None, description="Filter by customer"),
    export: Optional[str] = Query(None, pattern="^(csv)$", description="Export format: csv"),
    auth_context: AuthContext = Depends(AuthDependencies.require_any_role()),
    db: Session = Depends(get_db)
):
    """
    Invoices issued in the period.

    Includes totals, amounts collected, outstanding balances, the top
    customers and the best-selling products.
    """
    service = SalesReportService(db)
    report_data = service.get_sales_report(start_date, end_date, customer_id)

    if export == "csv":
        filename = f"sales_{start_date}_{end_date}.csv"
        return create_csv_response(
            prepare_documents_csv(report_data, "invoices"), filename, CSV_HEADERS["sales"]
        )

    return SalesReportResponse(**report_data)
