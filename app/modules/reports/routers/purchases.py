"""
Purchase Reports Router
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database.database import get_db
from app.modules.auth.dependencies import AuthDependencies
from app.modules.auth.schemas import AuthContext
from ..services.purchases import PurchaseReportService
from ..schemas import PurchaseReportResponse
from ..utils import create_csv_response, prepare_documents_csv, CSV_HEADERS


router = APIRouter(prefix="/reports/purchases", tags=["Reports"])


@router.get("/", response_model=None)
def get_purchase_report(
    start_date: date = Query(..., description="Start date for the report period"),
    end_date: date = Query(..., description="End date for the report period"),
    supplier_id: Optional[int] = Query(None, description="Filter by supplier"),
    export: Optional[str] = Query(None, pattern="^(csv)$", description="Export format: csv"),
    auth_context: AuthContext = Depends(AuthDependencies.require_any_role()),
    db: Session = Depends(get_db)
):
    """Purchases recorded in the period with amounts paid and owed."""
    service = PurchaseReportService(db)
    report_data = service.get_purchase_report(start_date, end_date, supplier_id)

    if export == "csv":
        filename = f"purchases_{start_date}_{end_date}.csv"
        return create_csv_response(
            prepare_documents_csv(report_data, "purchases"), filename, CSV_HEADERS["purchases"]
        )

    return PurchaseReportResponse(**report_data)
