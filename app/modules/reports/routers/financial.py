"""
Financial Reports Router

Accounts receivable/payable with aging, tax and profit & loss.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database.database import get_db
from app.modules.auth.dependencies import AuthDependencies
from app.modules.auth.schemas import AuthContext
from app.modules.ledger import AgingBucket
from ..services.financial import FinancialReportService
from ..schemas import (
    AccountsReceivableResponse,
    AccountsPayableResponse,
    TaxReportResponse,
    ProfitLossResponse
)
from ..utils import (
    create_csv_response,
    prepare_aging_csv,
    prepare_tax_csv,
    prepare_profit_loss_csv,
    CSV_HEADERS
)


router = APIRouter(prefix="/reports/financial", tags=["Reports"])


@router.get("/accounts-receivable", response_model=None)
def get_accounts_receivable(
    as_of_date: Optional[date] = Query(None, description="As of date (default: today)"),
    customer_id: Optional[int] = Query(None, description="Filter by customer"),
    aging_period: Optional[AgingBucket] = Query(None, description="current, 1-30, 31-60, 61-90 or 90+"),
    export: Optional[str] = Query(None, pattern="^(csv)$", description="Export format: csv"),
    auth_context: AuthContext = Depends(AuthDependencies.require_any_role()),
    db: Session = Depends(get_db)
):
    """Generate accounts receivable report."""
    service = FinancialReportService(db)
    report_data = service.get_accounts_receivable(as_of_date, customer_id, aging_period)

    if export == "csv":
        filename = f"accounts_receivable_{report_data['as_of_date']}.csv"
        return create_csv_response(prepare_aging_csv(report_data), filename, CSV_HEADERS["accounts_receivable"])

    return AccountsReceivableResponse(**report_data)


@router.get("/accounts-payable", response_model=None)
def get_accounts_payable(
    as_of_date: Optional[date] = Query(None, description="As of date (default: today)"),
    supplier_id: Optional[int] = Query(None, description="Filter by supplier"),
    aging_period: Optional[AgingBucket] = Query(None, description="current, 1-30, 31-60, 61-90 or 90+"),
    export: Optional[str] = Query(None, pattern="^(csv)$", description="Export format: csv"),
    auth_context: AuthContext = Depends(AuthDependencies.require_any_role()),
    db: Session = Depends(get_db)
):
    """Generate accounts payable report."""
    service = FinancialReportService(db)
    report_data = service.get_accounts_payable(as_of_date, supplier_id, aging_period)

    if export == "csv":
        filename = f"accounts_payable_{report_data['as_of_date']}.csv"
        return create_csv_response(prepare_aging_csv(report_data), filename, CSV_HEADERS["accounts_payable"])

    return AccountsPayableResponse(**report_data)


@router.get("/tax", response_model=None)
def get_tax_report(
    start_date: date = Query(..., description="Start date for the report period"),
    end_date: date = Query(..., description="End date for the report period"),
    export: Optional[str] = Query(None, pattern="^(csv)$", description="Export format: csv"),
    auth_context: AuthContext = Depends(AuthDependencies.require_role(["owner", "admin", "accountant"])),
    db: Session = Depends(get_db)
):
    """Tax collected on sales against tax paid on purchases."""
    service = FinancialReportService(db)
    report_data = service.get_tax_report(start_date, end_date)

    if export == "csv":
        filename = f"tax_{start_date}_{end_date}.csv"
        return create_csv_response(prepare_tax_csv(report_data), filename, CSV_HEADERS["tax"])

    return TaxReportResponse(**report_data)


@router.get("/profit-loss", response_model=None)
def get_profit_loss(
    start_date: date = Query(..., description="Start date for the report period"),
    end_date: date = Query(..., description="End date for the report period"),
    export: Optional[str] = Query(None, pattern="^(csv)$", description="Export format: csv"),
    auth_context: AuthContext = Depends(AuthDependencies.require_role(["owner", "admin", "accountant"])),
    db: Session = Depends(get_db)
):
    """Generate profit and loss report."""
    service = FinancialReportService(db)
    report_data = service.get_profit_loss(start_date, end_date)

    if export == "csv":
        filename = f"profit_loss_{start_date}_{end_date}.csv"
        return create_csv_response(prepare_profit_loss_csv(report_data), filename, CSV_HEADERS["profit_loss"])

    return ProfitLossResponse(**report_data)
