from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date

from app.database.database import get_db
from app.modules.auth.dependencies import AuthDependencies
from app.modules.invoices.service import InvoiceService, PaymentService
from app.modules.invoices.schemas import (
    InvoiceCreate, InvoiceUpdate, InvoiceOut, InvoiceDetail, InvoiceList,
    PaymentCreate, PaymentOut, PaymentHistory
)
from app.modules.ledger import PaymentStatus

router = APIRouter(prefix="/invoices", tags=["Invoices"])


@router.post("/", response_model=InvoiceDetail, status_code=status.HTTP_201_CREATED)
def create_invoice(
    invoice_data: InvoiceCreate,
    db: Session = Depends(get_db),
    auth_context=Depends(AuthDependencies.require_writer())
):
    """
    Create a sales invoice

    Line prices and tax rates default to the product's; stock is decremented.
    An optional ``initial_payment`` is recorded with the invoice.
    """
    service = InvoiceService(db)
    return service.create_invoice(invoice_data, auth_context.user_id)


@router.get("/", response_model=InvoiceList)
def list_invoices(
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    start_date: Optional[date] = Query(None, description="From invoice date (YYYY-MM-DD)"),
    end_date: Optional[date] = Query(None, description="To invoice date (YYYY-MM-DD)"),
    customer_id: Optional[int] = Query(None, description="Filter by customer"),
    payment_status: Optional[PaymentStatus] = Query(None, description="Unpaid, Partially Paid or Paid"),
    db: Session = Depends(get_db),
    auth_context=Depends(AuthDependencies.require_any_role())
):
    service = InvoiceService(db)
    return service.get_invoices(customer_id, start_date, end_date, payment_status, limit, offset)


@router.get("/unpaid", response_model=List[InvoiceOut])
def list_unpaid_invoices(
    customer_id: Optional[int] = Query(None, description="Filter by customer"),
    db: Session = Depends(get_db),
    auth_context=Depends(AuthDependencies.require_any_role())
):
    """Invoices that still have a balance due"""
    service = InvoiceService(db)
    return service.get_unpaid_invoices(customer_id)


@router.get("/{invoice_id}", response_model=InvoiceDetail)
def get_invoice(
    invoice_id: int,
    db: Session = Depends(get_db),
    auth_context=Depends(AuthDependencies.require_any_role())
):
    service = InvoiceService(db)
    return service.get_invoice_by_id(invoice_id)


@router.put("/{invoice_id}", response_model=InvoiceDetail)
def update_invoice(
    invoice_id: int,
    invoice_data: InvoiceUpdate,
    db: Session = Depends(get_db),
    auth_context=Depends(AuthDependencies.require_writer())
):
    """
    Replace an invoice's header and line items

    Rejected when the new total would be below the amount already paid.
    """
    service = InvoiceService(db)
    return service.update_invoice(invoice_id, invoice_data)


@router.delete("/{invoice_id}")
def delete_invoice(
    invoice_id: int,
    db: Session = Depends(get_db),
    auth_context=Depends(AuthDependencies.require_owner_or_admin())
):
    """Delete an invoice without payments and return its stock"""
    service = InvoiceService(db)
    return service.delete_invoice(invoice_id)


# --- PAYMENTS ---

@router.post("/{invoice_id}/payments", response_model=PaymentOut, status_code=status.HTTP_201_CREATED)
def add_payment(
    invoice_id: int,
    payment_data: PaymentCreate,
    db: Session = Depends(get_db),
    auth_context=Depends(AuthDependencies.require_writer())
):
    """
    Record a customer payment

    Partial payments are allowed; an amount above the balance due is rejected.
    """
    service = PaymentService(db)
    return service.add_payment(invoice_id, payment_data)


@router.get("/{invoice_id}/payments", response_model=PaymentHistory)
def get_invoice_payments(
    invoice_id: int,
    db: Session = Depends(get_db),
    auth_context=Depends(AuthDependencies.require_any_role())
):
    """Payment history, newest first, with the running balance after each payment"""
    service = PaymentService(db)
    return service.get_payment_history(invoice_id)
