from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date

from app.database.database import get_db
from app.modules.auth.dependencies import AuthDependencies
from app.modules.purchases.service import PurchaseService, PurchasePaymentService
from app.modules.purchases.schemas import (
    PurchaseCreate, PurchaseUpdate, PurchaseOut, PurchaseDetail, PurchaseList
)
from app.modules.invoices.schemas import PaymentCreate, PaymentOut, PaymentHistory
from app.modules.ledger import PaymentStatus

purchases_router = APIRouter(prefix="/purchases", tags=["Purchases"])


@purchases_router.post("/", response_model=PurchaseDetail, status_code=status.HTTP_201_CREATED)
def create_purchase(
    purchase_data: PurchaseCreate,
    db: Session = Depends(get_db),
    auth_context=Depends(AuthDependencies.require_writer())
):
    """
    Record a purchase from a supplier

    Line prices default to the product's cost price; stock is incremented.
    """
    service = PurchaseService(db)
    return service.create_purchase(purchase_data, auth_context.user_id)


@purchases_router.get("/", response_model=PurchaseList)
def list_purchases(
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    start_date: Optional[date] = Query(None, description="From purchase date (YYYY-MM-DD)"),
    end_date: Optional[date] = Query(None, description="To purchase date (YYYY-MM-DD)"),
    supplier_id: Optional[int] = Query(None, description="Filter by supplier"),
    payment_status: Optional[PaymentStatus] = Query(None, description="Unpaid, Partially Paid or Paid"),
    db: Session = Depends(get_db),
    auth_context=Depends(AuthDependencies.require_any_role())
):
    service = PurchaseService(db)
    return service.get_purchases(supplier_id, start_date, end_date, payment_status, limit, offset)


@purchases_router.get("/unpaid", response_model=List[PurchaseOut])
def list_unpaid_purchases(
    supplier_id: Optional[int] = Query(None, description="Filter by supplier"),
    db: Session = Depends(get_db),
    auth_context=Depends(AuthDependencies.require_any_role())
):
    service = PurchaseService(db)
    return service.get_unpaid_purchases(supplier_id)


@purchases_router.get("/supplier/{supplier_id}", response_model=List[PurchaseOut])
def list_supplier_purchases(
    supplier_id: int,
    db: Session = Depends(get_db),
    auth_context=Depends(AuthDependencies.require_any_role())
):
    service = PurchaseService(db)
    return service.get_supplier_purchases(supplier_id)


@purchases_router.get("/{purchase_id}", response_model=PurchaseDetail)
def get_purchase(
    purchase_id: int,
    db: Session = Depends(get_db),
    auth_context=Depends(AuthDependencies.require_any_role())
):
    service = PurchaseService(db)
    return service.get_purchase_by_id(purchase_id)


@purchases_router.put("/{purchase_id}", response_model=PurchaseDetail)
def update_purchase(
    purchase_id: int,
    purchase_data: PurchaseUpdate,
    db: Session = Depends(get_db),
    auth_context=Depends(AuthDependencies.require_writer())
):
    service = PurchaseService(db)
    return service.update_purchase(purchase_id, purchase_data)


@purchases_router.delete("/{purchase_id}")
def delete_purchase(
    purchase_id: int,
    db: Session = Depends(get_db),
    auth_context=Depends(AuthDependencies.require_owner_or_admin())
):
    service = PurchaseService(db)
    return service.delete_purchase(purchase_id)


# --- PAYMENTS ---

@purchases_router.post("/{purchase_id}/payments", response_model=PaymentOut, status_code=status.HTTP_201_CREATED)
def add_purchase_payment(
    purchase_id: int,
    payment_data: PaymentCreate,
    db: Session = Depends(get_db),
    auth_context=Depends(AuthDependencies.require_writer())
):
    service = PurchasePaymentService(db)
    return service.add_payment(purchase_id, payment_data)


@purchases_router.get("/{purchase_id}/payments", response_model=PaymentHistory)
def get_purchase_payments(
    purchase_id: int,
    db: Session = Depends(get_db),
    auth_context=Depends(AuthDependencies.require_any_role())
):
    service = PurchasePaymentService(db)
    return service.get_payment_history(purchase_id)
