"""
REST endpoints for customers and suppliers.
"""

from fastapi import APIRouter, Depends, Query, Path, status
from sqlalchemy.orm import Session
from typing import List, Optional

from app.database.database import get_db
from app.modules.auth.dependencies import AuthDependencies
from app.modules.contacts.service import CustomerService, SupplierService
from app.modules.contacts.schemas import (
    CustomerCreate, CustomerUpdate, CustomerOut, CustomerList,
    SupplierCreate, SupplierUpdate, SupplierOut, SupplierList,
    SupplierPendingPayment
)

customers_router = APIRouter(
    prefix="/customers",
    tags=["Customers"],
    responses={404: {"description": "Not found"}}
)

suppliers_router = APIRouter(
    prefix="/suppliers",
    tags=["Suppliers"],
    responses={404: {"description": "Not found"}}
)


# ===== CUSTOMERS =====

@customers_router.post("/", response_model=CustomerOut, status_code=status.HTTP_201_CREATED)
def create_customer(
    data: CustomerCreate,
    db: Session = Depends(get_db),
    auth_context=Depends(AuthDependencies.require_writer())
):
    return CustomerService(db).create(data)


@customers_router.get("/", response_model=CustomerList)
def list_customers(
    search: Optional[str] = Query(None, description="Search by name, email, phone or GSTIN"),
    is_active: Optional[bool] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    auth_context=Depends(AuthDependencies.require_any_role())
):
    result = CustomerService(db).get_all(search, is_active, limit, offset)
    return CustomerList(
        customers=result["items"],
        total=result["total"],
        limit=limit,
        offset=offset
    )


@customers_router.get("/{customer_id}", response_model=CustomerOut)
def get_customer(
    customer_id: int = Path(..., description="Customer ID"),
    db: Session = Depends(get_db),
    auth_context=Depends(AuthDependencies.require_any_role())
):
    return CustomerService(db).get(customer_id)


@customers_router.put("/{customer_id}", response_model=CustomerOut)
def update_customer(
    data: CustomerUpdate,
    customer_id: int = Path(..., description="Customer ID"),
    db: Session = Depends(get_db),
    auth_context=Depends(AuthDependencies.require_writer())
):
    """Only the fields provided are changed."""
    return CustomerService(db).update(customer_id, data)


@customers_router.delete("/{customer_id}")
def delete_customer(
    customer_id: int = Path(..., description="Customer ID"),
    db: Session = Depends(get_db),
    auth_context=Depends(AuthDependencies.require_owner_or_admin())
):
    """Customers with invoices cannot be deleted; deactivate them instead."""
    return CustomerService(db).delete(customer_id)


# ===== SUPPLIERS =====

@suppliers_router.post("/", response_model=SupplierOut, status_code=status.HTTP_201_CREATED)
def create_supplier(
    data: SupplierCreate,
    db: Session = Depends(get_db),
    auth_context=Depends(AuthDependencies.require_writer())
):
    return SupplierService(db).create(data)


@suppliers_router.get("/", response_model=SupplierList)
def list_suppliers(
    search: Optional[str] = Query(None, description="Search by name, email, phone or GSTIN"),
    is_active: Optional[bool] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    auth_context=Depends(AuthDependencies.require_any_role())
):
    result = SupplierService(db).get_all(search, is_active, limit, offset)
    return SupplierList(
        suppliers=result["items"],
        total=result["total"],
        limit=limit,
        offset=offset
    )


@suppliers_router.get("/pending-payments", response_model=List[SupplierPendingPayment])
def get_pending_payments(
    db: Session = Depends(get_db),
    auth_context=Depends(AuthDependencies.require_any_role())
):
    """
    Suppliers we still owe money to.

    Balances are recomputed from purchase payments on every call.
    """
    return SupplierService(db).get_pending_payments()


@suppliers_router.get("/{supplier_id}", response_model=SupplierOut)
def get_supplier(
    supplier_id: int = Path(..., description="Supplier ID"),
    db: Session = Depends(get_db),
    auth_context=Depends(AuthDependencies.require_any_role())
):
    return SupplierService(db).get(supplier_id)


@suppliers_router.put("/{supplier_id}", response_model=SupplierOut)
def update_supplier(
    data: SupplierUpdate,
    supplier_id: int = Path(..., description="Supplier ID"),
    db: Session = Depends(get_db),
    auth_context=Depends(AuthDependencies.require_writer())
):
    return SupplierService(db).update(supplier_id, data)


@suppliers_router.delete("/{supplier_id}")
def delete_supplier(
    supplier_id: int = Path(..., description="Supplier ID"),
    db: Session = Depends(get_db),
    auth_context=Depends(AuthDependencies.require_owner_or_admin())
):
    return SupplierService(db).delete(supplier_id)
