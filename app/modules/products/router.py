from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from app.database.database import get_db
from app.modules.auth.dependencies import AuthDependencies
from app.modules.products.service import ProductService
from app.modules.products.schemas import (
    ProductCreate, ProductUpdate, ProductOut, ProductList,
    StockAdjustment, InventoryMovementOut
)

product_router = APIRouter(prefix="/products", tags=["Products"])


@product_router.post("/", response_model=ProductOut, status_code=status.HTTP_201_CREATED)
def create_product(
    data: ProductCreate,
    db: Session = Depends(get_db),
    auth_context=Depends(AuthDependencies.require_owner_or_admin())
):
    """Create a product, optionally with opening stock."""
    return ProductService(db).create_product(data)


@product_router.get("/", response_model=ProductList)
def list_products(
    search: Optional[str] = Query(None, description="Search by name, SKU or description"),
    category_id: Optional[int] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    auth_context=Depends(AuthDependencies.require_any_role())
):
    return ProductService(db).get_products(search, category_id, limit, offset)


@product_router.get("/low-stock", response_model=List[ProductOut])
def list_low_stock_products(
    db: Session = Depends(get_db),
    auth_context=Depends(AuthDependencies.require_any_role())
):
    """Products at or below their low-stock threshold."""
    return ProductService(db).get_low_stock_products()


@product_router.get("/sku/{sku}", response_model=ProductOut)
def get_product_by_sku(
    sku: str,
    db: Session = Depends(get_db),
    auth_context=Depends(AuthDependencies.require_any_role())
):
    return ProductService(db).get_product_by_sku(sku)


@product_router.get("/{product_id}", response_model=ProductOut)
def get_product(
    product_id: int,
    db: Session = Depends(get_db),
    auth_context=Depends(AuthDependencies.require_any_role())
):
    return ProductService(db).get_product_by_id(product_id)


@product_router.patch("/{product_id}", response_model=ProductOut)
def update_product(
    product_id: int,
    data: ProductUpdate,
    db: Session = Depends(get_db),
    auth_context=Depends(AuthDependencies.require_owner_or_admin())
):
    return ProductService(db).update_product(product_id, data)


@product_router.patch("/{product_id}/stock", response_model=ProductOut)
def adjust_stock(
    product_id: int,
    adjustment: StockAdjustment,
    db: Session = Depends(get_db),
    auth_context=Depends(AuthDependencies.require_writer())
):
    """Manual stock correction; the resulting stock cannot go below zero."""
    return ProductService(db).adjust_stock(product_id, adjustment)


@product_router.get("/{product_id}/movements", response_model=List[InventoryMovementOut])
def list_movements(
    product_id: int,
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    auth_context=Depends(AuthDependencies.require_any_role())
):
    return ProductService(db).get_movements(product_id, limit, offset)


@product_router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    auth_context=Depends(AuthDependencies.require_owner_or_admin())
):
    ProductService(db).delete_product(product_id)
