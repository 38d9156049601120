from pydantic import BaseModel, Field, field_validator
from decimal import Decimal
from typing import Optional, List
from datetime import datetime

from app.common.types import Money


class CategoryResponse(BaseModel):
    """Basic category information"""
    id: int
    name: str

    class Config:
        from_attributes = True


class ProductBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    sku: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = None
    category_id: Optional[int] = None
    unit_price: Decimal = Field(Decimal("0"), ge=0, decimal_places=2, description="Selling price before tax")
    cost_price: Decimal = Field(Decimal("0"), ge=0, decimal_places=2, description="Purchase price before tax")
    low_stock_threshold: Optional[int] = Field(None, ge=0)
    hsn_sac_code: Optional[str] = Field(None, max_length=20)
    gst_rate: Decimal = Field(Decimal("0"), ge=0, le=100, decimal_places=2)

    @field_validator('sku')
    @classmethod
    def normalize_sku(cls, v):
        return v.strip().upper()


class ProductCreate(ProductBase):
    stock_quantity: int = Field(0, ge=0)


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    sku: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = None
    category_id: Optional[int] = None
    unit_price: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    cost_price: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    low_stock_threshold: Optional[int] = Field(None, ge=0)
    hsn_sac_code: Optional[str] = Field(None, max_length=20)
    gst_rate: Optional[Decimal] = Field(None, ge=0, le=100, decimal_places=2)
    is_active: Optional[bool] = None

    @field_validator('sku')
    @classmethod
    def normalize_sku(cls, v):
        return v.strip().upper() if v else v


class ProductOut(BaseModel):
    id: int
    name: str
    sku: str
    description: Optional[str] = None
    category: Optional[CategoryResponse] = None
    unit_price: Money
    cost_price: Money
    stock_quantity: int
    low_stock_threshold: int
    is_low_stock: bool
    hsn_sac_code: Optional[str] = None
    gst_rate: Money
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ProductList(BaseModel):
    products: List[ProductOut]
    total: int
    limit: int
    offset: int


class StockAdjustment(BaseModel):
    quantity_change: int = Field(..., description="Positive to add stock, negative to remove")
    notes: Optional[str] = Field(None, max_length=255)

    @field_validator('quantity_change')
    @classmethod
    def validate_change(cls, v):
        if v == 0:
            raise ValueError('quantity_change cannot be zero')
        return v


class InventoryMovementOut(BaseModel):
    id: int
    product_id: int
    quantity: int
    movement_type: str
    reference: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
