from pydantic import BaseModel, Field, EmailStr, field_validator
from typing import Optional, List
from datetime import datetime

from app.common.types import Money


class ContactBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = None
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    postal_code: Optional[str] = Field(None, max_length=20)
    country: Optional[str] = Field("India", max_length=100)
    gstin: Optional[str] = Field(None, max_length=20)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError('Name cannot be blank')
        return v.strip()

    @field_validator('gstin')
    @classmethod
    def normalize_gstin(cls, v):
        return v.strip().upper() if v else v


class ContactUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = None
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    postal_code: Optional[str] = Field(None, max_length=20)
    country: Optional[str] = Field(None, max_length=100)
    gstin: Optional[str] = Field(None, max_length=20)
    is_active: Optional[bool] = None


# Customer Schemas
class CustomerCreate(ContactBase):
    pass


class CustomerUpdate(ContactUpdate):
    pass


class CustomerOut(ContactBase):
    id: int
    email: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CustomerList(BaseModel):
    customers: List[CustomerOut]
    total: int
    limit: int
    offset: int


# Supplier Schemas
class SupplierCreate(ContactBase):
    contact_person: Optional[str] = Field(None, max_length=150)


class SupplierUpdate(ContactUpdate):
    contact_person: Optional[str] = Field(None, max_length=150)


class SupplierOut(SupplierCreate):
    id: int
    email: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class SupplierList(BaseModel):
    suppliers: List[SupplierOut]
    total: int
    limit: int
    offset: int


class SupplierPendingPayment(BaseModel):
    """Outstanding purchase balance owed to one supplier"""
    supplier_id: int
    supplier_name: str
    pending_purchases: int
    total_amount: Money
    amount_paid: Money
    balance_due: Money
