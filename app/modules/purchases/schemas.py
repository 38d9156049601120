from pydantic import BaseModel, Field, model_validator
from typing import Optional, List
from datetime import date, datetime

from app.common.types import Money
from app.modules.invoices.schemas import LineItemCreate, LineItemOut, PaymentCreate, PaymentOut
from app.modules.ledger import PaymentStatus


class PurchaseBase(BaseModel):
    supplier_id: int
    supplier_reference: Optional[str] = Field(None, max_length=100)
    purchase_date: date = Field(default_factory=date.today)
    due_date: Optional[date] = Field(None, description="Defaults to the configured payment terms")
    notes: Optional[str] = None
    items: List[LineItemCreate] = Field(..., min_length=1, description="At least one line item")

    @model_validator(mode='after')
    def validate_due_date(self):
        if self.due_date and self.due_date < self.purchase_date:
            raise ValueError('Due date cannot be before the purchase date')
        return self


class PurchaseCreate(PurchaseBase):
    initial_payment: Optional[PaymentCreate] = None


class PurchaseUpdate(PurchaseBase):
    """Full replacement of the header and every line item"""
    pass


class SupplierSummary(BaseModel):
    id: int
    name: str
    contact_person: Optional[str] = None
    gstin: Optional[str] = None

    class Config:
        from_attributes = True


class PurchaseOut(BaseModel):
    id: int
    purchase_number: str
    supplier_reference: Optional[str] = None
    supplier_id: int
    supplier: Optional[SupplierSummary] = None
    purchase_date: date
    due_date: date
    notes: Optional[str] = None
    subtotal: Money
    tax_amount: Money
    total_amount: Money
    amount_paid: Money
    balance_due: Money
    payment_status: PaymentStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PurchaseDetail(PurchaseOut):
    line_items: List[LineItemOut] = []
    payments: List[PaymentOut] = []


class PurchaseList(BaseModel):
    purchases: List[PurchaseOut]
    total: int
    limit: int
    offset: int
