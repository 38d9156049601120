from pydantic import BaseModel, Field, model_validator
from decimal import Decimal
from typing import Optional, List
from datetime import date, datetime

from app.common.types import Money
from app.modules.invoices.models import PaymentMethod
from app.modules.ledger import PaymentStatus


# Line item Schemas
class LineItemCreate(BaseModel):
    """
    One document line. ``unit_price`` and ``tax_rate`` default to the
    product's selling price and GST rate when omitted.
    """
    product_id: int
    quantity: int = Field(..., gt=0, description="Whole units, greater than 0")
    unit_price: Optional[Decimal] = Field(None, ge=0, decimal_places=2, description="Unit price before tax")
    discount_percentage: Decimal = Field(Decimal("0"), ge=0, le=100, decimal_places=2)
    tax_rate: Optional[Decimal] = Field(None, ge=0, le=100, decimal_places=2)


class LineItemOut(BaseModel):
    id: int
    product_id: int
    product_name: str
    hsn_sac_code: Optional[str] = None
    quantity: int
    unit_price: Money
    discount_percentage: Money
    tax_rate: Money
    line_total: Money
    line_tax: Money

    class Config:
        from_attributes = True


# Payment Schemas
class PaymentCreate(BaseModel):
    amount: Decimal = Field(..., gt=0, description="Must not exceed the balance due")
    payment_method: PaymentMethod = PaymentMethod.CASH
    reference_number: Optional[str] = Field(None, max_length=100)
    payment_date: date = Field(default_factory=date.today)
    notes: Optional[str] = None


class PaymentOut(BaseModel):
    id: int
    amount: Money
    payment_method: str
    reference_number: Optional[str] = None
    payment_date: date
    notes: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class PaymentHistoryEntry(BaseModel):
    """A payment with the running balance right after it"""
    payment_id: int
    payment_date: date
    amount: Money
    amount_paid: Money
    balance_after: Money
    payment_method: str
    reference_number: Optional[str] = None
    notes: Optional[str] = None


class PaymentHistory(BaseModel):
    document_id: int
    document_number: str
    total_amount: Money
    amount_paid: Money
    balance_due: Money
    payment_status: PaymentStatus
    payments: List[PaymentHistoryEntry]  # newest first


# Invoice Schemas
class InvoiceBase(BaseModel):
    customer_id: int
    invoice_date: date = Field(default_factory=date.today)
    due_date: Optional[date] = Field(None, description="Defaults to the configured payment terms")
    notes: Optional[str] = None
    items: List[LineItemCreate] = Field(..., min_length=1, description="At least one line item")

    @model_validator(mode='after')
    def validate_due_date(self):
        if self.due_date and self.due_date < self.invoice_date:
            raise ValueError('Due date cannot be before the invoice date')
        return self


class InvoiceCreate(InvoiceBase):
    initial_payment: Optional[PaymentCreate] = None


class InvoiceUpdate(InvoiceBase):
    """Full replacement of the header and every line item"""
    pass


class CustomerSummary(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    gstin: Optional[str] = None

    class Config:
        from_attributes = True


class InvoiceOut(BaseModel):
    id: int
    invoice_number: str
    customer_id: int
    customer: Optional[CustomerSummary] = None
    invoice_date: date
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


class InvoiceDetail(InvoiceOut):
    line_items: List[LineItemOut] = []
    payments: List[PaymentOut] = []


class InvoiceList(BaseModel):
    invoices: List[InvoiceOut]
    total: int
    limit: int
    offset: int
