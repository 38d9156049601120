"""
Pydantic schemas for Reports module

Response models for every report endpoint. Amounts are Decimal internally
and serialized as JSON numbers.
"""

from datetime import date, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from app.common.types import Money
from app.modules.ledger import AgingBucket, PaymentStatus


# Accounts receivable / payable
class AgingSummaryEntry(BaseModel):
    count: int = 0
    total: Money


class AgingItem(BaseModel):
    """One outstanding document as of the report date"""
    document_id: int
    document_number: str
    party_id: int
    party_name: str
    document_date: date
    due_date: date
    total_amount: Money
    amount_paid: Money
    balance_due: Money
    days_overdue: int = Field(description="Negative or zero while not yet due")
    aging_bucket: AgingBucket


class AgingReportResponse(BaseModel):
    as_of_date: date
    aging_period: Optional[AgingBucket] = None
    total_documents: int
    total_outstanding: Money
    aging_summary: Dict[str, AgingSummaryEntry] = Field(description="Every bucket, even when empty")
    documents: List[AgingItem]


class AccountsReceivableResponse(AgingReportResponse):
    customer_id: Optional[int] = None


class AccountsPayableResponse(AgingReportResponse):
    supplier_id: Optional[int] = None


# Sales / purchases
class DocumentReportItem(BaseModel):
    document_id: int
    document_number: str
    document_date: date
    due_date: date
    party_id: int
    party_name: str
    subtotal: Money
    tax_amount: Money
    total_amount: Money
    amount_paid: Money
    balance_due: Money
    payment_status: PaymentStatus


class DocumentsSummary(BaseModel):
    document_count: int
    total_subtotal: Money
    total_tax: Money
    total_amount: Money
    total_paid: Money
    total_outstanding: Money
    paid_count: int
    partially_paid_count: int
    unpaid_count: int


class PartyTotalItem(BaseModel):
    party_id: int
    party_name: str
    document_count: int
    total_amount: Money
    balance_due: Money


class ProductTotalItem(BaseModel):
    product_id: int
    product_name: str
    quantity: int
    total_amount: Money = Field(description="Line totals after discount, before tax")


class SalesReportResponse(BaseModel):
    period_start: date
    period_end: date
    customer_id: Optional[int] = None
    summary: DocumentsSummary
    invoices: List[DocumentReportItem]
    top_customers: List[PartyTotalItem]
    top_products: List[ProductTotalItem]


class PurchaseReportResponse(BaseModel):
    period_start: date
    period_end: date
    supplier_id: Optional[int] = None
    summary: DocumentsSummary
    purchases: List[DocumentReportItem]
    top_suppliers: List[PartyTotalItem]
    top_products: List[ProductTotalItem]


# Tax
class TaxRateItem(BaseModel):
    tax_rate: Money
    taxable_sales: Money
    tax_collected: Money
    invoice_count: int
    taxable_purchases: Money
    tax_paid: Money
    purchase_count: int
    net_tax: Money


class TaxReportResponse(BaseModel):
    period_start: date
    period_end: date
    rates: List[TaxRateItem]
    total_tax_collected: Money
    total_tax_paid: Money
    net_tax_payable: Money = Field(description="Output tax minus input tax")


# Profit & loss
class MonthlyProfitItem(BaseModel):
    month: str = Field(description="YYYY-MM")
    revenue: Money
    purchase_cost: Money
    gross_profit: Money


class ProfitLossResponse(BaseModel):
    period_start: date
    period_end: date
    revenue: Money = Field(description="Invoice subtotals, tax excluded")
    tax_collected: Money
    invoice_count: int
    purchase_cost: Money = Field(description="Purchase subtotals, tax excluded")
    tax_paid: Money
    purchase_count: int
    gross_profit: Money
    profit_margin: Money = Field(description="Gross profit as a percentage of revenue")
    cash_collected: Money = Field(description="Customer payments received in the period")
    cash_paid: Money = Field(description="Supplier payments made in the period")
    net_cash_flow: Money
    monthly: List[MonthlyProfitItem]


# Inventory
class InventoryItem(BaseModel):
    product_id: int
    product_name: str
    sku: str
    category_name: str
    stock_quantity: int
    low_stock_threshold: int
    cost_price: Money
    stock_value: Money = Field(description="Stock quantity times cost price")
    is_low_stock: bool
    last_movement_date: Optional[datetime] = None


class InventoryCategoryItem(BaseModel):
    category_id: Optional[int] = None
    category_name: str
    product_count: int
    total_quantity: int
    total_value: Money


class InventorySummary(BaseModel):
    total_products: int
    total_items_in_stock: int
    total_inventory_value: Money
    low_stock_count: int


class InventoryReportResponse(BaseModel):
    as_of_date: date
    category_id: Optional[int] = None
    low_stock_only: bool = False
    summary: InventorySummary
    by_category: List[InventoryCategoryItem]
    items: List[InventoryItem]
