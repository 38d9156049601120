from app.database.database import Base
from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, Date, Text
from sqlalchemy.orm import relationship
from datetime import date
from app.common.mixins import TimestampMixin
from app.modules.ledger import summarize_payments, BalanceSummary
import enum


class PaymentMethod(str, enum.Enum):
    CASH = "Cash"
    CREDIT = "Credit"            # Credit card
    DEBIT = "Debit"              # Debit card
    BANK_TRANSFER = "Bank Transfer"
    UPI = "UPI"
    CHEQUE = "Cheque"


class Invoice(Base, TimestampMixin):
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, autoincrement=True)
    invoice_number = Column(String(30), nullable=False, unique=True)

    # References
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    # Dates
    invoice_date = Column(Date, nullable=False, default=date.today, index=True)
    due_date = Column(Date, nullable=False)

    notes = Column(Text, nullable=True)

    # Totals (computed by the ledger at save time)
    subtotal = Column(Numeric(15, 2), nullable=False, default=0)
    tax_amount = Column(Numeric(15, 2), nullable=False, default=0)
    total_amount = Column(Numeric(15, 2), nullable=False, default=0)

    # Relationships
    customer = relationship("Customer", back_populates="invoices")
    line_items = relationship(
        "InvoiceLineItem", back_populates="invoice",
        cascade="all, delete-orphan", order_by="InvoiceLineItem.id"
    )
    payments = relationship("Payment", back_populates="invoice", cascade="all, delete-orphan")

    @property
    def balance(self) -> BalanceSummary:
        """Balance derived from the payments; nothing is stored"""
        return summarize_payments(self.total_amount, self.payments)

    @property
    def amount_paid(self):
        return self.balance.amount_paid

    @property
    def balance_due(self):
        return self.balance.balance_due

    @property
    def payment_status(self):
        return self.balance.status


class InvoiceLineItem(Base):
    __tablename__ = "invoice_line_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)

    # Snapshot so the line survives later product edits
    product_name = Column(String(150), nullable=False)
    hsn_sac_code = Column(String(20), nullable=True)

    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(15, 2), nullable=False)
    discount_percentage = Column(Numeric(5, 2), nullable=False, default=0)
    tax_rate = Column(Numeric(5, 2), nullable=False, default=0)
    line_total = Column(Numeric(18, 6), nullable=False)  # after discount, before tax
    line_tax = Column(Numeric(18, 6), nullable=False)

    # Relationships
    invoice = relationship("Invoice", back_populates="line_items")
    product = relationship("Product")


class Payment(Base, TimestampMixin):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=False, index=True)

    amount = Column(Numeric(15, 2), nullable=False)
    payment_method = Column(String(30), nullable=False, default=PaymentMethod.CASH.value)
    reference_number = Column(String(100), nullable=True)
    payment_date = Column(Date, nullable=False, default=date.today)
    notes = Column(Text, nullable=True)

    # Relationships
    invoice = relationship("Invoice", back_populates="payments")
