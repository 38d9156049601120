from app.database.database import Base
from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, Date, Text
from sqlalchemy.orm import relationship
from datetime import date
from app.common.mixins import TimestampMixin
from app.modules.invoices.models import PaymentMethod
from app.modules.ledger import summarize_payments, BalanceSummary


class Purchase(Base, TimestampMixin):
    __tablename__ = "purchases"

    id = Column(Integer, primary_key=True, autoincrement=True)
    purchase_number = Column(String(30), nullable=False, unique=True)
    supplier_reference = Column(String(100), nullable=True)  # Supplier's own bill number

    # References
    supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=False, index=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    # Dates
    purchase_date = Column(Date, nullable=False, default=date.today, index=True)
    due_date = Column(Date, nullable=False)

    notes = Column(Text, nullable=True)

    # Totals (computed by the ledger at save time)
    subtotal = Column(Numeric(15, 2), nullable=False, default=0)
    tax_amount = Column(Numeric(15, 2), nullable=False, default=0)
    total_amount = Column(Numeric(15, 2), nullable=False, default=0)

    # Relationships
    supplier = relationship("Supplier", back_populates="purchases")
    line_items = relationship(
        "PurchaseLineItem", back_populates="purchase",
        cascade="all, delete-orphan", order_by="PurchaseLineItem.id"
    )
    payments = relationship("PurchasePayment", back_populates="purchase", cascade="all, delete-orphan")

    @property
    def balance(self) -> BalanceSummary:
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


class PurchaseLineItem(Base):
    __tablename__ = "purchase_line_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    purchase_id = Column(Integer, ForeignKey("purchases.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)

    product_name = Column(String(150), nullable=False)
    hsn_sac_code = Column(String(20), nullable=True)

    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(15, 2), nullable=False)  # cost per unit
    discount_percentage = Column(Numeric(5, 2), nullable=False, default=0)
    tax_rate = Column(Numeric(5, 2), nullable=False, default=0)
    line_total = Column(Numeric(18, 6), nullable=False)
    line_tax = Column(Numeric(18, 6), nullable=False)

    # Relationships
    purchase = relationship("Purchase", back_populates="line_items")
    product = relationship("Product")


class PurchasePayment(Base, TimestampMixin):
    __tablename__ = "purchase_payments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    purchase_id = Column(Integer, ForeignKey("purchases.id"), nullable=False, index=True)

    amount = Column(Numeric(15, 2), nullable=False)
    payment_method = Column(String(30), nullable=False, default=PaymentMethod.BANK_TRANSFER.value)
    reference_number = Column(String(100), nullable=True)
    payment_date = Column(Date, nullable=False, default=date.today)
    notes = Column(Text, nullable=True)

    # Relationships
    purchase = relationship("Purchase", back_populates="payments")
