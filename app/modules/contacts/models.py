"""
SQLAlchemy models for the contacts module.

Customers appear on invoices, suppliers on purchases. Both carry the same
address and tax-registration fields, shared through ContactFieldsMixin.
"""

from app.database.database import Base
from sqlalchemy import Column, Integer, String, Boolean, Text
from sqlalchemy.orm import relationship
from app.common.mixins import TimestampMixin


class ContactFieldsMixin:
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(150), nullable=False, index=True)
    email = Column(String(150), nullable=True, index=True)
    phone = Column(String(30), nullable=True)

    # Address
    address = Column(Text, nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(100), nullable=True)
    postal_code = Column(String(20), nullable=True)
    country = Column(String(100), nullable=True, default="India")

    gstin = Column(String(20), nullable=True)  # GST registration number
    is_active = Column(Boolean, default=True, nullable=False)


class Customer(Base, ContactFieldsMixin, TimestampMixin):
    __tablename__ = "customers"

    # Relationships
    invoices = relationship("Invoice", back_populates="customer")


class Supplier(Base, ContactFieldsMixin, TimestampMixin):
    __tablename__ = "suppliers"

    contact_person = Column(String(150), nullable=True)

    # Relationships
    purchases = relationship("Purchase", back_populates="supplier")
