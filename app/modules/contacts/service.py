"""
Business services for customers and suppliers.

Both parties share CRUD and search; a party still referenced by invoices or
purchases cannot be deleted. Supplier pending payments are derived from the
purchase payments through the ledger.
"""

from fastapi import HTTPException, status
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import or_
from decimal import Decimal
from typing import List, Optional, Dict, Any
import logging

from app.modules.contacts.models import Customer, Supplier
from app.modules.contacts.schemas import SupplierPendingPayment
from app.modules.ledger import NotFoundError, summarize_payments, money

logger = logging.getLogger(__name__)


class ContactService:
    """CRUD shared by customers and suppliers"""

    model = None
    label = "Contact"
    documents_attr = None

    def __init__(self, db: Session):
        self.db = db

    def create(self, data) -> Any:
        try:
            contact = self.model(**data.model_dump())
            self.db.add(contact)
            self.db.commit()
            self.db.refresh(contact)
            logger.info(f"Created {self.label.lower()} {contact.id} ({contact.name})")
            return contact
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error creating {self.label.lower()}: {e}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error creating {self.label.lower()}: {str(e)}"
            )

    def get_all(
        self,
        search: Optional[str] = None,
        is_active: Optional[bool] = None,
        limit: int = 100,
        offset: int = 0
    ) -> Dict[str, Any]:
        query = self.db.query(self.model)

        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                self.model.name.ilike(pattern),
                self.model.email.ilike(pattern),
                self.model.phone.ilike(pattern),
                self.model.gstin.ilike(pattern)
            ))
        if is_active is not None:
            query = query.filter(self.model.is_active == is_active)

        total = query.count()
        items = query.order_by(self.model.name).offset(offset).limit(limit).all()
        return {"items": items, "total": total, "limit": limit, "offset": offset}

    def get(self, contact_id: int) -> Any:
        contact = self.db.query(self.model).filter(self.model.id == contact_id).first()
        if not contact:
            raise NotFoundError(self.label, contact_id)
        return contact

    def update(self, contact_id: int, data) -> Any:
        contact = self.get(contact_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(contact, field, value)
        self.db.commit()
        self.db.refresh(contact)
        return contact

    def delete(self, contact_id: int) -> Dict[str, str]:
        contact = self.get(contact_id)
        if getattr(contact, self.documents_attr):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"{self.label} {contact_id} has {self.documents_attr} and cannot be deleted"
            )
        self.db.delete(contact)
        self.db.commit()
        logger.info(f"Deleted {self.label.lower()} {contact_id}")
        return {"message": f"{self.label} deleted"}


class CustomerService(ContactService):
    model = Customer
    label = "Customer"
    documents_attr = "invoices"


class SupplierService(ContactService):
    model = Supplier
    label = "Supplier"
    documents_attr = "purchases"

    def get_pending_payments(self) -> List[SupplierPendingPayment]:
        """Suppliers with unpaid purchase balances, largest balance first."""
        from app.modules.purchases.models import Purchase

        purchases = self.db.query(Purchase).options(
            selectinload(Purchase.payments),
            selectinload(Purchase.supplier)
        ).all()

        pending: Dict[int, Dict[str, Any]] = {}
        for purchase in purchases:
            summary = summarize_payments(purchase.total_amount, purchase.payments)
            if summary.balance_due <= 0:
                continue
            entry = pending.setdefault(purchase.supplier_id, {
                "supplier_id": purchase.supplier_id,
                "supplier_name": purchase.supplier.name,
                "pending_purchases": 0,
                "total_amount": Decimal("0"),
                "amount_paid": Decimal("0"),
                "balance_due": Decimal("0"),
            })
            entry["pending_purchases"] += 1
            entry["total_amount"] += summary.total_amount
            entry["amount_paid"] += summary.amount_paid
            entry["balance_due"] += summary.balance_due

        result = [
            SupplierPendingPayment(**{
                **entry,
                "total_amount": money(entry["total_amount"]),
                "amount_paid": money(entry["amount_paid"]),
                "balance_due": money(entry["balance_due"]),
            })
            for entry in pending.values()
        ]
        return sorted(result, key=lambda p: p.balance_due, reverse=True)
