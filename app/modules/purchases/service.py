"""
Purchase and supplier payment services.

Purchased units are added to stock; editing or deleting a purchase takes
them back out, which fails with 400 when they have already been sold.
"""

from fastapi import HTTPException, status
from sqlalchemy.orm import Session, selectinload
from typing import List, Optional, Dict, Any
from datetime import date, timedelta
import logging

from app.core.config import settings
from app.common.numbering import next_document_number
from app.modules.purchases.models import Purchase, PurchaseLineItem, PurchasePayment
from app.modules.purchases.schemas import PurchaseCreate, PurchaseUpdate
from app.modules.invoices.schemas import PaymentCreate, PaymentHistory
from app.modules.invoices.service import build_payment_history, new_payment
from app.modules.contacts.models import Supplier
from app.modules.products.service import ProductService, StockService
from app.modules.ledger import (
    LedgerError, NotFoundError, PaymentStatus, DocumentTotals,
    validate_new_payment, validate_new_total, validate_payment_date
)

logger = logging.getLogger(__name__)


class PurchaseService:
    def __init__(self, db: Session):
        self.db = db

    def _require_supplier(self, supplier_id: int) -> Supplier:
        supplier = self.db.query(Supplier).filter(Supplier.id == supplier_id).first()
        if not supplier:
            raise NotFoundError("Supplier", supplier_id)
        return supplier

    def _add_line_items(self, purchase: Purchase, products, totals: DocumentTotals):
        """Persist the computed lines and add the received units to stock"""
        stock = StockService(self.db)
        for product, line in zip(products, totals.lines):
            purchase.line_items.append(PurchaseLineItem(
                product_id=product.id,
                product_name=product.name,
                hsn_sac_code=product.hsn_sac_code,
                quantity=line.quantity,
                unit_price=line.unit_price,
                discount_percentage=line.discount_percentage,
                tax_rate=line.tax_rate,
                line_total=line.line_total,
                line_tax=line.line_tax
            ))
            stock.move(product, line.quantity, "IN", reference=purchase.purchase_number)

    def _revert_stock(self, purchase: Purchase, reason: str):
        products = ProductService(self.db)
        stock = StockService(self.db)
        for item in purchase.line_items:
            product = products.get_product_by_id(item.product_id)
            stock.move(product, -item.quantity, "OUT", reference=purchase.purchase_number, notes=reason)

    def _due_date(self, purchase_date: date, due_date: Optional[date]) -> date:
        return due_date or purchase_date + timedelta(days=settings.DEFAULT_PAYMENT_TERMS_DAYS)

    def create_purchase(self, data: PurchaseCreate, user_id: Optional[int] = None) -> Purchase:
        try:
            self._require_supplier(data.supplier_id)
            products, totals = ProductService(self.db).resolve_lines(data.items, "cost_price")

            purchase = Purchase(
                purchase_number=next_document_number(self.db, Purchase.purchase_number, "PUR"),
                supplier_reference=data.supplier_reference,
                supplier_id=data.supplier_id,
                created_by=user_id,
                purchase_date=data.purchase_date,
                due_date=self._due_date(data.purchase_date, data.due_date),
                notes=data.notes,
                subtotal=totals.subtotal,
                tax_amount=totals.tax_amount,
                total_amount=totals.total_amount
            )
            self.db.add(purchase)
            self.db.flush()

            self._add_line_items(purchase, products, totals)

            if data.initial_payment:
                validate_payment_date(data.initial_payment.payment_date, purchase.purchase_date)
                amount = validate_new_payment(purchase.total_amount, [], data.initial_payment.amount)
                purchase.payments.append(new_payment(PurchasePayment, data.initial_payment, amount))

            self.db.commit()
            self.db.refresh(purchase)
            logger.info(
                f"Created purchase {purchase.purchase_number} from supplier {purchase.supplier_id}: "
                f"total {purchase.total_amount}"
            )
            return purchase

        except (HTTPException, LedgerError):
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error creating purchase: {e}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error creating purchase: {str(e)}"
            )

    def update_purchase(self, purchase_id: int, data: PurchaseUpdate) -> Purchase:
        purchase = self.get_purchase_by_id(purchase_id)
        try:
            self._require_supplier(data.supplier_id)
            products, totals = ProductService(self.db).resolve_lines(data.items, "cost_price")
            validate_new_total(totals.total_amount, purchase.payments)
            for payment in purchase.payments:
                validate_payment_date(payment.payment_date, data.purchase_date)

            self._revert_stock(purchase, "Purchase edited")
            purchase.line_items.clear()
            self.db.flush()

            purchase.supplier_id = data.supplier_id
            purchase.supplier_reference = data.supplier_reference
            purchase.purchase_date = data.purchase_date
            purchase.due_date = self._due_date(data.purchase_date, data.due_date)
            purchase.notes = data.notes
            purchase.subtotal = totals.subtotal
            purchase.tax_amount = totals.tax_amount
            purchase.total_amount = totals.total_amount
            self._add_line_items(purchase, products, totals)

            self.db.commit()
            self.db.refresh(purchase)
            logger.info(f"Updated purchase {purchase.purchase_number}: total {purchase.total_amount}")
            return purchase

        except (HTTPException, LedgerError):
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error updating purchase {purchase_id}: {e}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error updating purchase: {str(e)}"
            )

    def get_purchases(
        self,
        supplier_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        payment_status: Optional[PaymentStatus] = None,
        limit: int = 100,
        offset: int = 0
    ) -> Dict[str, Any]:
        query = self.db.query(Purchase).options(
            selectinload(Purchase.supplier),
            selectinload(Purchase.payments)
        )

        if supplier_id is not None:
            query = query.filter(Purchase.supplier_id == supplier_id)
        if start_date:
            query = query.filter(Purchase.purchase_date >= start_date)
        if end_date:
            query = query.filter(Purchase.purchase_date <= end_date)

        purchases = query.order_by(Purchase.purchase_date.desc(), Purchase.id.desc()).all()

        if payment_status is not None:
            purchases = [p for p in purchases if p.payment_status == payment_status]

        return {
            "purchases": purchases[offset:offset + limit],
            "total": len(purchases),
            "limit": limit,
            "offset": offset
        }

    def get_supplier_purchases(self, supplier_id: int) -> List[Purchase]:
        self._require_supplier(supplier_id)
        return self.get_purchases(supplier_id=supplier_id, limit=10_000)["purchases"]

    def get_unpaid_purchases(self, supplier_id: Optional[int] = None) -> List[Purchase]:
        query = self.db.query(Purchase).options(
            selectinload(Purchase.supplier),
            selectinload(Purchase.payments)
        )
        if supplier_id is not None:
            query = query.filter(Purchase.supplier_id == supplier_id)

        purchases = query.order_by(Purchase.due_date, Purchase.id).all()
        return [p for p in purchases if p.payment_status != PaymentStatus.PAID]

    def get_purchase_by_id(self, purchase_id: int) -> Purchase:
        purchase = self.db.query(Purchase).options(
            selectinload(Purchase.supplier),
            selectinload(Purchase.line_items),
            selectinload(Purchase.payments)
        ).filter(Purchase.id == purchase_id).first()

        if not purchase:
            raise NotFoundError("Purchase", purchase_id)
        return purchase

    def delete_purchase(self, purchase_id: int) -> Dict[str, str]:
        purchase = self.get_purchase_by_id(purchase_id)
        if purchase.payments:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Purchases with recorded payments cannot be deleted"
            )

        try:
            self._revert_stock(purchase, "Purchase deleted")
            self.db.delete(purchase)
            self.db.commit()
            logger.info(f"Deleted purchase {purchase.purchase_number}")
            return {"message": f"Purchase {purchase.purchase_number} deleted"}
        except (HTTPException, LedgerError):
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error deleting purchase {purchase_id}: {e}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error deleting purchase: {str(e)}"
            )


class PurchasePaymentService:
    """Payments made to suppliers against purchases"""

    def __init__(self, db: Session):
        self.db = db

    def add_payment(self, purchase_id: int, data: PaymentCreate) -> PurchasePayment:
        purchase = PurchaseService(self.db).get_purchase_by_id(purchase_id)
        validate_payment_date(data.payment_date, purchase.purchase_date)
        amount = validate_new_payment(purchase.total_amount, purchase.payments, data.amount)

        try:
            payment = new_payment(PurchasePayment, data, amount, purchase_id=purchase.id)
            self.db.add(payment)
            self.db.commit()
            self.db.refresh(payment)
            logger.info(f"Recorded payment {payment.id} of {amount} on purchase {purchase.purchase_number}")
            return payment
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error recording payment on purchase {purchase_id}: {e}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error recording payment: {str(e)}"
            )

    def get_payment_history(self, purchase_id: int) -> PaymentHistory:
        purchase = PurchaseService(self.db).get_purchase_by_id(purchase_id)
        return build_payment_history(purchase.id, purchase.purchase_number, purchase.balance, purchase.payments)
