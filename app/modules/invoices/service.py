"""
Invoice and customer payment services.

Totals, balances and payment statuses always come from the ledger; the
services own persistence, stock movements and transactions.
"""

from fastapi import HTTPException, status
from sqlalchemy.orm import Session, selectinload
from typing import List, Optional, Dict, Any
from datetime import date, timedelta
import logging

from app.core.config import settings
from app.common.numbering import next_document_number
from app.modules.invoices.models import Invoice, InvoiceLineItem, Payment
from app.modules.invoices.schemas import (
    InvoiceCreate, InvoiceUpdate, PaymentCreate, PaymentHistory, PaymentHistoryEntry
)
from app.modules.contacts.models import Customer
from app.modules.products.service import ProductService, StockService
from app.modules.ledger import (
    LedgerError, NotFoundError, PaymentStatus, DocumentTotals,
    validate_new_payment, validate_new_total, validate_payment_date
)

logger = logging.getLogger(__name__)


class InvoiceService:
    def __init__(self, db: Session):
        self.db = db

    def _require_customer(self, customer_id: int) -> Customer:
        customer = self.db.query(Customer).filter(Customer.id == customer_id).first()
        if not customer:
            raise NotFoundError("Customer", customer_id)
        return customer

    def _add_line_items(self, invoice: Invoice, products, totals: DocumentTotals):
        """Persist the computed lines and take the sold units out of stock"""
        stock = StockService(self.db)
        for product, line in zip(products, totals.lines):
            invoice.line_items.append(InvoiceLineItem(
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
            stock.move(product, -line.quantity, "OUT", reference=invoice.invoice_number)

    def _restore_stock(self, invoice: Invoice, reason: str):
        products = ProductService(self.db)
        stock = StockService(self.db)
        for item in invoice.line_items:
            product = products.get_product_by_id(item.product_id)
            stock.move(product, item.quantity, "IN", reference=invoice.invoice_number, notes=reason)

    def _due_date(self, invoice_date: date, due_date: Optional[date]) -> date:
        return due_date or invoice_date + timedelta(days=settings.DEFAULT_PAYMENT_TERMS_DAYS)

    def create_invoice(self, data: InvoiceCreate, user_id: Optional[int] = None) -> Invoice:
        """Create an invoice, decrement stock and apply an optional initial payment"""
        try:
            self._require_customer(data.customer_id)
            products, totals = ProductService(self.db).resolve_lines(data.items, "unit_price")

            invoice = Invoice(
                invoice_number=next_document_number(self.db, Invoice.invoice_number, "INV"),
                customer_id=data.customer_id,
                created_by=user_id,
                invoice_date=data.invoice_date,
                due_date=self._due_date(data.invoice_date, data.due_date),
                notes=data.notes,
                subtotal=totals.subtotal,
                tax_amount=totals.tax_amount,
                total_amount=totals.total_amount
            )
            self.db.add(invoice)
            self.db.flush()

            self._add_line_items(invoice, products, totals)

            if data.initial_payment:
                validate_payment_date(data.initial_payment.payment_date, invoice.invoice_date)
                amount = validate_new_payment(invoice.total_amount, [], data.initial_payment.amount)
                invoice.payments.append(new_payment(Payment, data.initial_payment, amount))

            self.db.commit()
            self.db.refresh(invoice)
            logger.info(
                f"Created invoice {invoice.invoice_number} for customer {invoice.customer_id}: "
                f"total {invoice.total_amount}"
            )
            return invoice

        except (HTTPException, LedgerError):
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error creating invoice: {e}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error creating invoice: {str(e)}"
            )

    def update_invoice(self, invoice_id: int, data: InvoiceUpdate) -> Invoice:
        """
        Replace the header and every line item.

        Stock taken by the old lines is returned before the new lines are
        applied. The new total may not fall below what was already paid.
        """
        invoice = self.get_invoice_by_id(invoice_id)
        try:
            self._require_customer(data.customer_id)
            products, totals = ProductService(self.db).resolve_lines(data.items, "unit_price")
            validate_new_total(totals.total_amount, invoice.payments)
            for payment in invoice.payments:
                validate_payment_date(payment.payment_date, data.invoice_date)

            self._restore_stock(invoice, "Invoice edited")
            invoice.line_items.clear()
            self.db.flush()

            invoice.customer_id = data.customer_id
            invoice.invoice_date = data.invoice_date
            invoice.due_date = self._due_date(data.invoice_date, data.due_date)
            invoice.notes = data.notes
            invoice.subtotal = totals.subtotal
            invoice.tax_amount = totals.tax_amount
            invoice.total_amount = totals.total_amount
            self._add_line_items(invoice, products, totals)

            self.db.commit()
            self.db.refresh(invoice)
            logger.info(f"Updated invoice {invoice.invoice_number}: total {invoice.total_amount}")
            return invoice

        except (HTTPException, LedgerError):
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error updating invoice {invoice_id}: {e}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error updating invoice: {str(e)}"
            )

    def get_invoices(
        self,
        customer_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        payment_status: Optional[PaymentStatus] = None,
        limit: int = 100,
        offset: int = 0
    ) -> Dict[str, Any]:
        query = self.db.query(Invoice).options(
            selectinload(Invoice.customer),
            selectinload(Invoice.payments)
        )

        if customer_id is not None:
            query = query.filter(Invoice.customer_id == customer_id)
        if start_date:
            query = query.filter(Invoice.invoice_date >= start_date)
        if end_date:
            query = query.filter(Invoice.invoice_date <= end_date)

        invoices = query.order_by(Invoice.invoice_date.desc(), Invoice.id.desc()).all()

        # Payment status is derived, so it is filtered after loading
        if payment_status is not None:
            invoices = [i for i in invoices if i.payment_status == payment_status]

        return {
            "invoices": invoices[offset:offset + limit],
            "total": len(invoices),
            "limit": limit,
            "offset": offset
        }

    def get_unpaid_invoices(self, customer_id: Optional[int] = None) -> List[Invoice]:
        """Invoices with a balance due, oldest due date first"""
        query = self.db.query(Invoice).options(
            selectinload(Invoice.customer),
            selectinload(Invoice.payments)
        )
        if customer_id is not None:
            query = query.filter(Invoice.customer_id == customer_id)

        invoices = query.order_by(Invoice.due_date, Invoice.id).all()
        return [i for i in invoices if i.payment_status != PaymentStatus.PAID]

    def get_invoice_by_id(self, invoice_id: int) -> Invoice:
        invoice = self.db.query(Invoice).options(
            selectinload(Invoice.customer),
            selectinload(Invoice.line_items),
            selectinload(Invoice.payments)
        ).filter(Invoice.id == invoice_id).first()

        if not invoice:
            raise NotFoundError("Invoice", invoice_id)
        return invoice

    def delete_invoice(self, invoice_id: int) -> Dict[str, str]:
        invoice = self.get_invoice_by_id(invoice_id)
        if invoice.payments:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Invoices with recorded payments cannot be deleted"
            )

        try:
            self._restore_stock(invoice, "Invoice deleted")
            self.db.delete(invoice)
            self.db.commit()
            logger.info(f"Deleted invoice {invoice.invoice_number}")
            return {"message": f"Invoice {invoice.invoice_number} deleted"}
        except (HTTPException, LedgerError):
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error deleting invoice {invoice_id}: {e}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error deleting invoice: {str(e)}"
            )


class PaymentService:
    """Customer payments applied to invoices"""

    def __init__(self, db: Session):
        self.db = db

    def add_payment(self, invoice_id: int, data: PaymentCreate) -> Payment:
        invoice = InvoiceService(self.db).get_invoice_by_id(invoice_id)
        # Raises before anything is written, so stored payments stay untouched
        validate_payment_date(data.payment_date, invoice.invoice_date)
        amount = validate_new_payment(invoice.total_amount, invoice.payments, data.amount)

        try:
            payment = new_payment(Payment, data, amount, invoice_id=invoice.id)
            self.db.add(payment)
            self.db.commit()
            self.db.refresh(payment)
            logger.info(f"Recorded payment {payment.id} of {amount} on invoice {invoice.invoice_number}")
            return payment
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error recording payment on invoice {invoice_id}: {e}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error recording payment: {str(e)}"
            )

    def get_payment_history(self, invoice_id: int) -> PaymentHistory:
        invoice = InvoiceService(self.db).get_invoice_by_id(invoice_id)
        return build_payment_history(invoice.id, invoice.invoice_number, invoice.balance, invoice.payments)


def build_payment_history(document_id: int, document_number: str, summary, payments) -> PaymentHistory:
    """Newest-first payment history with the balance left after each payment"""
    by_id = {p.id: p for p in payments}
    entries = []
    for running in summary.newest_first():
        payment = by_id[running.payment_id]
        entries.append(PaymentHistoryEntry(
            payment_id=running.payment_id,
            payment_date=running.payment_date,
            amount=running.amount,
            amount_paid=running.amount_paid,
            balance_after=running.balance_after,
            payment_method=payment.payment_method,
            reference_number=payment.reference_number,
            notes=payment.notes
        ))

    return PaymentHistory(
        document_id=document_id,
        document_number=document_number,
        total_amount=summary.total_amount,
        amount_paid=summary.amount_paid,
        balance_due=summary.balance_due,
        payment_status=summary.status,
        payments=entries
    )


def new_payment(model, data: PaymentCreate, amount, **refs):
    """Build a payment row from a validated request and ledger-checked amount"""
    return model(
        amount=amount,
        payment_method=data.payment_method.value,
        reference_number=data.reference_number,
        payment_date=data.payment_date,
        notes=data.notes,
        **refs
    )
