"""
Base service class for Reports module

Provides the document queries shared by every report service. Balances are
always rebuilt from payments through the ledger, never read from storage.
"""

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session, selectinload

from app.modules.invoices.models import Invoice
from app.modules.purchases.models import Purchase
from app.modules.ledger import PaymentStatus, ValidationError, money


class BaseReportService:
    """Base service class for all report services"""

    def __init__(self, db: Session):
        self.db = db

    def _validate_date_range(self, start_date: date, end_date: date):
        if end_date < start_date:
            raise ValidationError("end_date must be greater than or equal to start_date", field="end_date")

    def _get_invoices(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        customer_id: Optional[int] = None,
        with_items: bool = False
    ) -> List[Invoice]:
        """Invoices dated within the range (bounds inclusive, each optional)"""
        options = [selectinload(Invoice.customer), selectinload(Invoice.payments)]
        if with_items:
            options.append(selectinload(Invoice.line_items))

        query = self.db.query(Invoice).options(*options)
        if start_date:
            query = query.filter(Invoice.invoice_date >= start_date)
        if end_date:
            query = query.filter(Invoice.invoice_date <= end_date)
        if customer_id is not None:
            query = query.filter(Invoice.customer_id == customer_id)
        return query.order_by(Invoice.invoice_date.desc(), Invoice.id.desc()).all()

    def _get_purchases(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        supplier_id: Optional[int] = None,
        with_items: bool = False
    ) -> List[Purchase]:
        options = [selectinload(Purchase.supplier), selectinload(Purchase.payments)]
        if with_items:
            options.append(selectinload(Purchase.line_items))

        query = self.db.query(Purchase).options(*options)
        if start_date:
            query = query.filter(Purchase.purchase_date >= start_date)
        if end_date:
            query = query.filter(Purchase.purchase_date <= end_date)
        if supplier_id is not None:
            query = query.filter(Purchase.supplier_id == supplier_id)
        return query.order_by(Purchase.purchase_date.desc(), Purchase.id.desc()).all()

    def _summarize_documents(self, rows: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Counts and sums over rows built by ``_document_row``"""
        statuses = [row["payment_status"] for row in rows]
        return {
            "document_count": len(rows),
            "total_subtotal": money(sum((r["subtotal"] for r in rows), Decimal("0"))),
            "total_tax": money(sum((r["tax_amount"] for r in rows), Decimal("0"))),
            "total_amount": money(sum((r["total_amount"] for r in rows), Decimal("0"))),
            "total_paid": money(sum((r["amount_paid"] for r in rows), Decimal("0"))),
            "total_outstanding": money(sum((r["balance_due"] for r in rows), Decimal("0"))),
            "paid_count": statuses.count(PaymentStatus.PAID),
            "partially_paid_count": statuses.count(PaymentStatus.PARTIALLY_PAID),
            "unpaid_count": statuses.count(PaymentStatus.UNPAID),
        }

    def _document_row(self, document_id, number, document_date, due_date, party, document) -> Dict[str, Any]:
        summary = document.balance
        return {
            "document_id": document_id,
            "document_number": number,
            "document_date": document_date,
            "due_date": due_date,
            "party_id": party.id,
            "party_name": party.name,
            "subtotal": money(document.subtotal),
            "tax_amount": money(document.tax_amount),
            "total_amount": summary.total_amount,
            "amount_paid": summary.amount_paid,
            "balance_due": summary.balance_due,
            "payment_status": summary.status,
        }

    def _top_parties(self, rows: Iterable[Dict[str, Any]], limit: int = 5) -> List[Dict[str, Any]]:
        totals: Dict[int, Dict[str, Any]] = {}
        for row in rows:
            entry = totals.setdefault(row["party_id"], {
                "party_id": row["party_id"],
                "party_name": row["party_name"],
                "document_count": 0,
                "total_amount": Decimal("0"),
                "balance_due": Decimal("0"),
            })
            entry["document_count"] += 1
            entry["total_amount"] += row["total_amount"]
            entry["balance_due"] += row["balance_due"]
        return sorted(totals.values(), key=lambda e: e["total_amount"], reverse=True)[:limit]

    def _top_products(self, documents, limit: int = 5) -> List[Dict[str, Any]]:
        totals: Dict[int, Dict[str, Any]] = defaultdict(lambda: {"quantity": 0, "total_amount": Decimal("0")})
        for document in documents:
            for item in document.line_items:
                entry = totals[item.product_id]
                entry["product_id"] = item.product_id
                entry["product_name"] = item.product_name
                entry["quantity"] += item.quantity
                entry["total_amount"] += Decimal(item.line_total)

        ranked = sorted(totals.values(), key=lambda e: e["total_amount"], reverse=True)[:limit]
        return [{**e, "total_amount": money(e["total_amount"])} for e in ranked]
