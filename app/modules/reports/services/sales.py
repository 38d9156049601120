"""
Sales report service

Invoices issued in a period with their totals, collected amounts and
outstanding balances.
"""

from datetime import date
from typing import Any, Dict, Optional

from .base import BaseReportService


class SalesReportService(BaseReportService):
    """Service for sales reports"""

    def get_sales_report(
        self,
        start_date: date,
        end_date: date,
        customer_id: Optional[int] = None
    ) -> Dict[str, Any]:
        self._validate_date_range(start_date, end_date)
        invoices = self._get_invoices(start_date, end_date, customer_id, with_items=True)

        rows = [
            self._document_row(i.id, i.invoice_number, i.invoice_date, i.due_date, i.customer, i)
            for i in invoices
        ]

        return {
            "period_start": start_date,
            "period_end": end_date,
            "customer_id": customer_id,
            "summary": self._summarize_documents(rows),
            "invoices": rows,
            "top_customers": self._top_parties(rows),
            "top_products": self._top_products(invoices),
        }
