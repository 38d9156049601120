"""
Purchase report service
"""

from datetime import date
from typing import Any, Dict, Optional

from .base import BaseReportService


class PurchaseReportService(BaseReportService):
    """Service for purchase reports"""

    def get_purchase_report(
        self,
        start_date: date,
        end_date: date,
        supplier_id: Optional[int] = None
    ) -> Dict[str, Any]:
        self._validate_date_range(start_date, end_date)
        purchases = self._get_purchases(start_date, end_date, supplier_id, with_items=True)

        rows = [
            self._document_row(p.id, p.purchase_number, p.purchase_date, p.due_date, p.supplier, p)
            for p in purchases
        ]

        return {
            "period_start": start_date,
            "period_end": end_date,
            "supplier_id": supplier_id,
            "summary": self._summarize_documents(rows),
            "purchases": rows,
            "top_suppliers": self._top_parties(rows),
            "top_products": self._top_products(purchases),
        }
