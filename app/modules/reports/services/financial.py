"""
Financial Reports Service

Accounts receivable and payable with aging, tax collected vs paid, and
profit & loss. Aging uses the ledger buckets for both directions.
"""

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional


from .base import BaseReportService
from app.modules.invoices.models import Payment
from app.modules.purchases.models import PurchasePayment
from app.modules.ledger import (
    AgingBucket, summarize_payments, days_overdue, classify_balance, summarize_aging, money
)

ZERO = Decimal("0")


class FinancialReportService(BaseReportService):
    """Service for generating financial reports"""

    def _aging_report(
        self,
        documents: List[Dict[str, Any]],
        as_of_date: date,
        aging_period: Optional[AgingBucket]
    ) -> Dict[str, Any]:
        """
        Classify outstanding documents as of ``as_of_date``.

        ``documents`` carry the document fields plus its ORM ``payments``;
        payments made after the report date are ignored.
        """
        items = []
        for doc in documents:
            if doc["document_date"] > as_of_date:
                continue
            payments = [p for p in doc["payments"] if p.payment_date <= as_of_date]
            summary = summarize_payments(doc["total_amount"], payments)

            bucket = classify_balance(summary.balance_due, doc["due_date"], as_of_date)
            if bucket is None:
                continue

            items.append({
                "document_id": doc["document_id"],
                "document_number": doc["document_number"],
                "party_id": doc["party"].id,
                "party_name": doc["party"].name,
                "document_date": doc["document_date"],
                "due_date": doc["due_date"],
                "total_amount": summary.total_amount,
                "amount_paid": summary.amount_paid,
                "balance_due": summary.balance_due,
                "days_overdue": days_overdue(doc["due_date"], as_of_date),
                "aging_bucket": bucket,
            })

        # The summary always covers every bucket; the filter only narrows the list
        aging_summary = summarize_aging(((i["balance_due"], i["due_date"]) for i in items), as_of_date)
        if aging_period is not None:
            items = [i for i in items if i["aging_bucket"] == aging_period]

        items.sort(key=lambda i: (-i["days_overdue"], i["document_id"]))
        return {
            "as_of_date": as_of_date,
            "aging_period": aging_period,
            "total_documents": len(items),
            "total_outstanding": money(sum((i["balance_due"] for i in items), ZERO)),
            "aging_summary": aging_summary,
            "documents": items,
        }

    def get_accounts_receivable(
        self,
        as_of_date: Optional[date] = None,
        customer_id: Optional[int] = None,
        aging_period: Optional[AgingBucket] = None
    ) -> Dict[str, Any]:
        """Unpaid customer balances as of a date, classified by age"""
        as_of_date = as_of_date or date.today()
        documents = [
            {
                "document_id": i.id,
                "document_number": i.invoice_number,
                "document_date": i.invoice_date,
                "due_date": i.due_date,
                "total_amount": i.total_amount,
                "party": i.customer,
                "payments": i.payments,
            }
            for i in self._get_invoices(end_date=as_of_date, customer_id=customer_id)
        ]
        report = self._aging_report(documents, as_of_date, aging_period)
        report["customer_id"] = customer_id
        return report

    def get_accounts_payable(
        self,
        as_of_date: Optional[date] = None,
        supplier_id: Optional[int] = None,
        aging_period: Optional[AgingBucket] = None
    ) -> Dict[str, Any]:
        """Unpaid supplier balances as of a date, classified by age"""
        as_of_date = as_of_date or date.today()
        documents = [
            {
                "document_id": p.id,
                "document_number": p.purchase_number,
                "document_date": p.purchase_date,
                "due_date": p.due_date,
                "total_amount": p.total_amount,
                "party": p.supplier,
                "payments": p.payments,
            }
            for p in self._get_purchases(end_date=as_of_date, supplier_id=supplier_id)
        ]
        report = self._aging_report(documents, as_of_date, aging_period)
        report["supplier_id"] = supplier_id
        return report

    def get_tax_report(self, start_date: date, end_date: date) -> Dict[str, Any]:
        """
        Output tax (invoices) against input tax (purchases), grouped by rate.

        Per-rate rows are sums of line values; the totals are sums of the
        document tax amounts, so they can differ from the rows by a cent.
        """
        self._validate_date_range(start_date, end_date)
        invoices = self._get_invoices(start_date, end_date, with_items=True)
        purchases = self._get_purchases(start_date, end_date, with_items=True)

        rates: Dict[Decimal, Dict[str, Any]] = defaultdict(lambda: {
            "taxable_sales": ZERO, "tax_collected": ZERO, "invoices": set(),
            "taxable_purchases": ZERO, "tax_paid": ZERO, "purchases": set(),
        })
        for invoice in invoices:
            for item in invoice.line_items:
                entry = rates[money(item.tax_rate)]
                entry["taxable_sales"] += Decimal(item.line_total)
                entry["tax_collected"] += Decimal(item.line_tax)
                entry["invoices"].add(invoice.id)
        for purchase in purchases:
            for item in purchase.line_items:
                entry = rates[money(item.tax_rate)]
                entry["taxable_purchases"] += Decimal(item.line_total)
                entry["tax_paid"] += Decimal(item.line_tax)
                entry["purchases"].add(purchase.id)

        rows = []
        for rate in sorted(rates):
            entry = rates[rate]
            collected = money(entry["tax_collected"])
            paid = money(entry["tax_paid"])
            rows.append({
                "tax_rate": rate,
                "taxable_sales": money(entry["taxable_sales"]),
                "tax_collected": collected,
                "invoice_count": len(entry["invoices"]),
                "taxable_purchases": money(entry["taxable_purchases"]),
                "tax_paid": paid,
                "purchase_count": len(entry["purchases"]),
                "net_tax": collected - paid,
            })

        total_collected = money(sum((Decimal(i.tax_amount) for i in invoices), ZERO))
        total_paid = money(sum((Decimal(p.tax_amount) for p in purchases), ZERO))
        return {
            "period_start": start_date,
            "period_end": end_date,
            "rates": rows,
            "total_tax_collected": total_collected,
            "total_tax_paid": total_paid,
            "net_tax_payable": total_collected - total_paid,
        }

    def get_profit_loss(self, start_date: date, end_date: date) -> Dict[str, Any]:
        """
        Revenue and purchase cost exclude tax, which is passed through to the
        tax authority. Cash figures count payments dated within the period.
        """
        self._validate_date_range(start_date, end_date)
        invoices = self._get_invoices(start_date, end_date)
        purchases = self._get_purchases(start_date, end_date)

        revenue = money(sum((Decimal(i.subtotal) for i in invoices), ZERO))
        purchase_cost = money(sum((Decimal(p.subtotal) for p in purchases), ZERO))
        gross_profit = revenue - purchase_cost
        margin = money(gross_profit / revenue * 100) if revenue else money(ZERO)

        cash_collected = self._sum_payments(Payment, start_date, end_date)
        cash_paid = self._sum_payments(PurchasePayment, start_date, end_date)

        monthly: Dict[str, Dict[str, Decimal]] = defaultdict(lambda: {"revenue": ZERO, "purchase_cost": ZERO})
        for invoice in invoices:
            monthly[invoice.invoice_date.strftime("%Y-%m")]["revenue"] += Decimal(invoice.subtotal)
        for purchase in purchases:
            monthly[purchase.purchase_date.strftime("%Y-%m")]["purchase_cost"] += Decimal(purchase.subtotal)

        return {
            "period_start": start_date,
            "period_end": end_date,
            "revenue": revenue,
            "tax_collected": money(sum((Decimal(i.tax_amount) for i in invoices), ZERO)),
            "invoice_count": len(invoices),
            "purchase_cost": purchase_cost,
            "tax_paid": money(sum((Decimal(p.tax_amount) for p in purchases), ZERO)),
            "purchase_count": len(purchases),
            "gross_profit": gross_profit,
            "profit_margin": margin,
            "cash_collected": cash_collected,
            "cash_paid": cash_paid,
            "net_cash_flow": cash_collected - cash_paid,
            "monthly": [
                {
                    "month": month,
                    "revenue": money(values["revenue"]),
                    "purchase_cost": money(values["purchase_cost"]),
                    "gross_profit": money(values["revenue"] - values["purchase_cost"]),
                }
                for month, values in sorted(monthly.items())
            ],
        }

    def _sum_payments(self, model, start_date: date, end_date: date) -> Decimal:
        amounts = self.db.query(model.amount).filter(
            model.payment_date >= start_date,
            model.payment_date <= end_date
        ).all()
        return money(sum((Decimal(row[0]) for row in amounts), ZERO))
