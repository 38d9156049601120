"""
Billing ledger - pure computations shared by invoices, purchases and reports.

- calculator: line totals and document aggregates (discount before tax)
- balance: payment validation, running balances and payment status
- aging: days-past-due bucket classification for receivables/payables

Nothing in this package touches the database; every function can be
called repeatedly with the same input and returns the same result.
"""

from .exceptions import LedgerError, ValidationError, OverpaymentError, NotFoundError
from .calculator import (
    LineItemInput, LineTotals, DocumentTotals,
    compute_line, compute_document_totals, money
)
from .balance import (
    PaymentStatus, RunningBalance, BalanceSummary,
    payment_status, summarize_payments, validate_new_payment, validate_new_total,
    validate_payment_date
)
from .aging import AgingBucket, days_overdue, classify_due_date, classify_balance, summarize_aging

__all__ = [
    "LedgerError", "ValidationError", "OverpaymentError", "NotFoundError",
    "LineItemInput", "LineTotals", "DocumentTotals",
    "compute_line", "compute_document_totals", "money",
    "PaymentStatus", "RunningBalance", "BalanceSummary",
    "payment_status", "summarize_payments", "validate_new_payment", "validate_new_total",
    "validate_payment_date",
    "AgingBucket", "days_overdue", "classify_due_date", "classify_balance", "summarize_aging",
]
