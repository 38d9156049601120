"""
Errors raised by the billing ledger.

All of them describe invalid input rather than transient failures, so
callers never retry them. The API maps each kind to an HTTP status in
``app.common.error_handlers``.
"""

from decimal import Decimal
from typing import Any, Optional


class LedgerError(Exception):
    """Base class for every ledger error."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LedgerError):
    """A line item or payment carries a malformed value."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class OverpaymentError(LedgerError):
    """A payment (or an edit) would push amount_paid above total_amount."""

    def __init__(self, amount: Decimal, balance_due: Decimal, message: Optional[str] = None):
        super().__init__(
            message or f"Payment amount {amount} exceeds remaining balance of {balance_due}"
        )
        self.amount = amount
        self.balance_due = balance_due


class NotFoundError(LedgerError):
    """The document (or party, product) being operated on does not exist."""

    def __init__(self, resource: str, resource_id: Any):
        super().__init__(f"{resource} {resource_id} not found")
        self.resource = resource
        self.resource_id = resource_id
