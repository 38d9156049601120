"""
Payment application and running-balance tracking.

Balances are never stored: every summary is rebuilt from the full list
of payments, so calling :func:`summarize_payments` any number of times on
the same input yields the same result.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, List, Sequence, Tuple

from app.modules.ledger.calculator import ZERO, money, to_decimal
from app.modules.ledger.exceptions import OverpaymentError, ValidationError


class PaymentStatus(str, Enum):
    UNPAID = "Unpaid"
    PARTIALLY_PAID = "Partially Paid"
    PAID = "Paid"


@dataclass(frozen=True)
class RunningBalance:
    payment_id: Any
    payment_date: date
    amount: Decimal
    amount_paid: Decimal
    balance_after: Decimal


@dataclass(frozen=True)
class BalanceSummary:
    total_amount: Decimal
    amount_paid: Decimal
    balance_due: Decimal
    status: PaymentStatus
    history: Tuple[RunningBalance, ...]

    def newest_first(self) -> List[RunningBalance]:
        return list(reversed(self.history))


def payment_status(total_amount: Decimal, amount_paid: Decimal) -> PaymentStatus:
    """Derive the status tag from a total and the cumulative amount paid."""
    total = money(total_amount)
    paid = money(amount_paid)
    # A zero-total document has nothing left to collect
    if total - paid <= ZERO:
        return PaymentStatus.PAID
    if paid <= ZERO:
        return PaymentStatus.UNPAID
    return PaymentStatus.PARTIALLY_PAID


def chronological(payments: Iterable[Any]) -> List[Any]:
    """Order payments by date, then id, then insertion order."""
    indexed = list(enumerate(payments))
    indexed.sort(key=lambda pair: (
        pair[1].payment_date,
        getattr(pair[1], "id", None) is None,
        getattr(pair[1], "id", None) or 0,
        pair[0]
    ))
    return [payment for _, payment in indexed]


def amount_paid(payments: Iterable[Any]) -> Decimal:
    return sum((to_decimal(p.amount, "amount") for p in payments), ZERO)


def summarize_payments(total_amount: Any, payments: Sequence[Any]) -> BalanceSummary:
    """Compute amount paid, balance due, status and the running history.

    ``payments`` are objects exposing ``id``, ``amount`` and
    ``payment_date`` (ORM rows or pydantic models alike).
    """
    total = to_decimal(total_amount, "total_amount")

    history = []
    paid = ZERO
    for payment in chronological(payments):
        amount = to_decimal(payment.amount, "amount")
        paid += amount
        history.append(RunningBalance(
            payment_id=getattr(payment, "id", None),
            payment_date=payment.payment_date,
            amount=money(amount),
            amount_paid=money(paid),
            balance_after=money(total - paid)
        ))

    return BalanceSummary(
        total_amount=money(total),
        amount_paid=money(paid),
        balance_due=money(total - paid),
        status=payment_status(total, paid),
        history=tuple(history)
    )


def validate_new_payment(total_amount: Any, payments: Sequence[Any], amount: Any) -> Decimal:
    """Check a payment before it is stored and return its amount.

    Raises ValidationError for non-positive amounts or fractions of a cent,
    and OverpaymentError when the amount exceeds the balance due at
    submission time.
    """
    value = to_decimal(amount, "amount")
    if value <= ZERO:
        raise ValidationError("Payment amount must be greater than zero", field="amount")
    if value != money(value):
        raise ValidationError("Payment amount cannot have more than two decimals", field="amount")

    balance_due = money(to_decimal(total_amount, "total_amount") - amount_paid(payments))
    if value > balance_due:
        raise OverpaymentError(amount=value, balance_due=balance_due)
    return value


def validate_new_total(new_total: Any, payments: Sequence[Any]) -> None:
    """Reject an edit that would leave a document paid beyond its total."""
    total = money(to_decimal(new_total, "total_amount"))
    paid = money(amount_paid(payments))
    if paid > total:
        raise OverpaymentError(
            amount=paid,
            balance_due=total,
            message=f"New total {total} is below the amount already paid ({paid})"
        )


def validate_payment_date(payment_date: date, document_date: date) -> None:
    """A payment cannot predate the document it settles."""
    if payment_date is None:
        raise ValidationError("payment_date is required", field="payment_date")
    if document_date is not None and payment_date < document_date:
        raise ValidationError(
            f"Payment date {payment_date} is before the document date {document_date}",
            field="payment_date"
        )
