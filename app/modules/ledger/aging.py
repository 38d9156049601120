"""
Aging classification of outstanding balances.

Receivables and payables share the same buckets; only the data source
differs. Documents without a balance are never classified.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple

from app.modules.ledger.calculator import ZERO, money, to_decimal
from app.modules.ledger.exceptions import ValidationError


class AgingBucket(str, Enum):
    CURRENT = "current"
    DAYS_1_30 = "1-30"
    DAYS_31_60 = "31-60"
    DAYS_61_90 = "61-90"
    OVER_90 = "90+"


# Upper bound (inclusive) of days overdue for each overdue bucket
_OVERDUE_LIMITS = (
    (30, AgingBucket.DAYS_1_30),
    (60, AgingBucket.DAYS_31_60),
    (90, AgingBucket.DAYS_61_90),
)


def days_overdue(due_date: date, today: date) -> int:
    """Days elapsed since ``due_date``; zero or negative when not yet due."""
    if due_date is None:
        raise ValidationError("due_date is required for aging", field="due_date")
    return (today - due_date).days


def classify_due_date(due_date: date, today: date) -> AgingBucket:
    days = days_overdue(due_date, today)
    if days <= 0:
        return AgingBucket.CURRENT
    for limit, bucket in _OVERDUE_LIMITS:
        if days <= limit:
            return bucket
    return AgingBucket.OVER_90


def classify_balance(balance_due: Any, due_date: date, today: date) -> Optional[AgingBucket]:
    """Bucket for an outstanding balance, or None when nothing is owed."""
    if money(to_decimal(balance_due, "balance_due")) <= ZERO:
        return None
    return classify_due_date(due_date, today)


def empty_summary() -> Dict[str, Dict[str, Any]]:
    return {bucket.value: {"count": 0, "total": Decimal("0.00")} for bucket in AgingBucket}


def summarize_aging(rows: Iterable[Tuple[Any, date]], today: date) -> Dict[str, Dict[str, Any]]:
    """Aggregate ``(balance_due, due_date)`` pairs into per-bucket counts and totals."""
    summary = empty_summary()
    for balance_due, due_date in rows:
        bucket = classify_balance(balance_due, due_date, today)
        if bucket is None:
            continue
        entry = summary[bucket.value]
        entry["count"] += 1
        entry["total"] = money(entry["total"] + to_decimal(balance_due, "balance_due"))
    return summary
