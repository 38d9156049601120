from datetime import date
from typing import Optional

from sqlalchemy.orm import Session


def next_document_number(db: Session, column, prefix: str, on: Optional[date] = None) -> str:
    """
    Next sequential number of the form ``PREFIX-YYYYMMDD-NNNN``.

    The sequence restarts every day; ``column`` is the mapped number column
    (e.g. ``Invoice.invoice_number``).
    """
    day_prefix = f"{prefix}-{(on or date.today()).strftime('%Y%m%d')}-"
    latest = db.query(column).filter(column.like(f"{day_prefix}%")).order_by(column.desc()).first()

    sequence = 1
    if latest:
        try:
            sequence = int(latest[0].rsplit("-", 1)[1]) + 1
        except (IndexError, ValueError):
            sequence = 1
    return f"{day_prefix}{sequence:04d}"
