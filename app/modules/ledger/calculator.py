"""
Line-item and document total calculation.

Rounding policy: every line is computed at full ``Decimal`` precision and
only the document aggregates are quantized to cents (ROUND_HALF_UP).
``total_amount`` is the exact sum of the quantized subtotal and tax so the
``total = subtotal + tax`` identity always holds. Discount is applied
before tax for invoices and purchases alike.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Iterable, Tuple

from app.modules.ledger.exceptions import ValidationError

CENT = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")


def to_decimal(value: Any, field: str) -> Decimal:
    """Coerce ``value`` to a finite Decimal or raise ValidationError."""
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field} must be a number", field=field)
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f"{field} must be a number", field=field)
    if not result.is_finite():
        raise ValidationError(f"{field} must be a finite number", field=field)
    return result


def money(value: Decimal) -> Decimal:
    """Quantize an amount to two decimals for aggregates and display."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class LineItemInput:
    product_id: Any
    quantity: int
    unit_price: Decimal
    discount_percentage: Decimal = ZERO
    tax_rate: Decimal = ZERO


@dataclass(frozen=True)
class LineTotals:
    product_id: Any
    quantity: int
    unit_price: Decimal
    discount_percentage: Decimal
    tax_rate: Decimal
    line_total: Decimal
    line_tax: Decimal


@dataclass(frozen=True)
class DocumentTotals:
    lines: Tuple[LineTotals, ...]
    subtotal: Decimal
    tax_amount: Decimal
    total_amount: Decimal


def _validate_quantity(value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError("quantity must be a positive integer", field="quantity")
    if isinstance(value, int):
        quantity = value
    else:
        number = to_decimal(value, "quantity")
        if number != number.to_integral_value():
            raise ValidationError("quantity must be a positive integer", field="quantity")
        quantity = int(number)
    if quantity <= 0:
        raise ValidationError("quantity must be a positive integer", field="quantity")
    return quantity


def _validate_percentage(value: Any, field: str) -> Decimal:
    number = to_decimal(ZERO if value is None else value, field)
    if number < ZERO or number > HUNDRED:
        raise ValidationError(f"{field} must be between 0 and 100", field=field)
    return number


def compute_line(item: Any) -> LineTotals:
    """Compute ``line_total`` and ``line_tax`` for one line item.

    ``item`` may be a :class:`LineItemInput`, a pydantic schema or any
    object exposing the same attribute names.
    """
    quantity = _validate_quantity(getattr(item, "quantity", None))

    unit_price = to_decimal(getattr(item, "unit_price", None), "unit_price")
    if unit_price < ZERO:
        raise ValidationError("unit_price cannot be negative", field="unit_price")

    discount = _validate_percentage(getattr(item, "discount_percentage", ZERO), "discount_percentage")
    tax_rate = _validate_percentage(getattr(item, "tax_rate", ZERO), "tax_rate")

    line_total = unit_price * quantity * (1 - discount / HUNDRED)
    line_tax = line_total * tax_rate / HUNDRED

    return LineTotals(
        product_id=getattr(item, "product_id", None),
        quantity=quantity,
        unit_price=unit_price,
        discount_percentage=discount,
        tax_rate=tax_rate,
        line_total=line_total,
        line_tax=line_tax
    )


def compute_document_totals(items: Iterable[Any]) -> DocumentTotals:
    """Compute every line and the subtotal, tax and grand total of a document."""
    lines = []
    for index, item in enumerate(items):
        try:
            lines.append(compute_line(item))
        except ValidationError as e:
            field = f"items[{index}].{e.field}" if e.field else f"items[{index}]"
            raise ValidationError(f"Line {index + 1}: {e.message}", field=field) from e

    subtotal = money(sum((line.line_total for line in lines), ZERO))
    tax_amount = money(sum((line.line_tax for line in lines), ZERO))

    return DocumentTotals(
        lines=tuple(lines),
        subtotal=subtotal,
        tax_amount=tax_amount,
        total_amount=subtotal + tax_amount
    )

