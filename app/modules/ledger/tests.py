"""
Tests for the billing ledger

Pure computations only: line and document totals, payment application,
payment status and aging buckets. No database or HTTP involved.
"""

import pytest
from datetime import date, timedelta
from decimal import Decimal
from types import SimpleNamespace

from app.modules.ledger import (
    LineItemInput, compute_line, compute_document_totals, money,
    PaymentStatus, payment_status, summarize_payments, validate_new_payment, validate_new_total,
    validate_payment_date,
    AgingBucket, days_overdue, classify_due_date, classify_balance, summarize_aging,
    ValidationError, OverpaymentError,
)


def payment(id, amount, payment_date=date(2025, 1, 10)):
    return SimpleNamespace(id=id, amount=Decimal(str(amount)), payment_date=payment_date)


# ===== FIXTURES =====

@pytest.fixture
def discounted_line():
    return LineItemInput(
        product_id=1,
        quantity=2,
        unit_price=Decimal("100.00"),
        discount_percentage=Decimal("10"),
        tax_rate=Decimal("18")
    )


# ===== CALCULATOR =====

class TestLineCalculation:

    def test_discount_is_applied_before_tax(self, discounted_line):
        line = compute_line(discounted_line)
        assert line.line_total == Decimal("180.00")
        assert line.line_tax == Decimal("32.40")

    def test_defaults_mean_no_discount_and_no_tax(self):
        line = compute_line(LineItemInput(product_id=1, quantity=3, unit_price=Decimal("9.99")))
        assert line.line_total == Decimal("29.97")
        assert line.line_tax == Decimal("0")

    def test_full_discount_gives_zero_line(self):
        line = compute_line(LineItemInput(1, 5, Decimal("40"), Decimal("100"), Decimal("18")))
        assert line.line_total == 0
        assert line.line_tax == 0

    @pytest.mark.parametrize("quantity", [0, -1, 1.5, "two", None])
    def test_rejects_invalid_quantity(self, quantity):
        with pytest.raises(ValidationError) as exc:
            compute_line(SimpleNamespace(product_id=1, quantity=quantity, unit_price=10))
        assert exc.value.field == "quantity"

    def test_rejects_negative_price(self):
        with pytest.raises(ValidationError) as exc:
            compute_line(LineItemInput(1, 1, Decimal("-1")))
        assert exc.value.field == "unit_price"

    @pytest.mark.parametrize("field", ["discount_percentage", "tax_rate"])
    @pytest.mark.parametrize("value", [Decimal("-0.01"), Decimal("100.01")])
    def test_rejects_percentages_out_of_range(self, field, value):
        item = SimpleNamespace(product_id=1, quantity=1, unit_price=10, discount_percentage=0, tax_rate=0)
        setattr(item, field, value)
        with pytest.raises(ValidationError) as exc:
            compute_line(item)
        assert exc.value.field == field

    def test_rejects_non_finite_values(self):
        with pytest.raises(ValidationError):
            compute_line(SimpleNamespace(product_id=1, quantity=1, unit_price=Decimal("NaN")))


class TestDocumentTotals:

    def test_single_line_document(self, discounted_line):
        totals = compute_document_totals([discounted_line])
        assert totals.subtotal == Decimal("180.00")
        assert totals.tax_amount == Decimal("32.40")
        assert totals.total_amount == Decimal("212.40")

    def test_total_is_subtotal_plus_tax(self):
        items = [
            LineItemInput(1, 3, Decimal("33.333"), Decimal("7.5"), Decimal("12")),
            LineItemInput(2, 7, Decimal("19.99"), Decimal("0"), Decimal("5")),
            LineItemInput(3, 1, Decimal("0.01"), Decimal("0"), Decimal("28")),
        ]
        totals = compute_document_totals(items)
        assert totals.total_amount == totals.subtotal + totals.tax_amount
        assert totals.subtotal == money(sum(line.line_total for line in totals.lines))
        assert totals.tax_amount == money(sum(line.line_tax for line in totals.lines))

    def test_rounding_happens_on_aggregates_only(self):
        # Three lines of 0.005 tax each: rounding per line would give 0.03
        items = [LineItemInput(i, 1, Decimal("0.05"), Decimal("0"), Decimal("10")) for i in range(3)]
        totals = compute_document_totals(items)
        assert totals.tax_amount == Decimal("0.02")

    def test_half_up_rounding(self):
        totals = compute_document_totals([LineItemInput(1, 1, Decimal("0.125"))])
        assert totals.subtotal == Decimal("0.13")

    def test_same_input_same_output(self, discounted_line):
        assert compute_document_totals([discounted_line]) == compute_document_totals([discounted_line])

    def test_error_names_the_failing_line(self, discounted_line):
        bad = LineItemInput(2, 0, Decimal("5"))
        with pytest.raises(ValidationError) as exc:
            compute_document_totals([discounted_line, bad])
        assert exc.value.field == "items[1].quantity"
        assert exc.value.message.startswith("Line 2:")


# ===== BALANCE =====

class TestPaymentStatus:

    @pytest.mark.parametrize("total,paid,expected", [
        ("212.40", "0", PaymentStatus.UNPAID),
        ("212.40", "100", PaymentStatus.PARTIALLY_PAID),
        ("212.40", "212.40", PaymentStatus.PAID),
        ("0", "0", PaymentStatus.PAID),
    ])
    def test_status_from_amounts(self, total, paid, expected):
        assert payment_status(Decimal(total), Decimal(paid)) == expected


class TestPayments:

    def test_partial_then_full_payment(self):
        total = Decimal("212.40")
        payments = []

        validate_new_payment(total, payments, Decimal("100"))
        payments.append(payment(1, "100"))
        summary = summarize_payments(total, payments)
        assert summary.status == PaymentStatus.PARTIALLY_PAID
        assert summary.balance_due == Decimal("112.40")

        validate_new_payment(total, payments, Decimal("112.40"))
        payments.append(payment(2, "112.40", date(2025, 1, 20)))
        summary = summarize_payments(total, payments)
        assert summary.status == PaymentStatus.PAID
        assert summary.balance_due == Decimal("0.00")
        assert summary.amount_paid == Decimal("212.40")

    def test_overpayment_is_rejected(self):
        payments = [payment(1, "100"), payment(2, "112.40")]
        with pytest.raises(OverpaymentError) as exc:
            validate_new_payment(Decimal("212.40"), payments, Decimal("50"))
        assert exc.value.balance_due == Decimal("0.00")

    def test_overpayment_by_one_cent_on_open_balance(self):
        with pytest.raises(OverpaymentError):
            validate_new_payment(Decimal("10.00"), [payment(1, "5")], Decimal("5.01"))

    @pytest.mark.parametrize("amount", [0, -5])
    def test_non_positive_payment_is_rejected(self, amount):
        with pytest.raises(ValidationError) as exc:
            validate_new_payment(Decimal("10"), [], amount)
        assert exc.value.field == "amount"

    @pytest.mark.parametrize("amount", [Decimal("0.004"), Decimal("100.005")])
    def test_fractions_of_a_cent_are_rejected(self, amount):
        with pytest.raises(ValidationError) as exc:
            validate_new_payment(Decimal("212.40"), [], amount)
        assert exc.value.field == "amount"

    def test_payment_dated_before_document(self):
        with pytest.raises(ValidationError) as exc:
            validate_payment_date(date(2025, 1, 9), date(2025, 1, 10))
        assert exc.value.field == "payment_date"

    def test_payment_on_document_date_is_allowed(self):
        validate_payment_date(date(2025, 1, 10), date(2025, 1, 10))

    def test_history_is_chronological_with_running_balance(self):
        payments = [
            payment(3, "30", date(2025, 2, 1)),
            payment(1, "50", date(2025, 1, 1)),
            payment(2, "20", date(2025, 1, 1)),
        ]
        summary = summarize_payments(Decimal("100"), payments)
        assert [h.payment_id for h in summary.history] == [1, 2, 3]
        assert [h.balance_after for h in summary.history] == [Decimal("50.00"), Decimal("30.00"), Decimal("0.00")]
        assert [h.payment_id for h in summary.newest_first()] == [3, 2, 1]

    def test_summary_is_idempotent(self):
        payments = [payment(1, "40"), payment(2, "10")]
        assert summarize_payments(Decimal("99.99"), payments) == summarize_payments(Decimal("99.99"), payments)

    def test_new_total_below_paid_is_rejected(self):
        with pytest.raises(OverpaymentError):
            validate_new_total(Decimal("80"), [payment(1, "100")])

    def test_new_total_equal_to_paid_is_allowed(self):
        validate_new_total(Decimal("100.00"), [payment(1, "100")])


# ===== AGING =====

class TestAging:
    today = date(2025, 3, 31)

    def test_forty_five_days_is_31_60(self):
        assert classify_due_date(self.today - timedelta(days=45), self.today) == AgingBucket.DAYS_31_60

    @pytest.mark.parametrize("days,bucket", [
        (-10, AgingBucket.CURRENT),
        (0, AgingBucket.CURRENT),
        (1, AgingBucket.DAYS_1_30),
        (30, AgingBucket.DAYS_1_30),
        (31, AgingBucket.DAYS_31_60),
        (60, AgingBucket.DAYS_31_60),
        (61, AgingBucket.DAYS_61_90),
        (90, AgingBucket.DAYS_61_90),
        (91, AgingBucket.OVER_90),
    ])
    def test_bucket_boundaries(self, days, bucket):
        assert classify_due_date(self.today - timedelta(days=days), self.today) == bucket

    def test_days_overdue(self):
        assert days_overdue(date(2025, 3, 1), self.today) == 30

    def test_missing_due_date_is_rejected(self):
        with pytest.raises(ValidationError):
            days_overdue(None, self.today)

    def test_settled_balance_is_not_classified(self):
        assert classify_balance(Decimal("0.00"), date(2024, 1, 1), self.today) is None

    def test_summary_covers_every_bucket(self):
        rows = [
            (Decimal("100"), self.today - timedelta(days=45)),
            (Decimal("50.50"), self.today - timedelta(days=40)),
            (Decimal("0"), self.today - timedelta(days=200)),
            (Decimal("10"), self.today + timedelta(days=5)),
        ]
        summary = summarize_aging(rows, self.today)
        assert set(summary) == {"current", "1-30", "31-60", "61-90", "90+"}
        assert summary["31-60"] == {"count": 2, "total": Decimal("150.50")}
        assert summary["current"]["count"] == 1
        assert summary["90+"]["count"] == 0
