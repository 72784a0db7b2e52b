"""Tests for split payments and installments."""

from datetime import date
from decimal import Decimal
from itertools import count

import pytest

from conftest import make_payment
from fincore.domain.entities import PaymentMethod, PaymentStatus, TransactionStatus
from fincore.domain.errors import ValidationError
from fincore.domain.payments import (
    add_row,
    derive_status,
    generate_installments,
    reconcile,
    remove_row,
    single_payment,
    split_cents,
    toggle_split,
    update_row,
    validate,
)

PAID = PaymentStatus.PAID
PENDING = PaymentStatus.PENDING


def _ids():
    counter = count(1)
    return lambda: f"id{next(counter)}"


def test_installments_of_100_in_three():
    """Test the leftover cent lands on the first installment."""
    result = generate_installments(
        (), Decimal("100.00"), 3, date(2024, 1, 10), PaymentMethod.BOLETO
    )
    amounts = [p.amount for p in result]

    assert amounts == [Decimal("33.34"), Decimal("33.33"), Decimal("33.33")]
    assert sum(amounts) == Decimal("100.00")
    assert [p.date for p in result] == [date(2024, 1, 10), date(2024, 2, 10), date(2024, 3, 10)]
    assert [(p.installment_number, p.total_installments) for p in result] == [
        (1, 3),
        (2, 3),
        (3, 3),
    ]
    assert all(p.status == PENDING for p in result)
    assert all(p.method == PaymentMethod.BOLETO for p in result)


@pytest.mark.parametrize(
    "amount,n",
    [("0.01", 3), ("10.00", 7), ("999.99", 12), ("1234.56", 5), ("0.05", 5)],
)
def test_installments_always_sum_exactly(amount, n):
    """Test installment splitting never loses a cent."""
    result = generate_installments((), Decimal(amount), n, date(2024, 1, 1), PaymentMethod.PIX)
    assert sum(p.amount for p in result) == Decimal(amount)
    assert len(result) == n
    assert validate(result, Decimal(amount))


def test_installments_from_month_end_clamp_per_month():
    """Test installment dates from Jan 31 stay at each month's end."""
    result = generate_installments((), Decimal("90.00"), 3, date(2024, 1, 31), PaymentMethod.PIX)
    assert [p.date for p in result] == [date(2024, 1, 31), date(2024, 2, 29), date(2024, 3, 31)]


def test_installments_from_remainder_start_a_month_later():
    """Test generating from the outstanding remainder appends after existing rows."""
    existing = (make_payment("40.00", status=PAID, payment_id="down", day=date(2024, 1, 10)),)
    result = generate_installments(
        existing, Decimal("100.00"), 2, date(2024, 1, 10), PaymentMethod.PIX, id_factory=_ids()
    )

    assert result[0] == existing[0]
    new = result[1:]
    assert [p.amount for p in new] == [Decimal("30.00"), Decimal("30.00")]
    assert [p.date for p in new] == [date(2024, 2, 10), date(2024, 3, 10)]
    assert [p.id for p in new] == ["id1", "id2"]
    assert validate(result, Decimal("100.00"))


def test_installments_noop_when_nothing_to_split():
    """Test a fully allocated list or a non-positive count is left unchanged."""
    existing = (make_payment("100.00"),)
    assert generate_installments(existing, Decimal("100.00"), 3, date(2024, 1, 1), PaymentMethod.PIX) == existing
    assert generate_installments((), Decimal("100.00"), 0, date(2024, 1, 1), PaymentMethod.PIX) == ()


def test_split_cents():
    """Test integer-cent splitting."""
    assert split_cents(Decimal("0.02"), 3) == [Decimal("0.02"), Decimal("0.00"), Decimal("0.00")]
    assert split_cents(Decimal("10.00"), 1) == [Decimal("10.00")]


def test_add_row_suggests_outstanding_difference():
    """Test a new row defaults to total minus what is already allocated."""
    payments = (
        make_payment("100.00", payment_id="a"),
        make_payment("50.00", payment_id="b", status=PENDING),
    )
    result = add_row(payments, Decimal("200.00"), PaymentMethod.CASH, date(2024, 1, 20))

    assert len(result) == 3
    assert result[-1].amount == Decimal("50.00")
    assert result[-1].status == PENDING
    assert result[-1].method == PaymentMethod.CASH


def test_add_row_clamps_to_zero_when_over_allocated():
    """Test the suggestion is never negative."""
    payments = (make_payment("250.00"),)
    result = add_row(payments, Decimal("200.00"), PaymentMethod.CASH, date(2024, 1, 20))
    assert result[-1].amount == Decimal("0.00")


def test_remove_and_update_row():
    """Test removing and editing rows by id."""
    payments = (make_payment("60.00", payment_id="a"), make_payment("40.00", payment_id="b"))

    assert [p.id for p in remove_row(payments, "a")] == ["b"]
    assert remove_row(payments, "missing") == payments

    updated = update_row(payments, "b", amount="45.5", status=PENDING)
    assert updated[1].amount == Decimal("45.50")
    assert updated[1].status == PENDING
    assert updated[0] == payments[0]


def test_toggle_split():
    """Test entering split mode seeds the full amount and leaving clears it."""
    seeded = toggle_split((), True, Decimal("80.00"), PaymentMethod.PIX, date(2024, 1, 1), PAID)
    assert len(seeded) == 1
    assert seeded[0].amount == Decimal("80.00")
    assert seeded[0].status == PAID

    assert toggle_split(seeded, True, Decimal("80.00"), PaymentMethod.PIX, date(2024, 1, 1), PAID) == seeded
    assert toggle_split(seeded, False, Decimal("80.00"), PaymentMethod.PIX, date(2024, 1, 1), PAID) == ()


def test_single_payment_is_one_of_one():
    """Test the non-split payment list."""
    (payment,) = single_payment(Decimal("12.3"), PaymentMethod.CASH, date(2024, 1, 1), PAID)
    assert payment.amount == Decimal("12.30")
    assert (payment.installment_number, payment.total_installments) == (1, 1)


def test_validate_within_a_cent():
    """Test balance validation and its reasons."""
    payments = (make_payment("33.33", payment_id="a"), make_payment("66.67", payment_id="b"))
    assert validate(payments, Decimal("100.00"))

    short = reconcile(payments[:1], Decimal("100.00"))
    assert not short.balanced
    assert short.difference == Decimal("66.67")
    assert "short" in short.reason

    over = reconcile(payments, Decimal("90.00"))
    assert not over.balanced
    assert "exceed" in over.reason

    empty = reconcile((), Decimal("10.00"))
    assert not empty.balanced
    assert empty.reason == "no payments recorded"


@pytest.mark.parametrize(
    "statuses,expected",
    [
        ([PAID, PAID], TransactionStatus.PAID),
        ([PENDING, PENDING], TransactionStatus.PENDING),
        ([PAID, PENDING], TransactionStatus.PARTIAL),
        ([], TransactionStatus.PENDING),
    ],
)
def test_derive_status(statuses, expected):
    """Test status derivation from payment statuses."""
    payments = [make_payment("10.00", status=s, payment_id=str(i)) for i, s in enumerate(statuses)]
    assert derive_status(payments) == expected


def test_installment_fields_must_come_together():
    """Test a payment with only one installment field is rejected."""
    with pytest.raises(ValidationError):
        make_payment("10.00", installment_number=1)
