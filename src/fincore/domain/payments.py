"""Split-payment and installment reconciliation.

These functions back the payment editor of a transaction. Every function is
pure: it takes the current tuple of payments and returns a new one. Amounts
are Decimal cents throughout; installment splitting is done on integer
cents so no fraction of a cent is ever lost.
"""

import logging
import uuid
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Callable, Iterable, Optional, Sequence

from dateutil.relativedelta import relativedelta

from fincore.domain.entities import (
    Payment,
    PaymentMethod,
    PaymentStatus,
    TransactionStatus,
)
from fincore.utils.money import CENT, ZERO, from_cents, money_sum, to_cents, to_money

logger = logging.getLogger(__name__)

# Residual representation error tolerated when comparing totals
BALANCE_TOLERANCE = CENT


def new_payment_id() -> str:
    """Return a fresh client-side payment id."""
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Reconciliation:
    """Outcome of checking a payment list against a transaction amount."""

    balanced: bool
    total_amount: Decimal
    allocated: Decimal
    difference: Decimal
    reason: Optional[str] = None


def allocated_amount(payments: Iterable[Payment]) -> Decimal:
    """Sum of all payment amounts."""
    return money_sum(p.amount for p in payments)


def outstanding_amount(payments: Iterable[Payment], total_amount: Decimal) -> Decimal:
    """Amount still to allocate (may be negative when over-allocated)."""
    return to_money(total_amount) - allocated_amount(payments)


def single_payment(
    amount: Decimal,
    method: PaymentMethod,
    payment_date: date,
    status: PaymentStatus,
    payment_id: Optional[str] = None,
) -> tuple[Payment, ...]:
    """Build the one-payment list used when split mode is off."""
    return (
        Payment(
            id=payment_id or new_payment_id(),
            method=method,
            amount=to_money(amount),
            date=payment_date,
            status=status,
            installment_number=1,
            total_installments=1,
        ),
    )


def toggle_split(
    payments: Sequence[Payment],
    enabled: bool,
    amount: Decimal,
    method: PaymentMethod,
    payment_date: date,
    status: PaymentStatus,
) -> tuple[Payment, ...]:
    """Switch the payment editor into or out of split mode.

    Enabling split mode on an empty list seeds it with one payment carrying
    the full amount; an existing list is kept. Disabling returns an empty
    list: the caller keeps the single-payment fields on its side.
    """
    if not enabled:
        return ()
    if payments:
        return tuple(payments)
    return (
        Payment(
            id=new_payment_id(),
            method=method,
            amount=to_money(amount),
            date=payment_date,
            status=status,
        ),
    )


def add_row(
    payments: Sequence[Payment],
    total_amount: Decimal,
    method: PaymentMethod,
    payment_date: date,
) -> tuple[Payment, ...]:
    """Append a pending payment defaulting to the outstanding difference."""
    suggested = max(outstanding_amount(payments, total_amount), ZERO)
    row = Payment(
        id=new_payment_id(),
        method=method,
        amount=suggested,
        date=payment_date,
        status=PaymentStatus.PENDING,
    )
    return (*payments, row)


def remove_row(payments: Sequence[Payment], payment_id: str) -> tuple[Payment, ...]:
    """Drop the payment with the given id (no-op if absent)."""
    return tuple(p for p in payments if p.id != payment_id)


def update_row(
    payments: Sequence[Payment], payment_id: str, **changes
) -> tuple[Payment, ...]:
    """Replace fields of one payment, e.g. ``update_row(p, id, status=PAID)``."""
    if "amount" in changes:
        changes["amount"] = to_money(changes["amount"])
    return tuple(
        replace(p, **changes) if p.id == payment_id else p for p in payments
    )


def split_cents(amount: Decimal, count: int) -> list[Decimal]:
    """Split an amount into count parts, the first one taking the leftover cents.

    >>> split_cents(Decimal("100.00"), 3)
    [Decimal('33.34'), Decimal('33.33'), Decimal('33.33')]
    """
    cents = to_cents(amount)
    base = cents // count
    remainder = cents - base * count
    parts = [from_cents(base)] * count
    parts[0] = from_cents(base + remainder)
    return parts


def generate_installments(
    payments: Sequence[Payment],
    total_amount: Decimal,
    count: int,
    anchor_date: date,
    method: PaymentMethod,
    id_factory: Callable[[], str] = new_payment_id,
) -> tuple[Payment, ...]:
    """Generate monthly installments for a transaction.

    With no payments yet, the full amount is split and the installments
    replace the list, the first one dated on ``anchor_date``. When payments
    already exist, only the outstanding remainder is split and the new
    installments are appended starting one month after ``anchor_date``.

    Nothing is generated (the list is returned unchanged) when ``count`` is
    below 1 or there is nothing left to split.
    """
    if count < 1:
        logger.debug("Ignoring installment generation with count=%s", count)
        return tuple(payments)

    has_entries = len(payments) > 0
    if has_entries:
        to_split = outstanding_amount(payments, total_amount)
        first_date = anchor_date + relativedelta(months=1)
    else:
        to_split = to_money(total_amount)
        first_date = anchor_date

    if to_split <= ZERO:
        logger.debug("Nothing left to split into installments (%s)", to_split)
        return tuple(payments)

    installments = tuple(
        Payment(
            id=id_factory(),
            method=method,
            amount=part,
            # Offset from the first date so month-end days clamp per month
            date=first_date + relativedelta(months=i),
            status=PaymentStatus.PENDING,
            installment_number=i + 1,
            total_installments=count,
        )
        for i, part in enumerate(split_cents(to_split, count))
    )
    return (*payments, *installments) if has_entries else installments


def reconcile(payments: Sequence[Payment], total_amount: Decimal) -> Reconciliation:
    """Check that payments add up to the transaction amount, with a reason."""
    total = to_money(total_amount)
    allocated = allocated_amount(payments)
    difference = total - allocated

    if not payments:
        return Reconciliation(False, total, allocated, difference, "no payments recorded")
    if abs(difference) >= BALANCE_TOLERANCE:
        if difference > 0:
            reason = f"payments are {difference} short of the amount {total}"
        else:
            reason = f"payments exceed the amount {total} by {-difference}"
        return Reconciliation(False, total, allocated, difference, reason)
    return Reconciliation(True, total, allocated, difference)


def validate(payments: Sequence[Payment], total_amount: Decimal) -> bool:
    """True iff the payments sum to the total amount to the cent."""
    return reconcile(payments, total_amount).balanced


def derive_status(payments: Iterable[Payment]) -> TransactionStatus:
    """Derive a transaction status from its payments.

    PAID when every payment is paid, PENDING when every payment is pending
    (or there are none), PARTIAL otherwise.
    """
    statuses = {p.status for p in payments}
    if not statuses or statuses == {PaymentStatus.PENDING}:
        return TransactionStatus.PENDING
    if statuses == {PaymentStatus.PAID}:
        return TransactionStatus.PAID
    return TransactionStatus.PARTIAL
