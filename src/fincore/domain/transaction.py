"""Transaction domain service.

Persisting a transaction is where the payment reconciler's precondition is
enforced: a transaction whose payments do not add up to its amount is never
written. Account balances follow the PAID payments of each transaction and
are changed in the same commit as the transaction itself.
"""

import logging
import uuid
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence, Union

from fincore.database.base import Database
from fincore.domain import payments as reconciler
from fincore.domain.entities import (
    DateRange,
    LedgerQuery,
    Payment,
    PaymentStatus,
    Transaction as TransactionEntity,
    TransactionKind,
)
from fincore.domain.errors import (
    NotFoundError,
    ValidationError,
    account_not_found,
    category_not_found,
    transaction_not_found,
    unbalanced_payments,
)
from fincore.domain.ledger import filter_transactions
from fincore.domain.periods import PeriodContext
from fincore.utils.money import ZERO, to_money

logger = logging.getLogger(__name__)


def balance_effect(txn: Optional[TransactionEntity]) -> dict[str, Decimal]:
    """Return the balance change a transaction applies to its account.

    Only PAID payments move money: income adds, expense subtracts.
    """
    if txn is None or txn.account_id is None:
        return {}
    paid = txn.paid_amount
    if txn.kind == TransactionKind.EXPENSE:
        paid = -paid
    return {txn.account_id: paid}


def net_balance_changes(
    old: Optional[TransactionEntity], new: Optional[TransactionEntity]
) -> dict[str, Decimal]:
    """Combine reversing ``old`` and applying ``new`` into one delta per account."""
    changes: dict[str, Decimal] = {}
    for account_id, delta in balance_effect(old).items():
        changes[account_id] = changes.get(account_id, ZERO) - delta
    for account_id, delta in balance_effect(new).items():
        changes[account_id] = changes.get(account_id, ZERO) + delta
    return {account_id: delta for account_id, delta in changes.items() if delta != 0}


class TransactionService:
    """Service for managing transactions."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def _check_references(
        self, txn: TransactionEntity, check_category: bool = True
    ) -> TransactionEntity:
        """Verify account/cost center/category and snapshot the category name."""
        if txn.amount < 0:
            raise ValidationError(f"Amount must not be negative, got {txn.amount}")

        if txn.account_id is not None and self.db.get_account(txn.account_id) is None:
            raise NotFoundError(account_not_found(txn.account_id))

        if txn.cost_center_id is not None:
            known = {cc.id for cc in self.db.fetch_cost_centers(txn.company_id)}
            if txn.cost_center_id not in known:
                raise NotFoundError(f"Cost center {txn.cost_center_id} not found")

        if check_category and txn.category_id is not None:
            category = self.db.get_category(txn.category_id)
            if category is None:
                raise NotFoundError(category_not_found(txn.category_id))
            txn = replace(txn, category_name=category.name)
        return txn

    def _check_payments(self, txn: TransactionEntity) -> None:
        result = reconciler.reconcile(txn.payments, txn.amount)
        if not result.balanced:
            raise ValidationError(unbalanced_payments(result.reason))

    def create_transaction(
        self,
        company_id: str,
        date: date,
        amount: Decimal,
        kind: TransactionKind,
        payments: Sequence[Payment],
        category_id: Optional[str] = None,
        description: str = "",
        account_id: Optional[str] = None,
        cost_center_id: Optional[str] = None,
    ) -> str:
        """Create a transaction.

        Args:
            company_id: Owning company
            date: Transaction date
            amount: Transaction amount (non-negative)
            kind: INCOME or EXPENSE
            payments: Payments backing the amount (see ``fincore.domain.payments``)
            category_id: Optional category ID
            description: Optional description
            account_id: Optional account whose balance follows the PAID payments
            cost_center_id: Optional cost center ID

        Returns:
            Transaction ID

        Raises:
            ValidationError: If the amount is negative or payments don't add up
            NotFoundError: If account, cost center or category doesn't exist
        """
        txn = TransactionEntity(
            id=uuid.uuid4().hex,
            company_id=company_id,
            date=date,
            amount=to_money(amount),
            kind=TransactionKind(kind),
            category_id=category_id,
            description=description or "",
            account_id=account_id,
            cost_center_id=cost_center_id,
            payments=tuple(payments),
        )
        txn = self._check_references(txn)
        self._check_payments(txn)

        changes = net_balance_changes(None, txn)
        transaction_id = self.db.create_transaction(txn, balance_changes=changes)
        logger.info(
            "Created %s transaction %s of %s (%s)",
            txn.kind.value.lower(),
            transaction_id,
            txn.amount,
            txn.status.value,
        )
        return transaction_id

    def get_transaction(self, transaction_id: str) -> Optional[TransactionEntity]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            Transaction entity or None if not found
        """
        return self.db.get_transaction(transaction_id)

    def _require(self, transaction_id: str) -> TransactionEntity:
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        return txn

    def update_transaction(self, transaction_id: str, **changes) -> TransactionEntity:
        """Update transaction fields.

        Accepts the fields of ``create_transaction`` (``date``, ``amount``,
        ``kind``, ``payments``, ``category_id``, ``description``,
        ``account_id``, ``cost_center_id``). Balances of the old and new
        accounts are corrected by the net difference.

        Returns:
            The updated transaction

        Raises:
            NotFoundError: If transaction or a referenced entity doesn't exist
            ValidationError: If the result is invalid or unbalanced
        """
        allowed = {
            "date",
            "amount",
            "kind",
            "payments",
            "category_id",
            "description",
            "account_id",
            "cost_center_id",
        }
        unknown = set(changes) - allowed
        if unknown:
            raise ValidationError(f"Cannot update field(s): {', '.join(sorted(unknown))}")

        old = self._require(transaction_id)
        if "amount" in changes:
            changes["amount"] = to_money(changes["amount"])
        if "kind" in changes:
            changes["kind"] = TransactionKind(changes["kind"])
        if "payments" in changes:
            changes["payments"] = tuple(changes["payments"])
        if "category_id" in changes:
            changes["category_name"] = None

        new = self._check_references(
            replace(old, **changes), check_category="category_id" in changes
        )
        self._check_payments(new)

        self.db.update_transaction(new, balance_changes=net_balance_changes(old, new))
        logger.info("Updated transaction %s (%s)", transaction_id, new.status.value)
        return new

    def settle_payment(
        self, transaction_id: str, payment_id: str, paid_on: Optional[date] = None
    ) -> TransactionEntity:
        """Mark one payment as PAID, optionally moving its date.

        Raises:
            NotFoundError: If transaction or payment doesn't exist
        """
        txn = self._require(transaction_id)
        if not any(p.id == payment_id for p in txn.payments):
            raise NotFoundError(f"Payment {payment_id} not found in transaction {transaction_id}")

        fields: dict = {"status": PaymentStatus.PAID}
        if paid_on is not None:
            fields["date"] = paid_on
        payments = reconciler.update_row(txn.payments, payment_id, **fields)
        return self.update_transaction(transaction_id, payments=payments)

    def delete_transaction(self, transaction_id: str) -> None:
        """Delete a transaction, reversing its effect on the account balance.

        Raises:
            NotFoundError: If transaction doesn't exist
        """
        txn = self._require(transaction_id)
        self.db.delete_transaction(
            transaction_id, balance_changes=net_balance_changes(txn, None)
        )
        logger.info("Deleted transaction %s", transaction_id)

    def list_transactions(
        self,
        company_id: str,
        period: Union[PeriodContext, DateRange],
        query: Optional[LedgerQuery] = None,
    ) -> list[TransactionEntity]:
        """List the transactions of a period.

        Args:
            company_id: Owning company
            period: PeriodContext or an explicit DateRange
            query: Optional text/kind/status/account/cost center predicates

        Returns:
            List of transaction entities, newest first
        """
        date_range = period.range if isinstance(period, PeriodContext) else period
        transactions = self.db.fetch_transactions(company_id, date_range=date_range)
        return filter_transactions(transactions, date_range, query)
