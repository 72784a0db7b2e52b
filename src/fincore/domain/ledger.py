"""Ledger filtering and record ingestion.

``ingest_records`` is the boundary where raw rows (from an import, an API
payload or a store that keeps strings) become ``Transaction`` entities. Bad
rows are skipped and reported, never raised, so one broken line cannot take
down a whole period's report. ``filter_transactions`` selects the
transactions of a period.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Mapping, Optional, Sequence

from fincore.domain.entities import (
    DateRange,
    LedgerQuery,
    Payment,
    PaymentMethod,
    PaymentStatus,
    SkippedRow,
    Transaction,
    TransactionKind,
)
from fincore.domain.errors import ValidationError
from fincore.utils.amount_parser import parse_amount
from fincore.utils.date_parser import parse_date

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IngestResult:
    """Transactions accepted at ingestion plus the rows that were skipped."""

    transactions: tuple[Transaction, ...]
    skipped: tuple[SkippedRow, ...]


def _as_day(value: Any) -> date:
    return parse_date(value)


def _as_amount(value: Any, what: str = "amount"):
    try:
        amount = parse_amount(str(value)) if value is not None else None
    except ValueError as e:
        raise ValidationError(f"invalid {what}: {e}")
    if amount is None:
        raise ValidationError(f"missing {what}")
    if amount < 0:
        raise ValidationError(f"negative {what} {amount}")
    return amount


def _enum(enum_cls, value: Any, field_name: str):
    try:
        return enum_cls(str(value).strip().upper())
    except ValueError:
        raise ValidationError(f"invalid {field_name} '{value}'")


def _optional_id(value: Any) -> Optional[str]:
    if value is None or str(value).strip() == "":
        return None
    return str(value)


def _parse_payment(raw: Mapping[str, Any], index: int, fallback_date: date) -> Payment:
    if not isinstance(raw, Mapping):
        raise ValidationError(f"payment {index} is not a mapping")
    try:
        payment_date = _as_day(raw["date"]) if raw.get("date") else fallback_date
    except ValueError as e:
        raise ValidationError(f"payment {index}: invalid date: {e}")

    number = raw.get("installment_number")
    total = raw.get("total_installments")
    return Payment(
        id=str(raw.get("id") or f"p{index}"),
        method=_enum(PaymentMethod, raw.get("method", "OTHER"), "payment method"),
        amount=_as_amount(raw.get("amount"), f"payment {index} amount"),
        date=payment_date,
        status=_enum(PaymentStatus, raw.get("status", "PENDING"), "payment status"),
        installment_number=int(number) if number is not None else None,
        total_installments=int(total) if total is not None else None,
    )


def parse_record(record: Mapping[str, Any], company_id: Optional[str] = None) -> Transaction:
    """Convert one raw record into a Transaction.

    Raises:
        ValidationError: If the date, amount, kind or payments are invalid
    """
    if not isinstance(record, Mapping):
        raise ValidationError("record is not a mapping")
    try:
        txn_date = _as_day(record.get("date"))
    except ValueError as e:
        raise ValidationError(f"invalid date: {e}")

    amount = _as_amount(record.get("amount"))
    kind = _enum(TransactionKind, record.get("kind", record.get("type")), "kind")
    raw_payments = record.get("payments") or []
    if not isinstance(raw_payments, (list, tuple)):
        raise ValidationError("payments is not a list")
    payments = tuple(
        _parse_payment(raw, i, txn_date) for i, raw in enumerate(raw_payments)
    )

    return Transaction(
        id=str(record.get("id", "")),
        company_id=str(record.get("company_id") or company_id or ""),
        date=txn_date,
        amount=amount,
        kind=kind,
        category_id=_optional_id(record.get("category_id")),
        category_name=record.get("category_name") or record.get("category"),
        description=str(record.get("description") or ""),
        account_id=_optional_id(record.get("account_id")),
        cost_center_id=_optional_id(record.get("cost_center_id")),
        payments=payments,
    )


def ingest_records(
    records: Iterable[Mapping[str, Any]], company_id: Optional[str] = None
) -> IngestResult:
    """Convert raw records, skipping (and reporting) the invalid ones."""
    accepted: list[Transaction] = []
    skipped: list[SkippedRow] = []

    for index, record in enumerate(records):
        try:
            accepted.append(parse_record(record, company_id=company_id))
        except ValueError as e:
            # ValidationError plus plain conversion failures (e.g. int("x"))
            record_id = record.get("id") if isinstance(record, Mapping) else None
            skipped.append(
                SkippedRow(
                    index=index,
                    record_id=str(record_id) if record_id is not None else None,
                    reason=str(e),
                )
            )
            logger.warning("Skipping ledger row %d (id=%s): %s", index, record_id, e)

    if skipped:
        logger.warning(
            "Ingested %d transaction(s), skipped %d invalid row(s)",
            len(accepted),
            len(skipped),
        )
    return IngestResult(transactions=tuple(accepted), skipped=tuple(skipped))


def matches(txn: Transaction, period: DateRange, query: Optional[LedgerQuery] = None) -> bool:
    """Return True if a transaction falls in the period and satisfies query."""
    if not period.contains(txn.date):
        return False
    if query is None:
        return True

    if query.text:
        needle = query.text.lower()
        haystacks = (txn.description or "", txn.category_name or "")
        if not any(needle in h.lower() for h in haystacks):
            return False
    if query.kind is not None and txn.kind != query.kind:
        return False
    if query.status is not None and txn.status != query.status:
        return False
    if query.account_id is not None and txn.account_id != query.account_id:
        return False
    if query.cost_center_id is not None and txn.cost_center_id != query.cost_center_id:
        return False
    return True


def filter_transactions(
    transactions: Sequence[Transaction],
    period: DateRange,
    query: Optional[LedgerQuery] = None,
) -> list[Transaction]:
    """Select the transactions of a period matching optional predicates.

    The input is left untouched; a new list is returned.
    """
    return [txn for txn in transactions if matches(txn, period, query)]
