"""Tests for the ledger filter and record ingestion."""

import logging
from datetime import date
from decimal import Decimal

from conftest import make_payment, make_transaction
from fincore.domain.entities import (
    Granularity,
    LedgerQuery,
    PaymentStatus,
    TransactionKind,
    TransactionStatus,
)
from fincore.domain.ledger import filter_transactions, ingest_records, parse_record
from fincore.domain.periods import resolve

JANUARY = resolve(date(2024, 1, 10), Granularity.MONTH)


def test_last_day_of_month_is_included():
    """Test a transaction on the range's last day matches."""
    txns = [
        make_transaction("first", "1.00", day=date(2024, 1, 1)),
        make_transaction("last", "1.00", day=date(2024, 1, 31)),
        make_transaction("next", "1.00", day=date(2024, 2, 1)),
        make_transaction("before", "1.00", day=date(2023, 12, 31)),
    ]
    result = filter_transactions(txns, JANUARY)
    assert [t.id for t in result] == ["first", "last"]


def test_filter_returns_new_list_and_keeps_input():
    """Test the filter never mutates its input."""
    txns = [make_transaction("a", "1.00"), make_transaction("b", "1.00", day=date(2024, 3, 1))]
    snapshot = list(txns)
    result = filter_transactions(txns, JANUARY)
    assert result is not txns
    assert txns == snapshot


def test_text_filter_matches_description_or_category():
    """Test case-insensitive text search."""
    txns = [
        make_transaction("a", "1.00", description="Office chairs"),
        make_transaction("b", "1.00", category_name="Office supplies"),
        make_transaction("c", "1.00", description="Coffee"),
    ]
    result = filter_transactions(txns, JANUARY, LedgerQuery(text="OFFICE"))
    assert [t.id for t in result] == ["a", "b"]


def test_kind_account_and_cost_center_filters():
    """Test the dimension predicates combine."""
    txns = [
        make_transaction("a", "1.00", kind=TransactionKind.EXPENSE, account_id="acc1"),
        make_transaction("b", "1.00", kind=TransactionKind.EXPENSE, account_id="acc2"),
        make_transaction("c", "1.00", kind=TransactionKind.INCOME, account_id="acc1", cost_center_id="cc"),
    ]
    assert [t.id for t in filter_transactions(txns, JANUARY, LedgerQuery(kind=TransactionKind.EXPENSE))] == ["a", "b"]
    assert [t.id for t in filter_transactions(txns, JANUARY, LedgerQuery(account_id="acc1"))] == ["a", "c"]
    assert [t.id for t in filter_transactions(txns, JANUARY, LedgerQuery(cost_center_id="cc"))] == ["c"]


def test_status_filter_is_exact():
    """Test each status matches only transactions with that exact status."""
    paid = make_transaction("paid", "10.00")
    pending = make_transaction(
        "pending", "10.00", payments=[make_payment("10.00", status=PaymentStatus.PENDING)]
    )
    partial = make_transaction(
        "partial",
        "10.00",
        payments=[
            make_payment("5.00", payment_id="x"),
            make_payment("5.00", payment_id="y", status=PaymentStatus.PENDING),
        ],
    )
    txns = [paid, pending, partial]

    def ids(status):
        return [t.id for t in filter_transactions(txns, JANUARY, LedgerQuery(status=status))]

    assert ids(TransactionStatus.PAID) == ["paid"]
    assert ids(TransactionStatus.PENDING) == ["pending"]
    assert ids(TransactionStatus.PARTIAL) == ["partial"]


def test_parse_record_converts_strings():
    """Test a raw row becomes a Transaction with Decimal amounts."""
    txn = parse_record(
        {
            "id": "t1",
            "date": "2024-01-31",
            "amount": "R$ 1,250.50",
            "type": "income",
            "category": "Sales",
            "payments": [
                {"id": "p1", "amount": "1250.5", "status": "paid", "method": "pix"},
            ],
        },
        company_id="acme",
    )
    assert txn.date == date(2024, 1, 31)
    assert txn.amount == Decimal("1250.50")
    assert txn.kind == TransactionKind.INCOME
    assert txn.category_name == "Sales"
    assert txn.company_id == "acme"
    assert txn.status == TransactionStatus.PAID
    assert txn.payments[0].date == date(2024, 1, 31)


def test_ingest_skips_bad_rows_and_reports_them(caplog):
    """Test one bad row does not abort the batch."""
    records = [
        {"id": "ok", "date": "2024-01-05", "amount": "10.00", "kind": "EXPENSE"},
        {"id": "bad-date", "date": "not a date", "amount": "10.00", "kind": "EXPENSE"},
        {"id": "negative", "date": "2024-01-05", "amount": "-3.00", "kind": "EXPENSE"},
        {"id": "bad-kind", "date": "2024-01-05", "amount": "3.00", "kind": "TRANSFER"},
        {
            "id": "bad-installment",
            "date": "2024-01-05",
            "amount": "3.00",
            "kind": "INCOME",
            "payments": [{"amount": "3.00", "installment_number": "x", "total_installments": 2}],
        },
        {"id": "ok2", "date": "2024-01-06", "amount": 7, "kind": "income"},
    ]
    with caplog.at_level(logging.WARNING, logger="fincore.domain.ledger"):
        result = ingest_records(records)

    assert [t.id for t in result.transactions] == ["ok", "ok2"]
    assert [s.record_id for s in result.skipped] == [
        "bad-date",
        "negative",
        "bad-kind",
        "bad-installment",
    ]
    assert [s.index for s in result.skipped] == [1, 2, 3, 4]
    assert "negative" in result.skipped[1].reason
    assert "skipped 4 invalid row(s)" in caplog.text


def test_ingest_skips_amounts_too_large_for_cents():
    """Test an amount that cannot be held in cents is skipped, not raised."""
    records = [
        {"id": "ok", "date": "2024-01-05", "amount": "10.00", "kind": "INCOME"},
        {"id": "big", "date": "2024-01-05", "amount": "1e30", "kind": "INCOME"},
    ]

    result = ingest_records(records)

    assert [t.id for t in result.transactions] == ["ok"]
    assert [s.record_id for s in result.skipped] == ["big"]
    assert "out of range" in result.skipped[0].reason


def test_ingest_skips_rows_that_are_not_mappings():
    """Test non-mapping rows and payments are skipped with a reason."""
    records = [
        {"id": "ok", "date": "2024-01-05", "amount": "10.00", "kind": "INCOME"},
        None,
        ["2024-01-05", "10.00"],
        {"id": "bad-payment", "date": "2024-01-05", "amount": "1.00", "kind": "INCOME", "payments": [None]},
        {"id": "bad-payments", "date": "2024-01-05", "amount": "1.00", "kind": "INCOME", "payments": 5},
    ]

    result = ingest_records(records)

    assert [t.id for t in result.transactions] == ["ok"]
    assert [s.index for s in result.skipped] == [1, 2, 3, 4]
    assert result.skipped[0].record_id is None
    assert result.skipped[0].reason == "record is not a mapping"
    assert result.skipped[2].reason == "payment 0 is not a mapping"
    assert result.skipped[3].reason == "payments is not a list"
