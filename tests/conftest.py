"""Shared pytest fixtures for fincore tests."""

import os
import tempfile
from datetime import date
from decimal import Decimal

import pytest

from fincore.database.factories import create_sqlite_database
from fincore.domain.account import AccountService
from fincore.domain.category import CategoryService
from fincore.domain.entities import (
    LineMapping,
    LineType,
    MappingTarget,
    Payment,
    PaymentMethod,
    PaymentStatus,
    Transaction,
    TransactionKind,
)
from fincore.domain.report import ReportService
from fincore.domain.template import TemplateService
from fincore.domain.transaction import TransactionService

COMPANY = "acme"


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def company_id():
    """Company used by the service fixtures."""
    return COMPANY


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def template_service(temp_db):
    """Create a TemplateService with a temporary database."""
    return TemplateService(temp_db)


@pytest.fixture
def report_service(temp_db):
    """Create a ReportService with a temporary database."""
    return ReportService(temp_db)


@pytest.fixture
def sample_account(account_service, company_id):
    """Create a sample bank account with a 1,000.00 opening balance."""
    account_id = account_service.create_account(
        company_id=company_id,
        name="Checking",
        opening_balance=Decimal("1000.00"),
        bank_name="First Bank",
    )
    return account_service.get_account(account_id)


@pytest.fixture
def sample_categories(category_service, company_id):
    """Create income and expense categories; returns name -> id."""
    names = [
        ("Sales", TransactionKind.INCOME),
        ("Taxes on Sales", TransactionKind.EXPENSE),
        ("Supplies", TransactionKind.EXPENSE),
        ("Rent", TransactionKind.EXPENSE),
        ("Income Tax", TransactionKind.EXPENSE),
    ]
    return {
        name: category_service.create_category(company_id=company_id, name=name, kind=kind)
        for name, kind in names
    }


@pytest.fixture
def sample_template(template_service, sample_categories, company_id):
    """Create the standard income statement as the company default template."""
    template_id = template_service.create_template(
        company_id=company_id, name="Income statement", is_system_default=True
    )

    def cat(name):
        return (LineMapping(MappingTarget.CATEGORY, sample_categories[name]),)

    template_service.add_line(template_id, "revenue", "Revenue", LineType.REVENUE, cat("Sales"))
    template_service.add_line(
        template_id, "deductions", "Deductions", LineType.DEDUCTION, cat("Taxes on Sales")
    )
    template_service.add_line(
        template_id, "net_revenue", "Net revenue", LineType.SUBTOTAL,
        formula="revenue - deductions",
    )
    template_service.add_line(template_id, "costs", "Costs", LineType.COST, cat("Supplies"))
    template_service.add_line(
        template_id, "gross_result", "Gross result", LineType.SUBTOTAL,
        formula="net_revenue - costs",
    )
    template_service.add_line(template_id, "expenses", "Expenses", LineType.EXPENSE, cat("Rent"))
    template_service.add_line(template_id, "taxes", "Taxes", LineType.TAX, cat("Income Tax"))
    template_service.add_line(
        template_id, "final_result", "Final result", LineType.RESULT,
        formula="gross_result - expenses - taxes",
    )
    return template_service.get_template(template_id)


def make_payment(amount, status=PaymentStatus.PAID, payment_id="p1", day=date(2024, 1, 15), **kwargs):
    """Build a Payment for pure tests."""
    return Payment(
        id=payment_id,
        method=kwargs.pop("method", PaymentMethod.PIX),
        amount=Decimal(amount),
        date=day,
        status=status,
        **kwargs,
    )


def make_transaction(
    txn_id,
    amount,
    day=date(2024, 1, 15),
    kind=TransactionKind.INCOME,
    category_id=None,
    payments=None,
    **kwargs,
):
    """Build a Transaction for pure tests (one PAID payment by default)."""
    if payments is None:
        payments = (make_payment(amount, payment_id=f"{txn_id}-p1", day=day),)
    return Transaction(
        id=txn_id,
        company_id=kwargs.pop("company_id", COMPANY),
        date=day,
        amount=Decimal(amount),
        kind=kind,
        category_id=category_id,
        payments=tuple(payments),
        **kwargs,
    )


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
