"""Abstract database interface.

This is the collaborator boundary of the computation core: the fetch
operations provide transactions, categories, accounts, cost centers and
statement templates by company id, and the write operations back the
domain services.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Mapping, Optional

# Import entities directly to avoid circular import through domain/__init__.py
from fincore.domain.entities import (
    Account,
    AccountKind,
    Category,
    CostCenter,
    DateRange,
    StatementLine,
    StatementTemplate,
    Transaction,
    TransactionKind,
)

# account id -> signed amount to add to its balance
BalanceChanges = Mapping[str, Decimal]


class Database(ABC):
    """Abstract database interface for fincore."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self,
        company_id: str,
        name: str,
        kind: AccountKind = AccountKind.BANK,
        balance: Decimal = Decimal("0.00"),
        bank_name: Optional[str] = None,
    ) -> str:
        """Create a new account. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: str) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def fetch_accounts(self, company_id: str) -> list[Account]:
        """List the accounts of a company."""
        pass

    @abstractmethod
    def increment_account_balance(self, account_id: str, delta: Decimal) -> None:
        """Add delta to an account balance in a single atomic statement."""
        pass

    # Cost center operations
    @abstractmethod
    def create_cost_center(self, company_id: str, code: str, name: str) -> str:
        """Create a cost center. Returns cost center ID."""
        pass

    @abstractmethod
    def fetch_cost_centers(self, company_id: str) -> list[CostCenter]:
        """List the cost centers of a company."""
        pass

    # Category operations
    @abstractmethod
    def create_category(
        self,
        company_id: str,
        name: str,
        kind: TransactionKind,
        linked_account_id: Optional[str] = None,
    ) -> str:
        """Create a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, category_id: str) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def fetch_categories(self, company_id: str) -> list[Category]:
        """List the categories of a company."""
        pass

    @abstractmethod
    def delete_category(self, category_id: str) -> None:
        """Delete a category. Transactions referencing it are kept."""
        pass

    # Statement template operations
    @abstractmethod
    def create_statement_template(
        self, company_id: str, name: str, is_system_default: bool = False
    ) -> str:
        """Create an empty statement template. Returns template ID."""
        pass

    @abstractmethod
    def add_statement_line(self, template_id: str, line: StatementLine) -> None:
        """Append a line (with its mappings) to a template."""
        pass

    @abstractmethod
    def fetch_statement_templates(self, company_id: str) -> list[StatementTemplate]:
        """List templates of a company, system default first (lines not loaded)."""
        pass

    @abstractmethod
    def fetch_statement_lines(self, template_id: str) -> list[StatementLine]:
        """List the lines of a template ordered by their order index."""
        pass

    @abstractmethod
    def get_statement_template(self, template_id: str) -> Optional[StatementTemplate]:
        """Get a template with its lines."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self, transaction: Transaction, balance_changes: Optional[BalanceChanges] = None
    ) -> str:
        """Store a transaction and apply balance changes in one commit."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        """Get transaction by ID, with its payments."""
        pass

    @abstractmethod
    def update_transaction(
        self, transaction: Transaction, balance_changes: Optional[BalanceChanges] = None
    ) -> None:
        """Replace a stored transaction and apply balance changes in one commit."""
        pass

    @abstractmethod
    def delete_transaction(
        self, transaction_id: str, balance_changes: Optional[BalanceChanges] = None
    ) -> None:
        """Delete a transaction and apply balance changes in one commit."""
        pass

    @abstractmethod
    def fetch_transactions(
        self, company_id: str, date_range: Optional[DateRange] = None
    ) -> list[Transaction]:
        """List transactions of a company, optionally limited to a date range."""
        pass
