"""Account and cost center domain service."""

from decimal import Decimal
from typing import Optional

from fincore.database.base import Database
from fincore.domain.entities import (
    Account as AccountEntity,
    AccountKind,
    CostCenter as CostCenterEntity,
)
from fincore.domain.errors import ConflictError, ValidationError
from fincore.utils.money import ZERO, to_money


class AccountService:
    """Service for managing accounts and cost centers."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(
        self,
        company_id: str,
        name: str,
        kind: AccountKind = AccountKind.BANK,
        opening_balance: Decimal = ZERO,
        bank_name: Optional[str] = None,
    ) -> str:
        """Create a new account.

        Args:
            company_id: Owning company
            name: Account name
            kind: BANK, CASH or DIGITAL_WALLET
            opening_balance: Initial balance
            bank_name: Optional bank name

        Returns:
            Account ID

        Raises:
            ConflictError: If account name already exists
        """
        # Check if account with same name exists
        for acc in self.db.fetch_accounts(company_id):
            if acc.name == name:
                raise ConflictError(f"Account with name '{name}' already exists")

        return self.db.create_account(
            company_id=company_id,
            name=name,
            kind=AccountKind(kind),
            balance=to_money(opening_balance),
            bank_name=bank_name,
        )

    def get_account(self, account_id: str) -> Optional[AccountEntity]:
        """Get account by ID.

        Args:
            account_id: Account ID

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(account_id)

    def get_account_by_name(self, company_id: str, name: str) -> Optional[AccountEntity]:
        """Get account by name."""
        for acc in self.db.fetch_accounts(company_id):
            if acc.name == name:
                return acc
        return None

    def list_accounts(self, company_id: str) -> list[AccountEntity]:
        """List all accounts of a company."""
        return self.db.fetch_accounts(company_id)

    def create_cost_center(self, company_id: str, code: str, name: str) -> str:
        """Create a cost center.

        Raises:
            ValidationError: If code is blank
            ConflictError: If the code is already used
        """
        code = code.strip()
        if not code:
            raise ValidationError("Cost center code cannot be empty")
        for cc in self.db.fetch_cost_centers(company_id):
            if cc.code == code:
                raise ConflictError(f"Cost center with code '{code}' already exists")
        return self.db.create_cost_center(company_id=company_id, code=code, name=name)

    def list_cost_centers(self, company_id: str) -> list[CostCenterEntity]:
        """List all cost centers of a company."""
        return self.db.fetch_cost_centers(company_id)
