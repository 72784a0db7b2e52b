"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic so the computation core only ever
sees domain entities with Decimal amounts.
"""

from fincore.domain import entities as domain
from fincore.utils.money import to_money
from fincore.database.models import (
    Account as ORMAccount,
    Category as ORMCategory,
    CostCenter as ORMCostCenter,
    Payment as ORMPayment,
    StatementLine as ORMStatementLine,
    StatementTemplate as ORMStatementTemplate,
    Transaction as ORMTransaction,
)


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        company_id=orm_account.company_id,
        name=orm_account.name,
        kind=domain.AccountKind(orm_account.kind),
        balance=to_money(orm_account.balance or 0),
        active=orm_account.active,
        bank_name=orm_account.bank_name,
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        company_id=orm_category.company_id,
        name=orm_category.name,
        kind=domain.TransactionKind(orm_category.kind),
        active=orm_category.active,
        linked_account_id=orm_category.linked_account_id,
    )


def cost_center_to_domain(orm_cost_center: ORMCostCenter) -> domain.CostCenter:
    """Convert SQLAlchemy CostCenter model to domain CostCenter entity."""
    return domain.CostCenter(
        id=orm_cost_center.id,
        company_id=orm_cost_center.company_id,
        code=orm_cost_center.code,
        name=orm_cost_center.name,
        active=orm_cost_center.active,
    )


def payment_to_domain(orm_payment: ORMPayment) -> domain.Payment:
    """Convert SQLAlchemy Payment model to domain Payment entity."""
    return domain.Payment(
        id=orm_payment.payment_key,
        method=domain.PaymentMethod(orm_payment.method),
        amount=to_money(orm_payment.amount),
        date=orm_payment.date,
        status=domain.PaymentStatus(orm_payment.status),
        installment_number=orm_payment.installment_number,
        total_installments=orm_payment.total_installments,
    )


def payment_to_orm(payment: domain.Payment, position: int) -> ORMPayment:
    """Convert a domain Payment into a new SQLAlchemy Payment row."""
    return ORMPayment(
        position=position,
        payment_key=payment.id,
        method=payment.method.value,
        amount=payment.amount,
        date=payment.date,
        status=payment.status.value,
        installment_number=payment.installment_number,
        total_installments=payment.total_installments,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        company_id=orm_transaction.company_id,
        date=orm_transaction.date,
        amount=to_money(orm_transaction.amount),
        kind=domain.TransactionKind(orm_transaction.kind),
        category_id=orm_transaction.category_id,
        category_name=orm_transaction.category_name,
        description=orm_transaction.description or "",
        account_id=orm_transaction.account_id,
        cost_center_id=orm_transaction.cost_center_id,
        payments=tuple(payment_to_domain(p) for p in orm_transaction.payments),
    )


def apply_transaction(orm_transaction: ORMTransaction, txn: domain.Transaction) -> None:
    """Copy a domain Transaction onto a SQLAlchemy row, replacing its payments."""
    orm_transaction.company_id = txn.company_id
    orm_transaction.date = txn.date
    orm_transaction.amount = txn.amount
    orm_transaction.kind = txn.kind.value
    orm_transaction.status = txn.status.value
    orm_transaction.category_id = txn.category_id
    orm_transaction.category_name = txn.category_name
    orm_transaction.description = txn.description
    orm_transaction.account_id = txn.account_id
    orm_transaction.cost_center_id = txn.cost_center_id
    orm_transaction.payments = [
        payment_to_orm(p, position) for position, p in enumerate(txn.payments)
    ]


def statement_line_to_domain(orm_line: ORMStatementLine) -> domain.StatementLine:
    """Convert SQLAlchemy StatementLine model to domain StatementLine entity."""
    return domain.StatementLine(
        id=orm_line.line_id,
        name=orm_line.name,
        type=domain.LineType(orm_line.type),
        order=orm_line.order_index,
        mappings=tuple(
            domain.LineMapping(
                target_kind=domain.MappingTarget(m.target_kind),
                target_id=m.target_id,
                operation=domain.MappingOperation(m.operation),
            )
            for m in orm_line.mappings
        ),
        formula=orm_line.formula,
    )


def statement_template_to_domain(
    orm_template: ORMStatementTemplate, include_lines: bool = True
) -> domain.StatementTemplate:
    """Convert SQLAlchemy StatementTemplate model to domain StatementTemplate."""
    lines = ()
    if include_lines:
        lines = tuple(statement_line_to_domain(line) for line in orm_template.lines)
    return domain.StatementTemplate(
        id=orm_template.id,
        company_id=orm_template.company_id,
        name=orm_template.name,
        lines=lines,
        is_system_default=orm_template.is_system_default,
        active=orm_template.active,
    )
