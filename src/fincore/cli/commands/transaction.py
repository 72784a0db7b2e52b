"""Transaction management commands."""

import click

from fincore.cli.error_handling import handle_domain_error
from fincore.cli.period_options import period_options, resolve_cli_period
from fincore.domain import payments as reconciler
from fincore.domain.account import AccountService
from fincore.domain.category import CategoryService
from fincore.domain.entities import (
    LedgerQuery,
    PaymentMethod,
    PaymentStatus,
    TransactionKind,
    TransactionStatus,
)
from fincore.domain.errors import DomainError, category_name_not_found
from fincore.domain.transaction import TransactionService
from fincore.utils.amount_parser import parse_amount
from fincore.utils.date_parser import parse_date
from fincore.utils.money import format_money

METHODS = [m.value.lower() for m in PaymentMethod]


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


def _resolve_account_id(ctx, name: str | None) -> str | None:
    if name is None:
        return None
    acc = AccountService(ctx.obj["db"]).get_account_by_name(ctx.obj["company_id"], name)
    if acc is None:
        click.echo(f"Error: Account '{name}' not found", err=True)
        ctx.exit(1)
    return acc.id


def _resolve_cost_center_id(ctx, code: str | None) -> str | None:
    if code is None:
        return None
    for cc in AccountService(ctx.obj["db"]).list_cost_centers(ctx.obj["company_id"]):
        if cc.code == code:
            return cc.id
    click.echo(f"Error: Cost center '{code}' not found", err=True)
    ctx.exit(1)


@transaction_group.command("add")
@click.argument("amount")
@click.option(
    "--kind",
    type=click.Choice(["income", "expense"], case_sensitive=False),
    required=True,
    help="Income or expense",
)
@click.option("--category", help="Category name")
@click.option("--date", "txn_date", default="today", help="Transaction date (YYYY-MM-DD or 'today')")
@click.option("--description", default="", help="Transaction description")
@click.option("--account", help="Account name (its balance follows paid payments)")
@click.option("--cost-center", help="Cost center code")
@click.option(
    "--method",
    type=click.Choice(METHODS, case_sensitive=False),
    default="other",
    show_default=True,
    help="Payment method",
)
@click.option("--paid/--pending", default=False, help="Whether the single payment is already paid")
@click.option("--installments", type=int, help="Split into this many monthly installments")
@click.pass_context
def add_transaction(
    ctx,
    amount: str,
    kind: str,
    category: str | None,
    txn_date: str,
    description: str,
    account: str | None,
    cost_center: str | None,
    method: str,
    paid: bool,
    installments: int | None,
):
    """Record a transaction.

    Without --installments the amount is backed by a single payment. With
    --installments N the amount is split into N pending monthly
    installments, the first one absorbing any leftover cents.

    Examples:
        fincore transaction add 1000 --kind income --category Sales --paid
        fincore transaction add 100 --kind expense --category Rent --installments 3
    """
    db = ctx.obj["db"]
    company_id = ctx.obj["company_id"]

    try:
        value = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)
    try:
        day = parse_date(txn_date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    category_id = None
    if category is not None:
        cat = CategoryService(db).get_category_by_name(company_id, category)
        if cat is None:
            click.echo(f"Error: {category_name_not_found(category)}", err=True)
            ctx.exit(1)
        category_id = cat.id

    payment_method = PaymentMethod(method.upper())
    if installments is not None:
        if installments < 1:
            click.echo("Error: --installments must be at least 1", err=True)
            ctx.exit(1)
        if paid:
            click.echo("Error: --paid cannot be combined with --installments", err=True)
            ctx.exit(1)
        payments = reconciler.generate_installments((), value, installments, day, payment_method)
    else:
        status = PaymentStatus.PAID if paid else PaymentStatus.PENDING
        payments = reconciler.single_payment(value, payment_method, day, status)

    try:
        transaction_id = TransactionService(db).create_transaction(
            company_id=company_id,
            date=day,
            amount=value,
            kind=TransactionKind(kind.upper()),
            payments=payments,
            category_id=category_id,
            description=description,
            account_id=_resolve_account_id(ctx, account),
            cost_center_id=_resolve_cost_center_id(ctx, cost_center),
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created transaction {transaction_id}")
    if installments is not None:
        for p in payments:
            click.echo(
                f"  {p.installment_number}/{p.total_installments}  {p.date.isoformat()}"
                f"  {format_money(p.amount):>12}"
            )


@transaction_group.command("list")
@period_options
@click.option("--text", help="Text to look for in description or category")
@click.option("--kind", type=click.Choice(["income", "expense"], case_sensitive=False))
@click.option(
    "--status",
    type=click.Choice([s.value.lower() for s in TransactionStatus], case_sensitive=False),
    help="Only list transactions with exactly this status",
)
@click.option("--account", help="Account name")
@click.pass_context
def list_transactions(
    ctx,
    granularity: str,
    anchor: str | None,
    offset: int,
    text: str | None,
    kind: str | None,
    status: str | None,
    account: str | None,
):
    """List the transactions of a period."""
    context = resolve_cli_period(ctx, granularity=granularity, anchor=anchor, offset=offset)
    query = LedgerQuery(
        text=text,
        kind=TransactionKind(kind.upper()) if kind else None,
        status=TransactionStatus(status.upper()) if status else None,
        account_id=_resolve_account_id(ctx, account),
    )

    transactions = TransactionService(ctx.obj["db"]).list_transactions(
        ctx.obj["company_id"], context, query
    )

    click.echo(f"\n{context.label}")
    if not transactions:
        click.echo("No transactions found.")
        return

    click.echo(f"Found {len(transactions)} transaction(s):")
    click.echo("-" * 100)
    click.echo(
        f"{'ID':<34} {'Date':<12} {'Kind':<8} {'Amount':>12} {'Status':<8} {'Category':<20}"
    )
    click.echo("-" * 100)
    for txn in transactions:
        click.echo(
            f"{txn.id:<34} {txn.date.isoformat():<12} {txn.kind.value:<8} "
            f"{format_money(txn.amount):>12} {txn.status.value:<8} {(txn.category_name or '')[:20]:<20}"
        )

    income = sum(t.amount for t in transactions if t.kind == TransactionKind.INCOME)
    expense = sum(t.amount for t in transactions if t.kind == TransactionKind.EXPENSE)
    click.echo("-" * 100)
    click.echo(
        f"Income: {format_money(income)} | Expenses: {format_money(expense)} | "
        f"Count: {len(transactions)}"
    )


@transaction_group.command("show")
@click.argument("transaction_id")
@click.pass_context
def show_transaction(ctx, transaction_id: str):
    """Show a transaction with its payments."""
    txn = TransactionService(ctx.obj["db"]).get_transaction(transaction_id)
    if txn is None:
        click.echo(f"Error: Transaction {transaction_id} not found", err=True)
        ctx.exit(1)

    click.echo(f"\nTransaction ID: {txn.id}")
    click.echo(f"  Date: {txn.date.isoformat()}")
    click.echo(f"  Kind: {txn.kind.value}")
    click.echo(f"  Amount: {format_money(txn.amount)}")
    click.echo(f"  Status: {txn.status.value}")
    click.echo(f"  Category: {txn.category_name or '-'}")
    if txn.description:
        click.echo(f"  Description: {txn.description}")
    click.echo("  Payments:")
    for p in txn.payments:
        installment = (
            f"{p.installment_number}/{p.total_installments}" if p.installment_number else "-"
        )
        click.echo(
            f"    {p.id}  {installment:<6} {p.date.isoformat()}  {p.method.value:<12}"
            f" {format_money(p.amount):>12}  {p.status.value}"
        )


@transaction_group.command("pay")
@click.argument("transaction_id")
@click.argument("payment_id")
@click.option("--date", "paid_on", help="Date the payment was made")
@click.pass_context
def pay_installment(ctx, transaction_id: str, payment_id: str, paid_on: str | None):
    """Mark one payment of a transaction as paid."""
    day = None
    if paid_on is not None:
        try:
            day = parse_date(paid_on)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)

    try:
        txn = TransactionService(ctx.obj["db"]).settle_payment(transaction_id, payment_id, day)
        click.echo(f"Payment {payment_id} paid; transaction is now {txn.status.value}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("delete")
@click.argument("transaction_id")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_transaction(ctx, transaction_id: str, yes: bool) -> None:
    """Delete a transaction.

    Examples:
        fincore transaction delete 3f2a9c...
    """
    service = TransactionService(ctx.obj["db"])

    # Get transaction info for display
    txn = service.get_transaction(transaction_id)
    if txn is None:
        click.echo(f"Error: Transaction {transaction_id} not found", err=True)
        ctx.exit(1)

    # Confirm deletion
    if not yes and not click.confirm(f"Are you sure you want to delete transaction {transaction_id}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_transaction(transaction_id)
        click.echo(f"Deleted transaction {transaction_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli: click.Group) -> None:
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
