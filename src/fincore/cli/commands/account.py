"""Account and cost center management commands."""

import click

from fincore.cli.error_handling import handle_domain_error
from fincore.domain.account import AccountService
from fincore.domain.entities import AccountKind
from fincore.domain.errors import DomainError
from fincore.utils.amount_parser import parse_amount
from fincore.utils.money import ZERO, format_money


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("add")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option(
    "--kind",
    type=click.Choice([k.value.lower() for k in AccountKind], case_sensitive=False),
    default="bank",
    show_default=True,
    help="Account kind",
)
@click.option("--balance", "opening_balance", help="Opening balance (e.g., 1500.00)")
@click.option("--bank", help="Bank name")
@click.pass_context
def add_account(ctx, name: str, kind: str, opening_balance: str | None, bank: str | None):
    """Create a new account.

    Examples:
        fincore account add "Checking" --bank "First Bank" --balance 1500
        fincore account add "Petty cash" --kind cash
    """
    service = AccountService(ctx.obj["db"])

    balance = ZERO
    if opening_balance is not None:
        try:
            balance = parse_amount(opening_balance)
        except ValueError as e:
            click.echo(f"Error: Invalid amount format: {e}", err=True)
            ctx.exit(1)

    try:
        account_id = service.create_account(
            company_id=ctx.obj["company_id"],
            name=name,
            kind=AccountKind(kind.upper()),
            opening_balance=balance,
            bank_name=bank,
        )
        click.echo(f"Created account '{name}' (ID: {account_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List all accounts with their balances."""
    service = AccountService(ctx.obj["db"])

    accounts = service.list_accounts(ctx.obj["company_id"])
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 80)
    for acc in accounts:
        click.echo(
            f"{acc.name:<24} {acc.kind.value:<15} {format_money(acc.balance):>14}"
            f"  Bank: {acc.bank_name or '-'}"
        )


@click.group()
def cost_center_group():
    """Manage cost centers."""
    pass


@cost_center_group.command("add")
@click.argument("code")
@click.argument("name")
@click.pass_context
def add_cost_center(ctx, code: str, name: str):
    """Create a cost center.

    Examples:
        fincore cost-center add ADM "Administration"
    """
    service = AccountService(ctx.obj["db"])
    try:
        cost_center_id = service.create_cost_center(
            company_id=ctx.obj["company_id"], code=code, name=name
        )
        click.echo(f"Created cost center {code} '{name}' (ID: {cost_center_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@cost_center_group.command("list")
@click.pass_context
def list_cost_centers(ctx):
    """List cost centers."""
    service = AccountService(ctx.obj["db"])
    cost_centers = service.list_cost_centers(ctx.obj["company_id"])
    if not cost_centers:
        click.echo("No cost centers found.")
        return
    for cc in cost_centers:
        click.echo(f"{cc.code:<10} {cc.name}")


def register_commands(cli: click.Group) -> None:
    """Register account and cost center commands with main CLI."""
    cli.add_command(account_group, name="account")
    cli.add_command(cost_center_group, name="cost-center")
