"""Category management commands."""

import click

from fincore.cli.error_handling import handle_domain_error
from fincore.domain.account import AccountService
from fincore.domain.category import CategoryService
from fincore.domain.entities import TransactionKind
from fincore.domain.errors import DomainError, category_name_not_found


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("add")
@click.argument("name")
@click.option(
    "--kind",
    type=click.Choice(["income", "expense"], case_sensitive=False),
    required=True,
    help="Whether the category holds income or expenses",
)
@click.option("--account", help="Name of the account this category is linked to")
@click.pass_context
def add_category(ctx, name: str, kind: str, account: str | None):
    """Create a new category.

    Examples:
        fincore category add "Sales" --kind income
        fincore category add "Rent" --kind expense
    """
    db = ctx.obj["db"]
    company_id = ctx.obj["company_id"]
    service = CategoryService(db)

    linked_account_id = None
    if account is not None:
        acc = AccountService(db).get_account_by_name(company_id, account)
        if acc is None:
            click.echo(f"Error: Account '{account}' not found", err=True)
            ctx.exit(1)
        linked_account_id = acc.id

    try:
        category_id = service.create_category(
            company_id=company_id,
            name=name,
            kind=TransactionKind(kind.upper()),
            linked_account_id=linked_account_id,
        )
        click.echo(f"Created category '{name}' (ID: {category_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@category_group.command("list")
@click.option(
    "--kind",
    type=click.Choice(["income", "expense"], case_sensitive=False),
    help="Only show categories of this kind",
)
@click.pass_context
def list_categories(ctx, kind: str | None):
    """List categories."""
    service = CategoryService(ctx.obj["db"])
    categories = service.list_categories(
        ctx.obj["company_id"], kind=TransactionKind(kind.upper()) if kind else None
    )

    if not categories:
        click.echo("No categories found.")
        return

    click.echo("\nCategories:")
    click.echo("-" * 72)
    for cat in categories:
        click.echo(f"{cat.id:<34} {cat.name:<28} {cat.kind.value}")


@category_group.command("delete")
@click.argument("name")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_category(ctx, name: str, yes: bool):
    """Delete a category.

    Transactions in the category are kept. Statements keep matching them
    by the category name recorded on each transaction.
    """
    service = CategoryService(ctx.obj["db"])
    cat = service.get_category_by_name(ctx.obj["company_id"], name)
    if cat is None:
        click.echo(f"Error: {category_name_not_found(name)}", err=True)
        ctx.exit(1)

    if not yes and not click.confirm(f"Are you sure you want to delete category '{name}'?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_category(cat.id)
        click.echo(f"Deleted category '{name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli: click.Group) -> None:
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
