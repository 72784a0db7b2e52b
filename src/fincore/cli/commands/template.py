"""Statement template commands."""

import click

from fincore.cli.error_handling import handle_domain_error
from fincore.domain.account import AccountService
from fincore.domain.category import CategoryService
from fincore.domain.entities import LineMapping, LineType, MappingOperation, MappingTarget
from fincore.domain.errors import DomainError, category_name_not_found
from fincore.domain.template import TemplateService

LINE_TYPES = [t.value.lower() for t in LineType]


@click.group()
def template_group():
    """Manage statement templates."""
    pass


@template_group.command("create")
@click.argument("name")
@click.option("--default", "is_default", is_flag=True, help="Make this the company's default template")
@click.pass_context
def create_template(ctx, name: str, is_default: bool):
    """Create an empty statement template.

    Examples:
        fincore template create "Income statement" --default
    """
    service = TemplateService(ctx.obj["db"])
    try:
        template_id = service.create_template(
            company_id=ctx.obj["company_id"], name=name, is_system_default=is_default
        )
        click.echo(f"Created template '{name}' (ID: {template_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@template_group.command("add-line")
@click.argument("template_id")
@click.argument("line_id")
@click.argument("name")
@click.option("--type", "line_type", type=click.Choice(LINE_TYPES, case_sensitive=False), required=True)
@click.option("--category", "categories", multiple=True, help="Category name to map (repeatable)")
@click.option("--account", "accounts", multiple=True, help="Account name to map (repeatable)")
@click.option("--subtract", is_flag=True, help="Subtract the mapped amounts instead of adding them")
@click.option("--formula", help="Formula over line ids for subtotal/result lines, e.g. 'revenue - deductions'")
@click.option("--order", type=int, help="Position of the line (defaults to last)")
@click.pass_context
def add_line(
    ctx,
    template_id: str,
    line_id: str,
    name: str,
    line_type: str,
    categories: tuple[str, ...],
    accounts: tuple[str, ...],
    subtract: bool,
    formula: str | None,
    order: int | None,
):
    """Append a line to a template.

    Examples:
        fincore template add-line TEMPLATE revenue "Revenue" --type revenue --category Sales
        fincore template add-line TEMPLATE net_revenue "Net revenue" --type subtotal \\
            --formula "revenue - deductions"
    """
    db = ctx.obj["db"]
    company_id = ctx.obj["company_id"]
    operation = MappingOperation.SUBTRACT if subtract else MappingOperation.ADD

    mappings = []
    category_service = CategoryService(db)
    for category_name in categories:
        cat = category_service.get_category_by_name(company_id, category_name)
        if cat is None:
            click.echo(f"Error: {category_name_not_found(category_name)}", err=True)
            ctx.exit(1)
        mappings.append(LineMapping(MappingTarget.CATEGORY, cat.id, operation))

    account_service = AccountService(db)
    for account_name in accounts:
        acc = account_service.get_account_by_name(company_id, account_name)
        if acc is None:
            click.echo(f"Error: Account '{account_name}' not found", err=True)
            ctx.exit(1)
        mappings.append(LineMapping(MappingTarget.ACCOUNT, acc.id, operation))

    try:
        line = TemplateService(db).add_line(
            template_id=template_id,
            line_id=line_id,
            name=name,
            line_type=LineType(line_type.upper()),
            mappings=mappings,
            formula=formula,
            order=order,
        )
        click.echo(f"Added line '{line.id}' ({line.type.value}) to template {template_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@template_group.command("list")
@click.pass_context
def list_templates(ctx):
    """List statement templates."""
    templates = TemplateService(ctx.obj["db"]).list_templates(ctx.obj["company_id"])
    if not templates:
        click.echo("No templates found.")
        return
    for t in templates:
        marker = " (default)" if t.is_system_default else ""
        click.echo(f"{t.id:<34} {t.name}{marker}")


@template_group.command("show")
@click.argument("template_id", required=False)
@click.pass_context
def show_template(ctx, template_id: str | None):
    """Show the lines of a template and check it.

    Without TEMPLATE_ID the template used by reports is shown.
    """
    service = TemplateService(ctx.obj["db"])
    try:
        template = service.select_template(ctx.obj["company_id"], template_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\nTemplate: {template.name} (ID: {template.id})")
    click.echo("-" * 72)
    for line in template.lines:
        detail = line.formula or f"{len(line.mappings)} mapping(s)"
        click.echo(f"{line.order:>3} {line.id:<20} {line.name:<28} {line.type.value:<10} {detail}")

    try:
        service.validate_template(template)
        click.echo("\nTemplate is valid.")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli: click.Group) -> None:
    """Register template commands with main CLI."""
    cli.add_command(template_group, name="template")
