"""Report commands."""

import click

from fincore.cli.error_handling import handle_domain_error
from fincore.cli.period_options import period_options, resolve_cli_period
from fincore.domain.entities import LedgerQuery, LineType
from fincore.domain.errors import DomainError
from fincore.domain.report import ReportService
from fincore.utils.money import format_money


@click.group()
def report_group():
    """Statements and cash flow."""
    pass


@report_group.command("statement")
@period_options
@click.option("--template", "template_id", help="Template ID (defaults to the company default)")
@click.option("--percent", is_flag=True, help="Add a column with each line as a % of revenue")
@click.option("--text", help="Only include transactions matching this text")
@click.option(
    "--lenient",
    is_flag=True,
    help="Evaluate even if mappings point at deleted categories or accounts",
)
@click.pass_context
def statement(
    ctx,
    granularity: str,
    anchor: str | None,
    offset: int,
    template_id: str | None,
    percent: bool,
    text: str | None,
    lenient: bool,
):
    """Evaluate a statement template over a period.

    Examples:
        fincore report statement
        fincore report statement -g year --date 2024-01-01 --percent
    """
    context = resolve_cli_period(ctx, granularity=granularity, anchor=anchor, offset=offset)
    service = ReportService(ctx.obj["db"])

    try:
        report = service.build_statement(
            ctx.obj["company_id"],
            context,
            template_id=template_id,
            query=LedgerQuery(text=text) if text else None,
            percent=percent,
            check_mappings=not lenient,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\n{report.template_name} - {report.label}")
    click.echo("-" * 64)
    for row in report.rows:
        name = row.name
        if row.type in (LineType.SUBTOTAL, LineType.RESULT):
            name = name.upper()
        line = f"{name:<40} {format_money(row.value):>14}"
        if percent:
            pct = report.percentages.get(row.line_id)
            line += f" {'N/A' if pct is None else f'{pct}%':>9}"
        click.echo(line)
    click.echo("-" * 64)
    click.echo(f"Transactions: {report.transaction_count}")
    if report.excluded_count:
        click.echo(f"Not mapped to any line: {report.excluded_count}")
    if report.orphaned_transaction_ids:
        click.echo(f"With a deleted category: {len(report.orphaned_transaction_ids)}")


@report_group.command("cash-flow")
@period_options
@click.pass_context
def cash_flow(ctx, granularity: str, anchor: str | None, offset: int):
    """Show income, expense and running balance per day or month."""
    context = resolve_cli_period(ctx, granularity=granularity, anchor=anchor, offset=offset)
    rows = ReportService(ctx.obj["db"]).cash_flow(ctx.obj["company_id"], context)

    click.echo(f"\nCash flow - {context.label}")
    if not rows:
        click.echo("No transactions found.")
        return

    click.echo("-" * 70)
    click.echo(f"{'Period':<12} {'Income':>14} {'Expense':>14} {'Balance':>14} {'Accumulated':>14}")
    click.echo("-" * 70)
    for row in rows:
        if not row.income and not row.expense:
            continue
        click.echo(
            f"{row.key:<12} {format_money(row.income):>14} {format_money(row.expense):>14} "
            f"{format_money(row.balance):>14} {format_money(row.accumulated):>14}"
        )
    final = rows[-1]
    click.echo("-" * 70)
    click.echo(f"{'Total':<12} {'':>14} {'':>14} {'':>14} {format_money(final.accumulated):>14}")


def register_commands(cli: click.Group) -> None:
    """Register report commands with main CLI."""
    cli.add_command(report_group, name="report")
