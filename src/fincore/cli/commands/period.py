"""Period command."""

import click

from fincore.cli.period_options import period_options, resolve_cli_period


@click.command("period")
@period_options
@click.pass_context
def show_period(ctx, granularity: str, anchor: str | None, offset: int):
    """Show the date range of a period.

    Examples:
        fincore period
        fincore period -g week --date 2024-03-13
        fincore period -g semester --offset -1
    """
    context = resolve_cli_period(ctx, granularity=granularity, anchor=anchor, offset=offset)
    period = context.range

    click.echo(f"Period: {context.label}")
    click.echo(f"From:   {period.start.isoformat()}")
    click.echo(f"To:     {period.end.isoformat()}")
    click.echo(f"Days:   {period.days}")
    if context.previous().anchor != context.anchor:
        click.echo(f"Previous: {context.previous().label}")
        click.echo(f"Next:     {context.next().label}")


def register_commands(cli: click.Group) -> None:
    """Register period command with main CLI."""
    cli.add_command(show_period, name="period")
