"""CLI helpers for period selection.

Commands that look at one period share the ``--granularity``, ``--date``
and ``--offset`` options and turn them into a ``PeriodContext``.
"""

from datetime import date

import click

from fincore.domain.entities import Granularity
from fincore.domain.periods import PeriodContext
from fincore.utils.date_parser import parse_date

GRANULARITY_CHOICES = [g.value.lower() for g in Granularity]


def period_options(func):
    """Decorate a command with the period selection options."""
    func = click.option(
        "--offset",
        type=int,
        default=0,
        show_default=True,
        help="Move the period back (negative) or forward (positive) this many steps",
    )(func)
    func = click.option(
        "--date",
        "anchor",
        help="Any day inside the period (YYYY-MM-DD or 'today'); defaults to today",
    )(func)
    func = click.option(
        "--granularity",
        "-g",
        type=click.Choice(GRANULARITY_CHOICES, case_sensitive=False),
        default="month",
        show_default=True,
        help="Period length",
    )(func)
    return func


def resolve_cli_period(
    ctx: click.Context,
    *,
    granularity: str,
    anchor: str | None,
    offset: int = 0,
    today: date | None = None,
) -> PeriodContext:
    """Build the PeriodContext selected on the command line."""
    anchor_date = today or date.today()
    if anchor:
        try:
            anchor_date = parse_date(anchor)
        except ValueError as e:
            click.echo(f"Error: Invalid date: {e}", err=True)
            ctx.exit(1)

    context = PeriodContext(anchor=anchor_date, granularity=Granularity(granularity.upper()))
    if offset:
        context = context.shift(offset)
    return context
