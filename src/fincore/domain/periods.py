"""Period resolution shared by every date-filtered view.

A period is described by an anchor date and a granularity. ``resolve`` turns
it into an inclusive ``DateRange``, ``step`` moves the anchor to the
previous/next period and ``label`` renders a short description. Callers
carry their current period in a ``PeriodContext`` value instead of shared
module state.

Month arithmetic goes through ``relativedelta``, which works on
(year, month) and clamps the day, so stepping from Jan 31 lands on the last
day of February rather than rolling into March.
"""

import calendar
from dataclasses import dataclass, replace
from datetime import date, timedelta
from typing import Iterator, Literal, Union

from dateutil.relativedelta import relativedelta

from fincore.domain.entities import DateRange, Granularity

ALL_TIME_START = date(1900, 1, 1)
ALL_TIME_END = date(2999, 12, 31)
ALL_TIME_LABEL = "All time"

Direction = Literal["prev", "next"]

_STEPS = {
    Granularity.WEEK: relativedelta(days=7),
    Granularity.MONTH: relativedelta(months=1),
    Granularity.SEMESTER: relativedelta(months=6),
    Granularity.YEAR: relativedelta(years=1),
}


def as_granularity(value: Union[Granularity, str]) -> Granularity:
    """Coerce a string such as 'month' into a Granularity."""
    if isinstance(value, Granularity):
        return value
    try:
        return Granularity(str(value).strip().upper())
    except ValueError:
        choices = ", ".join(g.value.lower() for g in Granularity)
        raise ValueError(f"Unknown granularity: '{value}'. Supported: {choices}")


def last_day_of_month(year: int, month: int) -> date:
    """Return the last calendar day of a month."""
    return date(year, month, calendar.monthrange(year, month)[1])


def resolve(anchor: date, granularity: Union[Granularity, str]) -> DateRange:
    """Resolve the inclusive date range containing an anchor date.

    Args:
        anchor: Any day inside the wanted period
        granularity: WEEK, MONTH, SEMESTER, YEAR or ALL

    Returns:
        DateRange with both ends included
    """
    granularity = as_granularity(granularity)

    if granularity == Granularity.WEEK:
        # date.weekday() is Monday=0..Sunday=6; weeks start on Sunday
        days_since_sunday = (anchor.weekday() + 1) % 7
        start = anchor - timedelta(days=days_since_sunday)
        return DateRange(start=start, end=start + timedelta(days=6))

    if granularity == Granularity.MONTH:
        return DateRange(
            start=date(anchor.year, anchor.month, 1),
            end=last_day_of_month(anchor.year, anchor.month),
        )

    if granularity == Granularity.SEMESTER:
        first_month = 1 if anchor.month <= 6 else 7
        return DateRange(
            start=date(anchor.year, first_month, 1),
            end=last_day_of_month(anchor.year, first_month + 5),
        )

    if granularity == Granularity.YEAR:
        return DateRange(start=date(anchor.year, 1, 1), end=date(anchor.year, 12, 31))

    return DateRange(start=ALL_TIME_START, end=ALL_TIME_END)


def step(
    anchor: date,
    granularity: Union[Granularity, str],
    direction: Direction,
) -> date:
    """Move an anchor date one period backward or forward.

    ALL has no neighbours, so the anchor is returned unchanged.
    """
    granularity = as_granularity(granularity)
    if direction not in ("prev", "next"):
        raise ValueError(f"Unknown direction: '{direction}'. Use 'prev' or 'next'")

    delta = _STEPS.get(granularity)
    if delta is None:
        return anchor
    return anchor - delta if direction == "prev" else anchor + delta


def shift(anchor: date, granularity: Union[Granularity, str], periods: int) -> date:
    """Move an anchor date by a signed number of periods."""
    granularity = as_granularity(granularity)
    delta = _STEPS.get(granularity)
    if delta is None or periods == 0:
        return anchor
    # Applied in one go so month-end clamping happens once
    return anchor + delta * periods


def _ordinal_half(month: int) -> str:
    return "1st" if month <= 6 else "2nd"


def label(anchor: date, granularity: Union[Granularity, str]) -> str:
    """Render a human readable label for the period containing anchor."""
    granularity = as_granularity(granularity)
    period = resolve(anchor, granularity)

    if granularity == Granularity.WEEK:
        return f"{period.start.isoformat()} – {period.end.isoformat()}"
    if granularity == Granularity.MONTH:
        return f"{calendar.month_name[period.start.month]} {period.start.year}"
    if granularity == Granularity.SEMESTER:
        return f"{_ordinal_half(period.start.month)} half of {period.start.year}"
    if granularity == Granularity.YEAR:
        return str(period.start.year)
    return ALL_TIME_LABEL


def buckets(period: DateRange, granularity: Union[Granularity, str]) -> Iterator[date]:
    """Yield the start day of each chart bucket inside a period.

    WEEK and MONTH periods are charted per day, longer periods per month.
    """
    granularity = as_granularity(granularity)
    if granularity in (Granularity.WEEK, Granularity.MONTH):
        current = period.start
        while current <= period.end:
            yield current
            current += timedelta(days=1)
        return

    current = date(period.start.year, period.start.month, 1)
    while current <= period.end:
        yield current
        current += relativedelta(months=1)


def bucket_key(day: date, granularity: Union[Granularity, str]) -> str:
    """Return the bucket key a day belongs to ('2024-01-31' or '2024-01')."""
    granularity = as_granularity(granularity)
    if granularity in (Granularity.WEEK, Granularity.MONTH):
        return day.strftime("%Y-%m-%d")
    return day.strftime("%Y-%m")


@dataclass(frozen=True)
class PeriodContext:
    """The period a view is currently looking at.

    Navigation returns a new context; nothing is mutated.
    """

    anchor: date
    granularity: Granularity = Granularity.MONTH

    def __post_init__(self):
        object.__setattr__(self, "granularity", as_granularity(self.granularity))

    @property
    def range(self) -> DateRange:
        return resolve(self.anchor, self.granularity)

    @property
    def label(self) -> str:
        return label(self.anchor, self.granularity)

    def previous(self) -> "PeriodContext":
        return replace(self, anchor=step(self.anchor, self.granularity, "prev"))

    def next(self) -> "PeriodContext":
        return replace(self, anchor=step(self.anchor, self.granularity, "next"))

    def shift(self, periods: int) -> "PeriodContext":
        return replace(self, anchor=shift(self.anchor, self.granularity, periods))

    def with_granularity(self, granularity: Union[Granularity, str]) -> "PeriodContext":
        return replace(self, granularity=as_granularity(granularity))
