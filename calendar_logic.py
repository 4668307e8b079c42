"""Pure calendar calculations — no UI dependencies."""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from typing import Callable, NamedTuple

from locales import LocaleProfile

YEAR_SPAN = 10


class DateRange(NamedTuple):
    """Inclusive span of days shown in the grid, always whole weeks."""

    start: date
    end: date

    @property
    def num_days(self) -> int:
        return (self.end - self.start).days + 1


class DayDescriptor(NamedTuple):
    date: date
    is_selected: bool
    is_today: bool
    in_current_month: bool
    is_disabled: bool


class CalendarView(NamedTuple):
    """Everything needed to draw the open grid, taken from one state snapshot."""

    view_month: date
    date_range: DateRange
    days: list[DayDescriptor]
    weeks: list[list[DayDescriptor]]
    weekday_headers: list[str]
    month_options: list[tuple[int, str]]
    year_options: list[int]
    title: str
    tab_stop: date | None


# ------------------------------------------------------------------
# Month arithmetic
# ------------------------------------------------------------------
def weekday_index(d: date) -> int:
    """Return the weekday with 0 = Sunday … 6 = Saturday."""
    return (d.weekday() + 1) % 7


def first_of_month(d: date) -> date:
    return date(d.year, d.month, 1)


def last_of_month(d: date) -> date:
    return date(d.year, d.month, calendar.monthrange(d.year, d.month)[1])


def prev_month(year: int, month: int) -> tuple[int, int]:
    """Return (year, month) for one month earlier."""
    if month == 1:
        return year - 1, 12
    return year, month - 1


def next_month(year: int, month: int) -> tuple[int, int]:
    """Return (year, month) for one month later."""
    if month == 12:
        return year + 1, 1
    return year, month + 1


# ------------------------------------------------------------------
# Date range
# ------------------------------------------------------------------
def compute_range(view_month: date, first_day_of_week: int) -> DateRange:
    """Return the whole-week range covering *view_month*.

    The start is the month's first day moved back to *first_day_of_week*;
    the end is the month's last day moved forward to the day before it.
    """
    first = first_of_month(view_month)
    last = last_of_month(view_month)
    last_day_of_week = (first_day_of_week + 6) % 7
    start = first - timedelta(days=(weekday_index(first) - first_day_of_week) % 7)
    end = last + timedelta(days=(last_day_of_week - weekday_index(last)) % 7)
    return DateRange(start, end)


def enumerate_days(date_range: DateRange) -> list[date]:
    """Return every day from start to end inclusive, ascending."""
    return [date_range.start + timedelta(days=i) for i in range(date_range.num_days)]


def chunk_weeks(days: list) -> list[list]:
    """Split a flat grid into rows of 7."""
    return [days[i:i + 7] for i in range(0, len(days), 7)]


# ------------------------------------------------------------------
# Day classification
# ------------------------------------------------------------------
def _as_date(value: date | datetime | None) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    return value


def same_day(a: date | datetime | None, b: date | datetime | None) -> bool:
    """Calendar-day equality, ignoring any time-of-day component."""
    a, b = _as_date(a), _as_date(b)
    if a is None or b is None:
        return False
    return (a.year, a.month, a.day) == (b.year, b.month, b.day)


def disabled_predicate(
    disabled: bool = False,
    min_date: date | None = None,
    max_date: date | None = None,
) -> Callable[[date], bool]:
    """Build the is-disabled test for a day. Bounds are inclusive."""
    lo, hi = _as_date(min_date), _as_date(max_date)

    def is_disabled(day: date) -> bool:
        if disabled:
            return True
        if lo is not None and day < lo:
            return True
        if hi is not None and day > hi:
            return True
        return False

    return is_disabled


def classify(
    day: date,
    view_month: date,
    selected_date: date | None,
    today: date,
    is_disabled: Callable[[date], bool] | None = None,
) -> DayDescriptor:
    return DayDescriptor(
        date=day,
        is_selected=same_day(day, selected_date),
        is_today=same_day(day, today),
        in_current_month=day.month == view_month.month,
        is_disabled=bool(is_disabled(day)) if is_disabled else False,
    )


def day_label(desc: DayDescriptor, profile: LocaleProfile) -> str:
    """Accessible label: day number, month name, year, then qualifiers."""
    d = desc.date
    label = f"{d.day} {profile.month_names[d.month - 1]} {d.year}"
    if desc.is_today:
        label += f", {profile.texts.today}"
    if desc.is_selected:
        label += f", {profile.texts.selected}"
    return label


# ------------------------------------------------------------------
# Header data
# ------------------------------------------------------------------
def weekday_headers(profile: LocaleProfile, style: str = "short") -> list[str]:
    """Day names rotated so the locale's first day of week comes first."""
    names = {
        "full": profile.day_names,
        "short": profile.day_names_short,
        "min": profile.day_names_min,
    }[style]
    first = profile.first_day_of_week
    return list(names[first:]) + list(names[:first])


def month_options(profile: LocaleProfile) -> list[tuple[int, str]]:
    """Return [(month_number, name), ...] for the month dropdown."""
    return [(i + 1, name) for i, name in enumerate(profile.month_names)]


def year_options(year: int) -> list[int]:
    """The 21 years centred on *year*."""
    return list(range(year - YEAR_SPAN, year + YEAR_SPAN + 1))


def build_view(
    view_month: date,
    selected_date: date | None,
    today: date,
    profile: LocaleProfile,
    is_disabled: Callable[[date], bool] | None = None,
) -> CalendarView:
    """Derive the grid for one snapshot of the picker state."""
    view_month = first_of_month(view_month)
    rng = compute_range(view_month, profile.first_day_of_week)
    days = [
        classify(d, view_month, selected_date, today, is_disabled)
        for d in enumerate_days(rng)
    ]
    tab_stop = next((desc.date for desc in days if desc.is_selected), None)
    return CalendarView(
        view_month=view_month,
        date_range=rng,
        days=days,
        weeks=chunk_weeks(days),
        weekday_headers=weekday_headers(profile),
        month_options=month_options(profile),
        year_options=year_options(view_month.year),
        title=f"{profile.month_names[view_month.month - 1]} {view_month.year}",
        tab_stop=tab_stop,
    )
