"""Resolution of report period filters.

Targets are stored per ``(month, year)`` while transactions carry a calendar
date, so every report needs both a continuous transaction window and the list
of discrete periods that window overlaps. All report entry points go through
``resolve_period`` and differ only in the default window they ask for.
"""
from __future__ import annotations

import calendar
import enum
from dataclasses import dataclass, field
from datetime import MAXYEAR, MINYEAR, date
from typing import NamedTuple


MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


class DefaultWindow(str, enum.Enum):
    year = "year"
    month = "month"


class Period(NamedTuple):
    month: int
    year: int


@dataclass(frozen=True)
class PeriodFilter:
    start_month: int | None = None
    start_year: int | None = None
    end_month: int | None = None
    end_year: int | None = None
    month: int | None = None
    year: int | None = None

    @property
    def has_range(self) -> bool:
        return None not in (self.start_month, self.start_year, self.end_month, self.end_year)

    @property
    def has_single(self) -> bool:
        return self.month is not None and self.year is not None

    def is_empty(self) -> bool:
        return not self.has_range and not self.has_single

    @property
    def label(self) -> str:
        if self.has_range:
            return f"{self.start_month}/{self.start_year} to {self.end_month}/{self.end_year}"
        if self.has_single:
            return f"{self.month}/{self.year}"
        return ""


@dataclass(frozen=True)
class ResolvedPeriod:
    transaction_start: date
    transaction_end: date
    periods: list[Period] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.periods or self.transaction_start > self.transaction_end


EMPTY_PERIOD = ResolvedPeriod(transaction_start=date.max, transaction_end=date.min, periods=[])


def period_index(period: Period) -> int:
    """Months since year 0; consecutive months differ by exactly one."""
    month, year = period
    return year * 12 + month


def month_name(month: int) -> str:
    return MONTH_NAMES[month - 1]


def _valid(month: int, year: int) -> bool:
    return 1 <= month <= 12 and MINYEAR <= year <= MAXYEAR


def first_day(month: int, year: int) -> date:
    return date(year, month, 1)


def last_day(month: int, year: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


def enumerate_periods(start_month: int, start_year: int, end_month: int, end_year: int) -> list[Period]:
    periods: list[Period] = []
    for year in range(start_year, end_year + 1):
        first = start_month if year == start_year else 1
        last = end_month if year == end_year else 12
        for month in range(first, last + 1):
            periods.append(Period(month, year))
    return periods


def _window(start_month: int, start_year: int, end_month: int, end_year: int) -> ResolvedPeriod:
    if not (_valid(start_month, start_year) and _valid(end_month, end_year)):
        return EMPTY_PERIOD
    return ResolvedPeriod(
        transaction_start=first_day(start_month, start_year),
        transaction_end=last_day(end_month, end_year),
        periods=enumerate_periods(start_month, start_year, end_month, end_year),
    )


def resolve_period(
    filters: PeriodFilter,
    default: DefaultWindow = DefaultWindow.year,
    *,
    today: date | None = None,
) -> ResolvedPeriod:
    # An inverted range is not rejected: it yields an inverted window with no
    # periods, so reports come back empty.
    if filters.has_range:
        return _window(filters.start_month, filters.start_year, filters.end_month, filters.end_year)
    if filters.has_single:
        return _window(filters.month, filters.year, filters.month, filters.year)

    current = today or date.today()
    if default == DefaultWindow.month:
        return _window(current.month, current.year, current.month, current.year)
    return _window(1, current.year, 12, current.year)
