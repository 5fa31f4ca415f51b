from __future__ import annotations

import calendar
from datetime import date, timedelta
from functools import lru_cache
from typing import Protocol

type SundayTable = dict[int, tuple[int, ...]]

MONTHS = range(12)

_SUNDAY = 6  # date.weekday(): Monday == 0


@lru_cache(maxsize=8)
def _sundays_for_year(year: int) -> tuple[tuple[int, ...], ...]:
    months: list[tuple[int, ...]] = []
    for month in MONTHS:
        first = date(year, month + 1, 1)
        last = first.replace(day=calendar.monthrange(year, month + 1)[1])
        days: list[int] = []
        current = first
        while current <= last:
            if current.weekday() == _SUNDAY:
                days.append(current.day)
            current += timedelta(days=1)
        months.append(tuple(days))
    return tuple(months)


def sundays_for_year(year: int) -> SundayTable:
    """Map each month (0-11) of ``year`` to its Sunday day-numbers, ascending.

    The scan is memoized per year; every call returns a fresh dict whose values
    are immutable tuples.
    """
    return dict(enumerate(_sundays_for_year(year)))


def sundays_in_month(table: SundayTable, month: int) -> tuple[int, ...]:
    if month not in MONTHS:
        return ()
    return table.get(month, ())


class CalendarProvider(Protocol):
    def sundays_by_month(self, year: int) -> SundayTable: ...


class GregorianCalendar:
    """Sundays computed from the proleptic Gregorian calendar."""

    def sundays_by_month(self, year: int) -> SundayTable:
        return sundays_for_year(year)


class FixedCalendar:
    """Canned Sunday table, independent of the year asked for."""

    def __init__(self, table: SundayTable) -> None:
        self._table = {month: tuple(sorted(table.get(month, ()))) for month in MONTHS}

    def sundays_by_month(self, year: int) -> SundayTable:
        return dict(self._table)
