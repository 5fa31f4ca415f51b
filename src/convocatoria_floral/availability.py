from __future__ import annotations

from collections.abc import Collection, Iterable
from dataclasses import dataclass

from .models import Assignment
from .sundays import MONTHS, SundayTable, sundays_in_month


def assigned_sundays(records: Iterable[Assignment], month: int) -> set[int]:
    return {a.sunday for a in records if a.month == month}


def available_sundays(table: SundayTable, records: Iterable[Assignment], month: int) -> list[int]:
    """Sundays of ``month`` nobody has taken yet, ascending.

    Always computed from the records passed in; callers hand over the live
    store contents so availability never goes stale after an add or remove.
    """
    taken = assigned_sundays(records, month)
    return [day for day in sundays_in_month(table, month) if day not in taken]


def first_available(table: SundayTable, records: Iterable[Assignment], month: int, exclude: Collection[int] = ()) -> int | None:
    """Default Sunday to preselect for ``month``, or None when the month is full."""
    for day in available_sundays(table, records, month):
        if day not in exclude:
            return day
    return None


@dataclass(frozen=True, slots=True)
class MonthSummary:
    month: int
    assigned: tuple[Assignment, ...]
    missing: tuple[int, ...]

    @property
    def is_complete(self) -> bool:
        return not self.missing


def month_summary(table: SundayTable, records: Iterable[Assignment], month: int) -> MonthSummary:
    assigned = sorted((a for a in records if a.month == month), key=lambda a: a.sunday)
    taken = {a.sunday for a in assigned}
    missing = tuple(day for day in sundays_in_month(table, month) if day not in taken)
    return MonthSummary(month=month, assigned=tuple(assigned), missing=missing)


def month_summaries(table: SundayTable, records: Iterable[Assignment]) -> list[MonthSummary]:
    records = list(records)
    return [month_summary(table, records, month) for month in MONTHS]
