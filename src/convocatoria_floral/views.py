from __future__ import annotations

from collections.abc import Iterable
from typing import Literal

from .models import Assignment, MONTH_NAMES

ALL_MONTHS: Literal["all"] = "all"

type MonthFilter = int | str | None


def parse_month(value: int | str) -> int:
    """Turn '3', 3 or 'abril' into a month index 0-11."""
    if isinstance(value, int):
        month = value
    else:
        text = value.strip()
        if text.lstrip("-").isdigit():
            month = int(text)
        elif text.upper() in MONTH_NAMES:
            month = MONTH_NAMES.index(text.upper())
        else:
            raise ValueError(f"Unknown month '{value}'. Use 0-11 or a month name like 'enero'.")
    if not 0 <= month <= 11:
        raise ValueError(f"Month must be between 0 and 11 (got {month})")
    return month


def _month_key(month: MonthFilter) -> int | None:
    if month is None:
        return None
    if isinstance(month, str) and month.strip().lower() == ALL_MONTHS:
        return None
    return parse_month(month)


def sort_by_slot(records: Iterable[Assignment]) -> list[Assignment]:
    return sorted(records, key=lambda a: (a.month, a.sunday))


def sort_by_sunday(records: Iterable[Assignment]) -> list[Assignment]:
    return sorted(records, key=lambda a: a.sunday)


def filter_assignments(records: Iterable[Assignment], search: str = "", month: MonthFilter = ALL_MONTHS) -> list[Assignment]:
    """Records whose name contains ``search`` (any case) and that fall in ``month``.

    ``month`` may be an index, its string form, a month name, or "all"/None to
    keep every month. The result is ordered by (month, sunday).
    """
    needle = search.lower()
    wanted = _month_key(month)
    hits = [a for a in records if needle in a.name.lower() and (wanted is None or a.month == wanted)]
    return sort_by_slot(hits)
