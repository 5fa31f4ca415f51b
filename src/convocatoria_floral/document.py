"""Structural model of the printable schedule.

The model carries text and layout intent only; the PDF and PNG renderers
decide how it looks on a page.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from .models import Assignment, ConvocatoriaSettings
from .sundays import MONTHS, SundayTable, sundays_in_month


@dataclass(frozen=True, slots=True)
class DocumentRow:
    sunday: int
    name: str | None
    placeholder: str

    @property
    def is_assigned(self) -> bool:
        return self.name is not None

    @property
    def text(self) -> str:
        return self.name if self.name is not None else self.placeholder


@dataclass(frozen=True, slots=True)
class MonthBlock:
    month: int
    label: str
    rows: tuple[DocumentRow, ...]
    # The block must never be split across pages
    keep_together: bool = True

    @property
    def assigned_count(self) -> int:
        return sum(1 for row in self.rows if row.is_assigned)


@dataclass(frozen=True, slots=True)
class Document:
    year: int
    title: str
    epigraph: str
    attribution: str
    column_headers: tuple[str, str]
    blocks: tuple[MonthBlock, ...]
    columns: int = field(default=2)

    def grid(self) -> Iterator[tuple[MonthBlock, ...]]:
        """Yield the blocks row by row, ``columns`` blocks per row."""
        for start in range(0, len(self.blocks), self.columns):
            yield self.blocks[start : start + self.columns]


def build_month_block(table: SundayTable, records: Iterable[Assignment], month: int, settings: ConvocatoriaSettings) -> MonthBlock:
    by_sunday: dict[int, str] = {}
    for a in records:
        if a.month != month:
            continue
        if a.sunday in by_sunday:
            raise ValueError(f"Two assignments on month {month}, sunday {a.sunday}")
        by_sunday[a.sunday] = a.name
    rows = tuple(
        DocumentRow(sunday=day, name=by_sunday.get(day), placeholder=settings.placeholder) for day in sorted(sundays_in_month(table, month))
    )
    return MonthBlock(month=month, label=settings.month_name(month), rows=rows)


def build_document(table: SundayTable, records: Iterable[Assignment], settings: ConvocatoriaSettings) -> Document:
    records = list(records)
    blocks = tuple(build_month_block(table, records, month, settings) for month in MONTHS)
    return Document(
        year=settings.year,
        title=settings.title,
        epigraph=settings.epigraph,
        attribution=settings.attribution,
        column_headers=settings.column_headers,
        blocks=blocks,
    )
