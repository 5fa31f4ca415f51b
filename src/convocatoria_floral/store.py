from __future__ import annotations

import json
import logging
import uuid
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Literal

from pydantic import ValidationError

from .availability import available_sundays
from .errors import EmptyNameError, InvalidSlotError, MonthFullError, NotFoundError, SlotTakenError, StorageError
from .models import Assignment
from .storage import KeyValueStore
from .sundays import MONTHS, SundayTable, sundays_in_month

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "families"


def new_id() -> str:
    return uuid.uuid4().hex


class AssignmentStore:
    """Owns every assignment of the schedule year.

    Mutations go through ``add``, ``update`` and ``remove`` only; each one
    validates first and, on success, overwrites the storage key with a full
    snapshot. A rejected call leaves both memory and storage untouched.
    """

    def __init__(
        self,
        storage: KeyValueStore,
        table: SundayTable,
        *,
        key: str = DEFAULT_STORAGE_KEY,
        id_factory: Callable[[], str] = new_id,
    ) -> None:
        self._storage = storage
        self._table = {month: tuple(table.get(month, ())) for month in MONTHS}
        self._key = key
        self._id_factory = id_factory
        self._records: list[Assignment] = []
        self.reload()

    # ---------- reads ----------

    @property
    def table(self) -> SundayTable:
        return dict(self._table)

    def records(self) -> tuple[Assignment, ...]:
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Assignment]:
        return iter(tuple(self._records))

    def __contains__(self, assignment_id: object) -> bool:
        return any(a.id == assignment_id for a in self._records)

    def get(self, assignment_id: str) -> Assignment:
        for record in self._records:
            if record.id == assignment_id:
                return record
        raise NotFoundError(assignment_id)

    def is_taken(self, month: int, sunday: int) -> bool:
        return any(a.month == month and a.sunday == sunday for a in self._records)

    def available_sundays(self, month: int) -> list[int]:
        return available_sundays(self._table, self._records, month)

    def snapshot(self) -> list[dict[str, object]]:
        return [a.model_dump(mode="json") for a in self._records]

    # ---------- mutations ----------

    def add(self, name: str, month: int, sunday: int) -> Assignment:
        clean = name.strip()
        if not clean:
            raise EmptyNameError()
        if month not in MONTHS:
            raise InvalidSlotError(month)
        # Fullness is reported before the exact-slot collision
        if not self.available_sundays(month):
            raise MonthFullError(month)
        if self.is_taken(month, sunday):
            raise SlotTakenError(month, sunday)
        if sunday not in sundays_in_month(self._table, month):
            raise InvalidSlotError(month, sunday)

        record = Assignment(id=self._unique_id(), name=clean, month=month, sunday=sunday)
        self._commit([*self._records, record])
        logger.info("Assigned %r to month %d, sunday %d (id %s)", record.name, month, sunday, record.id)
        return record

    def update(self, assignment_id: str, name: str) -> Assignment:
        current = self.get(assignment_id)
        clean = name.strip()
        if not clean:
            raise EmptyNameError()
        updated = current.model_copy(update={"name": clean})
        self._commit([updated if a.id == assignment_id else a for a in self._records])
        logger.info("Renamed %s from %r to %r", assignment_id, current.name, clean)
        return updated

    def remove(self, assignment_id: str) -> Assignment:
        current = self.get(assignment_id)
        self._commit([a for a in self._records if a.id != assignment_id])
        logger.info("Removed %r from month %d, sunday %d", current.name, current.month, current.sunday)
        return current

    def request_removal(self, assignment_id: str) -> RemovalRequest:
        """Stage a removal; nothing changes until the request is confirmed."""
        return RemovalRequest(self, self.get(assignment_id))

    # ---------- persistence ----------

    def reload(self) -> None:
        raw = self._storage.get(self._key)
        if raw is None:
            self._records = []
            return
        try:
            items = json.loads(raw)
            if not isinstance(items, list):
                raise StorageError(f"Stored value under {self._key!r} must be a JSON array")
            records = [Assignment.model_validate(item) for item in items]
        except (json.JSONDecodeError, ValidationError) as exc:
            raise StorageError(f"Stored value under {self._key!r} is not valid: {exc}") from exc

        seen_slots: set[tuple[int, int]] = set()
        for record in records:
            if record.sunday not in sundays_in_month(self._table, record.month):
                raise StorageError(f"Stored assignment {record.id} is on day {record.sunday} of month {record.month}, which is not a Sunday of this year")
            if record.slot in seen_slots:
                raise StorageError(f"Stored assignments share month {record.month}, sunday {record.sunday}")
            seen_slots.add(record.slot)

        repaired = self._reassign_duplicate_ids(records)
        if repaired:
            self._commit(records)
        else:
            self._records = records
        logger.debug("Loaded %d assignments from key %r", len(records), self._key)

    def _reassign_duplicate_ids(self, records: list[Assignment]) -> bool:
        # The first record keeps a repeated id; later ones get a fresh one
        taken = {a.id for a in records}
        seen: set[str] = set()
        repaired = False
        for index, record in enumerate(records):
            if record.id not in seen:
                seen.add(record.id)
                continue
            candidate = self._id_factory()
            while candidate in taken:
                candidate = self._id_factory()
            taken.add(candidate)
            seen.add(candidate)
            records[index] = record.model_copy(update={"id": candidate})
            logger.warning("Assignment %r on month %d, sunday %d shared id %s; reassigned %s", record.name, record.month, record.sunday, record.id, candidate)
            repaired = True
        return repaired

    def _commit(self, records: list[Assignment]) -> None:
        payload = json.dumps([a.model_dump(mode="json") for a in records], ensure_ascii=False)
        self._storage.set(self._key, payload)
        self._records = records

    def _unique_id(self) -> str:
        taken = {a.id for a in self._records}
        candidate = self._id_factory()
        while candidate in taken:
            candidate = self._id_factory()
        return candidate


@dataclass(slots=True)
class RemovalRequest:
    """A staged delete awaiting an explicit ``confirm`` or ``cancel``."""

    store: AssignmentStore
    assignment: Assignment
    state: Literal["pending", "confirmed", "cancelled"] = field(default="pending")

    def confirm(self) -> Assignment:
        if self.state != "pending":
            raise RuntimeError(f"Removal request already {self.state}")
        removed = self.store.remove(self.assignment.id)
        self.state = "confirmed"
        return removed

    def cancel(self) -> None:
        if self.state == "pending":
            self.state = "cancelled"
