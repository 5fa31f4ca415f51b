"""Errors raised by the schedule core.

Validation errors carry a user-facing ``notice`` so the calling layer can show
them without knowing which check failed.
"""

from __future__ import annotations


class ScheduleError(Exception):
    """Base class for recoverable, user-facing schedule conditions."""

    notice = "Operación no válida"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.notice)


class EmptyNameError(ScheduleError):
    notice = "Ingresa el nombre de la familia"


class MonthFullError(ScheduleError):
    notice = "Este mes ya está lleno"

    def __init__(self, month: int) -> None:
        self.month = month
        super().__init__(f"{self.notice} (month {month})")


class SlotTakenError(ScheduleError):
    notice = "Esta fecha ya está registrada"

    def __init__(self, month: int, sunday: int) -> None:
        self.month = month
        self.sunday = sunday
        super().__init__(f"{self.notice} (month {month}, sunday {sunday})")


class InvalidSlotError(ScheduleError):
    notice = "Esa fecha no es un domingo válido"

    def __init__(self, month: int, sunday: int | None = None) -> None:
        self.month = month
        self.sunday = sunday
        where = f"month {month}" if sunday is None else f"month {month}, sunday {sunday}"
        super().__init__(f"{self.notice} ({where})")


class NotFoundError(ScheduleError):
    notice = "La familia no existe"

    def __init__(self, assignment_id: str) -> None:
        self.assignment_id = assignment_id
        super().__init__(f"{self.notice} (id {assignment_id})")


class StorageError(ScheduleError):
    notice = "No se pudieron leer los datos guardados"


class RenderError(RuntimeError):
    """An export precondition failed before the renderer could run."""
