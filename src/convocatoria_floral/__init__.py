from .models import Assignment, Slot, ConvocatoriaSettings, DocumentPalette, ExportSettings, MONTH_NAMES
from .errors import ScheduleError, EmptyNameError, MonthFullError, SlotTakenError, InvalidSlotError, NotFoundError, StorageError, RenderError
from .sundays import sundays_for_year, sundays_in_month, CalendarProvider, GregorianCalendar, FixedCalendar
from .storage import KeyValueStore, MemoryStore, JsonFileStore
from .store import AssignmentStore, RemovalRequest
from .availability import available_sundays, first_available, month_summary, month_summaries, MonthSummary
from .views import filter_assignments, sort_by_sunday, parse_month, ALL_MONTHS
from .document import Document, MonthBlock, DocumentRow, build_document
from .exporter import ExportPipeline, ExportPlan, RenderTarget, PdfRenderConfig, ImageRenderConfig, export_filename, write_exports
from .resources import load_default_settings, default_settings_text
from .config import load_settings

__all__ = [
    "Assignment","Slot","ConvocatoriaSettings","DocumentPalette","ExportSettings","MONTH_NAMES",
    "ScheduleError","EmptyNameError","MonthFullError","SlotTakenError","InvalidSlotError","NotFoundError","StorageError","RenderError",
    "sundays_for_year","sundays_in_month","CalendarProvider","GregorianCalendar","FixedCalendar",
    "KeyValueStore","MemoryStore","JsonFileStore",
    "AssignmentStore","RemovalRequest",
    "available_sundays","first_available","month_summary","month_summaries","MonthSummary",
    "filter_assignments","sort_by_sunday","parse_month","ALL_MONTHS",
    "Document","MonthBlock","DocumentRow","build_document",
    "ExportPipeline","ExportPlan","RenderTarget","PdfRenderConfig","ImageRenderConfig","export_filename","write_exports",
    "load_default_settings","default_settings_text","load_settings",
]
