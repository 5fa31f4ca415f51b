from __future__ import annotations

from typing import Literal, NamedTuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

type ColorValue = str  # CSS3 color name like "gold" or hex string like "#FFC107"
type PageFormat = Literal["a3", "a4", "a5", "letter", "legal"]
type PageOrientation = Literal["portrait", "landscape"]

MONTH_NAMES: tuple[str, ...] = (
    "ENERO",
    "FEBRERO",
    "MARZO",
    "ABRIL",
    "MAYO",
    "JUNIO",
    "JULIO",
    "AGOSTO",
    "SEPTIEMBRE",
    "OCTUBRE",
    "NOVIEMBRE",
    "DICIEMBRE",
)


class Slot(NamedTuple):
    month: int
    sunday: int


class Assignment(BaseModel):
    """A family booked on one Sunday of the schedule year."""

    model_config = ConfigDict(frozen=True)

    id: str
    # Non-blank names are enforced by AssignmentStore; older files may hold ""
    name: str
    month: int = Field(ge=0, le=11, description="Month index, January == 0")
    sunday: int = Field(ge=1, le=31, description="Day of month of the Sunday")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v: object) -> object:
        # Older data files stored millisecond timestamps as ids
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @property
    def slot(self) -> Slot:
        return Slot(self.month, self.sunday)


class DocumentPalette(BaseModel):
    """Colors of the exported document.

    Supports CSS3 color names (e.g. 'gold') or hex strings (e.g. '#FFC107').
    """

    month_header: ColorValue = Field(default="#FFC107", description="Band behind the month name")
    month_header_text: ColorValue | None = Field(default=None, description="Month name color; black or white by contrast with month_header when unset")
    table_header: ColorValue = Field(default="#F5F5F5", description="Background of the FAMILIA/DOMINGO row")
    border: ColorValue = Field(default="#333333")
    title: ColorValue = Field(default="#1E293B")
    assigned_text: ColorValue = Field(default="black")
    placeholder_text: ColorValue = Field(default="#666666")


class ExportSettings(BaseModel):
    filename_prefix: str = Field(default="convocatoria-floral", min_length=1)
    page_format: PageFormat = "a4"
    page_orientation: PageOrientation = "portrait"
    page_margins: tuple[float, float, float, float] = Field(default=(5.0, 5.0, 5.0, 5.0), description="top, right, bottom, left in mm")
    image_quality: float = Field(default=0.98, gt=0, le=1, description="JPEG quality of rasterized blocks in the PDF")
    raster_scale: int = Field(default=2, ge=1, le=4)
    background_color: ColorValue = Field(default="#ffffff")

    @field_validator("page_margins")
    @classmethod
    def _validate_margins(cls, v: tuple[float, float, float, float]) -> tuple[float, float, float, float]:
        if any(m < 0 for m in v):
            raise ValueError("page margins must not be negative")
        return v


class ConvocatoriaSettings(BaseModel):
    version: str = Field(default="1.0.0", description="Schema version for compatibility tracking")
    year: int = Field(default=2026, ge=1, le=9999)
    title: str = "CONVOCATORIA"
    epigraph: str = (
        "Cada uno dé como propuso en su corazón: no con tristeza, ni por necesidad, porque Dios ama al dador alegre."
    )
    attribution: str = "2 Corintios 9:7"
    placeholder: str = Field(default="Disponible", description="Label shown for a Sunday nobody has taken")
    month_names: tuple[str, ...] = MONTH_NAMES
    column_headers: tuple[str, str] = ("FAMILIA", "DOMINGO")
    storage_key: str = Field(default="families", min_length=1)
    palette: DocumentPalette = Field(default_factory=DocumentPalette)
    export: ExportSettings = Field(default_factory=ExportSettings)

    @field_validator("month_names")
    @classmethod
    def _validate_month_names(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        if len(v) != 12:
            raise ValueError(f"month_names needs exactly 12 entries (got {len(v)})")
        return v

    def month_name(self, month: int) -> str:
        return self.month_names[month]
