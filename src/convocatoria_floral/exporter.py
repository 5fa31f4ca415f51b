from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import Literal

from .document import Document, build_document
from .models import ConvocatoriaSettings, DocumentPalette, PageFormat, PageOrientation
from .store import AssignmentStore

logger = logging.getLogger(__name__)

type ExportFormat = Literal["pdf", "png"]


def export_filename(prefix: str, year: int, suffix: str) -> str:
    return f"{prefix}-{year}.{suffix.lstrip('.')}"


@dataclass(frozen=True, slots=True)
class PdfRenderConfig:
    output_filename: str
    page_margins: tuple[float, float, float, float] = (5.0, 5.0, 5.0, 5.0)
    image_quality: float = 0.98
    raster_scale: int = 2
    page_format: PageFormat = "a4"
    page_orientation: PageOrientation = "portrait"


@dataclass(frozen=True, slots=True)
class ImageRenderConfig:
    raster_scale: int = 2
    background_color: str = "#ffffff"


@dataclass(slots=True)
class RenderTarget:
    """The off-screen view an image renderer captures.

    It stays hidden while the schedule is being edited; ``revealed`` makes it
    capturable for the duration of a ``with`` block.
    """

    document: Document
    palette: DocumentPalette = field(default_factory=DocumentPalette)
    visible: bool = False
    position: tuple[int, int] | None = None

    @contextmanager
    def revealed(self, offscreen: tuple[int, int] = (-9999, 0)) -> Iterator[RenderTarget]:
        previous = (self.visible, self.position)
        self.visible = True
        self.position = offscreen
        try:
            yield self
        finally:
            self.visible, self.position = previous


type PdfRenderer = Callable[[Document, Path, PdfRenderConfig], Path]
type ImageRenderer = Callable[[RenderTarget, Path, ImageRenderConfig], Path]


def _default_pdf_renderer(document: Document, out_path: Path, config: PdfRenderConfig, palette: DocumentPalette | None = None) -> Path:
    from .pdf import render_document_pdf

    return render_document_pdf(document, out_path, config, palette=palette)


def _default_image_renderer(target: RenderTarget, out_path: Path, config: ImageRenderConfig) -> Path:
    from .visualizer import render_target_image

    return render_target_image(target, out_path, config)


class ExportPipeline:
    """Hands a built document to the PDF and image renderers.

    Renderer failures are not caught here; they reach the caller as raised.
    """

    def __init__(
        self,
        settings: ConvocatoriaSettings,
        pdf_renderer: PdfRenderer | None = None,
        image_renderer: ImageRenderer | None = None,
    ) -> None:
        self.settings = settings
        self._pdf_renderer = pdf_renderer or partial(_default_pdf_renderer, palette=settings.palette)
        self._image_renderer = image_renderer or _default_image_renderer

    def filename(self, suffix: str) -> str:
        return export_filename(self.settings.export.filename_prefix, self.settings.year, suffix)

    def pdf_config(self) -> PdfRenderConfig:
        opts = self.settings.export
        return PdfRenderConfig(
            output_filename=self.filename("pdf"),
            page_margins=opts.page_margins,
            image_quality=opts.image_quality,
            raster_scale=opts.raster_scale,
            page_format=opts.page_format,
            page_orientation=opts.page_orientation,
        )

    def image_config(self) -> ImageRenderConfig:
        opts = self.settings.export
        return ImageRenderConfig(raster_scale=opts.raster_scale, background_color=opts.background_color)

    def export_pdf(self, document: Document, outdir: Path) -> Path:
        config = self.pdf_config()
        out_path = Path(outdir) / config.output_filename
        logger.info("Exporting PDF to %s", out_path)
        return self._pdf_renderer(document, out_path, config)

    def export_image(self, target: RenderTarget, outdir: Path) -> Path:
        out_path = Path(outdir) / self.filename("png")
        logger.info("Exporting image to %s", out_path)
        with target.revealed():
            return self._image_renderer(target, out_path, self.image_config())


@dataclass(slots=True)
class ExportPlan:
    outdir: Path
    formats: tuple[ExportFormat, ...] = ("pdf", "png")


def write_exports(plan: ExportPlan, store: AssignmentStore, settings: ConvocatoriaSettings, pipeline: ExportPipeline | None = None) -> dict[str, Path]:
    unknown = set(plan.formats) - {"pdf", "png"}
    if unknown:
        raise ValueError(f"Unknown export format(s): {', '.join(sorted(unknown))}. Use pdf or png.")

    pipeline = pipeline or ExportPipeline(settings)
    document = build_document(store.table, store.records(), settings)
    paths: dict[str, Path] = {}

    if "pdf" in plan.formats:
        paths["pdf"] = pipeline.export_pdf(document, plan.outdir)

    if "png" in plan.formats:
        target = RenderTarget(document, palette=settings.palette)
        paths["png"] = pipeline.export_image(target, plan.outdir)

    return paths
