from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from fpdf import FPDF
from PIL import Image

from .models import DocumentPalette
from .visualizer import BLOCK_WIDTH, COLUMN_GAP, CONTENT_WIDTH, ROW_GAP, draw_header, draw_month_block, load_fonts, resolve_palette

if TYPE_CHECKING:
    from .document import Document
    from .exporter import PdfRenderConfig

logger = logging.getLogger(__name__)

_WHITE = (255, 255, 255)


def _jpeg(image: Image.Image, quality: float) -> io.BytesIO:
    buf = io.BytesIO()
    image.save(buf, format="JPEG", quality=max(1, min(100, round(quality * 100))))
    buf.seek(0)
    return buf


def render_document_pdf(document: Document, out_path: Path, config: PdfRenderConfig, palette: DocumentPalette | None = None) -> Path:
    """
    Write the schedule as a paginated PDF.

    The header and each month block are rasterized at ``config.raster_scale``
    and embedded as JPEG. Blocks are laid out in the document's grid; a grid
    row that would cross the bottom margin starts a new page instead, so no
    month block is ever split.

    Args:
        document: Structural document to render
        out_path: File path to write the PDF
        config: Page format, orientation, margins (mm), raster scale and JPEG quality
        palette: Optional document colors (defaults to the stock palette)

    Returns:
        Path to the written PDF file.
    """
    scale = config.raster_scale
    colors = resolve_palette(palette)
    fonts = load_fonts(scale)
    top, right, bottom, left = config.page_margins

    pdf = FPDF(orientation=config.page_orientation, unit="mm", format=config.page_format)
    pdf.set_margins(left=left, top=top, right=right)
    pdf.set_auto_page_break(False)
    pdf.set_title(f"{document.title} {document.year}")
    pdf.set_creator("convocatoria-floral")
    pdf.add_page()

    mm_per_px = (pdf.w - left - right) / (CONTENT_WIDTH * scale)
    page_bottom = pdf.h - bottom
    gap = ROW_GAP * scale * mm_per_px

    header = draw_header(document, colors, fonts, scale, _WHITE)
    pdf.image(_jpeg(header, config.image_quality), x=left, y=top, w=header.width * mm_per_px, h=header.height * mm_per_px)
    y = top + header.height * mm_per_px + gap

    for grid_row in document.grid():
        images = [draw_month_block(block, document.column_headers, colors, fonts, scale, _WHITE) for block in grid_row]
        row_h = max(img.height for img in images) * mm_per_px
        keep_together = any(block.keep_together for block in grid_row)
        if keep_together and y + row_h > page_bottom and y > top:
            pdf.add_page()
            y = top
        for col, img in enumerate(images):
            x = left + col * (BLOCK_WIDTH + COLUMN_GAP) * scale * mm_per_px
            pdf.image(_jpeg(img, config.image_quality), x=x, y=y, w=img.width * mm_per_px, h=img.height * mm_per_px)
        y += row_h + gap

    out_path.parent.mkdir(parents=True, exist_ok=True)
    pdf.output(str(out_path))
    logger.debug("Wrote %d page(s) to %s", pdf.page_no(), out_path)
    return out_path
