from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from PIL import Image, ImageDraw, ImageFont

from .colors import RGB, resolve_color, text_color_for
from .errors import RenderError
from .models import DocumentPalette

if TYPE_CHECKING:
    from .document import Document, MonthBlock
    from .exporter import ImageRenderConfig, RenderTarget

type Font = ImageFont.ImageFont | ImageFont.FreeTypeFont
type Palette = dict[str, RGB]

# Layout in unscaled pixels; every renderer multiplies by its raster scale
CONTENT_WIDTH = 760
COLUMN_GAP = 16
ROW_GAP = 14
BLOCK_WIDTH = (CONTENT_WIDTH - COLUMN_GAP) // 2
PAGE_PADDING = 20
MONTH_BAND_HEIGHT = 30
TABLE_HEAD_HEIGHT = 24
ROW_HEIGHT = 24
NAME_COLUMN_SHARE = 0.75
CELL_PADDING = 8
HEADER_PADDING = 16

_REGULAR_FONTS = (
    "DejaVuSans.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/System/Library/Fonts/Supplemental/Arial.ttf",
    "/Library/Fonts/Arial.ttf",
    "Arial.ttf",
)
_BOLD_FONTS = (
    "DejaVuSans-Bold.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/System/Library/Fonts/Supplemental/Arial Bold.ttf",
    "/Library/Fonts/Arial Bold.ttf",
    "Arial-Bold.ttf",
)
_ITALIC_FONTS = (
    "DejaVuSans-Oblique.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Oblique.ttf",
    "/System/Library/Fonts/Supplemental/Arial Italic.ttf",
    "/Library/Fonts/Arial Italic.ttf",
    "Arial-Italic.ttf",
)


def _load_font(candidates: tuple[str, ...], size: int) -> Font:
    for font_path in candidates:
        try:
            return ImageFont.truetype(font_path, size)
        except OSError:
            continue
    return ImageFont.load_default(size)


@dataclass(slots=True)
class Fonts:
    title: Font
    epigraph: Font
    attribution: Font
    month: Font
    table_head: Font
    cell: Font
    placeholder: Font


def load_fonts(scale: int) -> Fonts:
    return Fonts(
        title=_load_font(_BOLD_FONTS, 30 * scale),
        epigraph=_load_font(_ITALIC_FONTS, 13 * scale),
        attribution=_load_font(_BOLD_FONTS, 13 * scale),
        month=_load_font(_BOLD_FONTS, 15 * scale),
        table_head=_load_font(_BOLD_FONTS, 11 * scale),
        cell=_load_font(_REGULAR_FONTS, 12 * scale),
        placeholder=_load_font(_ITALIC_FONTS, 12 * scale),
    )


def resolve_palette(palette: DocumentPalette | None = None) -> Palette:
    values = (palette or DocumentPalette()).model_dump()
    resolved = {key: resolve_color(value) for key, value in values.items() if value is not None}
    resolved.setdefault("month_header_text", text_color_for(resolved["month_header"]))
    return resolved


def _font_bbox(font: Font, text: str) -> tuple[int, int, int, int]:
    bbox = font.getbbox(text)
    return (int(bbox[0]), int(bbox[1]), int(bbox[2]), int(bbox[3]))


def _text_width(font: Font, text: str) -> int:
    return int(font.getlength(text))


def _line_height(font: Font) -> int:
    bbox = _font_bbox(font, "Hgé")
    return bbox[3] - bbox[1]


def _draw_text_center(draw: ImageDraw.ImageDraw, text: str, x: int, y: int, font: Font, fill: RGB) -> None:
    bbox = _font_bbox(font, text)
    draw.text((x - (bbox[2] - bbox[0]) // 2 - bbox[0], y - (bbox[3] - bbox[1]) // 2 - bbox[1]), text, fill=fill, font=font)


def _draw_text_left(draw: ImageDraw.ImageDraw, text: str, x: int, y: int, font: Font, fill: RGB) -> None:
    bbox = _font_bbox(font, text)
    draw.text((x - bbox[0], y - (bbox[3] - bbox[1]) // 2 - bbox[1]), text, fill=fill, font=font)


def _fit(text: str, font: Font, width: int) -> str:
    """Shorten ``text`` with an ellipsis until it fits in ``width`` pixels."""
    if _text_width(font, text) <= width:
        return text
    while text and _text_width(font, text + "...") > width:
        text = text[:-1]
    return text.rstrip() + "..."


def wrap_text(text: str, font: Font, width: int) -> list[str]:
    lines: list[str] = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}".strip()
        if current and _text_width(font, candidate) > width:
            lines.append(current)
            current = word
        else:
            current = candidate
    if current:
        lines.append(current)
    return lines


def block_height(block: MonthBlock) -> int:
    return MONTH_BAND_HEIGHT + TABLE_HEAD_HEIGHT + len(block.rows) * ROW_HEIGHT


def draw_header(document: Document, palette: Palette, fonts: Fonts, scale: int, background: RGB) -> Image.Image:
    """Title, epigraph and attribution, centered across the content width."""
    width = CONTENT_WIDTH * scale
    wrap_width = (CONTENT_WIDTH - 2 * HEADER_PADDING * 4) * scale
    epigraph_lines = wrap_text(document.epigraph, fonts.epigraph, wrap_width)
    title_h = _line_height(fonts.title)
    line_h = int(_line_height(fonts.epigraph) * 1.5)
    pad = HEADER_PADDING * scale

    height = pad + title_h + pad + line_h * len(epigraph_lines) + (line_h if document.attribution else 0) + pad
    image = Image.new("RGB", (width, height), background)
    draw = ImageDraw.Draw(image)

    y = pad + title_h // 2
    _draw_text_center(draw, document.title, width // 2, y, fonts.title, palette["title"])
    y += title_h // 2 + pad + line_h // 2
    for line in epigraph_lines:
        _draw_text_center(draw, line, width // 2, y, fonts.epigraph, palette["title"])
        y += line_h
    if document.attribution:
        _draw_text_center(draw, document.attribution, width // 2, y, fonts.attribution, palette["title"])
    return image


def draw_month_block(
    block: MonthBlock,
    column_headers: tuple[str, str],
    palette: Palette,
    fonts: Fonts,
    scale: int,
    background: RGB,
) -> Image.Image:
    """One month: a colored band with its name, then FAMILIA / DOMINGO rows."""
    width = BLOCK_WIDTH * scale
    height = block_height(block) * scale
    line = max(1, scale)
    name_w = int(width * NAME_COLUMN_SHARE)
    pad = CELL_PADDING * scale

    image = Image.new("RGB", (width, height), background)
    draw = ImageDraw.Draw(image)

    band_h = MONTH_BAND_HEIGHT * scale
    draw.rectangle((0, 0, width - 1, band_h - 1), fill=palette["month_header"], outline=palette["border"], width=line)
    _draw_text_center(draw, block.label, width // 2, band_h // 2, fonts.month, palette["month_header_text"])

    head_top = band_h
    head_h = TABLE_HEAD_HEIGHT * scale
    draw.rectangle((0, head_top, width - 1, head_top + head_h - 1), fill=palette["table_header"], outline=palette["border"], width=line)
    draw.line((name_w, head_top, name_w, head_top + head_h - 1), fill=palette["border"], width=line)
    header_text = palette["assigned_text"]
    _draw_text_center(draw, column_headers[0], name_w // 2, head_top + head_h // 2, fonts.table_head, header_text)
    _draw_text_center(draw, column_headers[1], name_w + (width - name_w) // 2, head_top + head_h // 2, fonts.table_head, header_text)

    row_h = ROW_HEIGHT * scale
    for i, row in enumerate(block.rows):
        top = head_top + head_h + i * row_h
        draw.rectangle((0, top, width - 1, top + row_h - 1), outline=palette["border"], width=line)
        draw.line((name_w, top, name_w, top + row_h - 1), fill=palette["border"], width=line)
        if row.is_assigned:
            font, fill = fonts.cell, palette["assigned_text"]
        else:
            font, fill = fonts.placeholder, palette["placeholder_text"]
        _draw_text_left(draw, _fit(row.text, font, name_w - 2 * pad), pad, top + row_h // 2, font, fill)
        _draw_text_center(draw, str(row.sunday), name_w + (width - name_w) // 2, top + row_h // 2, fonts.cell, palette["assigned_text"])
    return image


def compose_document(document: Document, palette: Palette, scale: int, background: RGB) -> Image.Image:
    """The whole schedule on a single canvas: header, then the block grid."""
    fonts = load_fonts(scale)
    header = draw_header(document, palette, fonts, scale, background)
    rows = [
        [draw_month_block(block, document.column_headers, palette, fonts, scale, background) for block in grid_row]
        for grid_row in document.grid()
    ]

    pad = PAGE_PADDING * scale
    gap = ROW_GAP * scale
    grid_h = sum(max(img.height for img in row) for row in rows) + gap * max(0, len(rows) - 1)
    width = CONTENT_WIDTH * scale + 2 * pad
    height = pad + header.height + gap + grid_h + pad

    canvas = Image.new("RGB", (width, height), background)
    canvas.paste(header, (pad, pad))
    y = pad + header.height + gap
    for row in rows:
        for col, img in enumerate(row):
            canvas.paste(img, (pad + col * (BLOCK_WIDTH + COLUMN_GAP) * scale, y))
        y += max(img.height for img in row) + gap
    return canvas


def render_target_image(target: RenderTarget, out_path: Path, config: ImageRenderConfig) -> Path:
    """
    Rasterize a render target into a PNG.

    The target has to be revealed first (see ``RenderTarget.revealed``);
    capturing a hidden target is refused rather than producing a blank image.

    Args:
        target: Document plus palette to draw
        out_path: File path to write the PNG image
        config: Raster scale and background color

    Returns:
        Path to the written PNG file.
    """
    if not target.visible:
        raise RenderError("Render target is hidden; reveal it before capturing an image.")

    background = resolve_color(config.background_color)
    image = compose_document(target.document, resolve_palette(target.palette), config.raster_scale, background)

    out_path.parent.mkdir(parents=True, exist_ok=True)
    image.save(out_path, format="PNG")
    return out_path
