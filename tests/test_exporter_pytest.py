from pathlib import Path

import pytest

from convocatoria_floral.document import build_document
from convocatoria_floral.exporter import (
    ExportPipeline,
    ExportPlan,
    ImageRenderConfig,
    PdfRenderConfig,
    RenderTarget,
    export_filename,
    write_exports,
)
from convocatoria_floral.models import ConvocatoriaSettings
from convocatoria_floral.resources import load_default_settings
from convocatoria_floral.storage import MemoryStore
from convocatoria_floral.store import AssignmentStore
from convocatoria_floral.sundays import sundays_for_year

SETTINGS = load_default_settings()
TABLE = sundays_for_year(2026)
DOCUMENT = build_document(TABLE, [], SETTINGS)


class FakeRenderers:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.pdf_calls: list[tuple] = []
        self.image_calls: list[tuple] = []

    def pdf(self, document, out_path: Path, config: PdfRenderConfig) -> Path:
        self.pdf_calls.append((document, out_path, config))
        if self.fail:
            raise RuntimeError("pdf engine crashed")
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_bytes(b"%PDF-1.4\n")
        return out_path

    def image(self, target: RenderTarget, out_path: Path, config: ImageRenderConfig) -> Path:
        self.image_calls.append((target.visible, target.position, out_path, config))
        if self.fail:
            raise RuntimeError("canvas engine crashed")
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_bytes(b"\x89PNG\r\n\x1a\n")
        return out_path


def _pipeline(renderers: FakeRenderers, settings: ConvocatoriaSettings = SETTINGS) -> ExportPipeline:
    return ExportPipeline(settings, pdf_renderer=renderers.pdf, image_renderer=renderers.image)


@pytest.mark.parametrize(
    "suffix,expected",
    [
        ("pdf", "convocatoria-floral-2026.pdf"),
        (".png", "convocatoria-floral-2026.png"),
    ],
)
def test_export_filename(suffix: str, expected: str):
    assert export_filename("convocatoria-floral", 2026, suffix) == expected


def test_pdf_config_defaults():
    config = ExportPipeline(SETTINGS).pdf_config()
    assert config.output_filename == "convocatoria-floral-2026.pdf"
    assert config.page_margins == (5.0, 5.0, 5.0, 5.0)
    assert config.image_quality == 0.98
    assert config.raster_scale == 2
    assert config.page_format == "a4"
    assert config.page_orientation == "portrait"


def test_image_config_defaults():
    config = ExportPipeline(SETTINGS).image_config()
    assert config.raster_scale == 2
    assert config.background_color == "#ffffff"


def test_filename_follows_year():
    settings = SETTINGS.model_copy(update={"year": 2027})
    assert ExportPipeline(settings).filename("png") == "convocatoria-floral-2027.png"


def test_export_pdf_invokes_renderer(tmp_path: Path):
    fakes = FakeRenderers()
    path = _pipeline(fakes).export_pdf(DOCUMENT, tmp_path)
    assert path == tmp_path / "convocatoria-floral-2026.pdf"
    assert path.exists()
    document, out_path, config = fakes.pdf_calls[0]
    assert document is DOCUMENT
    assert out_path == path
    assert config.output_filename == path.name


def test_export_pdf_failure_propagates(tmp_path: Path):
    with pytest.raises(RuntimeError, match="pdf engine crashed"):
        _pipeline(FakeRenderers(fail=True)).export_pdf(DOCUMENT, tmp_path)


def test_export_image_reveals_target_during_capture(tmp_path: Path):
    fakes = FakeRenderers()
    target = RenderTarget(DOCUMENT)
    path = _pipeline(fakes).export_image(target, tmp_path)
    assert path == tmp_path / "convocatoria-floral-2026.png"
    visible, position, _, config = fakes.image_calls[0]
    assert visible is True
    assert position == (-9999, 0)
    assert config.raster_scale == 2
    assert target.visible is False
    assert target.position is None


def test_export_image_restores_target_on_failure(tmp_path: Path):
    fakes = FakeRenderers(fail=True)
    target = RenderTarget(DOCUMENT)
    with pytest.raises(RuntimeError, match="canvas engine crashed"):
        _pipeline(fakes).export_image(target, tmp_path)
    assert fakes.image_calls[0][0] is True
    assert target.visible is False
    assert target.position is None


def test_revealed_restores_previous_state():
    target = RenderTarget(DOCUMENT, visible=True, position=(10, 20))
    with target.revealed():
        assert target.position == (-9999, 0)
    assert target.visible is True
    assert target.position == (10, 20)


def test_revealed_restores_on_exception():
    target = RenderTarget(DOCUMENT)
    with pytest.raises(KeyError):
        with target.revealed():
            raise KeyError("boom")
    assert target.visible is False


def test_write_exports(tmp_path: Path):
    fakes = FakeRenderers()
    store = AssignmentStore(MemoryStore(), TABLE)
    store.add("Smith", 0, 4)
    paths = write_exports(ExportPlan(outdir=tmp_path), store, SETTINGS, pipeline=_pipeline(fakes))
    assert set(paths) == {"pdf", "png"}
    assert paths["pdf"].name == "convocatoria-floral-2026.pdf"
    assert paths["png"].name == "convocatoria-floral-2026.png"
    document = fakes.pdf_calls[0][0]
    assert document.blocks[0].rows[0].text == "Smith"


@pytest.mark.parametrize("formats,expected", [(("pdf",), {"pdf"}), (("png",), {"png"})])
def test_write_exports_single_format(tmp_path: Path, formats, expected):
    fakes = FakeRenderers()
    store = AssignmentStore(MemoryStore(), TABLE)
    paths = write_exports(ExportPlan(outdir=tmp_path, formats=formats), store, SETTINGS, pipeline=_pipeline(fakes))
    assert set(paths) == expected


def test_write_exports_unknown_format(tmp_path: Path):
    store = AssignmentStore(MemoryStore(), TABLE)
    with pytest.raises(ValueError, match="csv"):
        write_exports(ExportPlan(outdir=tmp_path, formats=("csv",)), store, SETTINGS)
