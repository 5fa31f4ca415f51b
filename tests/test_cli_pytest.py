from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

from convocatoria_floral import cli
from convocatoria_floral.config import write_settings
from convocatoria_floral.resources import load_default_settings


@pytest.fixture
def env(tmp_path: Path) -> list[str]:
    settings = write_settings(tmp_path / "settings.yaml", load_default_settings())
    return ["--settings", str(settings), "--data", str(tmp_path / "families.json")]


def _records(env: list[str]) -> list[dict]:
    data = json.loads(Path(env[3]).read_text(encoding="utf-8"))
    return json.loads(data["families"])


def test_help(capsys, monkeypatch):
    monkeypatch.setattr(sys, "argv", ["convocatoria", "--help"])
    with pytest.raises(SystemExit) as exc:
        cli.main()
    assert exc.value.code == 0
    captured = capsys.readouterr()
    assert "usage: convocatoria" in captured.out


def test_no_args_error(capsys):
    with pytest.raises(SystemExit) as exc:
        cli.main([])
    assert exc.value.code == 2


def test_add_defaults_to_first_free_sunday(env, capsys):
    cli.main(["add", "Smith", "--month", "enero", *env])
    out = capsys.readouterr().out
    assert "Familia agregada correctamente: Smith → ENERO 4" in out
    assert "Siguiente domingo disponible: 11" in out
    assert _records(env)[0]["sunday"] == 4


def test_add_blank_name(env):
    with pytest.raises(SystemExit) as exc:
        cli.main(["add", "  ", "--month", "0", *env])
    assert exc.value.code == "Aviso: Ingresa el nombre de la familia"


def test_add_taken_slot(env):
    cli.main(["add", "Smith", "--month", "0", "--sunday", "4", *env])
    with pytest.raises(SystemExit) as exc:
        cli.main(["add", "Jones", "--month", "0", "--sunday", "4", *env])
    assert exc.value.code == "Aviso: Esta fecha ya está registrada"


def test_full_month(env, capsys):
    for name in ("A", "B", "C", "D"):
        cli.main(["add", name, "--month", "0", *env])
    assert "ENERO está completo" in capsys.readouterr().out

    cli.main(["slots", "--month", "0", *env])
    assert "ENERO: Lleno" in capsys.readouterr().out

    with pytest.raises(SystemExit) as exc:
        cli.main(["add", "Lee", "--month", "0", *env])
    assert exc.value.code == "Aviso: Este mes ya está lleno"


def test_slots(env, capsys):
    cli.main(["add", "Smith", "--month", "2", "--sunday", "8", *env])
    capsys.readouterr()
    cli.main(["slots", "--month", "marzo", *env])
    assert "MARZO: 1, 15, 22, 29" in capsys.readouterr().out


def test_bad_month_argument(env):
    with pytest.raises(SystemExit) as exc:
        cli.main(["slots", "--month", "13", *env])
    assert exc.value.code == 2


def test_list_filters(env, capsys):
    cli.main(["add", "Smith", "--month", "0", *env])
    cli.main(["add", "Johnson", "--month", "2", *env])
    cli.main(["add", "Lee", "--month", "0", *env])
    capsys.readouterr()

    cli.main(["list", "--search", "oh", *env])
    out = capsys.readouterr().out
    assert "Johnson" in out and "Smith" not in out
    assert "Total: 1 de 3" in out

    cli.main(["list", "--month", "0", *env])
    out = capsys.readouterr().out
    assert out.index("Smith") < out.index("Lee")
    assert "Johnson" not in out


def test_list_empty(env, capsys):
    cli.main(["list", *env])
    assert "No hay familias registradas" in capsys.readouterr().out


def test_edit(env, capsys):
    cli.main(["add", "Smith", "--month", "0", *env])
    record_id = _records(env)[0]["id"]
    cli.main(["edit", record_id, "Smythe", *env])
    assert "Familia actualizada: Smythe" in capsys.readouterr().out
    assert _records(env)[0]["name"] == "Smythe"


def test_edit_missing(env):
    with pytest.raises(SystemExit) as exc:
        cli.main(["edit", "nope", "Smythe", *env])
    assert exc.value.code == "Aviso: La familia no existe"


def test_remove_cancelled(env, capsys, monkeypatch):
    cli.main(["add", "Smith", "--month", "0", *env])
    record_id = _records(env)[0]["id"]
    monkeypatch.setattr("builtins.input", lambda prompt: "n")
    cli.main(["remove", record_id, *env])
    assert "Cancelado" in capsys.readouterr().out
    assert len(_records(env)) == 1


def test_remove_confirmed(env, capsys, monkeypatch):
    cli.main(["add", "Smith", "--month", "0", *env])
    record_id = _records(env)[0]["id"]
    monkeypatch.setattr("builtins.input", lambda prompt: "s")
    cli.main(["remove", record_id, *env])
    assert "Familia eliminada" in capsys.readouterr().out
    assert _records(env) == []


def test_remove_yes_skips_prompt(env, monkeypatch):
    cli.main(["add", "Smith", "--month", "0", *env])
    record_id = _records(env)[0]["id"]

    def _no_prompt(prompt):
        raise AssertionError("prompted")

    monkeypatch.setattr("builtins.input", _no_prompt)
    cli.main(["remove", record_id, "--yes", *env])
    assert _records(env) == []


def test_summary(env, capsys):
    cli.main(["add", "Smith", "--month", "0", "--sunday", "4", *env])
    for day in ("1", "8", "15", "22"):
        cli.main(["add", f"F{day}", "--month", "1", "--sunday", day, *env])
    capsys.readouterr()
    cli.main(["summary", *env])
    out = capsys.readouterr().out
    assert "ENERO       1 asig." in out
    assert "Faltan: Días 11, 18, 25" in out
    assert " 4: Smith" in out
    assert "FEBRERO     Completo" in out
    assert "Sin asignar" in out


def test_export(env, capsys, monkeypatch, tmp_path: Path):
    calls = {}

    def fake_write_exports(plan, store, settings):
        calls["plan"] = plan
        return {fmt: plan.outdir / f"convocatoria-floral-{settings.year}.{fmt}" for fmt in plan.formats}

    monkeypatch.setattr(cli, "write_exports", fake_write_exports)
    cli.main(["export", "--outdir", str(tmp_path / "out"), "--formats", "png", "png", *env])
    assert calls["plan"].formats == ("png",)
    out = capsys.readouterr().out
    assert "convocatoria-floral-2026.png" in out


def test_init(tmp_path: Path, capsys):
    out = tmp_path / "cfg" / "settings.yaml"
    cli.main(["init", "--year", "2027", "-o", str(out)])
    assert out.exists()
    assert "year: 2027" in out.read_text(encoding="utf-8")
    with pytest.raises(SystemExit) as exc:
        cli.main(["init", "-o", str(out)])
    assert "Output file already exists" in str(exc.value.code)
    assert "year: 2027" in out.read_text(encoding="utf-8")
    cli.main(["init", "-o", str(out), "-f"])
    assert "year: 2026" in out.read_text(encoding="utf-8")


def test_missing_settings_file(tmp_path: Path):
    with pytest.raises(SystemExit) as exc:
        cli.main(["list", "--settings", str(tmp_path / "missing.yaml"), "--data", str(tmp_path / "families.json")])
    assert exc.value.code == f"Settings file not found: {tmp_path / 'missing.yaml'}"


def test_remove_without_input_cancels(env, capsys, monkeypatch):
    cli.main(["add", "Smith", "--month", "0", *env])
    record_id = _records(env)[0]["id"]

    def _closed_stdin(prompt):
        raise EOFError

    monkeypatch.setattr("builtins.input", _closed_stdin)
    cli.main(["remove", record_id, *env])
    assert "Cancelado" in capsys.readouterr().out
    assert len(_records(env)) == 1


def test_add_to_full_month_without_sunday(env):
    for day in ("4", "11", "18", "25"):
        cli.main(["add", f"F{day}", "--month", "0", "--sunday", day, *env])
    with pytest.raises(SystemExit) as exc:
        cli.main(["add", "Lee", "--month", "enero", *env])
    assert exc.value.code == "Aviso: Este mes ya está lleno"
    assert len(_records(env)) == 4


def test_add_blank_name_to_full_month(env):
    for day in ("4", "11", "18", "25"):
        cli.main(["add", f"F{day}", "--month", "0", "--sunday", day, *env])
    with pytest.raises(SystemExit) as exc:
        cli.main(["add", " ", "--month", "0", *env])
    assert exc.value.code == "Aviso: Ingresa el nombre de la familia"
