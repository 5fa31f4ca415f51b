from __future__ import annotations

import argparse
import logging
from pathlib import Path

import argcomplete

from .availability import first_available, month_summaries
from .colors import list_all_colors
from .config import ensure_config_dir, get_config_path, get_data_path, load_settings, write_settings
from .errors import EmptyNameError, MonthFullError, ScheduleError
from .exporter import ExportPlan, write_exports
from .models import ConvocatoriaSettings
from .resources import load_default_settings
from .storage import JsonFileStore
from .store import AssignmentStore
from .sundays import GregorianCalendar
from .views import ALL_MONTHS, filter_assignments, parse_month

logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )


def _month_arg(value: str) -> int:
    try:
        return parse_month(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _month_filter_arg(value: str) -> int | str:
    if value.strip().lower() == ALL_MONTHS:
        return ALL_MONTHS
    return _month_arg(value)


def _open(sp) -> tuple[ConvocatoriaSettings, AssignmentStore]:
    if sp.settings is not None and not Path(sp.settings).exists():
        raise SystemExit(f"Settings file not found: {sp.settings}")
    settings = load_settings(sp.settings)
    data_path = Path(sp.data) if sp.data else get_data_path()
    table = GregorianCalendar().sundays_by_month(settings.year)
    store = AssignmentStore(JsonFileStore(data_path), table, key=settings.storage_key)
    return settings, store


def _cmd_init(sp):
    if sp.outfile is None:
        ensure_config_dir()
        outfile = get_config_path()
    else:
        outfile = Path(sp.outfile)

    if outfile.exists() and not sp.force:
        raise SystemExit(f"Output file already exists: {outfile}\nUse -f/--force to overwrite")

    data = load_default_settings().model_dump()
    if sp.year is not None:
        data["year"] = sp.year
    out = write_settings(outfile, ConvocatoriaSettings.model_validate(data), overwrite=sp.force)
    print(f"Wrote settings → {out}")


def _cmd_add(sp):
    settings, store = _open(sp)
    sunday = sp.sunday
    if sunday is None:
        if not sp.name.strip():
            raise EmptyNameError()
        sunday = first_available(store.table, store.records(), sp.month)
        if sunday is None:
            raise MonthFullError(sp.month)
    record = store.add(sp.name, sp.month, sunday)
    print(f"Familia agregada correctamente: {record.name} → {settings.month_name(record.month)} {record.sunday} (id {record.id})")
    remaining = store.available_sundays(record.month)
    if remaining:
        print(f"Siguiente domingo disponible: {remaining[0]}")
    else:
        print(f"{settings.month_name(record.month)} está completo")


def _cmd_slots(sp):
    settings, store = _open(sp)
    free = store.available_sundays(sp.month)
    label = settings.month_name(sp.month)
    if free:
        print(f"{label}: {', '.join(str(day) for day in free)}")
    else:
        print(f"{label}: Lleno")


def _cmd_list(sp):
    settings, store = _open(sp)
    hits = filter_assignments(store.records(), sp.search, sp.month)
    if not hits:
        print("No hay familias registradas")
        return
    for a in hits:
        print(f"{a.id}  {settings.month_name(a.month):<11} {a.sunday:>2}  {a.name}")
    print(f"\nTotal: {len(hits)} de {len(store)}")


def _cmd_edit(sp):
    _, store = _open(sp)
    record = store.update(sp.id, sp.name)
    print(f"Familia actualizada: {record.name}")


def _cmd_remove(sp):
    settings, store = _open(sp)
    request = store.request_removal(sp.id)
    target = request.assignment
    if not sp.yes:
        prompt = f"¿Eliminar a {target.name} ({settings.month_name(target.month)} {target.sunday})? Esta acción no se puede deshacer. [s/N] "
        try:
            answer = input(prompt).strip().lower()
        except EOFError:
            answer = ""
        if answer not in ("s", "si", "sí", "y", "yes"):
            request.cancel()
            print("Cancelado")
            return
    request.confirm()
    print("Familia eliminada")


def _cmd_summary(sp):
    settings, store = _open(sp)
    for summary in month_summaries(store.table, store.records()):
        label = settings.month_name(summary.month)
        status = "Completo" if summary.is_complete else f"{len(summary.assigned)} asig."
        print(f"{label:<11} {status}")
        if summary.missing:
            print(f"  Faltan: Días {', '.join(str(day) for day in summary.missing)}")
        for a in summary.assigned:
            print(f"  {a.sunday:>2}: {a.name}")
        if not summary.assigned:
            print("  Sin asignar")


def _cmd_export(sp):
    settings, store = _open(sp)
    fmts = tuple(dict.fromkeys(f.lower() for f in sp.formats))  # unique, normalized, ordered
    plan = ExportPlan(outdir=Path(sp.outdir), formats=fmts)
    paths = write_exports(plan, store, settings)
    print("Exported:")
    for k, p in paths.items():
        print(f"  {k}: {p}")


def _cmd_list_colors(sp):
    list_all_colors()


def main(argv: list[str] | None = None):
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--settings", default=None, help="Settings file (default: ~/.config/convocatoria-floral/settings.yaml or packaged default)")
    common.add_argument("--data", default=None, help="Data file (default: ~/.config/convocatoria-floral/families.json)")
    common.add_argument("-v", "--verbose", action="store_true", help="Log debug output")

    ap = argparse.ArgumentParser(prog="convocatoria", description="convocatoria-floral CLI")
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_init = sub.add_parser("init", parents=[common], help="Write a settings file from the packaged default")
    ap_init.add_argument("--year", type=int, default=None, help="Schedule year (default: 2026)")
    ap_init.add_argument("-o", "--outfile", default=None, help="Output file (default: ~/.config/convocatoria-floral/settings.yaml)")
    ap_init.add_argument("-f", "--force", action="store_true")
    ap_init.set_defaults(func=_cmd_init)

    ap_add = sub.add_parser("add", parents=[common], help="Assign a family to a Sunday")
    ap_add.add_argument("name", help="Family name")
    ap_add.add_argument("--month", type=_month_arg, required=True, help="0-11 or month name (e.g. enero)")
    ap_add.add_argument("--sunday", type=int, default=None, help="Day of month (default: first available Sunday)")
    ap_add.set_defaults(func=_cmd_add)

    ap_slots = sub.add_parser("slots", parents=[common], help="Show free Sundays of a month")
    ap_slots.add_argument("--month", type=_month_arg, required=True, help="0-11 or month name")
    ap_slots.set_defaults(func=_cmd_slots)

    ap_list = sub.add_parser("list", parents=[common], help="List assigned families")
    ap_list.add_argument("--search", default="", help="Case-insensitive name filter")
    ap_list.add_argument("--month", type=_month_filter_arg, default=ALL_MONTHS, help="0-11, month name or 'all' (default)")
    ap_list.set_defaults(func=_cmd_list)

    ap_edit = sub.add_parser("edit", parents=[common], help="Rename a family")
    ap_edit.add_argument("id")
    ap_edit.add_argument("name")
    ap_edit.set_defaults(func=_cmd_edit)

    ap_rm = sub.add_parser("remove", parents=[common], help="Remove a family (asks for confirmation)")
    ap_rm.add_argument("id")
    ap_rm.add_argument("-y", "--yes", action="store_true", help="Skip the confirmation prompt")
    ap_rm.set_defaults(func=_cmd_remove)

    ap_sum = sub.add_parser("summary", parents=[common], help="Per-month completeness")
    ap_sum.set_defaults(func=_cmd_summary)

    ap_exp = sub.add_parser("export", parents=[common], help="Export the schedule as PDF and/or PNG")
    ap_exp.add_argument("--outdir", default="out", help="Output directory (default: ./out)")
    ap_exp.add_argument("--formats", nargs="+", default=["pdf", "png"], choices=["pdf", "png"], help="One or more of: pdf png")
    ap_exp.set_defaults(func=_cmd_export)

    ap_colors = sub.add_parser("list-colors", parents=[common], help="Show all CSS3 color names usable in the palette")
    ap_colors.set_defaults(func=_cmd_list_colors)

    argcomplete.autocomplete(ap)

    args = ap.parse_args(argv)
    _setup_logging(args.verbose)
    try:
        args.func(args)
    except ScheduleError as exc:
        logger.debug("Rejected %s: %s", args.cmd, exc)
        raise SystemExit(f"Aviso: {exc.notice}") from None


if __name__ == "__main__":
    main()
