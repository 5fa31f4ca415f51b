from __future__ import annotations

import json
import logging
from pathlib import Path

import yaml

from .models import ConvocatoriaSettings
from .resources import load_default_settings

logger = logging.getLogger(__name__)

# Default config location following XDG Base Directory specification
DEFAULT_CONFIG_DIR = Path.home() / ".config" / "convocatoria-floral"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "settings.yaml"
DEFAULT_DATA_FILE = DEFAULT_CONFIG_DIR / "families.json"


def get_config_path() -> Path:
    """
    Get the path to the user's settings file.

    Prefers settings.yaml, falls back to a legacy settings.json, and returns
    the YAML path when neither exists yet.
    """
    yaml_path = DEFAULT_CONFIG_DIR / "settings.yaml"
    json_path = DEFAULT_CONFIG_DIR / "settings.json"

    if yaml_path.exists():
        return yaml_path
    elif json_path.exists():
        return json_path
    else:
        return DEFAULT_CONFIG_FILE


def get_data_path() -> Path:
    """Where assignments are persisted unless --data says otherwise."""
    return DEFAULT_DATA_FILE


def ensure_config_dir() -> Path:
    DEFAULT_CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    return DEFAULT_CONFIG_DIR


def config_exists() -> bool:
    """Check if a settings file exists at the default location (YAML or JSON)."""
    yaml_path = DEFAULT_CONFIG_DIR / "settings.yaml"
    json_path = DEFAULT_CONFIG_DIR / "settings.json"
    return yaml_path.exists() or json_path.exists()


def read_settings_file(path: Path) -> ConvocatoriaSettings:
    """Load settings from file, detecting format by extension."""
    content = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(content) or {}
        return ConvocatoriaSettings.model_validate(data)
    return ConvocatoriaSettings.model_validate_json(content)


def load_settings(path: str | Path | None = None) -> ConvocatoriaSettings:
    """
    Load settings from an explicit path, the default location, or the packaged default.

    Priority:
    1. Specified path (must exist)
    2. Default user settings (~/.config/convocatoria-floral/settings.yaml or settings.json)
    3. Packaged default settings
    """
    if path is not None:
        settings_path = Path(path)
        if not settings_path.exists():
            raise FileNotFoundError(f"Settings file not found: {settings_path}")
        logger.debug("Loading settings from %s", settings_path)
        return read_settings_file(settings_path)

    if config_exists():
        default_path = get_config_path()
        logger.debug("Loading settings from %s", default_path)
        return read_settings_file(default_path)

    return load_default_settings()


def dump_settings(settings: ConvocatoriaSettings, path: Path) -> str:
    data = settings.model_dump(mode="json")
    if path.suffix in (".yaml", ".yml"):
        return yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True, width=120, indent=2)
    return json.dumps(data, indent=2, ensure_ascii=False)


def write_settings(path: Path, settings: ConvocatoriaSettings, overwrite: bool = False) -> Path:
    if path.exists() and not overwrite:
        raise FileExistsError(f"Refusing to overwrite existing file: {path}")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dump_settings(settings, path), encoding="utf-8")
    return path
