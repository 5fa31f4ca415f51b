from __future__ import annotations

from importlib import resources

import yaml

from .models import ConvocatoriaSettings

_DATA_DIR = "data"
_DEFAULT_SETTINGS = "default-settings.yaml"


def default_settings_text() -> str:
    return resources.files(__package__).joinpath(_DATA_DIR).joinpath(_DEFAULT_SETTINGS).read_text(encoding="utf-8")


def load_default_settings() -> ConvocatoriaSettings:
    return ConvocatoriaSettings.model_validate(yaml.safe_load(default_settings_text()))
