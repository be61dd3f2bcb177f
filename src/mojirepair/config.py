"""
YAML configuration: encoding lists, thresholds, table overrides, logging level.
"""
from __future__ import annotations

import copy
from pathlib import Path
from typing import Any

import yaml

from mojirepair.errors import ConfigError
from mojirepair.repair.codecs import (
    DECODE_ENCODINGS,
    DEFAULT_SOURCE_ENCODINGS,
    DEFAULT_TARGET_ENCODINGS,
)

DEFAULT_CONFIG: dict[str, Any] = {
    "source_encodings": DEFAULT_SOURCE_ENCODINGS,
    "target_encodings": DEFAULT_TARGET_ENCODINGS,
    "decode_encodings": DECODE_ENCODINGS,
    "threshold": 0,
    "verbose_threshold": 0,
    "quiet_threshold": 50,
    "tables": {"common_han": None, "japanese_han": None, "rare_han": None},
    "max_workers": None,
    "log_level": "WARNING",
}

_LIST_KEYS = ("source_encodings", "target_encodings", "decode_encodings")


def load_config(config_path: str | Path | None) -> dict[str, Any]:
    """
    Read a YAML config and merge it over DEFAULT_CONFIG.
    No path, or a path that is not a file, gives the defaults.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)
    if not config_path or not Path(config_path).is_file():
        return config
    try:
        with open(config_path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
    if not isinstance(loaded, dict):
        raise ConfigError(f"Config {config_path} must be a mapping, got {type(loaded).__name__}")
    for key in _LIST_KEYS:
        value = loaded.get(key)
        if isinstance(value, str):
            loaded[key] = [s.strip() for s in value.split(",") if s.strip()]
        elif value is not None and not isinstance(value, list):
            raise ConfigError(f"{key} must be a list or comma-separated string")
    tables = loaded.pop("tables", None) or {}
    if not isinstance(tables, dict):
        raise ConfigError("tables must be a mapping")
    config.update(loaded)
    config["tables"].update(tables)
    return config
